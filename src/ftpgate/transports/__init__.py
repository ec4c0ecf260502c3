"""Transport executors."""

from ftpgate.transports.memory import MemoryTransport

__all__ = ["MemoryTransport"]
