"""SQLModel database models for ftpgate."""

from ftpgate.models.grants import (
    GrantRecord,
    GrantRecordBase,
    ServerRecord,
    ServerRecordBase,
)

__all__ = [
    "GrantRecord",
    "GrantRecordBase",
    "ServerRecord",
    "ServerRecordBase",
]
