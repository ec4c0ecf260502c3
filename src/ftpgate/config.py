"""ServerConfig, CallPolicy, and ProgressCadence."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .exceptions import ConfigurationError

PROTOCOLS = ("ftp", "ftps", "sftp")

DEFAULT_PORTS = {"ftp": 21, "ftps": 990, "sftp": 22}


@dataclass
class ServerConfig:
    """Connection settings for the single file server."""

    host: str
    """Hostname or IP address of the file server."""

    port: int | None = None
    """TCP port.  Defaults to the protocol's standard port."""

    username: str = ""
    """Login name passed to the transport executor."""

    password: str = field(default="", repr=False)
    """Login secret.  Never included in ``repr``."""

    protocol: str = "ftp"
    """One of ``ftp``, ``ftps``, ``sftp``."""

    passive_mode: bool = True
    """Use passive data connections (FTP only)."""

    name: str = ""
    """Display name for the server."""

    id: str | None = None
    """Record id when the config comes from the server store."""

    def __post_init__(self) -> None:
        self.host = self.host.strip()
        self.protocol = self.protocol.lower()
        if not self.host:
            raise ConfigurationError("Server host is required")
        if self.protocol not in PROTOCOLS:
            raise ConfigurationError(
                f"Invalid protocol: {self.protocol!r}. Must be one of {', '.join(PROTOCOLS)}."
            )
        if self.port is None:
            self.port = DEFAULT_PORTS[self.protocol]
        if not 1 <= self.port <= 65535:
            raise ConfigurationError(f"Invalid port: {self.port}")
        if not self.name:
            self.name = self.host

    def to_wire(self) -> dict[str, Any]:
        """Serialize using the field names the transport executor expects."""
        return {
            "name": self.name,
            "host": self.host,
            "port": self.port,
            "username": self.username,
            "password": self.password,
            "protocol": self.protocol,
            "passive_mode": self.passive_mode,
        }


@dataclass(frozen=True)
class CallPolicy:
    """Timeout and retry policy applied around each transport call.

    The defaults issue every call exactly once and wait for it indefinitely.
    """

    timeout: float | None = None
    """Seconds to wait for one attempt before giving up with ``TimedOut``."""

    max_retries: int = 0
    """Extra attempts after a transient failure."""

    backoff_base: float = 0.5
    """Delay before the first retry; doubled for each further retry."""

    backoff_max: float = 8.0
    """Upper bound on a single retry delay."""

    def __post_init__(self) -> None:
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if self.max_retries < 0:
            raise ConfigurationError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.backoff_base < 0 or self.backoff_max < 0:
            raise ConfigurationError("backoff delays must be >= 0")

    def backoff(self, attempt: int) -> float:
        """Delay before retry number *attempt* (1-based)."""
        return min(self.backoff_base * (2 ** (attempt - 1)), self.backoff_max)


@dataclass(frozen=True)
class ProgressCadence:
    """Timing of the synthetic progress shown while a transfer is pending."""

    step: int = 10
    interval: float = 0.2
    ceiling: int = 90
    grace: float = 1.0

    def __post_init__(self) -> None:
        if not 0 < self.ceiling < 100:
            raise ConfigurationError(f"ceiling must be between 1 and 99, got {self.ceiling}")
        if self.step <= 0:
            raise ConfigurationError(f"step must be positive, got {self.step}")
        if self.interval <= 0:
            raise ConfigurationError(f"interval must be positive, got {self.interval}")
        if self.grace < 0:
            raise ConfigurationError(f"grace must be >= 0, got {self.grace}")


UPLOAD_CADENCE = ProgressCadence(step=10, interval=0.2)
DOWNLOAD_CADENCE = ProgressCadence(step=15, interval=0.3)
