"""Entry, request, and outcome types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from .exceptions import MalformedResponseError
from .paths import join_remote_path, normalize_path
from .permissions import Capability

if TYPE_CHECKING:
    from .config import ServerConfig


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True, slots=True)
class RemoteEntry:
    """A file or directory reported by the transport executor."""

    name: str
    path: str
    kind: EntryKind = EntryKind.FILE
    size_bytes: int = 0
    modified_at: datetime | None = None
    permissions: str | None = None

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> RemoteEntry:
        """Build an entry from a transport listing item.

        Expects ``path`` and optionally ``name``, ``type``, ``size``,
        ``modified_at`` and ``permissions``.  Raises
        ``MalformedResponseError`` when the item is unusable.
        """
        if not isinstance(data, dict) or not data.get("path"):
            raise MalformedResponseError(f"Listing entry has no path: {data!r}")

        path = normalize_path(str(data["path"]))
        name = data.get("name") or path.rsplit("/", 1)[-1] or "/"

        raw_kind = data.get("type", EntryKind.FILE.value)
        try:
            kind = EntryKind(raw_kind)
        except ValueError:
            raise MalformedResponseError(
                f"Unknown entry type {raw_kind!r} for {path}"
            ) from None

        try:
            size = int(data.get("size") or 0)
        except (TypeError, ValueError):
            raise MalformedResponseError(
                f"Invalid size {data.get('size')!r} for {path}"
            ) from None

        return cls(
            name=name,
            path=path,
            kind=kind,
            size_bytes=size,
            modified_at=_parse_timestamp(data.get("modified_at")),
            permissions=data.get("permissions"),
        )


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


# =============================================================================
# Requests
# =============================================================================


def _request_path(path: Any) -> str:
    if not isinstance(path, str) or not path.strip():
        raise ValueError(f"Request path must be a non-empty string, got {path!r}")
    return normalize_path(path)


@dataclass(frozen=True, slots=True)
class ListRequest:
    """List the entries of a remote directory."""

    path: str = "/"

    action: ClassVar[str] = "list_files"
    capability: ClassVar[Capability | None] = Capability.READ

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", _request_path(self.path))

    @property
    def target(self) -> str:
        return self.path


@dataclass(frozen=True, slots=True)
class UploadRequest:
    """Upload *data* as *name* into the remote directory *path*."""

    path: str
    name: str
    data: bytes = field(repr=False)

    action: ClassVar[str] = "upload_file"
    capability: ClassVar[Capability | None] = Capability.WRITE

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", _request_path(self.path))
        if not self.name or not self.name.strip():
            raise ValueError(f"Upload name must be non-empty, got {self.name!r}")

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def remote_path(self) -> str:
        return join_remote_path(self.path, self.name)

    @property
    def target(self) -> str:
        return self.remote_path


@dataclass(frozen=True, slots=True)
class DownloadRequest:
    """Fetch the content of a remote file."""

    path: str

    action: ClassVar[str] = "download_file"
    capability: ClassVar[Capability | None] = Capability.READ

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", _request_path(self.path))

    @property
    def target(self) -> str:
        return self.path


@dataclass(frozen=True, slots=True)
class DeleteRequest:
    """Remove a single remote file."""

    path: str

    action: ClassVar[str] = "delete_file"
    capability: ClassVar[Capability | None] = Capability.DELETE

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", _request_path(self.path))

    @property
    def target(self) -> str:
        return self.path


@dataclass(frozen=True, slots=True)
class TestConnectionRequest:
    """Check whether *config* can reach the file server.  Needs no capability."""

    __test__ = False  # keep pytest from collecting this class

    config: ServerConfig

    action: ClassVar[str] = "test_connection"
    capability: ClassVar[Capability | None] = None

    @property
    def target(self) -> None:
        return None


OperationRequest = (
    ListRequest | UploadRequest | DownloadRequest | DeleteRequest | TestConnectionRequest
)


# =============================================================================
# Outcomes
# =============================================================================


class OutcomeKind(str, Enum):
    SUCCEEDED = "succeeded"
    DENIED = "denied"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True, slots=True)
class Succeeded:
    """The transport completed the operation.

    ``payload`` is a ``list[RemoteEntry]`` for listings, ``bytes`` for
    downloads, and ``None`` otherwise.
    """

    payload: Any = None
    request: OperationRequest | None = None

    kind: ClassVar[OutcomeKind] = OutcomeKind.SUCCEEDED

    @property
    def success(self) -> bool:
        return True

    @property
    def message(self) -> str:
        if isinstance(self.payload, list):
            return f"Found {len(self.payload)} accessible item(s)"
        if isinstance(self.payload, bytes):
            return f"Downloaded {len(self.payload)} byte(s)"
        return "OK"


@dataclass(frozen=True, slots=True)
class Denied:
    """Refused by policy.  The transport was never contacted."""

    reason: str
    request: OperationRequest | None = None

    kind: ClassVar[OutcomeKind] = OutcomeKind.DENIED

    @property
    def success(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return self.reason


@dataclass(frozen=True, slots=True)
class Failed:
    """The transport reported or raised an error."""

    message: str
    request: OperationRequest | None = None

    kind: ClassVar[OutcomeKind] = OutcomeKind.FAILED

    @property
    def success(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class TimedOut:
    """The transport did not answer within the call policy's timeout."""

    message: str
    timeout: float
    request: OperationRequest | None = None

    kind: ClassVar[OutcomeKind] = OutcomeKind.TIMED_OUT

    @property
    def success(self) -> bool:
        return False


OperationOutcome = Succeeded | Denied | Failed | TimedOut


# =============================================================================
# Transport response
# =============================================================================


@dataclass
class TransportResponse:
    """Parsed ``{success, files?, content?, error?}`` reply from the transport."""

    success: bool
    files: list[dict[str, Any]] | None = None
    content: str | None = None
    error: str | None = None

    @classmethod
    def from_wire(cls, data: Any) -> TransportResponse:
        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"Expected a mapping from the transport, got {type(data).__name__}"
            )
        if "success" not in data:
            raise MalformedResponseError("Transport response has no 'success' field")
        if not isinstance(data["success"], bool):
            raise MalformedResponseError(
                f"Transport response 'success' is not a boolean: {data['success']!r}"
            )
        files = data.get("files")
        if files is not None and not isinstance(files, list):
            raise MalformedResponseError("Transport response 'files' is not a list")
        error = data.get("error")
        return cls(
            success=data["success"],
            files=files,
            content=data.get("content"),
            error=str(error) if error else None,
        )
