"""ftpgate: permission-mediated access to a remote file server.

Every list, upload, download, and delete is checked against the user's
path grants before it reaches the transport.
"""

__version__ = "0.1.0"

from ftpgate.config import CallPolicy, ProgressCadence, ServerConfig
from ftpgate.events import EventBus, OperationEvent
from ftpgate.exceptions import (
    AuthenticationRequiredError,
    ConfigurationError,
    FtpGateError,
    MalformedResponseError,
    ServerNotConfiguredError,
    TransientTransportError,
    TransportError,
)
from ftpgate.mediator import OperationMediator, SessionContext
from ftpgate.paths import join_remote_path, matches, normalize_path
from ftpgate.permissions import Capability, Grant, PermissionSet, can_access
from ftpgate.progress import TransferKind, TransferProgress
from ftpgate.protocol import CallableTransport, GrantSource, ServerConfigSource, Transport
from ftpgate.session import FileSession, format_size
from ftpgate.sources import (
    SQLGrantSource,
    SQLServerConfigSource,
    StaticGrantSource,
    StaticServerConfigSource,
)
from ftpgate.types import (
    Denied,
    DeleteRequest,
    DownloadRequest,
    EntryKind,
    Failed,
    ListRequest,
    OperationOutcome,
    OperationRequest,
    OutcomeKind,
    RemoteEntry,
    Succeeded,
    TestConnectionRequest,
    TimedOut,
    UploadRequest,
)

__all__ = [
    "AuthenticationRequiredError",
    "CallPolicy",
    "CallableTransport",
    "Capability",
    "ConfigurationError",
    "DeleteRequest",
    "Denied",
    "DownloadRequest",
    "EntryKind",
    "EventBus",
    "Failed",
    "FileSession",
    "FtpGateError",
    "Grant",
    "GrantSource",
    "ListRequest",
    "MalformedResponseError",
    "OperationEvent",
    "OperationMediator",
    "OperationOutcome",
    "OperationRequest",
    "OutcomeKind",
    "PermissionSet",
    "ProgressCadence",
    "RemoteEntry",
    "SQLGrantSource",
    "SQLServerConfigSource",
    "ServerConfig",
    "ServerConfigSource",
    "ServerNotConfiguredError",
    "SessionContext",
    "StaticGrantSource",
    "StaticServerConfigSource",
    "Succeeded",
    "TestConnectionRequest",
    "TimedOut",
    "TransferKind",
    "TransferProgress",
    "TransientTransportError",
    "Transport",
    "TransportError",
    "UploadRequest",
    "__version__",
    "can_access",
    "format_size",
    "join_remote_path",
    "matches",
    "normalize_path",
]
