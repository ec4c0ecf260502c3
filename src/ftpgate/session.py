"""FileSession — one user's browsing session against the file server.

Owns the state the mediator needs but must not keep globally: the active
server, the user's current ``PermissionSet``, and the current directory.
The permission set is rebuilt on :meth:`FileSession.refresh_permissions`,
never mutated.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import AuthenticationRequiredError, ConfigurationError, ServerNotConfiguredError
from .mediator import OperationMediator, SessionContext
from .paths import breadcrumbs, normalize_path, parent_path
from .permissions import Capability, PermissionSet, can_access
from .types import (
    DeleteRequest,
    DownloadRequest,
    Failed,
    ListRequest,
    RemoteEntry,
    TestConnectionRequest,
    UploadRequest,
)

if TYPE_CHECKING:
    from .config import CallPolicy, ProgressCadence, ServerConfig
    from .events import EventBus
    from .protocol import GrantSource, ServerConfigSource, Transport
    from .types import OperationOutcome

logger = logging.getLogger(__name__)

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


class FileSession:
    """Permission-checked file browsing for a single user.

    Usage::

        async with FileSession("alice", transport, grants, servers) as s:
            outcome = await s.list_dir()
            s.cd("/docs")
            await s.upload("report.txt", b"...")
    """

    def __init__(
        self,
        user_id: str,
        transport: Transport,
        grant_source: GrantSource,
        server_source: ServerConfigSource,
        *,
        policy: CallPolicy | None = None,
        event_bus: EventBus | None = None,
        upload_cadence: ProgressCadence | None = None,
        download_cadence: ProgressCadence | None = None,
    ) -> None:
        if not user_id:
            raise AuthenticationRequiredError("user_id is required to open a file session")
        self.user_id = user_id
        self._grant_source = grant_source
        self._server_source = server_source
        self.mediator = OperationMediator(
            transport,
            policy=policy,
            event_bus=event_bus,
            upload_cadence=upload_cadence,
            download_cadence=download_cadence,
        )
        self.server: ServerConfig | None = None
        self.permissions: PermissionSet | None = None
        self.current_path = "/"
        self.last_listing: list[RemoteEntry] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> FileSession:
        """Load the active server and this user's grants for it."""
        server = await self._server_source.get_server()
        if server is None:
            raise ServerNotConfiguredError("No file server configured")
        if server.id is None:
            raise ConfigurationError(f"Server {server.name!r} has no record id")
        self.server = server
        await self.refresh_permissions()
        return self

    async def close(self) -> None:
        self.mediator.close()

    async def __aenter__(self) -> FileSession:
        return await self.open()

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def refresh_permissions(self) -> PermissionSet:
        """Rebuild the permission set from the grant source."""
        server_id = self._server_id()
        grants = await self._grant_source.load_grants(self.user_id, server_id)
        self.permissions = PermissionSet.from_grants(self.user_id, server_id, grants)
        logger.debug(
            "Permission set for %s on %s rebuilt with %d grant(s)",
            self.user_id,
            server_id,
            len(self.permissions),
        )
        return self.permissions

    @property
    def context(self) -> SessionContext:
        if self.permissions is None:
            raise ServerNotConfiguredError("Session is not open; call open() first")
        return SessionContext(
            user_id=self.user_id,
            server_id=self._server_id(),
            permission_set=self.permissions,
        )

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def can(self, capability: Capability, path: str | None = None) -> bool:
        """Check *capability* on *path* (default: the current directory)."""
        if self.permissions is None:
            return False
        return can_access(self.permissions, path or self.current_path, capability)

    def cd(self, path: str) -> str:
        """Change the current directory.  No remote call is made."""
        self.current_path = normalize_path(path)
        return self.current_path

    def up(self) -> str:
        return self.cd(parent_path(self.current_path))

    def enter(self, entry: RemoteEntry) -> bool:
        """Change into *entry* if it is a directory. Return True if moved."""
        if entry.name == "..":
            self.up()
            return True
        if not entry.is_directory:
            return False
        self.cd(entry.path)
        return True

    def breadcrumbs(self) -> list[tuple[str, str]]:
        return breadcrumbs(self.current_path)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def list_dir(self, path: str | None = None) -> OperationOutcome:
        """List *path* (default: the current directory) into ``last_listing``."""
        outcome = await self.mediator.execute(
            ListRequest(path or self.current_path), self.context
        )
        self.last_listing = outcome.payload if outcome.success else []
        return outcome

    async def upload(self, name: str, data: bytes) -> OperationOutcome:
        """Upload *data* as *name* into the current directory."""
        outcome = await self.mediator.execute(
            UploadRequest(self.current_path, name, data), self.context
        )
        if outcome.success:
            await self.list_dir()
        return outcome

    async def download(self, target: RemoteEntry | str) -> OperationOutcome:
        """Download a file; the ``Succeeded`` payload holds its bytes."""
        if isinstance(target, RemoteEntry) and target.is_directory:
            return Failed(
                message=f"Cannot download a directory: {target.path}",
                request=DownloadRequest(target.path),
            )
        path = target.path if isinstance(target, RemoteEntry) else target
        return await self.mediator.execute(DownloadRequest(path), self.context)

    async def delete(self, target: RemoteEntry | str) -> OperationOutcome:
        path = target.path if isinstance(target, RemoteEntry) else target
        outcome = await self.mediator.execute(DeleteRequest(path), self.context)
        if outcome.success:
            await self.list_dir()
        return outcome

    async def test_connection(self, config: ServerConfig | None = None) -> OperationOutcome:
        """Check *config* (default: the active server).  Not permission-checked."""
        config = config or self.server
        if config is None:
            raise ServerNotConfiguredError("No server config to test")
        if self.permissions is not None:
            context = self.context
        else:
            server_id = config.id or ""
            context = SessionContext(
                user_id=self.user_id,
                server_id=server_id,
                permission_set=PermissionSet.empty(self.user_id, server_id),
            )
        return await self.mediator.execute(TestConnectionRequest(config), context)

    def _server_id(self) -> str:
        if self.server is None or self.server.id is None:
            raise ServerNotConfiguredError("Session is not open; call open() first")
        return self.server.id


def format_size(size_bytes: int) -> str:
    """Human-readable size.

    Examples:
        format_size(0) -> "0 B"
        format_size(1536) -> "1.5 KB"
    """
    if size_bytes <= 0:
        return "0 B"
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"
