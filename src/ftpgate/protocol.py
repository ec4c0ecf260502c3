"""External collaborator protocols — runtime-checkable interfaces.

The core never talks to a file server, a database, or an identity
provider directly.  It consumes three collaborators:

- ``Transport``: performs the actual remote file-server call.
- ``GrantSource``: supplies the grants for one (user, server).
- ``ServerConfigSource``: supplies the single active server record.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .config import ServerConfig
    from .permissions import Grant


@runtime_checkable
class Transport(Protocol):
    """Executes one structured file-server call.

    ``call`` carries ``action`` (``list_files``, ``upload_file``,
    ``download_file``, ``delete_file`` or ``test_connection``) plus
    ``serverId`` and one of ``path``, ``fileData`` or ``config``.
    The reply is ``{"success": bool, "files"?: [...], "content"?: str,
    "error"?: str}``.  ``content`` is base64 text.
    """

    async def invoke(self, call: dict[str, Any]) -> dict[str, Any]: ...


@runtime_checkable
class GrantSource(Protocol):
    """Read-only access to the grant records of one user on one server."""

    async def load_grants(self, user_id: str, server_id: str) -> list[Grant]: ...


@runtime_checkable
class ServerConfigSource(Protocol):
    """Read-only access to the configured file server."""

    async def get_server(self) -> ServerConfig | None:
        """Return the active server, or ``None`` if none is configured."""
        ...


class CallableTransport:
    """Adapt an async callable (e.g. an HTTP function invoker) to ``Transport``."""

    def __init__(self, func: Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]) -> None:
        self._func = func

    async def invoke(self, call: dict[str, Any]) -> dict[str, Any]:
        return await self._func(call)
