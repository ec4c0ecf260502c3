"""MemoryTransport — an in-process transport executor.

Speaks the same ``{action, serverId, ...}`` call dictionary as a real
executor and keeps files in a dict.  Useful for local development and
for exercising the mediator without a file server.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from datetime import UTC, datetime
from typing import Any

from ftpgate.paths import join_remote_path, normalize_path, parent_path

logger = logging.getLogger(__name__)


class MemoryTransport:
    """Dict-backed file store answering transport calls.

    Every call is recorded in :attr:`calls`.  ``latency`` delays each
    reply, and :meth:`fail_next` queues a failure for the next call,
    either a ``success: false`` reply or a raised exception.
    """

    def __init__(
        self,
        files: dict[str, bytes] | None = None,
        *,
        server_id: str | None = None,
        reachable_hosts: set[str] | None = None,
        latency: float = 0.0,
    ) -> None:
        self.server_id = server_id
        self.reachable_hosts = reachable_hosts
        self.latency = latency
        self.calls: list[dict[str, Any]] = []
        self._files: dict[str, tuple[bytes, datetime]] = {}
        self._dirs: set[str] = {"/"}
        self._failures: list[BaseException | str] = []
        for path, data in (files or {}).items():
            self._store(normalize_path(path), data)

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    def fail_next(self, failure: BaseException | str) -> None:
        """Make the next call raise *failure* (exception) or reply with it as error text."""
        self._failures.append(failure)

    def mkdir(self, path: str) -> None:
        path = normalize_path(path)
        while path not in self._dirs:
            self._dirs.add(path)
            path = parent_path(path)

    def read(self, path: str) -> bytes | None:
        entry = self._files.get(normalize_path(path))
        return entry[0] if entry else None

    def exists(self, path: str) -> bool:
        path = normalize_path(path)
        return path in self._files or path in self._dirs

    # ------------------------------------------------------------------
    # Transport protocol
    # ------------------------------------------------------------------

    async def invoke(self, call: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(call)
        if self.latency:
            await asyncio.sleep(self.latency)

        if self._failures:
            failure = self._failures.pop(0)
            if isinstance(failure, BaseException):
                raise failure
            return {"success": False, "error": failure}

        action = call.get("action")
        if action != "test_connection" and self.server_id is not None:
            if call.get("serverId") != self.server_id:
                return {"success": False, "error": f"Unknown server: {call.get('serverId')}"}

        handler = {
            "list_files": self._list_files,
            "upload_file": self._upload_file,
            "download_file": self._download_file,
            "delete_file": self._delete_file,
            "test_connection": self._test_connection,
        }.get(action)  # type: ignore[arg-type]
        if handler is None:
            return {"success": False, "error": f"Unknown action: {action}"}
        return handler(call)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _list_files(self, call: dict[str, Any]) -> dict[str, Any]:
        path = normalize_path(call.get("path", "/"))
        if path not in self._dirs:
            return {"success": False, "error": f"Directory not found: {path}"}

        files = [
            {
                "name": d.rsplit("/", 1)[-1],
                "size": 0,
                "type": "directory",
                "modified_at": None,
                "path": d,
            }
            for d in sorted(self._dirs)
            if d != "/" and parent_path(d) == path
        ]
        files.extend(
            {
                "name": p.rsplit("/", 1)[-1],
                "size": len(data),
                "type": "file",
                "modified_at": modified.isoformat(),
                "path": p,
            }
            for p, (data, modified) in sorted(self._files.items())
            if parent_path(p) == path
        )
        return {"success": True, "files": files}

    def _upload_file(self, call: dict[str, Any]) -> dict[str, Any]:
        file_data = call.get("fileData") or {}
        remote = file_data.get("remotePath") or join_remote_path("/", file_data.get("fileName", ""))
        remote = normalize_path(remote)
        if remote in self._dirs:
            return {"success": False, "error": f"Is a directory: {remote}"}
        try:
            data = base64.b64decode(file_data.get("content", ""), validate=True)
        except (binascii.Error, ValueError):
            return {"success": False, "error": "Invalid file content encoding"}
        self._store(remote, data)
        logger.debug("Stored %d byte(s) at %s", len(data), remote)
        return {"success": True}

    def _download_file(self, call: dict[str, Any]) -> dict[str, Any]:
        path = normalize_path(call.get("path", ""))
        entry = self._files.get(path)
        if entry is None:
            return {"success": False, "error": f"File not found: {path}"}
        return {"success": True, "content": base64.b64encode(entry[0]).decode("ascii")}

    def _delete_file(self, call: dict[str, Any]) -> dict[str, Any]:
        path = normalize_path(call.get("path", ""))
        if path in self._dirs:
            return {"success": False, "error": f"Cannot delete directory: {path}"}
        if self._files.pop(path, None) is None:
            return {"success": False, "error": f"File not found: {path}"}
        return {"success": True}

    def _test_connection(self, call: dict[str, Any]) -> dict[str, Any]:
        config = call.get("config") or {}
        host = config.get("host")
        if self.reachable_hosts is not None and host not in self.reachable_hosts:
            return {"success": False, "error": f"Unable to connect to {host}"}
        return {"success": True}

    def _store(self, path: str, data: bytes) -> None:
        self.mkdir(parent_path(path))
        self._files[path] = (data, datetime.now(UTC))
