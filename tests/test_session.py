"""Tests for FileSession — navigation and mediated operations end to end."""

from __future__ import annotations

import pytest

from ftpgate.config import ProgressCadence, ServerConfig
from ftpgate.exceptions import (
    AuthenticationRequiredError,
    ConfigurationError,
    ServerNotConfiguredError,
)
from ftpgate.permissions import Capability, Grant
from ftpgate.session import FileSession, format_size
from ftpgate.sources import StaticGrantSource, StaticServerConfigSource
from ftpgate.transports.memory import MemoryTransport
from ftpgate.types import Denied, EntryKind, Failed, RemoteEntry, Succeeded

SERVER = ServerConfig(host="ftp.example.com", id="srv-1", name="Main")
FAST = ProgressCadence(step=10, interval=0.01, ceiling=90, grace=0.01)


def _grant(pattern: str, **flags: bool) -> Grant:
    return Grant(
        "alice",
        "srv-1",
        pattern,
        can_read=flags.get("read", False),
        can_write=flags.get("write", False),
        can_delete=flags.get("delete", False),
    )


@pytest.fixture
def grants() -> StaticGrantSource:
    return StaticGrantSource(
        [
            _grant("/", read=True),
            _grant("/docs", read=True, write=True, delete=True),
            _grant("/other", write=True),
        ]
    )


@pytest.fixture
def store() -> MemoryTransport:
    return MemoryTransport(
        {
            "/docs/a.txt": b"alpha",
            "/other/b.txt": b"bravo",
            "/readme.md": b"# hi",
        },
        server_id="srv-1",
    )


@pytest.fixture
async def session(store: MemoryTransport, grants: StaticGrantSource) -> FileSession:
    s = FileSession(
        "alice",
        store,
        grants,
        StaticServerConfigSource(SERVER),
        upload_cadence=FAST,
        download_cadence=FAST,
    )
    return await s.open()


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_requires_user(self, store, grants):
        with pytest.raises(AuthenticationRequiredError):
            FileSession("", store, grants, StaticServerConfigSource(SERVER))

    async def test_no_server(self, store, grants):
        s = FileSession("alice", store, grants, StaticServerConfigSource(None))
        with pytest.raises(ServerNotConfiguredError):
            await s.open()

    async def test_server_without_id(self, store, grants):
        s = FileSession("alice", store, grants, StaticServerConfigSource(ServerConfig(host="h")))
        with pytest.raises(ConfigurationError):
            await s.open()

    async def test_context_before_open(self, store, grants):
        s = FileSession("alice", store, grants, StaticServerConfigSource(SERVER))
        with pytest.raises(ServerNotConfiguredError):
            _ = s.context
        assert not s.can(Capability.READ)

    async def test_async_context_manager(self, store, grants):
        async with FileSession("alice", store, grants, StaticServerConfigSource(SERVER)) as s:
            assert s.server is SERVER
            assert len(s.permissions) == 3

    async def test_refresh_permissions_rebuilds(self, session: FileSession, grants):
        before = session.permissions
        grants.replace([_grant("*", read=True)])
        after = await session.refresh_permissions()
        assert after is not before
        assert len(before) == 3
        assert len(after) == 1
        assert session.can(Capability.READ, "/anything")


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


class TestNavigation:
    async def test_cd_and_up(self, session: FileSession):
        assert session.cd("docs/") == "/docs"
        assert session.up() == "/"
        assert session.up() == "/"

    async def test_enter_directory(self, session: FileSession):
        assert session.enter(RemoteEntry("docs", "/docs", EntryKind.DIRECTORY))
        assert session.current_path == "/docs"

    async def test_enter_file_is_noop(self, session: FileSession):
        assert not session.enter(RemoteEntry("a.txt", "/docs/a.txt"))
        assert session.current_path == "/"

    async def test_enter_parent_entry(self, session: FileSession):
        session.cd("/docs/sub")
        assert session.enter(RemoteEntry("..", "/docs", EntryKind.DIRECTORY))
        assert session.current_path == "/docs"

    async def test_breadcrumbs(self, session: FileSession):
        session.cd("/docs/sub")
        assert session.breadcrumbs() == [("Root", "/"), ("docs", "/docs"), ("sub", "/docs/sub")]

    async def test_can_defaults_to_current_path(self, session: FileSession):
        assert not session.can(Capability.WRITE)
        session.cd("/docs")
        assert session.can(Capability.WRITE)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class TestOperations:
    async def test_list_root(self, session: FileSession):
        outcome = await session.list_dir()
        assert isinstance(outcome, Succeeded)
        names = [e.name for e in session.last_listing]
        assert names == ["docs", "other", "readme.md"]

    async def test_denied_listing_clears_last_listing(self, session: FileSession, grants):
        await session.list_dir()
        grants.replace([_grant("/docs", read=True)])
        await session.refresh_permissions()
        outcome = await session.list_dir("/")
        assert isinstance(outcome, Denied)
        assert session.last_listing == []

    async def test_root_read_grant_covers_subdirectories(self, session: FileSession, store):
        session.cd("/other")
        calls_before = len(store.calls)
        outcome = await session.list_dir()
        assert isinstance(outcome, Succeeded)
        assert len(store.calls) == calls_before + 1

    async def test_upload_then_refresh(self, session: FileSession, store):
        session.cd("/docs")
        outcome = await session.upload("new.txt", b"fresh")
        assert isinstance(outcome, Succeeded)
        assert store.read("/docs/new.txt") == b"fresh"
        assert "new.txt" in [e.name for e in session.last_listing]

    async def test_upload_denied_without_write(self, session: FileSession, store):
        outcome = await session.upload("x.txt", b"x")
        assert isinstance(outcome, Denied)
        assert store.read("/x.txt") is None
        assert store.calls == []

    async def test_download(self, session: FileSession):
        outcome = await session.download("/docs/a.txt")
        assert isinstance(outcome, Succeeded)
        assert outcome.payload == b"alpha"
        assert session.mediator.download_progress.percent == 100

    async def test_download_directory_refused(self, session: FileSession, store):
        outcome = await session.download(RemoteEntry("docs", "/docs", EntryKind.DIRECTORY))
        assert isinstance(outcome, Failed)
        assert store.calls == []

    async def test_download_missing_file(self, session: FileSession):
        outcome = await session.download("/docs/missing.txt")
        assert isinstance(outcome, Failed)
        assert "not found" in outcome.message

    async def test_delete(self, session: FileSession, store):
        session.cd("/docs")
        outcome = await session.delete(RemoteEntry("a.txt", "/docs/a.txt"))
        assert isinstance(outcome, Succeeded)
        assert store.read("/docs/a.txt") is None
        assert session.last_listing == []

    async def test_delete_denied(self, session: FileSession, store):
        outcome = await session.delete("/readme.md")
        assert isinstance(outcome, Denied)
        assert store.read("/readme.md") == b"# hi"

    async def test_test_connection(self, session: FileSession, store):
        outcome = await session.test_connection()
        assert isinstance(outcome, Succeeded)
        assert store.calls[-1]["config"]["host"] == "ftp.example.com"

    async def test_test_connection_before_open(self, store, grants):
        s = FileSession("alice", store, grants, StaticServerConfigSource(SERVER))
        store.reachable_hosts = {"other.example.com"}
        outcome = await s.test_connection(ServerConfig(host="ftp.example.com"))
        assert isinstance(outcome, Failed)
        assert "Unable to connect" in outcome.message


class TestFormatSize:
    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            pytest.param(0, "0 B", id="zero"),
            pytest.param(512, "512 B", id="bytes"),
            pytest.param(1024, "1 KB", id="one-kb"),
            pytest.param(1536, "1.5 KB", id="fractional-kb"),
            pytest.param(5 * 1024**2, "5 MB", id="mb"),
            pytest.param(3 * 1024**3, "3 GB", id="gb"),
        ],
    )
    def test_format(self, size: int, expected: str):
        assert format_size(size) == expected
