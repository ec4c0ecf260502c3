"""Grant and server sources — read-only adapters over the record store.

Stateless readers that receive the record models at construction and
an async session factory for queries, following the same pattern as
the permission services they front.  The core never writes through
these; record maintenance belongs to the admin tooling.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlmodel import select

from .config import ServerConfig
from .models.grants import GrantRecord, ServerRecord
from .permissions import Grant

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from .models.grants import GrantRecordBase, ServerRecordBase

logger = logging.getLogger(__name__)


class SQLGrantSource:
    """Loads a user's grants for one server from the permission table."""

    def __init__(
        self,
        session_factory: Callable[..., AsyncSession],
        grant_model: type[GrantRecordBase] = GrantRecord,
    ) -> None:
        self._session_factory = session_factory
        self._grant_model = grant_model

    async def load_grants(self, user_id: str, server_id: str) -> list[Grant]:
        model = self._grant_model
        async with self._session_factory() as session:
            result = await session.execute(
                select(model)
                .where(model.user_id == user_id, model.server_id == server_id)
                .order_by(model.path)  # type: ignore[arg-type]
            )
            records = result.scalars().all()
        logger.debug("Loaded %d grant(s) for %s on %s", len(records), user_id, server_id)
        return [record_to_grant(r) for r in records]


class SQLServerConfigSource:
    """Reads the single configured file server from the server table."""

    def __init__(
        self,
        session_factory: Callable[..., AsyncSession],
        server_model: type[ServerRecordBase] = ServerRecord,
    ) -> None:
        self._session_factory = session_factory
        self._server_model = server_model

    async def get_server(self) -> ServerConfig | None:
        model = self._server_model
        async with self._session_factory() as session:
            result = await session.execute(
                select(model).order_by(model.created_at).limit(1)  # type: ignore[arg-type]
            )
            record = result.scalars().first()
        if record is None:
            return None
        return record_to_server(record)


class StaticGrantSource:
    """Grant source over a fixed collection, for embedding and tests."""

    def __init__(self, grants: Iterable[Grant] = ()) -> None:
        self._grants = list(grants)

    async def load_grants(self, user_id: str, server_id: str) -> list[Grant]:
        return [g for g in self._grants if g.owner_user_id == user_id and g.server_id == server_id]

    def replace(self, grants: Iterable[Grant]) -> None:
        """Swap in a new grant collection (simulates an admin edit)."""
        self._grants = list(grants)


class StaticServerConfigSource:
    """Server source returning a fixed config."""

    def __init__(self, server: ServerConfig | None) -> None:
        self._server = server

    async def get_server(self) -> ServerConfig | None:
        return self._server


def record_to_grant(record: GrantRecordBase) -> Grant:
    return Grant(
        owner_user_id=record.user_id,
        server_id=record.server_id,
        path_pattern=record.path,
        can_read=record.can_read,
        can_write=record.can_write,
        can_delete=record.can_delete,
    )


def record_to_server(record: ServerRecordBase) -> ServerConfig:
    return ServerConfig(
        host=record.host,
        port=record.port,
        username=record.username,
        password=record.password,
        protocol=record.protocol,
        passive_mode=record.passive_mode,
        name=record.name,
        id=record.id,
    )
