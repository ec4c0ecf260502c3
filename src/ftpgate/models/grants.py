"""Grant and server records — the tables the admin tooling maintains.

Provides non-table ``*Base`` models and concrete default tables.
Subclass a ``*Base`` with ``table=True`` and a custom ``__tablename__``
to read from a different table.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class GrantRecordBase(SQLModel):
    """Base fields for a user permission record."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(index=True)
    server_id: str = Field(index=True)
    path: str = Field(default="/")
    can_read: bool = Field(default=True)
    can_write: bool = Field(default=False)
    can_delete: bool = Field(default=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class GrantRecord(GrantRecordBase, table=True):
    """Default permission table — ``ftpgate_user_permissions``."""

    __tablename__ = "ftpgate_user_permissions"


class ServerRecordBase(SQLModel):
    """Base fields for a file server record."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(default="")
    host: str
    port: int = Field(default=21)
    username: str = Field(default="")
    password: str = Field(default="")
    protocol: str = Field(default="ftp")
    passive_mode: bool = Field(default=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class ServerRecord(ServerRecordBase, table=True):
    """Default server table — ``ftpgate_servers``."""

    __tablename__ = "ftpgate_servers"
