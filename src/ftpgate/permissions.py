"""Capabilities, grants, and the permission index."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .paths import matches

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class Capability(str, Enum):
    """A single access right, checked independently of the others."""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class Grant:
    """One rule binding a user, server, and path pattern to a set of capabilities.

    Attributes:
        owner_user_id: The user the grant applies to.
        server_id: The file server the grant applies to.
        path_pattern: ``*`` or a path covering itself and its descendants.
        can_read: Listing and downloading.
        can_write: Uploading.
        can_delete: Removing files.
    """

    owner_user_id: str
    server_id: str
    path_pattern: str
    can_read: bool = False
    can_write: bool = False
    can_delete: bool = False

    def allows(self, capability: Capability) -> bool:
        """Return True if the capability flag is set on this grant."""
        if capability is Capability.READ:
            return self.can_read
        if capability is Capability.WRITE:
            return self.can_write
        if capability is Capability.DELETE:
            return self.can_delete
        return False

    def covers(self, path: str) -> bool:
        return matches(self.path_pattern, path)


@dataclass(frozen=True, slots=True)
class PermissionSet:
    """Snapshot of one user's grants for one server.

    Immutable: when the grant records change, build a new set with
    :meth:`from_grants` instead of mutating this one.
    """

    user_id: str
    server_id: str
    grants: tuple[Grant, ...] = ()

    @classmethod
    def from_grants(
        cls,
        user_id: str,
        server_id: str,
        grants: Iterable[Grant],
    ) -> PermissionSet:
        """Build a set from *grants*, keeping only those for (*user_id*, *server_id*)."""
        kept = tuple(
            g for g in grants if g.owner_user_id == user_id and g.server_id == server_id
        )
        return cls(user_id=user_id, server_id=server_id, grants=kept)

    @classmethod
    def empty(cls, user_id: str, server_id: str) -> PermissionSet:
        return cls(user_id=user_id, server_id=server_id)

    def __iter__(self) -> Iterator[Grant]:
        return iter(self.grants)

    def __len__(self) -> int:
        return len(self.grants)

    def can(self, path: str, capability: Capability) -> bool:
        return can_access(self, path, capability)

    def capabilities_for(self, path: str) -> set[Capability]:
        """Union of every capability granted on *path*."""
        return {cap for cap in Capability if can_access(self, path, cap)}


def can_access(permission_set: PermissionSet, path: str, capability: Capability) -> bool:
    """Check whether *permission_set* grants *capability* on *path*.

    True iff at least one grant covers the path and carries the capability.
    Grants only ever widen access: there is no precedence between
    overlapping grants and no deny rule.
    """
    return any(g.allows(capability) and g.covers(path) for g in permission_set.grants)
