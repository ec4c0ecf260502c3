"""EventBus and OperationEvent for reporting mediated operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .types import OutcomeKind

if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OperationEvent:
    """Immutable record of one finished operation.

    Attributes:
        kind: How the operation ended.
        action: Transport action name, e.g. ``"upload_file"``.
        path: Remote path the operation targeted (None for connection tests).
        message: Human-readable summary suitable for a notification.
        user_id: The session user.
        server_id: The server the operation ran against.
    """

    kind: OutcomeKind
    action: str
    path: str | None
    message: str
    user_id: str | None = None
    server_id: str | None = None


class EventBus:
    """Routes finished-operation events to async handlers by outcome kind.

    The mediator emits one event per ``execute`` call.  Handlers for the
    event's kind run in registration order; one that raises is logged
    and the rest still run.
    """

    def __init__(self) -> None:
        self._handlers: dict[OutcomeKind, list[Callable[..., Any]]] = {k: [] for k in OutcomeKind}

    def register(self, kind: OutcomeKind, handler: Callable[..., Any]) -> None:
        """Append *handler* to the list for *kind*."""
        self._handlers[kind].append(handler)

    def register_all(self, handler: Callable[..., Any]) -> None:
        """Register *handler* for every outcome kind."""
        for kind in OutcomeKind:
            self.register(kind, handler)

    def unregister(self, kind: OutcomeKind, handler: Callable[..., Any]) -> bool:
        """Remove first occurrence of *handler*. Return True if found."""
        handlers = self._handlers[kind]
        try:
            handlers.remove(handler)
            return True
        except ValueError:
            return False

    async def emit(self, event: OperationEvent) -> None:
        """Dispatch *event* to all registered handlers for its kind."""
        for handler in self._handlers[event.kind]:
            try:
                await handler(event)
            except Exception:
                logger.warning(
                    "Handler %r failed for %s on %s",
                    handler,
                    event.kind.value,
                    event.path,
                    exc_info=True,
                )

