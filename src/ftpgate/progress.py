"""TransferProgress — synthetic progress for pending uploads and downloads.

The transport reports nothing until a transfer completes, so the percentage
shown while a call is outstanding is a timer-driven estimate capped below
100.  The real completion signal is the call resolving: at that point the
timer is cancelled and joined, the value jumps to 100, and after a short
grace period it returns to 0.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, TypeVar

from .config import DOWNLOAD_CADENCE, UPLOAD_CADENCE, ProgressCadence

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TransferKind(str, Enum):
    UPLOAD = "upload"
    DOWNLOAD = "download"


_DEFAULT_CADENCE = {
    TransferKind.UPLOAD: UPLOAD_CADENCE,
    TransferKind.DOWNLOAD: DOWNLOAD_CADENCE,
}


class TransferProgress:
    """Progress of one logical transfer at a time.

    Listeners registered with :meth:`subscribe` are called with
    ``(kind, percent)`` on every change.  A failing listener is logged
    and skipped.  No mutual exclusion is enforced: a transfer started
    while another is outstanding joins the estimate already running.
    """

    def __init__(
        self,
        kind: TransferKind,
        cadence: ProgressCadence | None = None,
    ) -> None:
        self.kind = kind
        self.cadence = cadence or _DEFAULT_CADENCE[kind]
        self._percent = 0
        self._active = False
        self._listeners: list[Callable[[TransferKind, int], None]] = []
        self._reset_task: asyncio.Task[None] | None = None
        self._ticker: asyncio.Task[None] | None = None
        self._pending = 0

    @property
    def percent(self) -> int:
        return self._percent

    @property
    def active(self) -> bool:
        """True while a tracked call is outstanding."""
        return self._active

    def subscribe(self, listener: Callable[[TransferKind, int], None]) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[TransferKind, int], None]) -> bool:
        """Remove first occurrence of *listener*. Return True if found."""
        try:
            self._listeners.remove(listener)
            return True
        except ValueError:
            return False

    async def track(self, awaitable: Awaitable[T]) -> T:
        """Await *awaitable* while emitting estimated progress.

        Returns the awaitable's result or re-raises its exception.  Calls
        that overlap share one estimate: the value reaches 100 and
        ``active`` clears only once the last outstanding call settles.
        """
        self._pending += 1
        if self._pending == 1:
            self._start()
        try:
            return await awaitable
        finally:
            self._pending -= 1
            if self._pending == 0:
                await self._finish()

    async def wait_idle(self) -> None:
        """Wait until a pending reset back to 0 has happened."""
        if self._reset_task is not None:
            await asyncio.wait([self._reset_task])

    def close(self) -> None:
        """Cancel any pending reset and return to 0 immediately."""
        self._cancel_reset()
        self._active = False
        self._set(0)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start(self) -> None:
        self._cancel_reset()
        self._active = True
        self._set(0)
        self._set(min(self.cadence.step, self.cadence.ceiling))
        self._ticker = asyncio.create_task(self._tick())

    async def _finish(self) -> None:
        ticker, self._ticker = self._ticker, None
        if ticker is not None:
            ticker.cancel()
            await asyncio.wait([ticker])
        # a new call may have started while the ticker was being joined
        if self._pending:
            return
        self._set(100)
        self._active = False
        self._schedule_reset()

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.cadence.interval)
            self._set(min(self._percent + self.cadence.step, self.cadence.ceiling))

    def _schedule_reset(self) -> None:
        self._cancel_reset()
        if self.cadence.grace == 0:
            self._set(0)
            return
        self._reset_task = asyncio.create_task(self._reset_after(self.cadence.grace))

    async def _reset_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self._set(0)

    def _cancel_reset(self) -> None:
        if self._reset_task is not None and not self._reset_task.done():
            self._reset_task.cancel()
        self._reset_task = None

    def _set(self, value: int) -> None:
        if value == self._percent:
            return
        self._percent = value
        for listener in list(self._listeners):
            try:
                listener(self.kind, value)
            except Exception:
                logger.warning(
                    "Progress listener %r failed for %s at %d%%",
                    listener,
                    self.kind.value,
                    value,
                    exc_info=True,
                )
