"""OperationMediator — the permission gate in front of every file action.

Each request is checked against the session's ``PermissionSet`` before
anything is sent to the transport.  A refused request returns ``Denied``
without any remote side effect.  Allowed requests are dispatched, their
replies normalized into outcomes, and listings are filtered entry by
entry through the same read check.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from . import normalizer
from .config import CallPolicy
from .events import OperationEvent
from .exceptions import TransientTransportError
from .permissions import can_access
from .progress import TransferKind, TransferProgress
from .types import (
    DeleteRequest,
    DownloadRequest,
    ListRequest,
    OutcomeKind,
    TestConnectionRequest,
    UploadRequest,
)

if TYPE_CHECKING:
    from .config import ProgressCadence
    from .events import EventBus
    from .permissions import PermissionSet
    from .protocol import Transport
    from .types import OperationOutcome, OperationRequest

logger = logging.getLogger(__name__)

_TRANSIENT_ERRORS = (TransientTransportError, ConnectionError, TimeoutError)


@dataclass(frozen=True)
class SessionContext:
    """Identity and grants of the session issuing a request."""

    user_id: str
    server_id: str
    permission_set: PermissionSet


class OperationMediator:
    """Gate, dispatch, and normalize file operations.

    ``execute`` never raises for operational failures: every call ends in
    exactly one of ``Succeeded``, ``Denied``, ``Failed`` or ``TimedOut``.

    Usage::

        mediator = OperationMediator(transport)
        outcome = await mediator.execute(ListRequest("/docs"), context)
        if outcome.success:
            entries = outcome.payload
    """

    def __init__(
        self,
        transport: Transport,
        *,
        policy: CallPolicy | None = None,
        event_bus: EventBus | None = None,
        upload_cadence: ProgressCadence | None = None,
        download_cadence: ProgressCadence | None = None,
    ) -> None:
        self._transport = transport
        self.policy = policy or CallPolicy()
        self._event_bus = event_bus
        self.upload_progress = TransferProgress(TransferKind.UPLOAD, upload_cadence)
        self.download_progress = TransferProgress(TransferKind.DOWNLOAD, download_cadence)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def execute(
        self,
        request: OperationRequest,
        context: SessionContext,
    ) -> OperationOutcome:
        """Run *request* on behalf of *context* and return its outcome."""
        try:
            outcome = await self._execute(request, context)
        except Exception as exc:
            logger.warning("%s raised unexpectedly", request.action, exc_info=True)
            outcome = normalizer.from_exception(request, exc)
        self._log_outcome(outcome, context)
        await self._emit(outcome, context)
        return outcome

    def close(self) -> None:
        """Stop any pending progress resets."""
        self.upload_progress.close()
        self.download_progress.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _execute(
        self,
        request: OperationRequest,
        context: SessionContext,
    ) -> OperationOutcome:
        capability = request.capability
        if capability is not None and not can_access(
            context.permission_set, request.target, capability
        ):
            return normalizer.denied(request)

        call = self._build_call(request, context)
        logger.debug("Dispatching %s for %s", request.action, request.target)

        tracker = self._tracker_for(request)
        try:
            if tracker is not None:
                raw = await tracker.track(self._dispatch(call))
            else:
                raw = await self._dispatch(call)
        except TimeoutError as exc:
            if self.policy.timeout is not None:
                return normalizer.timed_out(request, self.policy.timeout)
            return normalizer.from_exception(request, exc)
        except Exception as exc:
            return normalizer.from_exception(request, exc)

        return normalizer.from_response(request, raw, context.permission_set)

    async def _dispatch(self, call: dict[str, Any]) -> Any:
        """Invoke the transport, applying the call policy's timeout and retries."""
        attempt = 0
        while True:
            try:
                if self.policy.timeout is None:
                    return await self._transport.invoke(call)
                async with asyncio.timeout(self.policy.timeout):
                    return await self._transport.invoke(call)
            except _TRANSIENT_ERRORS as exc:
                if attempt >= self.policy.max_retries:
                    raise
                attempt += 1
                delay = self.policy.backoff(attempt)
                logger.info(
                    "Retrying %s after transient failure (%s); attempt %d of %d in %.2fs",
                    call["action"],
                    str(exc) or type(exc).__name__,
                    attempt,
                    self.policy.max_retries,
                    delay,
                )
                await asyncio.sleep(delay)

    def _tracker_for(self, request: OperationRequest) -> TransferProgress | None:
        if isinstance(request, UploadRequest):
            return self.upload_progress
        if isinstance(request, DownloadRequest):
            return self.download_progress
        return None

    @staticmethod
    def _build_call(request: OperationRequest, context: SessionContext) -> dict[str, Any]:
        """Build the structured transport call for *request*."""
        if isinstance(request, TestConnectionRequest):
            return {"action": request.action, "config": request.config.to_wire()}

        call: dict[str, Any] = {"action": request.action, "serverId": context.server_id}
        if isinstance(request, UploadRequest):
            call["fileData"] = {
                "fileName": request.name,
                "size": request.size_bytes,
                "localPath": request.name,
                "remotePath": request.remote_path,
                "content": normalizer.encode_content(request.data),
            }
        elif isinstance(request, (ListRequest, DownloadRequest, DeleteRequest)):
            call["path"] = request.path
        return call

    @staticmethod
    def _log_outcome(outcome: OperationOutcome, context: SessionContext) -> None:
        request = outcome.request
        action = request.action if request is not None else "?"
        target = request.target if request is not None else None
        if outcome.kind is OutcomeKind.SUCCEEDED:
            logger.info("%s %s for %s: %s", action, target, context.user_id, outcome.message)
        elif outcome.kind is OutcomeKind.DENIED:
            logger.info("%s %s denied for %s", action, target, context.user_id)
        else:
            logger.warning(
                "%s %s %s for %s: %s",
                action,
                target,
                outcome.kind.value,
                context.user_id,
                outcome.message,
            )

    async def _emit(self, outcome: OperationOutcome, context: SessionContext) -> None:
        if self._event_bus is None or outcome.request is None:
            return
        await self._event_bus.emit(
            OperationEvent(
                kind=outcome.kind,
                action=outcome.request.action,
                path=outcome.request.target,
                message=outcome.message,
                user_id=context.user_id,
                server_id=context.server_id,
            )
        )
