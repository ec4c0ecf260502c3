"""Conversion of transport replies, errors, and denials into outcomes.

Every path out of the mediator goes through one of the functions here,
so callers only ever branch on ``Succeeded``, ``Denied``, ``Failed`` or
``TimedOut`` and never on the shape of a transport error.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import TYPE_CHECKING, Any

from .exceptions import MalformedResponseError
from .permissions import Capability, can_access
from .types import (
    Denied,
    DownloadRequest,
    Failed,
    ListRequest,
    RemoteEntry,
    Succeeded,
    TimedOut,
    TransportResponse,
)

if TYPE_CHECKING:
    from .permissions import PermissionSet
    from .types import OperationOutcome, OperationRequest

logger = logging.getLogger(__name__)

_GENERIC_FAILURES = {
    "list_files": "Failed to list files",
    "upload_file": "Upload failed",
    "download_file": "Download failed",
    "delete_file": "Delete failed",
    "test_connection": "Unable to connect to file server",
}

_DENIALS = {
    Capability.READ: "You don't have read permission for this location",
    Capability.WRITE: "You don't have write permission for this location",
    Capability.DELETE: "You don't have delete permission for this item",
}


def generic_failure(request: OperationRequest) -> str:
    return _GENERIC_FAILURES.get(request.action, "Operation failed")


def denied(request: OperationRequest, reason: str | None = None) -> Denied:
    """Policy refusal for *request*."""
    if reason is None:
        reason = _DENIALS.get(request.capability, "Access denied")  # type: ignore[arg-type]
    return Denied(reason=reason, request=request)


def from_exception(request: OperationRequest, exc: BaseException) -> Failed:
    """Failure raised by the transport or while decoding its reply."""
    message = str(exc).strip() or generic_failure(request)
    return Failed(message=message, request=request)


def timed_out(request: OperationRequest, timeout: float) -> TimedOut:
    return TimedOut(
        message=f"No response from file server after {timeout:g}s",
        timeout=timeout,
        request=request,
    )


def encode_content(data: bytes) -> str:
    """Encode an upload payload into the transport's base64 text form."""
    return base64.b64encode(data).decode("ascii")


def decode_content(content: str) -> bytes:
    """Decode the transport's base64 text into raw bytes.

    ASCII whitespace is ignored, so MIME-wrapped output (a newline every
    76 characters) decodes the same as a single line.
    """
    try:
        return base64.b64decode("".join(content.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedResponseError(f"Could not decode file content: {exc}") from exc


def filter_entries(
    entries: list[RemoteEntry],
    permission_set: PermissionSet,
) -> list[RemoteEntry]:
    """Drop every entry the permission set cannot read."""
    visible = [e for e in entries if can_access(permission_set, e.path, Capability.READ)]
    hidden = len(entries) - len(visible)
    if hidden:
        logger.debug("Filtered %d unreadable entr(ies) from listing", hidden)
    return visible


def from_response(
    request: OperationRequest,
    raw: Any,
    permission_set: PermissionSet,
) -> OperationOutcome:
    """Convert a raw transport reply into an outcome for *request*."""
    try:
        response = TransportResponse.from_wire(raw)
    except MalformedResponseError as exc:
        return from_exception(request, exc)

    if not response.success:
        return Failed(message=response.error or generic_failure(request), request=request)

    try:
        if isinstance(request, ListRequest):
            entries = [RemoteEntry.from_wire(item) for item in response.files or []]
            return Succeeded(payload=filter_entries(entries, permission_set), request=request)

        if isinstance(request, DownloadRequest):
            if response.content is None:
                return Failed(
                    message=response.error or generic_failure(request),
                    request=request,
                )
            return Succeeded(payload=decode_content(response.content), request=request)
    except MalformedResponseError as exc:
        return from_exception(request, exc)

    return Succeeded(payload=None, request=request)
