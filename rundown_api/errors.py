"""
errors.py: Typed error taxonomy for the remote rundown API.

Every non-2xx response is normalised into an ``ApiError`` carrying an
``ErrorKind``.  Callers branch on ``kind``; they never inspect message text.

Classification order (first match wins):
  1. An explicit ``code`` field in the error body (``"conflict"``, ...).
  2. The HTTP status code (401, 404, 409, 400/422).
  3. Legacy text contract: the backend reports duplicate story integrations
     as a plain 400 with "Story already exists in this rundown" (older builds:
     "already integrated").  Those messages classify as CONFLICT.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    UNKNOWN = "unknown"


_LEGACY_CONFLICT_PHRASES = ("already integrated", "already exists")

_STATUS_KINDS = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.UNAUTHORIZED,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
    422: ErrorKind.VALIDATION,
}


class ApiError(Exception):
    """A failed call to the rundown API, normalised by the request helper."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status

    def __repr__(self) -> str:
        return f"ApiError(kind={self.kind.value!r}, status={self.status!r}, message={self.message!r})"


def classify_error(
    status: Optional[int],
    message: str = "",
    code: Optional[str] = None,
) -> ErrorKind:
    """Map an HTTP failure to an ``ErrorKind``.

    Args:
        status:  HTTP status code, or None for transport failures.
        message: Server-provided error text (may be empty).
        code:    Optional machine-readable error code from the response body.

    Returns:
        The ErrorKind for the failure.
    """
    if code:
        try:
            return ErrorKind(code.lower())
        except ValueError:
            pass  # unknown code; fall through to status/text rules

    if status is None:
        return ErrorKind.NETWORK

    text = (message or "").lower()
    if status in (400, 409) and any(p in text for p in _LEGACY_CONFLICT_PHRASES):
        return ErrorKind.CONFLICT

    return _STATUS_KINDS.get(status, ErrorKind.UNKNOWN)
