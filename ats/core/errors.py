"""Error taxonomy for board operations.

Every failure an operation can surface is an ``ATSError`` subclass carrying a
human-readable message (shown to the user as a notice) and the HTTP status the
API layer answers with.
"""

from __future__ import annotations

from typing import Any

from ats.models.enums import ErrorKind


class ATSError(Exception):
    """Base exception for board operation failures."""

    kind: ErrorKind = ErrorKind.validation
    status_code: int = 400

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        self.message = message
        self.original_error = original_error
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to the JSON shape returned by the API."""
        return {"error": {"kind": self.kind.value, "message": self.message}}


class TransportFailure(ATSError):
    """Remote call rejected: network error, API error, constraint or timeout."""

    kind = ErrorKind.transport
    status_code = 502


class ValidationFailure(ATSError):
    """Input rejected at the boundary before any adapter call."""

    kind = ErrorKind.validation
    status_code = 422


class NotFoundFailure(ValidationFailure):
    """The job or candidate named by a request does not exist."""

    status_code = 404


class ParseFailure(ATSError):
    """Malformed snapshot or imported JSON document."""

    kind = ErrorKind.parse
    status_code = 400


class AttachmentFailure(ATSError):
    """A single attachment upload failed."""

    kind = ErrorKind.attachment
    status_code = 502


def describe_exception(exc: BaseException) -> str:
    """Return the most useful one-line message for *exc*.

    supabase / postgrest errors expose ``message``; timeouts stringify to an
    empty string, so fall back to the class name.
    """
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        text = message
    else:
        text = str(exc) or type(exc).__name__
    return text.split("\n", 1)[0].strip()
