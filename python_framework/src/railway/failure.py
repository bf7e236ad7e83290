"""
Failure description — structured error information for the failure track.

Every stage of the CRL pipeline reports problems as a FailureDescription
instead of raising. The ErrorCode decides the HTTP status; the message
becomes the response body verbatim.

Upstream failures carry the status the remote server answered with, so the
proxy can mirror it (a 404 from the CRL host is a 404 for the caller).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """
    Error taxonomy for the failure track.

    - Client errors: INVALID_INPUT, METHOD_NOT_ALLOWED
    - Upstream errors: UPSTREAM_ERROR (mirrors upstream), UPSTREAM_UNREACHABLE, UPSTREAM_TIMEOUT
    - Local errors: DECODE_ERROR, CONFIGURATION_ERROR, UNCLASSIFIED
    """

    # --- Client-side errors (4xx HTTP range) ---
    INVALID_INPUT = "INVALID_INPUT"
    """Missing or malformed target URL (→ 400)."""

    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    """Anything other than GET (→ 405)."""

    # --- Upstream errors ---
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    """Upstream answered with a non-2xx status (→ same status)."""

    UPSTREAM_UNREACHABLE = "UPSTREAM_UNREACHABLE"
    """Connection refused, DNS failure, TLS failure (→ 500)."""

    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    """Fetch deadline exceeded (→ 500)."""

    # --- Server-side errors (5xx HTTP range) ---
    DECODE_ERROR = "DECODE_ERROR"
    """The decoding capability rejected the payload or could not run (→ 500)."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """System misconfiguration (→ 500)."""

    UNCLASSIFIED = "UNCLASSIFIED"
    """Unexpected exception caught at the top-level boundary (→ 500)."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message, optional exception,
    optional upstream status and timestamp.

    >>> desc = FailureDescription(ErrorCode.INVALID_INPUT, "Invalid CRL URL")
    >>> desc.code
    <ErrorCode.INVALID_INPUT: 'INVALID_INPUT'>
    >>> desc.message
    'Invalid CRL URL'
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False)
    status_code: Optional[int] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @staticmethod
    def from_exception(exception: BaseException) -> FailureDescription:
        """
        Describe an exception nobody classified.

        The message is the exception's own message, or its type name
        when it carries none.
        """
        message = str(exception) or type(exception).__name__
        return FailureDescription(ErrorCode.UNCLASSIFIED, message, exception)

