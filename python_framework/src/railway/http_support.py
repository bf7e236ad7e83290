"""
HTTP integration — ErrorCode→HTTP status mapping.

Framework-agnostic: produces (status, message) pairs that any web layer
(FastAPI, a Lambda proxy response) can serialize.

    status = HttpStatusMapper.map_error_code(ErrorCode.INVALID_INPUT)  # → 400
    status, message = classify(failure)
"""

from __future__ import annotations

from railway.failure import ErrorCode, FailureDescription


class HttpStatusMapper:
    """Maps ErrorCode enum values to HTTP status codes."""

    _CODE_TO_STATUS: dict[ErrorCode, int] = {
        ErrorCode.INVALID_INPUT: 400,
        ErrorCode.METHOD_NOT_ALLOWED: 405,
        ErrorCode.UPSTREAM_ERROR: 502,
        ErrorCode.UPSTREAM_UNREACHABLE: 500,
        ErrorCode.UPSTREAM_TIMEOUT: 500,
        ErrorCode.DECODE_ERROR: 500,
        ErrorCode.CONFIGURATION_ERROR: 500,
        ErrorCode.UNCLASSIFIED: 500,
    }

    @classmethod
    def map_error_code(cls, code: ErrorCode) -> int:
        return cls._CODE_TO_STATUS.get(code, 500)

    @classmethod
    def map_failure(cls, failure: FailureDescription) -> int:
        """
        Map a FailureDescription to an HTTP status code.

        An explicit status on the failure (the upstream's own answer) wins
        over the code's default.
        """
        if failure.status_code is not None:
            return failure.status_code
        return cls.map_error_code(failure.code)


def classify(failure: FailureDescription) -> tuple[int, str]:
    """Reduce a failure to the (status, message) pair the caller sees."""
    return HttpStatusMapper.map_failure(failure), failure.message

