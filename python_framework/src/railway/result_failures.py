"""
Convenience factory methods for the common Result failures.

    from railway.result_failures import ResultFailures

    # Instead of:
    Result.failure(ErrorCode.INVALID_INPUT, "Invalid CRL URL")

    # Write:
    ResultFailures.invalid_input("Invalid CRL URL")
"""

from __future__ import annotations

from railway.failure import ErrorCode
from railway.result import Result


class ResultFailures:
    """Factory methods for the failures the CRL pipeline reports."""

    @staticmethod
    def invalid_input(message: str) -> Result:
        """Missing or malformed request input."""
        return Result.failure(ErrorCode.INVALID_INPUT, message)

    @staticmethod
    def method_not_allowed(message: str = "Method Not Allowed") -> Result:
        return Result.failure(ErrorCode.METHOD_NOT_ALLOWED, message)

    @staticmethod
    def upstream_error(status_code: int, reason: str) -> Result:
        """Upstream answered, but not with a 2xx; status and reason are mirrored."""
        return Result.failure(ErrorCode.UPSTREAM_ERROR, reason, status_code=status_code)

    @staticmethod
    def upstream_unreachable(message: str, exception: BaseException | None = None) -> Result:
        return Result.failure(ErrorCode.UPSTREAM_UNREACHABLE, message, exception)

    @staticmethod
    def upstream_timeout(message: str, exception: BaseException | None = None) -> Result:
        return Result.failure(ErrorCode.UPSTREAM_TIMEOUT, message, exception)

    @staticmethod
    def decode_error(message: str, exception: BaseException | None = None) -> Result:
        """The decoding capability failed or rejected the payload."""
        return Result.failure(ErrorCode.DECODE_ERROR, message, exception)

