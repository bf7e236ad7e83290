"""
Railway-Oriented Programming (ROP) framework.

Explicit, composable, functional error handling — no exceptions in business logic.

    from railway import Result, ErrorCode

    def validate(url: str | None) -> Result[str]:
        if url is None:
            return Result.failure(ErrorCode.INVALID_INPUT, "Invalid CRL URL")
        return Result.success(url)

    result = validate(url).flat_map(fetcher.fetch).map(normalize)
"""

from railway.result import Result, Success, Failure
from railway.failure import ErrorCode, FailureDescription
from railway.execution import (
    ExecutionContext,
    NoOpExecutionContext,
    LoggingExecutionContext,
)
from railway.result_failures import ResultFailures
from railway.assertions import ResultAssertions

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ExecutionContext",
    "NoOpExecutionContext",
    "LoggingExecutionContext",
    "ResultFailures",
    "ResultAssertions",
]

__version__ = "1.1.0"
