"""
Execution contexts — separate WHAT (pure logic) from HOW (side effects).

A pipeline describes what should happen and returns Result[T]. An
ExecutionContext decides how it runs: with timing logs, or as the single
top-level boundary that turns a stray exception into a Failure.

    ctx = LoggingExecutionContext(operation="CrlDecode")
    result = ctx.execute(lambda: run_pipeline(url, fetcher=f, decoder=d))
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Protocol, TypeVar, runtime_checkable

from railway.failure import FailureDescription
from railway.result import Failure, Result

T = TypeVar("T")
logger = logging.getLogger("railway.execution")


@runtime_checkable
class ExecutionContext(Protocol):
    """Any class implementing execute(computation) is an execution context."""

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]: ...


class NoOpExecutionContext:
    """Passthrough execution context — runs the computation as-is."""

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        return computation()


class LoggingExecutionContext:
    """
    Execution context that logs entry, exit, duration and result state.

    It is also the last line of defence: an exception escaping the
    computation becomes an UNCLASSIFIED Failure carrying the exception's
    message, so callers always get exactly one Result back.

        ctx = LoggingExecutionContext(operation="CrlDecode")
    """

    def __init__(
        self,
        inner: ExecutionContext | None = None,
        operation: str = "unknown",
        log_level: int = logging.INFO,
    ) -> None:
        self._inner = inner or NoOpExecutionContext()
        self._operation = operation
        self._log_level = log_level

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        logger.log(self._log_level, "[%s] Starting execution", self._operation)
        start = time.monotonic()

        try:
            result = self._inner.execute(computation)
        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "[%s] Execution failed after %.3fs: %s",
                self._operation,
                elapsed,
                e,
            )
            return Failure(FailureDescription.from_exception(e))

        elapsed = time.monotonic() - start
        state = "SUCCESS" if result.is_success() else "FAILURE"
        logger.log(
            self._log_level,
            "[%s] Completed in %.3fs — %s",
            self._operation,
            elapsed,
            state,
        )
        return result
