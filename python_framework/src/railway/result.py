"""
Result monad — the core of Railway-Oriented Programming.

A Result[T] is either Success(value: T) or Failure(error: FailureDescription).
Stages return Result instead of raising, and .flat_map() short-circuits on the
first Failure, so a pipeline reads as its happy path only:

    ┌──────────┐  flat_map  ┌─────────┐  flat_map  ┌───────────┐  flat_map  ┌────────┐
    │ validate │──Success───│  fetch  │──Success───│ normalize │──Success───│ decode │──→ Result[str]
    └────┬─────┘            └────┬────┘            └─────┬─────┘            └───┬────┘
         │ Failure               │ Failure               │ Failure              │ Failure
         └───────────────────────┴───────────────────────┴──────────────────────┴──→ Result[str]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from railway.failure import ErrorCode, FailureDescription

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


class Result(Generic[T]):
    """
    Railway-Oriented Programming Result monad.

    Two possible states:
      - Success(value: T)  — the happy path
      - Failure(error: FailureDescription) — the error track

    Usage:
        >>> Result.success(b"\\x30\\x82").map(len).value()
        2

        >>> result = Result.failure(ErrorCode.INVALID_INPUT, "Invalid CRL URL")
        >>> result.map(len).is_failure()
        True
    """

    # ──────────────────────── Introspection ────────────────────────

    def is_success(self) -> bool:
        return isinstance(self, Success)

    def is_failure(self) -> bool:
        return isinstance(self, Failure)

    def value(self) -> T:
        """
        Extract the success value. Raises ValueError if called on a Failure.

        Prefer .either() or match/case for safe access.
        """
        match self:
            case Success(v):
                return v
            case Failure(err):
                raise ValueError(f"Cannot get value from a Failure: {err.message}")
        raise TypeError("unreachable")  # pragma: no cover

    def error(self) -> FailureDescription:
        """Extract the failure description. Raises ValueError if called on a Success."""
        match self:
            case Failure(err):
                return err
            case Success(v):
                raise ValueError(f"Cannot get error from a Success: {v!r}")
        raise TypeError("unreachable")  # pragma: no cover

    # ──────────────────────── Core Transformations ────────────────────────

    def either(
        self,
        on_success: Callable[[T], R],
        on_failure: Callable[[FailureDescription], R],
    ) -> R:
        """
        Apply one of two functions depending on the state.

        This is the fundamental destructor; the HTTP layer uses it to turn
        a pipeline result into exactly one response.
        """
        match self:
            case Success(v):
                return on_success(v)
            case Failure(err):
                return on_failure(err)
        raise TypeError("unreachable")  # pragma: no cover

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        """Transform the success value. Short-circuits on failure."""
        match self:
            case Success(v):
                return Success(mapper(v))
            case Failure(err):
                return Failure(err)
        raise TypeError("unreachable")  # pragma: no cover

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        """
        Chain a Result-returning function. Short-circuits on failure.

        This is the KEY operator of ROP — it connects railway segments.

            Result.success(url).flat_map(fetcher.fetch)  # → Result[FetchedPayload]
        """
        match self:
            case Success(v):
                return mapper(v)
            case Failure(err):
                return Failure(err)
        raise TypeError("unreachable")  # pragma: no cover

    # ──────────────────────── Side Effects ────────────────────────

    def peek(self, action: Callable[[T], Any]) -> Result[T]:
        """Execute a side effect on the success value (logging) without altering the Result."""
        match self:
            case Success(v):
                action(v)
        return self

    def peek_failure(self, action: Callable[[FailureDescription], Any]) -> Result[T]:
        """Execute a side effect on failure without altering the Result."""
        match self:
            case Failure(err):
                action(err)
        return self

    # ──────────────────────── Static Factories ────────────────────────

    @staticmethod
    def success(value: T) -> Result[T]:
        return Success(value)

    @staticmethod
    def failure(
        code: ErrorCode,
        message: str,
        exception: Optional[BaseException] = None,
        status_code: Optional[int] = None,
    ) -> Result[T]:
        """
        Create a failed Result with error code, message, optional exception
        and optional upstream status.

            Result.failure(ErrorCode.INVALID_INPUT, "Invalid CRL URL")
            Result.failure(ErrorCode.UPSTREAM_ERROR, "Not Found", status_code=404)
        """
        return Failure(
            FailureDescription(
                code=code,
                message=message,
                exception=exception,
                status_code=status_code,
            )
        )

    @staticmethod
    def from_computation(
        computation: Callable[[], T],
        error_code: ErrorCode,
        error_message: str,
    ) -> Result[T]:
        """
        Create a Result from a computation that may raise.

        Wraps exceptions into Result.failure — eliminates try/except boilerplate
        at adapter boundaries.

            return Result.from_computation(
                lambda: x509.load_der_x509_crl(payload),
                ErrorCode.DECODE_ERROR,
                "Unable to load CRL",
            )
        """
        try:
            return Result.success(computation())
        except Exception as e:
            return Result.failure(error_code, error_message, e)


@dataclass(frozen=True, slots=True)
class Success(Result[T]):
    """The success track — wraps a value of type T."""

    _value: T

    def __post_init__(self) -> None:
        if self._value is None:
            raise TypeError("Success value must not be None")

    def __repr__(self) -> str:
        return f"Success({self._value!r})"


@dataclass(frozen=True, slots=True, eq=False)
class Failure(Result[T]):
    """The failure track — wraps a FailureDescription."""

    _error: FailureDescription

    def __post_init__(self) -> None:
        if self._error is None:
            raise TypeError("Failure error must not be None")

    def __repr__(self) -> str:
        return f"Failure({self._error.code.value}: {self._error.message!r})"

    # Timestamps differ between otherwise identical failures; compare what matters.
    def __eq__(self, other: object) -> bool:
        if isinstance(other, Failure):
            return (
                self._error.code == other._error.code
                and self._error.message == other._error.message
                and self._error.status_code == other._error.status_code
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("Failure", self._error.code, self._error.message, self._error.status_code))
