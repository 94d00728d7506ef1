"""
Success-or-failure envelope returned by the ledger services.

Services return ``Result[T]`` for expected business outcomes so callers (HTTP
handlers, admin scripts, tests) can branch on ``error_code`` without catching
exceptions. Unexpected failures still propagate as exceptions.

Usage:
    return Result.ok(participation)
    return Result.ok()      # delete returns no value
    return Result.fail("Bet 7 not found.", code=error_codes.BET_NOT_FOUND)
    return Result.from_error(exc)   # exc is a domain BettingError

    if not result:
        respond(status_for(result.error_code), result.error)
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from domain.errors import BettingError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a service call.

    Attributes:
        success: False when a BettingError stopped the operation
        value: Payload on success, None otherwise
        error: Human-readable message if failed
        error_code: Machine-readable code from services.error_codes
    """

    success: bool
    value: T | None = None
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def ok(cls, value: T | None = None) -> "Result[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str, code: str | None = None) -> "Result[T]":
        return cls(success=False, error=error, error_code=code)

    @classmethod
    def from_error(cls, exc: "BettingError") -> "Result[T]":
        """Failure carrying a domain error's message and code."""
        return cls(success=False, error=str(exc), error_code=exc.code)

    def __bool__(self) -> bool:
        """Truthy exactly when success is True."""
        return self.success

    def unwrap(self) -> T:
        """Return the payload; a failed result raises ValueError."""
        if not self.success:
            raise ValueError(f"Cannot unwrap failed result ({self.error_code}): {self.error}")
        return self.value  # type: ignore

    def unwrap_or(self, default: T) -> T:
        """Payload on success, ``default`` on failure."""
        return self.value if self.success else default  # type: ignore

    def map(self, fn: "Callable[[T], Result[U]]") -> "Result[U]":
        """
        Feed the payload into another Result-returning call.

        A failure is returned unchanged; otherwise ``fn`` receives the value.
        """
        if not self.success:
            return self  # type: ignore
        return fn(self.value)  # type: ignore
