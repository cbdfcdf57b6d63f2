"""Two-variant result type returned across repository boundaries.

Repositories never raise for remote faults. Every call returns either
``Success`` carrying its value (possibly ``None``) or ``Error`` carrying the
original exception.

Usage:
    result = await repository.get_user_by_id("uid-123")
    match result:
        case Success(value=user):
            ...
        case Error(cause=exc):
            ...
"""

from dataclasses import dataclass
from typing import TypeGuard, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success[T]:
    """Successful outcome."""

    value: T


@dataclass(frozen=True, slots=True)
class Error:
    """Failed outcome carrying the underlying cause."""

    cause: Exception

    @property
    def message(self) -> str:
        return str(self.cause) or type(self.cause).__name__


type Result[T] = Success[T] | Error


def is_success(result: "Result[T]") -> TypeGuard[Success[T]]:
    return isinstance(result, Success)


def is_error(result: "Result[T]") -> TypeGuard[Error]:
    return isinstance(result, Error)


def get_or_none(result: "Result[T]") -> T | None:
    """Return the success value, or None for an error."""
    if isinstance(result, Success):
        return result.value
    return None


def unwrap(result: "Result[T]") -> T:
    """Return the success value or re-raise the wrapped cause."""
    if isinstance(result, Error):
        raise result.cause
    return result.value
