"""
Result values for expected business outcomes.

Operations return ``Ok(value)`` on success or ``Err(tag)`` where ``tag`` is
one of a closed ``Literal`` set of string codes. Unexpected failures are
still raised as exceptions and never folded into a result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeGuard, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T
    ok: bool = True


@dataclass(frozen=True)
class Err(Generic[E]):
    """Expected failure outcome carrying a string-tagged error code."""

    error: E
    ok: bool = False


Result = Ok[T] | Err[E]


def is_ok(result: Ok[T] | Err[Any]) -> TypeGuard[Ok[T]]:
    return isinstance(result, Ok)


class Unreachable(Exception):
    """Raised when an exhaustive match over error codes falls through."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Unreachable: {value!r}")


class InvariantViolation(Exception):
    """A state that storage guarantees should make impossible was observed."""
