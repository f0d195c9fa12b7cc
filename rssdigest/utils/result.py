"""
Tagged Results
==============

Small ``Ok``/``Err`` result types used where a failure should degrade a
value instead of propagating. Fallback chains are built with ``first_ok``
and terminated with ``unwrap_or``.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful result carrying a value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed result carrying the reason (usually an exception)."""

    reason: Any

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def attempt(func: Callable[..., T], *args, expected=(Exception,), **kwargs) -> Result:
    """Call ``func`` and wrap its return value or one of the expected exceptions."""
    try:
        return Ok(func(*args, **kwargs))
    except expected as e:
        return Err(e)


def first_ok(*steps: Callable[[], Result]) -> Result:
    """Evaluate steps lazily and return the first ``Ok``.

    Returns the last ``Err`` when every step fails, or an ``Err`` with no
    reason when no steps were given.
    """
    result: Result = Err(None)
    for step in steps:
        result = step()
        if result.is_ok:
            return result
    return result


def unwrap_or(result: Result, default: T) -> T:
    """Return the carried value, or ``default`` for an ``Err``."""
    if result.is_ok:
        return result.value
    return default
