"""
Tagged results returned by the core entry points.

Callers branch on the variant instead of catching exceptions::

    result = service.create_booking(actor, payload)
    if isinstance(result, Err):
        return error_response(result.error)
    booking = result.value
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Callable, Generic, NoReturn, TypeVar, Union

from booking_engine.domain.errors import BookingError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: BookingError

    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        """Re-raise the carried error. Used inside core code to short-circuit."""
        raise self.error


Result = Union[Ok[T], Err]


def returns_result(func: Callable[..., T]) -> Callable[..., Result[T]]:
    """
    Wrap a core function so a raised ``BookingError`` becomes ``Err``.

    The wrapped function runs its transaction blocks to completion first, so by
    the time the error is converted any open transaction has already been
    rolled back. Unexpected exceptions still propagate.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):  # type: ignore[no-untyped-def]
        try:
            return Ok(func(*args, **kwargs))
        except BookingError as e:
            return Err(e)

    return wrapper
