"""
Internal helpers for booking and property route handlers.

Core services return ``Ok``/``Err``; these helpers turn an ``Err`` into the
matching HTTP error so route handlers stay linear.
"""

from __future__ import annotations

from typing import Any, TypeVar

from fastapi import HTTPException, status

from booking_engine.domain.errors import (
    BookingError,
    GuestCountExceededError,
    InvalidRangeError,
    InvalidStayLengthError,
    InvalidTransitionError,
    NotFoundError,
    PropertyUnavailableError,
    UnauthorizedActionError,
)
from booking_engine.domain.result import Err, Result

T = TypeVar("T")

ERROR_STATUS: dict[type[BookingError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UnauthorizedActionError: status.HTTP_403_FORBIDDEN,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    PropertyUnavailableError: status.HTTP_409_CONFLICT,
    InvalidRangeError: status.HTTP_400_BAD_REQUEST,
    InvalidStayLengthError: status.HTTP_400_BAD_REQUEST,
    GuestCountExceededError: status.HTTP_400_BAD_REQUEST,
}


def error_detail(error: BookingError) -> Any:
    """
    Build the response body detail for a core error.

    Unavailability carries the blocked dates so clients can highlight them.
    """
    if isinstance(error, PropertyUnavailableError):
        return {
            "message": error.message,
            "blocked_dates": [d.isoformat() for d in error.blocked_dates],
        }
    return error.message


def to_http_exception(error: BookingError) -> HTTPException:
    """
    Map a core error to an HTTPException.

    Args:
        error: Error carried by an ``Err`` result

    Returns:
        HTTPException with 400, 403, 404 or 409 status
    """
    code = ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=code, detail=error_detail(error))


def unwrap_or_http(result: Result[T]) -> T:
    """
    Return the value of an ``Ok`` result or raise the mapped HTTPException.

    Raises:
        HTTPException: For any ``Err`` result
    """
    if isinstance(result, Err):
        raise to_http_exception(result.error)
    return result.value
