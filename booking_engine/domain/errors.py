"""
Typed failures of the booking core.

Every error the core can report derives from ``BookingError``. Core entry
points do not let these escape: ``returns_result`` turns them into ``Err``
values (see ``booking_engine.domain.result``).
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from booking_engine.domain.enums import BookingAction, BookingStatus


class BookingError(Exception):
    """Base class for all booking core failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRangeError(BookingError):
    def __init__(self, check_in: date, check_out: date):
        super().__init__("Check-out date must be after check-in date")
        self.check_in = check_in
        self.check_out = check_out


class InvalidStayLengthError(BookingError):
    def __init__(self, nights: int, min_stay: int, max_stay: int):
        super().__init__(f"Stay of {nights} night(s) is outside the allowed {min_stay}-{max_stay}")
        self.nights = nights
        self.min_stay = min_stay
        self.max_stay = max_stay


class PropertyUnavailableError(BookingError):
    def __init__(
        self,
        message: str = "Property is not available for selected dates",
        blocked_dates: Optional[Sequence[date]] = None,
    ):
        super().__init__(message)
        self.blocked_dates = list(blocked_dates or [])


class GuestCountExceededError(BookingError):
    def __init__(self, requested: int, max_guests: int):
        super().__init__(f"Property can accommodate maximum {max_guests} guests")
        self.requested = requested
        self.max_guests = max_guests


class InvalidTransitionError(BookingError):
    def __init__(self, current_status: BookingStatus, action: BookingAction):
        super().__init__(
            f"Cannot {action.value} a booking in status {current_status.value}"
        )
        self.current_status = current_status
        self.action = action


class UnauthorizedActionError(BookingError):
    pass


class NotFoundError(BookingError):
    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id
