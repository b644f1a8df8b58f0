"""
Availability checker for property date ranges.

A range ``[check_in, check_out)`` is available when no booking in a blocking
status overlaps it and no night inside it is blocked by a host override.
Checks are read-only and safe to run concurrently; callers that go on to write
(booking creation, re-dating) run them inside a transaction that holds the
property lock.
"""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

import structlog

from booking_engine.db.store import BookingRepository
from booking_engine.domain.entities import AvailabilityResult
from booking_engine.domain.errors import InvalidRangeError, NotFoundError
from booking_engine.domain.result import returns_result
from booking_engine.utils.datetime import iter_nights

logger = structlog.get_logger(__name__)

REASON_BOOKED = "dates already booked"
REASON_BLOCKED = "dates blocked by host"


def validate_range(check_in: date, check_out: date) -> None:
    """
    Raise InvalidRangeError unless check-out is strictly after check-in.

    Raises:
        InvalidRangeError: On a zero-night or reversed range.
    """
    if check_in >= check_out:
        raise InvalidRangeError(check_in, check_out)


def evaluate_availability(
    repo: BookingRepository,
    property_id: UUID,
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[UUID] = None,
) -> AvailabilityResult:
    """
    Decide availability of an already validated range.

    Step 1 looks for overlapping blocking bookings; when any exists the nights
    they occupy inside the range are reported and overrides are not consulted.
    Step 2 reports every night blocked by an override.

    Args:
        repo: Repository of the current unit of work.
        property_id: Property to check.
        check_in: First night, inclusive.
        check_out: Departure date, exclusive.
        exclude_booking_id: Booking whose own interval is ignored (re-dating).

    Returns:
        AvailabilityResult: available flag, blocked dates and a reason.
    """
    conflicts = repo.find_blocking_bookings(property_id, check_in, check_out, exclude_booking_id)
    if conflicts:
        booked = sorted(
            {
                night
                for booking in conflicts
                for night in iter_nights(
                    max(check_in, booking.check_in), min(check_out, booking.check_out)
                )
            }
        )
        logger.debug(
            "availability_booking_conflict",
            property_id=str(property_id),
            conflicting_bookings=[b.booking_number for b in conflicts],
        )
        return AvailabilityResult(available=False, blocked_dates=booked, reason=REASON_BOOKED)

    overrides = repo.get_overrides(property_id, check_in, check_out)
    blocked = [
        night
        for night in iter_nights(check_in, check_out)
        if night in overrides and not overrides[night].available
    ]
    if blocked:
        return AvailabilityResult(available=False, blocked_dates=blocked, reason=REASON_BLOCKED)

    return AvailabilityResult(available=True)


@returns_result
def check_availability(
    repo: BookingRepository,
    property_id: UUID,
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[UUID] = None,
) -> AvailabilityResult:
    """
    Check whether a property is free for ``[check_in, check_out)``.

    Returns:
        Ok(AvailabilityResult), or Err(InvalidRangeError | NotFoundError).

    Example:
        >>> with store.read() as repo:
        ...     result = check_availability(repo, property_id, date(2025, 6, 9), date(2025, 6, 11))
        >>> result.value.blocked_dates
        [datetime.date(2025, 6, 10)]
    """
    validate_range(check_in, check_out)

    if repo.get_property(property_id) is None:
        raise NotFoundError("Property", property_id)

    return evaluate_availability(repo, property_id, check_in, check_out, exclude_booking_id)
