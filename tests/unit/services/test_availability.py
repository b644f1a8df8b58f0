"""
Unit tests for the availability checker.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from booking_engine.domain.entities import AvailabilityOverride
from booking_engine.domain.enums import BookingStatus
from booking_engine.domain.errors import InvalidRangeError, NotFoundError
from booking_engine.domain.result import Err, Ok
from booking_engine.services.availability import (
    REASON_BLOCKED,
    REASON_BOOKED,
    check_availability,
)


@pytest.mark.unit
def test_free_range_is_available(store, beach_house) -> None:
    with store.read() as repo:
        result = check_availability(repo, beach_house.id, date(2025, 6, 9), date(2025, 6, 11))

    assert isinstance(result, Ok)
    assert result.value.available is True
    assert result.value.blocked_dates == []
    assert result.value.reason is None


@pytest.mark.unit
def test_range_inside_confirmed_booking_is_unavailable(store, beach_house, booking_factory) -> None:
    """Fully booked Jun 1-5: a request for Jun 3-4 is rejected."""
    store.add_booking(booking_factory(beach_house.id, date(2025, 6, 1), date(2025, 6, 5)))

    with store.read() as repo:
        result = check_availability(repo, beach_house.id, date(2025, 6, 3), date(2025, 6, 4))

    assert result.value.available is False
    assert result.value.reason == REASON_BOOKED
    assert result.value.blocked_dates == [date(2025, 6, 3)]


@pytest.mark.unit
def test_override_blocks_single_night(store, beach_house) -> None:
    """Jun 10 blocked by the host: Jun 9-11 reports exactly Jun 10."""
    store.add_override(
        AvailabilityOverride(property_id=beach_house.id, date=date(2025, 6, 10), available=False)
    )

    with store.read() as repo:
        result = check_availability(repo, beach_house.id, date(2025, 6, 9), date(2025, 6, 11))

    assert result.value.available is False
    assert result.value.reason == REASON_BLOCKED
    assert result.value.blocked_dates == [date(2025, 6, 10)]


@pytest.mark.unit
def test_override_with_price_only_does_not_block(store, beach_house) -> None:
    store.add_override(
        AvailabilityOverride(
            property_id=beach_house.id, date=date(2025, 6, 10), price=Decimal("9000")
        )
    )

    with store.read() as repo:
        result = check_availability(repo, beach_house.id, date(2025, 6, 9), date(2025, 6, 11))

    assert result.value.available is True


@pytest.mark.unit
def test_back_to_back_stays_do_not_overlap(store, beach_house, booking_factory) -> None:
    """Check-out day of one stay is a valid check-in day for the next."""
    store.add_booking(booking_factory(beach_house.id, date(2025, 6, 1), date(2025, 6, 5)))

    with store.read() as repo:
        after = check_availability(repo, beach_house.id, date(2025, 6, 5), date(2025, 6, 7))
        before = check_availability(repo, beach_house.id, date(2025, 5, 29), date(2025, 6, 1))

    assert after.value.available is True
    assert before.value.available is True


@pytest.mark.unit
@pytest.mark.parametrize(
    "status",
    [BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.CHECKED_OUT],
)
def test_non_blocking_bookings_are_ignored(store, beach_house, booking_factory, status) -> None:
    store.add_booking(
        booking_factory(beach_house.id, date(2025, 6, 1), date(2025, 6, 5), status=status)
    )

    with store.read() as repo:
        result = check_availability(repo, beach_house.id, date(2025, 6, 2), date(2025, 6, 4))

    assert result.value.available is True


@pytest.mark.unit
def test_booked_dates_only_cover_the_requested_range(store, beach_house, booking_factory) -> None:
    store.add_booking(booking_factory(beach_house.id, date(2025, 6, 1), date(2025, 6, 5)))
    store.add_booking(booking_factory(beach_house.id, date(2025, 6, 8), date(2025, 6, 12)))

    with store.read() as repo:
        result = check_availability(repo, beach_house.id, date(2025, 6, 4), date(2025, 6, 10))

    assert result.value.blocked_dates == [
        date(2025, 6, 4),
        date(2025, 6, 8),
        date(2025, 6, 9),
    ]


@pytest.mark.unit
def test_booking_conflict_takes_precedence_over_overrides(
    store, beach_house, booking_factory
) -> None:
    store.add_booking(booking_factory(beach_house.id, date(2025, 6, 1), date(2025, 6, 3)))
    store.add_override(
        AvailabilityOverride(property_id=beach_house.id, date=date(2025, 6, 4), available=False)
    )

    with store.read() as repo:
        result = check_availability(repo, beach_house.id, date(2025, 6, 2), date(2025, 6, 5))

    assert result.value.reason == REASON_BOOKED
    assert result.value.blocked_dates == [date(2025, 6, 2)]


@pytest.mark.unit
def test_excluded_booking_does_not_conflict_with_itself(
    store, beach_house, booking_factory
) -> None:
    existing = store.add_booking(
        booking_factory(beach_house.id, date(2025, 6, 1), date(2025, 6, 5))
    )

    with store.read() as repo:
        result = check_availability(
            repo,
            beach_house.id,
            date(2025, 6, 2),
            date(2025, 6, 6),
            exclude_booking_id=existing.id,
        )

    assert result.value.available is True


@pytest.mark.unit
@pytest.mark.parametrize(
    "check_in, check_out",
    [
        (date(2025, 6, 5), date(2025, 6, 5)),
        (date(2025, 6, 6), date(2025, 6, 5)),
    ],
)
def test_empty_or_reversed_range_is_rejected(store, beach_house, check_in, check_out) -> None:
    with store.read() as repo:
        result = check_availability(repo, beach_house.id, check_in, check_out)

    assert isinstance(result, Err)
    assert isinstance(result.error, InvalidRangeError)


@pytest.mark.unit
def test_unknown_property_is_not_found(store) -> None:
    with store.read() as repo:
        result = check_availability(repo, uuid4(), date(2025, 6, 1), date(2025, 6, 3))

    assert isinstance(result, Err)
    assert isinstance(result.error, NotFoundError)
