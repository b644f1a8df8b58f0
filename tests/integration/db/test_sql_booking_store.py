"""
Integration tests for the SQL booking store and BookingService on PostgreSQL.
"""

from __future__ import annotations

import re
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from booking_engine.domain.entities import Actor, AvailabilityOverride, BookingFilters
from booking_engine.domain.enums import BookingAction, BookingStatus, UserRole
from booking_engine.domain.errors import PropertyUnavailableError
from booking_engine.domain.result import Err, Ok
from booking_engine.schemas.bookings import BookingActionPayload, BookingCreatePayload
from booking_engine.utils.datetime import utc_now

BOOKING_NUMBER = re.compile(r"^BK\d{4}-\d{6}$")


def payload(property_id, check_in=date(2025, 6, 6), check_out=date(2025, 6, 8)):  # type: ignore
    return BookingCreatePayload(
        property_id=property_id,
        check_in=check_in,
        check_out=check_out,
        adults=2,
        guest_name="Jane Guest",
        guest_email="jane@example.com",
        guest_phone="+15555550100",
    )


@pytest.mark.integration
def test_property_rates_round_trip(sql_store, db_property, host_id) -> None:
    with sql_store.read() as repo:
        prop = repo.get_property(db_property)

    assert prop.host_id == host_id
    assert prop.base_rate == Decimal("10000")
    assert prop.min_stay == 1
    assert prop.max_stay == 90


@pytest.mark.integration
def test_create_booking_persists_priced_booking(
    sql_service, sql_store, db_property, customer
) -> None:
    result = sql_service.create_booking(customer, payload(db_property))

    assert isinstance(result, Ok)
    booking = result.value
    assert BOOKING_NUMBER.match(booking.booking_number)
    assert booking.total_amount == Decimal("28350")
    assert booking.created_at is not None

    with sql_store.read() as repo:
        stored = repo.get_booking(booking.id)
    assert stored.booking_number == booking.booking_number
    assert stored.total_amount == Decimal("28350")
    assert stored.status == BookingStatus.PENDING_APPROVAL


@pytest.mark.integration
def test_overlapping_create_is_rejected(sql_service, db_property, customer, stranger) -> None:
    sql_service.create_booking(customer, payload(db_property))

    result = sql_service.create_booking(
        stranger, payload(db_property, date(2025, 6, 7), date(2025, 6, 9))
    )

    assert isinstance(result, Err)
    assert result.error.blocked_dates == [date(2025, 6, 7)]


@pytest.mark.integration
def test_exclusion_constraint_rejects_overlap_without_lock(
    sql_service, sql_store, db_property, customer
) -> None:
    existing = sql_service.create_booking(customer, payload(db_property)).value
    clash = replace(existing, id=uuid4(), booking_number=f"BK2025-{uuid4().int % 10**6:06d}")

    with pytest.raises(PropertyUnavailableError):
        with sql_store.transaction() as repo:
            repo.insert_booking(clash)


@pytest.mark.integration
def test_cancelled_bookings_do_not_block(sql_service, db_property, customer, host) -> None:
    booking = sql_service.create_booking(customer, payload(db_property)).value
    sql_service.perform_action(host, booking.id, BookingActionPayload(action=BookingAction.REJECT))

    again = sql_service.create_booking(customer, payload(db_property))

    assert isinstance(again, Ok)


@pytest.mark.integration
def test_booking_numbers_are_unique_and_increasing(sql_service, db_property, customer) -> None:
    first = sql_service.create_booking(customer, payload(db_property)).value
    second = sql_service.create_booking(
        customer, payload(db_property, date(2025, 6, 8), date(2025, 6, 10))
    ).value

    assert second.booking_number > first.booking_number


@pytest.mark.integration
def test_concurrent_creates_exactly_one_wins(sql_service, db_property) -> None:
    barrier = threading.Barrier(4)

    def attempt():  # type: ignore[no-untyped-def]
        barrier.wait()
        actor = Actor(user_id=uuid4(), role=UserRole.CUSTOMER)
        return sql_service.create_booking(actor, payload(db_property))

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda _: attempt(), range(4)))

    assert sum(isinstance(r, Ok) for r in results) == 1
    assert all(
        isinstance(r.error, PropertyUnavailableError) for r in results if isinstance(r, Err)
    )


@pytest.mark.integration
def test_overrides_upsert_and_block(sql_service, sql_store, db_property) -> None:
    night = date(2025, 6, 10)
    with sql_store.transaction() as repo:
        repo.upsert_overrides([AvailabilityOverride(db_property, night, available=False)])
    with sql_store.transaction() as repo:
        repo.upsert_overrides(
            [AvailabilityOverride(db_property, night, available=False, notes="Plumber")]
        )

    with sql_store.read() as repo:
        overrides = repo.get_overrides(db_property, date(2025, 6, 9), date(2025, 6, 11))
    check = sql_service.check_availability(db_property, date(2025, 6, 9), date(2025, 6, 11))

    assert list(overrides) == [night]
    assert overrides[night].notes == "Plumber"
    assert check.value.blocked_dates == [night]


@pytest.mark.integration
def test_search_and_summary_for_host(sql_service, db_property, customer, host) -> None:
    booking = sql_service.create_booking(customer, payload(db_property)).value
    sql_service.perform_action(host, booking.id, BookingActionPayload(action=BookingAction.APPROVE))
    sql_service.perform_action(host, booking.id, BookingActionPayload(action=BookingAction.CONFIRM))

    page = sql_service.search_bookings(host, BookingFilters(property_id=db_property)).value

    assert page.total == 1
    assert page.bookings[0].status == BookingStatus.CONFIRMED
    assert page.summary.active_bookings == 1
    assert page.summary.total_revenue == Decimal("28350")


@pytest.mark.integration
def test_complete_due_bookings(sql_service, sql_store, db_property, customer, host) -> None:
    booking = sql_service.create_booking(customer, payload(db_property)).value
    for action in (
        BookingAction.APPROVE,
        BookingAction.CONFIRM,
        BookingAction.CHECK_IN,
        BookingAction.CHECK_OUT,
    ):
        sql_service.perform_action(host, booking.id, BookingActionPayload(action=action))

    completed = sql_service.complete_due_bookings(
        now=utc_now() + timedelta(minutes=5), delay_seconds=60
    )

    assert booking.id in [b.id for b in completed]
    with sql_store.read() as repo:
        assert repo.get_booking(booking.id).status == BookingStatus.COMPLETED
