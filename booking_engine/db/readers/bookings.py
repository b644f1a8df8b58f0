from __future__ import annotations

from dataclasses import fields
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.engine import Connection
from sqlalchemy.sql import Select

from booking_engine.domain import entities
from booking_engine.domain.enums import BLOCKING_STATUSES, BookingStatus
from booking_engine.models.bookings import Booking
from booking_engine.models.properties import Property

_BOOKING_FIELDS = [f.name for f in fields(entities.Booking)]

REVENUE_STATUSES = (
    BookingStatus.CONFIRMED,
    BookingStatus.CHECKED_IN,
    BookingStatus.CHECKED_OUT,
    BookingStatus.COMPLETED,
)


def row_to_booking(row: Mapping[str, Any]) -> entities.Booking:
    """Convert a bookings row mapping into the core's Booking value object."""
    return entities.Booking(**{name: row[name] for name in _BOOKING_FIELDS})


def get_booking(
    conn: Connection, booking_id: UUID, for_update: bool = False
) -> Optional[entities.Booking]:
    """
    Fetch a single booking by id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        booking_id (UUID): Booking to load.
        for_update (bool): Lock the row until the transaction ends.

    Returns:
        Optional[Booking]: The booking, or None if not found.
    """
    stmt = select(Booking).where(Booking.id == booking_id)
    if for_update:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return row_to_booking(row) if row else None


def find_blocking_bookings(
    conn: Connection,
    property_id: UUID,
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[UUID] = None,
) -> list[entities.Booking]:
    """
    Fetch blocking-status bookings whose [check_in, check_out) overlaps the range.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (UUID): Property to check.
        check_in (date): Requested check-in, inclusive.
        check_out (date): Requested check-out, exclusive.
        exclude_booking_id (Optional[UUID]): Booking to ignore (a booking being re-dated).
    """
    stmt = (
        select(Booking)
        .where(Booking.property_id == property_id)
        .where(Booking.status.in_(tuple(BLOCKING_STATUSES)))
        .where(Booking.check_in < check_out)
        .where(Booking.check_out > check_in)
        .order_by(Booking.check_in)
    )
    if exclude_booking_id is not None:
        stmt = stmt.where(Booking.id != exclude_booking_id)

    return [row_to_booking(row) for row in conn.execute(stmt).mappings()]


def _apply_filters(stmt: Select, filters: entities.BookingFilters) -> Select:
    if filters.host_id is not None:
        stmt = stmt.join(Property, Property.id == Booking.property_id).where(
            Property.host_id == filters.host_id
        )
    if filters.status is not None:
        stmt = stmt.where(Booking.status == filters.status)
    if filters.payment_status is not None:
        stmt = stmt.where(Booking.payment_status == filters.payment_status)
    if filters.property_id is not None:
        stmt = stmt.where(Booking.property_id == filters.property_id)
    if filters.customer_id is not None:
        stmt = stmt.where(Booking.customer_id == filters.customer_id)
    if filters.check_in_from is not None:
        stmt = stmt.where(Booking.check_in >= filters.check_in_from)
    if filters.check_in_to is not None:
        stmt = stmt.where(Booking.check_in <= filters.check_in_to)
    if filters.booking_number:
        stmt = stmt.where(Booking.booking_number.ilike(f"%{filters.booking_number}%"))
    return stmt


def search_bookings(
    conn: Connection, filters: entities.BookingFilters
) -> tuple[list[entities.Booking], int]:
    """
    Fetch one page of bookings matching the filters, newest first.

    Returns:
        tuple: (bookings on the requested page, total matching count)
    """
    total = conn.execute(
        _apply_filters(select(func.count()).select_from(Booking), filters)
    ).scalar_one()

    stmt = (
        _apply_filters(select(Booking), filters)
        .order_by(Booking.created_at.desc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    bookings = [row_to_booking(row) for row in conn.execute(stmt).mappings()]
    return bookings, total


def booking_summary(conn: Connection, filters: entities.BookingFilters) -> entities.BookingSummary:
    """
    Aggregate revenue and status counts over every booking matching the filters.

    Pagination and the status filter are ignored so the summary describes the
    whole scoped set.
    """
    scoped = entities.BookingFilters(
        property_id=filters.property_id,
        customer_id=filters.customer_id,
        host_id=filters.host_id,
        payment_status=filters.payment_status,
        check_in_from=filters.check_in_from,
        check_in_to=filters.check_in_to,
        booking_number=filters.booking_number,
    )

    revenue = conn.execute(
        _apply_filters(
            select(func.coalesce(func.sum(Booking.total_amount), 0)).select_from(Booking), scoped
        ).where(Booking.status.in_(REVENUE_STATUSES))
    ).scalar_one()

    counts = {
        status: count
        for status, count in conn.execute(
            _apply_filters(
                select(Booking.status, func.count()).select_from(Booking), scoped
            ).group_by(Booking.status)
        )
    }

    return entities.BookingSummary(
        total_revenue=Decimal(revenue),
        pending_approvals=counts.get(BookingStatus.PENDING_APPROVAL, 0),
        active_bookings=counts.get(BookingStatus.CONFIRMED, 0)
        + counts.get(BookingStatus.CHECKED_IN, 0),
        completed_bookings=counts.get(BookingStatus.COMPLETED, 0),
    )


def find_due_for_completion(conn: Connection, checked_out_before: datetime) -> list[UUID]:
    """
    Fetch ids of CHECKED_OUT bookings whose check-out was recorded before the cutoff.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        checked_out_before (datetime): Timezone-aware cutoff.
    """
    result = conn.execute(
        select(Booking.id)
        .where(Booking.status == BookingStatus.CHECKED_OUT)
        .where(Booking.checked_out_at <= checked_out_before)
        .order_by(Booking.checked_out_at)
    )
    return list(result.scalars().all())
