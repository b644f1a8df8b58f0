from dataclasses import fields
from typing import Any

from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.engine import Connection

from booking_engine.db.readers.bookings import row_to_booking
from booking_engine.domain import entities
from booking_engine.models.bookings import Booking, BookingNumberCounter
from booking_engine.utils.datetime import utc_now


# Managed by the database
_SERVER_MANAGED = {"created_at", "updated_at"}


def _booking_values(booking: entities.Booking) -> dict[str, Any]:
    return {
        f.name: getattr(booking, f.name)
        for f in fields(booking)
        if f.name not in _SERVER_MANAGED
    }


def insert_booking(conn: Connection, booking: entities.Booking) -> entities.Booking:
    """
    Insert a new booking row and return it as stored.

    Args:
        conn (Connection): Connection inside the creating transaction.
        booking (Booking): Fully priced booking to persist.

    Raises:
        sqlalchemy.exc.IntegrityError: On a duplicate booking number or an
            overlap caught by the exclusion constraint.
    """
    stmt = insert(Booking).values(**_booking_values(booking)).returning(*Booking.__table__.columns)
    row = conn.execute(stmt).mappings().one()
    return row_to_booking(row)


def update_booking(conn: Connection, booking: entities.Booking) -> entities.Booking:
    """
    Overwrite every mutable column of an existing booking.

    Args:
        conn (Connection): Connection inside the updating transaction.
        booking (Booking): Booking carrying the new state.
    """
    values = _booking_values(booking)
    values.pop("id")
    values["updated_at"] = utc_now()

    stmt = (
        update(Booking)
        .where(Booking.id == booking.id)
        .values(**values)
        .returning(*Booking.__table__.columns)
    )
    row = conn.execute(stmt).mappings().one()
    return row_to_booking(row)


def next_booking_sequence(conn: Connection, year: int) -> int:
    """
    Atomically claim the next booking number sequence for a year.

    The counter row is created on first use; concurrent callers serialize on
    the row lock taken by ON CONFLICT DO UPDATE.
    """
    stmt = insert(BookingNumberCounter).values(year=year, last_value=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=["year"],
        set_={"last_value": BookingNumberCounter.last_value + 1},
    ).returning(BookingNumberCounter.last_value)

    return int(conn.execute(stmt).scalar_one())
