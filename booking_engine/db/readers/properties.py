from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.engine import Connection

from booking_engine.domain.entities import AvailabilityOverride, PropertyRates
from booking_engine.models.availability import PropertyAvailability
from booking_engine.models.properties import Property


def get_property_rates(
    conn: Connection, property_id: UUID, for_update: bool = False
) -> Optional[PropertyRates]:
    """
    Fetch the rate configuration of a property.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (UUID): Property to load.
        for_update (bool): Lock the property row until the transaction ends.
            Booking creation uses this as its per-property lock.

    Returns:
        Optional[PropertyRates]: The configuration, or None if not found.
    """
    stmt = select(Property).where(Property.id == property_id)
    if for_update:
        stmt = stmt.with_for_update()

    row = conn.execute(stmt).mappings().fetchone()
    if not row:
        return None

    return PropertyRates(
        id=row["id"],
        host_id=row["host_id"],
        status=row["status"],
        base_rate=row["base_rate"],
        weekend_premium=row["weekend_premium"],
        cleaning_fee=row["cleaning_fee"],
        security_deposit=row["security_deposit"],
        service_fee_rate=row["service_fee_rate"],
        min_stay=row["min_stay"],
        max_stay=row["max_stay"],
        max_guests=row["max_guests"],
    )


def get_overrides(
    conn: Connection, property_id: UUID, start: date, end: date
) -> dict[date, AvailabilityOverride]:
    """
    Fetch availability overrides for dates in [start, end), keyed by date.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (UUID): Property whose overrides to load.
        start (date): First date, inclusive.
        end (date): Last date, exclusive.
    """
    result = conn.execute(
        select(PropertyAvailability)
        .where(PropertyAvailability.property_id == property_id)
        .where(PropertyAvailability.date >= start)
        .where(PropertyAvailability.date < end)
    ).mappings()

    return {
        row["date"]: AvailabilityOverride(
            property_id=row["property_id"],
            date=row["date"],
            available=row["available"],
            price=row["price"],
            min_stay=row["min_stay"],
            notes=row["notes"],
        )
        for row in result
    }
