from typing import Any

import structlog
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.engine import Connection

from booking_engine.domain.entities import AvailabilityOverride
from booking_engine.models.availability import PropertyAvailability
from booking_engine.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def upsert_overrides(conn: Connection, overrides: list[AvailabilityOverride]) -> int:
    """
    Upsert per-date availability overrides, one row per (property, date).

    Rows are only rewritten when a value actually changed.

    Args:
        conn (Connection): Connection inside an open transaction.
        overrides (list[AvailabilityOverride]): Overrides to store.

    Returns:
        int: Number of overrides submitted.
    """
    if not overrides:
        logger.info("no_overrides_to_upsert")
        return 0

    now = utc_now()
    rows: list[dict[str, Any]] = [
        {
            "property_id": o.property_id,
            "date": o.date,
            "available": o.available,
            "price": o.price,
            "min_stay": o.min_stay,
            "notes": o.notes,
            "updated_at": now,
        }
        for o in overrides
    ]

    stmt = insert(PropertyAvailability).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=["property_id", "date"],
        set_={
            "available": stmt.excluded.available,
            "price": stmt.excluded.price,
            "min_stay": stmt.excluded.min_stay,
            "notes": stmt.excluded.notes,
            "updated_at": stmt.excluded.updated_at,
        },
        where=(
            PropertyAvailability.available.is_distinct_from(stmt.excluded.available)
            | PropertyAvailability.price.is_distinct_from(stmt.excluded.price)
            | PropertyAvailability.min_stay.is_distinct_from(stmt.excluded.min_stay)
            | PropertyAvailability.notes.is_distinct_from(stmt.excluded.notes)
        ),
    )
    conn.execute(stmt)

    logger.info("overrides_upserted", count=len(rows))
    return len(rows)
