"""
Shared fixtures for PostgreSQL-backed integration tests.

Tests are skipped when the database in DATABASE_URL is not reachable. Tables
are created from the ORM metadata (including the btree_gist extension and the
no-overlap exclusion constraint) on first use.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy import delete, insert
from sqlalchemy.engine import Engine
from sqlalchemy.schema import CreateSchema

from booking_engine.config import SCHEMA
from booking_engine.db.engine import check_engine_health, engine
from booking_engine.db.store import SqlBookingStore
from booking_engine.models.availability import PropertyAvailability
from booking_engine.models.base import Base
from booking_engine.models.bookings import Booking
from booking_engine.models.properties import Property
from booking_engine.services.bookings import BookingService


@pytest.fixture(scope="session")
def db_engine() -> Engine:
    if not check_engine_health():
        pytest.skip("PostgreSQL is not reachable at DATABASE_URL")

    with engine.begin() as conn:
        conn.execute(CreateSchema(SCHEMA, if_not_exists=True))
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def sql_store(db_engine: Engine) -> SqlBookingStore:
    return SqlBookingStore(db_engine)


@pytest.fixture
def sql_service(sql_store: SqlBookingStore) -> BookingService:
    return BookingService(sql_store)


@pytest.fixture
def db_property(db_engine: Engine, host_id: UUID) -> Generator[UUID, None, None]:
    """
    Insert a property priced like the ``beach_house`` fixture.

    Returns the property id. Cleans up its bookings and overrides afterwards.
    """
    property_id = uuid4()
    with db_engine.begin() as conn:
        conn.execute(
            insert(Property).values(
                id=property_id,
                host_id=host_id,
                name="Integration Beach House",
                base_rate=Decimal("10000"),
                weekend_premium=Decimal("20"),
                cleaning_fee=Decimal("5000"),
                service_fee_rate=Decimal("0.05"),
                max_guests=4,
            )
        )

    yield property_id

    with db_engine.begin() as conn:
        conn.execute(delete(Booking).where(Booking.property_id == property_id))
        conn.execute(
            delete(PropertyAvailability).where(PropertyAvailability.property_id == property_id)
        )
        conn.execute(delete(Property).where(Property.id == property_id))
