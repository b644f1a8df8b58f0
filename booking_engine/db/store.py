"""
Persistence port for the booking core.

The core services never import the engine. They receive a ``BookingStore``
and open units of work from it:

- ``store.read()`` yields a repository for read-only work (quotes, lookups).
- ``store.transaction()`` yields a repository whose writes commit together
  when the block exits normally and roll back when it raises.

``SqlBookingStore`` is the PostgreSQL implementation. Tests substitute an
in-memory double that honors the same contract, including the per-property
lock taken by ``lock_property``.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import ContextManager, Iterator, Optional, Protocol
from uuid import UUID

import structlog
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from booking_engine.db.readers import bookings as booking_readers
from booking_engine.db.readers import properties as property_readers
from booking_engine.db.writers import availability as availability_writers
from booking_engine.db.writers import bookings as booking_writers
from booking_engine.domain import entities
from booking_engine.domain.errors import PropertyUnavailableError
from booking_engine.models.bookings import NO_OVERLAP_CONSTRAINT

logger = structlog.get_logger(__name__)


class BookingRepository(Protocol):
    def get_property(self, property_id: UUID) -> Optional[entities.PropertyRates]: ...

    def lock_property(self, property_id: UUID) -> Optional[entities.PropertyRates]:
        """Load the property and hold an exclusive lock on it until the unit of work ends."""
        ...

    def find_blocking_bookings(
        self,
        property_id: UUID,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[UUID] = None,
    ) -> list[entities.Booking]: ...

    def get_overrides(
        self, property_id: UUID, start: date, end: date
    ) -> dict[date, entities.AvailabilityOverride]: ...

    def get_booking(
        self, booking_id: UUID, for_update: bool = False
    ) -> Optional[entities.Booking]: ...

    def search_bookings(
        self, filters: entities.BookingFilters
    ) -> tuple[list[entities.Booking], int]: ...

    def booking_summary(self, filters: entities.BookingFilters) -> entities.BookingSummary: ...

    def find_due_for_completion(self, checked_out_before: datetime) -> list[UUID]: ...

    def next_booking_sequence(self, year: int) -> int: ...

    def insert_booking(self, booking: entities.Booking) -> entities.Booking:
        """Persist a new booking. Raises PropertyUnavailableError on an overlap."""
        ...

    def update_booking(self, booking: entities.Booking) -> entities.Booking:
        """Persist new state of a booking. Raises PropertyUnavailableError on an overlap."""
        ...

    def upsert_overrides(self, overrides: list[entities.AvailabilityOverride]) -> int: ...


class BookingStore(Protocol):
    def read(self) -> ContextManager[BookingRepository]: ...

    def transaction(self) -> ContextManager[BookingRepository]: ...


def _is_overlap_violation(error: IntegrityError) -> bool:
    diag = getattr(error.orig, "diag", None)
    return getattr(diag, "constraint_name", None) == NO_OVERLAP_CONSTRAINT


class SqlBookingRepository:
    """``BookingRepository`` bound to one SQLAlchemy connection."""

    def __init__(self, conn: Connection):
        self.conn = conn

    def get_property(self, property_id: UUID) -> Optional[entities.PropertyRates]:
        return property_readers.get_property_rates(self.conn, property_id)

    def lock_property(self, property_id: UUID) -> Optional[entities.PropertyRates]:
        return property_readers.get_property_rates(self.conn, property_id, for_update=True)

    def find_blocking_bookings(
        self,
        property_id: UUID,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[UUID] = None,
    ) -> list[entities.Booking]:
        return booking_readers.find_blocking_bookings(
            self.conn, property_id, check_in, check_out, exclude_booking_id
        )

    def get_overrides(
        self, property_id: UUID, start: date, end: date
    ) -> dict[date, entities.AvailabilityOverride]:
        return property_readers.get_overrides(self.conn, property_id, start, end)

    def get_booking(
        self, booking_id: UUID, for_update: bool = False
    ) -> Optional[entities.Booking]:
        return booking_readers.get_booking(self.conn, booking_id, for_update=for_update)

    def search_bookings(
        self, filters: entities.BookingFilters
    ) -> tuple[list[entities.Booking], int]:
        return booking_readers.search_bookings(self.conn, filters)

    def booking_summary(self, filters: entities.BookingFilters) -> entities.BookingSummary:
        return booking_readers.booking_summary(self.conn, filters)

    def find_due_for_completion(self, checked_out_before: datetime) -> list[UUID]:
        return booking_readers.find_due_for_completion(self.conn, checked_out_before)

    def next_booking_sequence(self, year: int) -> int:
        return booking_writers.next_booking_sequence(self.conn, year)

    def insert_booking(self, booking: entities.Booking) -> entities.Booking:
        try:
            return booking_writers.insert_booking(self.conn, booking)
        except IntegrityError as e:
            if _is_overlap_violation(e):
                logger.warning(
                    "booking_overlap_rejected_by_database", property_id=str(booking.property_id)
                )
                raise PropertyUnavailableError("Dates already booked") from e
            raise

    def update_booking(self, booking: entities.Booking) -> entities.Booking:
        try:
            return booking_writers.update_booking(self.conn, booking)
        except IntegrityError as e:
            if _is_overlap_violation(e):
                logger.warning("booking_overlap_rejected_by_database", booking_id=str(booking.id))
                raise PropertyUnavailableError("Dates already booked") from e
            raise

    def upsert_overrides(self, overrides: list[entities.AvailabilityOverride]) -> int:
        return availability_writers.upsert_overrides(self.conn, overrides)


class SqlBookingStore:
    """
    ``BookingStore`` backed by a PostgreSQL engine.

    Transactions run at the default READ COMMITTED level. Overlap safety comes
    from ``lock_property`` (``SELECT ... FOR UPDATE`` on the property row),
    backed by the ``ex_bookings_no_overlap`` exclusion constraint.

    Example:
        >>> store = SqlBookingStore(engine)
        >>> with store.transaction() as repo:
        ...     prop = repo.lock_property(property_id)
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def read(self) -> Iterator[SqlBookingRepository]:
        with self.engine.connect() as conn:
            yield SqlBookingRepository(conn)

    @contextmanager
    def transaction(self) -> Iterator[SqlBookingRepository]:
        with self.engine.begin() as conn:
            yield SqlBookingRepository(conn)
