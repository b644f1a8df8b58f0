from sqlalchemy import (
    DDL,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    event,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from booking_engine.config import SCHEMA
from booking_engine.domain.enums import BLOCKING_STATUSES, BookingStatus, PaymentStatus
from booking_engine.models.base import Base

NO_OVERLAP_CONSTRAINT = "ex_bookings_no_overlap"


class Booking(Base):
    """
    ORM model for guest bookings.

    Bookings are never deleted; cancellation is a status change. Bookings in a
    blocking status may not overlap on the same property, which is enforced by
    the ``ex_bookings_no_overlap`` exclusion constraint (created below) on top
    of the per-property lock taken by the booking service.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_bookings_check_out_after_check_in"),
        {"schema": SCHEMA},
    )

    id = Column(UUID(as_uuid=True), primary_key=True)
    booking_number = Column(String(32), nullable=False, unique=True)
    property_id = Column(
        UUID(as_uuid=True),
        ForeignKey(f"{SCHEMA}.properties.id"),
        nullable=False,
        index=True,
    )
    customer_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    nights = Column(Integer, nullable=False)
    adults = Column(Integer, nullable=False, server_default="1")
    children = Column(Integer, nullable=False, server_default="0")
    status = Column(
        Enum(BookingStatus, native_enum=False, length=32),
        nullable=False,
        server_default=BookingStatus.PENDING_APPROVAL.value,
        index=True,
    )
    payment_status = Column(
        Enum(PaymentStatus, native_enum=False, length=32),
        nullable=False,
        server_default=PaymentStatus.PENDING.value,
    )

    # Money, whole currency units
    base_amount = Column(Numeric(12, 2), nullable=False)
    cleaning_fee = Column(Numeric(12, 2), nullable=False, server_default="0")
    service_fee = Column(Numeric(12, 2), nullable=False, server_default="0")
    taxes = Column(Numeric(12, 2), nullable=False, server_default="0")
    discounts = Column(Numeric(12, 2), nullable=False, server_default="0")
    total_amount = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False, server_default="0")
    refund_amount = Column(Numeric(12, 2), nullable=True)

    guest_name = Column(String, nullable=False)
    guest_email = Column(String, nullable=False)
    guest_phone = Column(String, nullable=False)
    special_requests = Column(String, nullable=True)
    admin_notes = Column(String, nullable=True)

    cancellation_reason = Column(String, nullable=True)
    cancellation_date = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(UUID(as_uuid=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    checked_out_at = Column(DateTime(timezone=True), nullable=True)  # due for completion after this
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class BookingNumberCounter(Base):
    """Last issued booking number sequence, one row per calendar year."""

    __tablename__ = "booking_number_counters"
    __table_args__ = {"schema": SCHEMA}

    year = Column(Integer, primary_key=True, autoincrement=False)
    last_value = Column(Integer, nullable=False)


_blocking = ", ".join(f"'{status.value}'" for status in sorted(BLOCKING_STATUSES))

event.listen(
    Booking.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist"),
)
event.listen(
    Booking.__table__,
    "after_create",
    DDL(
        f"ALTER TABLE {SCHEMA}.bookings ADD CONSTRAINT {NO_OVERLAP_CONSTRAINT} "
        "EXCLUDE USING gist (property_id WITH =, daterange(check_in, check_out, '[)') WITH &&) "
        f"WHERE (status IN ({_blocking}))"
    ),
)
