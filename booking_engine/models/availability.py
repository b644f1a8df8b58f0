from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from booking_engine.config import SCHEMA
from booking_engine.models.base import Base


class PropertyAvailability(Base):
    """
    ORM model for host-set per-date availability overrides.

    A row either blocks the date (available=false) or carries date-specific
    pricing / minimum stay. At most one row exists per (property, date).
    """

    __tablename__ = "property_availability"
    __table_args__ = (
        UniqueConstraint("property_id", "date", name="uq_property_availability_date"),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    property_id = Column(
        UUID(as_uuid=True),
        ForeignKey(f"{SCHEMA}.properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(Date, nullable=False)
    available = Column(Boolean, nullable=False, server_default="true")
    price = Column(Numeric(12, 2), nullable=True)
    min_stay = Column(Integer, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
