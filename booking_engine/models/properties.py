from sqlalchemy import Column, DateTime, Enum, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from booking_engine.config import SCHEMA
from booking_engine.domain.enums import PropertyStatus
from booking_engine.models.base import Base


class Property(Base):
    """
    ORM model for the rate configuration of a rentable property.

    Only the columns the booking engine reads are mapped here; listing content
    (descriptions, images, amenities) is owned by the property service.
    The row doubles as the per-property lock taken while creating bookings.
    """

    __tablename__ = "properties"
    __table_args__ = {"schema": SCHEMA}

    id = Column(UUID(as_uuid=True), primary_key=True)
    host_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    name = Column(String, nullable=False)
    status = Column(
        Enum(PropertyStatus, native_enum=False, length=32),
        nullable=False,
        server_default=PropertyStatus.ACTIVE.value,
    )
    base_rate = Column(Numeric(12, 2), nullable=False)
    weekend_premium = Column(Numeric(5, 2), nullable=False, server_default="0")  # percent
    cleaning_fee = Column(Numeric(12, 2), nullable=True, server_default="0")
    security_deposit = Column(Numeric(12, 2), nullable=True, server_default="0")
    service_fee_rate = Column(Numeric(5, 4), nullable=True, server_default="0.05")
    min_stay = Column(Integer, nullable=False, server_default="1")
    max_stay = Column(Integer, nullable=False, server_default="90")
    max_guests = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
