"""
Plain value objects passed between the repositories and the core services.

The core never touches ORM rows directly: repositories translate rows into
these dataclasses so the availability, pricing and state-machine code can run
against any persistence implementation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from math import ceil
from typing import Optional
from uuid import UUID

from booking_engine.domain.enums import BookingStatus, PaymentStatus, PropertyStatus, UserRole


@dataclass(frozen=True)
class Actor:
    """Identity fact supplied by the caller; the core only branches on it."""

    user_id: UUID
    role: UserRole


@dataclass(frozen=True)
class PropertyRates:
    """Rate configuration of a property. Owned by the host, read-only here."""

    id: UUID
    host_id: UUID
    base_rate: Decimal
    max_guests: int
    status: PropertyStatus = PropertyStatus.ACTIVE
    weekend_premium: Decimal = Decimal("0")  # percent
    cleaning_fee: Optional[Decimal] = None
    security_deposit: Optional[Decimal] = None
    service_fee_rate: Optional[Decimal] = None  # fraction of base + cleaning
    min_stay: int = 1
    max_stay: int = 90


@dataclass(frozen=True)
class AvailabilityOverride:
    property_id: UUID
    date: date
    available: bool = True
    price: Optional[Decimal] = None
    min_stay: Optional[int] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class NightlyRate:
    date: date
    rate: Decimal
    is_weekend: bool


@dataclass(frozen=True)
class PriceBreakdown:
    nights: int
    base_amount: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    taxes: Decimal
    discounts: Decimal
    total_amount: Decimal
    breakdown: list[NightlyRate] = field(default_factory=list)


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    blocked_dates: list[date] = field(default_factory=list)
    reason: Optional[str] = None


@dataclass(frozen=True)
class Booking:
    id: UUID
    booking_number: str
    property_id: UUID
    customer_id: UUID
    check_in: date
    check_out: date
    nights: int
    adults: int
    children: int
    guest_name: str
    guest_email: str
    guest_phone: str
    base_amount: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    taxes: Decimal
    discounts: Decimal
    total_amount: Decimal
    status: BookingStatus = BookingStatus.PENDING_APPROVAL
    payment_status: PaymentStatus = PaymentStatus.PENDING
    paid_amount: Decimal = Decimal("0")
    special_requests: Optional[str] = None
    admin_notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancellation_date: Optional[datetime] = None
    refund_amount: Optional[Decimal] = None
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    checked_out_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def overlaps(self, check_in: date, check_out: date) -> bool:
        """Half-open interval test: [a, b) and [c, d) overlap iff a < d and c < b."""
        return self.check_in < check_out and check_in < self.check_out


@dataclass(frozen=True)
class BookingFilters:
    """Search filters for the booking list; role scoping is applied on top."""

    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None
    property_id: Optional[UUID] = None
    customer_id: Optional[UUID] = None
    host_id: Optional[UUID] = None
    check_in_from: Optional[date] = None
    check_in_to: Optional[date] = None
    booking_number: Optional[str] = None
    page: int = 1
    limit: int = 20


@dataclass(frozen=True)
class BookingSummary:
    total_revenue: Decimal
    pending_approvals: int
    active_bookings: int
    completed_bookings: int


@dataclass(frozen=True)
class BookingPage:
    bookings: list[Booking]
    total: int
    page: int
    limit: int
    summary: BookingSummary

    @property
    def total_pages(self) -> int:
        return ceil(self.total / self.limit) if self.limit else 0
