from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer, field_validator

from booking_engine.domain.enums import BookingAction, BookingStatus, PaymentStatus


class BookingCreatePayload(BaseModel):
    """
    Schema for a customer's booking request. Dates are calendar dates; the
    ordering of check-in and check-out is checked by the booking core.
    """

    property_id: UUID = Field(..., description="Property to book")
    check_in: date = Field(..., description="First night of the stay")
    check_out: date = Field(..., description="Departure date (not a night of the stay)")
    adults: int = Field(..., ge=1, description="Number of adult guests")
    children: int = Field(0, ge=0, description="Number of children")
    guest_name: str = Field(..., min_length=2, description="Lead guest's full name")
    guest_email: EmailStr = Field(..., description="Lead guest's email")
    guest_phone: str = Field(..., min_length=10, description="Lead guest's phone number")
    special_requests: Optional[str] = Field(None, description="Free-text requests for the host")


class BookingUpdatePayload(BaseModel):
    """
    Schema for changing an existing booking. All fields are optional.
    Changing dates or adults re-prices the booking.
    """

    check_in: Optional[date] = Field(None, description="New first night")
    check_out: Optional[date] = Field(None, description="New departure date")
    adults: Optional[int] = Field(None, ge=1, description="New number of adults")
    children: Optional[int] = Field(None, ge=0, description="New number of children")
    guest_name: Optional[str] = Field(None, min_length=2)
    guest_email: Optional[EmailStr] = None
    guest_phone: Optional[str] = Field(None, min_length=10)
    special_requests: Optional[str] = None
    admin_notes: Optional[str] = Field(None, description="Internal notes (host/admin)")

    @property
    def reprices(self) -> bool:
        return any(v is not None for v in (self.check_in, self.check_out, self.adults))


class BookingActionPayload(BaseModel):
    """
    Schema for a booking lifecycle action (approve, reject, confirm, check_in,
    check_out, complete, cancel).
    """

    action: BookingAction = Field(..., description="Lifecycle action to perform")
    reason: Optional[str] = Field(None, description="Reason for reject/cancel")
    refund_amount: Optional[Decimal] = Field(
        None, gt=0, description="Refund on cancel; marks the payment as refunded"
    )
    admin_notes: Optional[str] = Field(None, description="Internal notes")

    @field_validator("action")
    @classmethod
    def action_is_lifecycle(cls, v: BookingAction) -> BookingAction:
        if v == BookingAction.UPDATE:
            raise ValueError("use PATCH /bookings/{id} to change dates or guests")
        return v


def _money_to_number(value: Decimal) -> Union[int, float]:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# Amounts are emitted as JSON numbers; whole-unit totals come out as integers
Money = Annotated[Decimal, PlainSerializer(_money_to_number, when_used="json")]


class NightlyRateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    rate: Money
    is_weekend: bool


class PriceBreakdownOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    nights: int
    base_amount: Money
    cleaning_fee: Money
    service_fee: Money
    taxes: Money
    discounts: Money
    total_amount: Money
    breakdown: list[NightlyRateOut]


class AvailabilityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    available: bool
    blocked_dates: list[date] = []
    reason: Optional[str] = None


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_number: str
    property_id: UUID
    customer_id: UUID
    check_in: date
    check_out: date
    nights: int
    adults: int
    children: int
    status: BookingStatus
    payment_status: PaymentStatus
    base_amount: Money
    cleaning_fee: Money
    service_fee: Money
    taxes: Money
    discounts: Money
    total_amount: Money
    paid_amount: Money
    refund_amount: Optional[Money] = None
    guest_name: str
    guest_email: str
    guest_phone: str
    special_requests: Optional[str] = None
    admin_notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancellation_date: Optional[datetime] = None
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    checked_out_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookingSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_revenue: Money
    pending_approvals: int
    active_bookings: int
    completed_bookings: int


class BookingPageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    bookings: list[BookingOut]
    total: int
    page: int
    limit: int
    total_pages: int
    summary: BookingSummaryOut
