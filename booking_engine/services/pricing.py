"""
Pricing engine: nightly rate breakdown and fee totals for a stay.

Pricing always runs the availability checker first; a stay that cannot be
booked is never priced.

Nightly rate, per date in ``[check_in, check_out)``:
    - an override with a non-null price wins, unmodified by the weekend premium
    - otherwise ``base_rate``, times ``1 + weekend_premium / 100`` on Sat/Sun

Totals:
    cleaning = cleaning_fee or 0
    service  = round((base + cleaning) * service_fee_rate), rate defaults to 0.05
    total    = base + cleaning + service + taxes - discounts

Totals are rounded half-up to whole currency units; taxes and discounts are
placeholders that stay at zero.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

import structlog

from booking_engine.config import DEFAULT_SERVICE_FEE_RATE
from booking_engine.db.store import BookingRepository
from booking_engine.domain.entities import (
    AvailabilityOverride,
    NightlyRate,
    PriceBreakdown,
    PropertyRates,
)
from booking_engine.domain.enums import PropertyStatus
from booking_engine.domain.errors import (
    GuestCountExceededError,
    InvalidStayLengthError,
    PropertyUnavailableError,
)
from booking_engine.domain.result import returns_result
from booking_engine.metrics import pricing_duration
from booking_engine.services.availability import evaluate_availability, validate_range
from booking_engine.utils.datetime import is_weekend, iter_nights, nights_between
from booking_engine.utils.money import round_cents, round_whole

logger = structlog.get_logger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def nightly_rate(
    prop: PropertyRates, night: date, override: Optional[AvailabilityOverride]
) -> NightlyRate:
    weekend = is_weekend(night)
    if override is not None and override.price is not None:
        return NightlyRate(date=night, rate=round_cents(override.price), is_weekend=weekend)

    rate = prop.base_rate
    if weekend:
        rate = rate * (1 + (prop.weekend_premium or ZERO) / HUNDRED)
    return NightlyRate(date=night, rate=round_cents(rate), is_weekend=weekend)


def validate_stay(
    prop: PropertyRates,
    check_in: date,
    check_out: date,
    adults: int,
    overrides: dict[date, AvailabilityOverride],
) -> None:
    """
    Check stay length and guest count against the property's constraints.

    The minimum stay is the property's, unless the check-in date has an
    override with its own ``min_stay``.

    Raises:
        InvalidStayLengthError: Too few or too many nights.
        GuestCountExceededError: More adults than the property sleeps.
    """
    nights = nights_between(check_in, check_out)
    arrival = overrides.get(check_in)
    min_stay = arrival.min_stay if arrival and arrival.min_stay else prop.min_stay
    if nights < min_stay or nights > prop.max_stay:
        raise InvalidStayLengthError(nights, min_stay, prop.max_stay)

    if adults > prop.max_guests:
        raise GuestCountExceededError(adults, prop.max_guests)


def price_stay(
    prop: PropertyRates,
    check_in: date,
    check_out: date,
    overrides: dict[date, AvailabilityOverride],
) -> PriceBreakdown:
    """
    Compute the breakdown for a stay without any availability checks.

    Deterministic: the same property, range and overrides always give the same
    breakdown.
    """
    breakdown = [
        nightly_rate(prop, night, overrides.get(night))
        for night in iter_nights(check_in, check_out)
    ]
    base_amount = sum((line.rate for line in breakdown), ZERO)

    cleaning_fee = prop.cleaning_fee or ZERO
    service_fee_rate = prop.service_fee_rate or DEFAULT_SERVICE_FEE_RATE
    service_fee = round_whole((base_amount + cleaning_fee) * service_fee_rate)
    taxes = ZERO
    discounts = ZERO
    total_amount = base_amount + cleaning_fee + service_fee + taxes - discounts

    return PriceBreakdown(
        nights=len(breakdown),
        base_amount=round_whole(base_amount),
        cleaning_fee=round_whole(cleaning_fee),
        service_fee=service_fee,
        taxes=taxes,
        discounts=discounts,
        total_amount=round_whole(total_amount),
        breakdown=breakdown,
    )


def build_quote(
    repo: BookingRepository,
    prop: PropertyRates,
    check_in: date,
    check_out: date,
    adults: int,
    exclude_booking_id: Optional[UUID] = None,
) -> PriceBreakdown:
    """
    Validate, check availability and price a stay, raising on any failure.

    This is the raising form used inside booking transactions; callers outside
    the core use ``calculate_pricing``.

    Raises:
        InvalidRangeError, InvalidStayLengthError, GuestCountExceededError,
        PropertyUnavailableError
    """
    with pricing_duration.time():
        validate_range(check_in, check_out)
        overrides = repo.get_overrides(prop.id, check_in, check_out)
        validate_stay(prop, check_in, check_out, adults, overrides)

        if prop.status != PropertyStatus.ACTIVE:
            raise PropertyUnavailableError("Property is not available for booking")

        availability = evaluate_availability(
            repo, prop.id, check_in, check_out, exclude_booking_id
        )
        if not availability.available:
            raise PropertyUnavailableError(
                f"Property is not available for selected dates: {availability.reason}",
                blocked_dates=availability.blocked_dates,
            )

        quote = price_stay(prop, check_in, check_out, overrides)

    logger.debug(
        "stay_priced",
        property_id=str(prop.id),
        nights=quote.nights,
        total_amount=str(quote.total_amount),
    )
    return quote


@returns_result
def calculate_pricing(
    repo: BookingRepository,
    prop: PropertyRates,
    check_in: date,
    check_out: date,
    adults: int,
    exclude_booking_id: Optional[UUID] = None,
) -> PriceBreakdown:
    """
    Price a stay at a property.

    Args:
        repo: Repository of the current unit of work.
        prop: Rate configuration of the property.
        check_in: First night, inclusive.
        check_out: Departure date, exclusive.
        adults: Number of adult guests.
        exclude_booking_id: Booking whose own dates do not count as taken.

    Returns:
        Ok(PriceBreakdown), or Err carrying InvalidRangeError,
        InvalidStayLengthError, GuestCountExceededError or
        PropertyUnavailableError.

    Example:
        >>> result = calculate_pricing(repo, prop, date(2025, 6, 6), date(2025, 6, 8), 2)
        >>> result.value.total_amount
        Decimal('28350')
    """
    return build_quote(repo, prop, check_in, check_out, adults, exclude_booking_id)
