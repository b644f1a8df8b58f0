from datetime import date
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from booking_engine.dependencies import get_actor, get_booking_service
from booking_engine.domain.entities import Actor
from booking_engine.routes._booking_helpers import unwrap_or_http
from booking_engine.schemas.availability import AvailabilityOverridePayload
from booking_engine.schemas.bookings import AvailabilityOut, PriceBreakdownOut
from booking_engine.services.bookings import BookingService

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/properties/{property_id}/availability", response_model=AvailabilityOut)
def get_availability(
    property_id: UUID,
    check_in: date = Query(..., description="First night, inclusive"),
    check_out: date = Query(..., description="Departure date, exclusive"),
    service: BookingService = Depends(get_booking_service),
) -> AvailabilityOut:
    """
    Check whether a property can be booked for a date range.

    Args:
        property_id: Property to check
        check_in: First night of the stay
        check_out: Departure date

    Returns:
        AvailabilityOut: available flag, blocked dates and reason
    """
    try:
        result = unwrap_or_http(service.check_availability(property_id, check_in, check_out))
        return AvailabilityOut.model_validate(result)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("availability_check_failed", property_id=str(property_id), error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/properties/{property_id}/quote", response_model=PriceBreakdownOut)
def get_quote(
    property_id: UUID,
    check_in: date = Query(..., description="First night, inclusive"),
    check_out: date = Query(..., description="Departure date, exclusive"),
    adults: int = Query(1, ge=1, description="Number of adult guests"),
    service: BookingService = Depends(get_booking_service),
) -> PriceBreakdownOut:
    """
    Price a prospective stay without reserving it.

    Returns:
        PriceBreakdownOut: nightly breakdown and totals
    """
    try:
        quote = unwrap_or_http(service.quote(property_id, check_in, check_out, adults))
        return PriceBreakdownOut.model_validate(quote)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("quote_failed", property_id=str(property_id), error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/properties/{property_id}/availability", status_code=status.HTTP_200_OK)
def put_availability(
    property_id: UUID,
    payload: AvailabilityOverridePayload,
    actor: Actor = Depends(get_actor),
    service: BookingService = Depends(get_booking_service),
) -> dict[str, object]:
    """
    Set availability overrides for every date in [start_date, end_date).

    Only the property's host or an admin may do this.

    Returns:
        dict: Message and number of dates written
    """
    try:
        count = unwrap_or_http(service.set_availability(actor, property_id, payload))
        return {"message": "Availability updated", "dates_updated": count}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("availability_update_failed", property_id=str(property_id), error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
