from datetime import date
from typing import Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from booking_engine.dependencies import get_actor, get_booking_service
from booking_engine.domain.entities import Actor, BookingFilters
from booking_engine.domain.enums import BookingStatus, PaymentStatus
from booking_engine.routes._booking_helpers import unwrap_or_http
from booking_engine.schemas.bookings import (
    BookingActionPayload,
    BookingCreatePayload,
    BookingOut,
    BookingPageOut,
    BookingUpdatePayload,
)
from booking_engine.services.bookings import BookingService

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/bookings", status_code=status.HTTP_201_CREATED, response_model=BookingOut)
def create_booking(
    payload: BookingCreatePayload,
    actor: Actor = Depends(get_actor),
    service: BookingService = Depends(get_booking_service),
) -> BookingOut:
    """
    Request a booking. The booking starts in PENDING_APPROVAL.

    Args:
        payload: Property, dates, guest counts and contact details
        actor: Acting user from identity headers

    Returns:
        BookingOut: The created booking with its price
    """
    try:
        booking = unwrap_or_http(service.create_booking(actor, payload))
        return BookingOut.model_validate(booking)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("booking_creation_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/bookings", response_model=BookingPageOut)
def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    payment_status: Optional[PaymentStatus] = Query(None),
    property_id: Optional[UUID] = Query(None),
    customer_id: Optional[UUID] = Query(None),
    check_in_from: Optional[date] = Query(None),
    check_in_to: Optional[date] = Query(None),
    booking_number: Optional[str] = Query(None, description="Partial booking number"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: BookingService = Depends(get_booking_service),
) -> BookingPageOut:
    """
    Search bookings with pagination and a revenue/status summary.

    Customers see only their own bookings and hosts only bookings of their
    properties, whatever filters they pass.
    """
    try:
        filters = BookingFilters(
            status=status_filter,
            payment_status=payment_status,
            property_id=property_id,
            customer_id=customer_id,
            check_in_from=check_in_from,
            check_in_to=check_in_to,
            booking_number=booking_number,
            page=page,
            limit=limit,
        )
        result = unwrap_or_http(service.search_bookings(actor, filters))
        return BookingPageOut.model_validate(result)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("booking_search_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/bookings/{booking_id}", response_model=BookingOut)
def get_booking(
    booking_id: UUID,
    actor: Actor = Depends(get_actor),
    service: BookingService = Depends(get_booking_service),
) -> BookingOut:
    """Fetch a single booking visible to the acting user."""
    try:
        booking = unwrap_or_http(service.get_booking(actor, booking_id))
        return BookingOut.model_validate(booking)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("booking_fetch_failed", booking_id=str(booking_id), error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/bookings/{booking_id}", response_model=BookingOut)
def update_booking(
    booking_id: UUID,
    payload: BookingUpdatePayload,
    actor: Actor = Depends(get_actor),
    service: BookingService = Depends(get_booking_service),
) -> BookingOut:
    """
    Change a booking's guest details, dates or guest counts.

    New dates or adults re-check availability and re-price the booking.
    """
    try:
        booking = unwrap_or_http(service.update_booking(actor, booking_id, payload))
        return BookingOut.model_validate(booking)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("booking_update_failed", booking_id=str(booking_id), error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/bookings/{booking_id}/actions", response_model=BookingOut)
def perform_booking_action(
    booking_id: UUID,
    payload: BookingActionPayload,
    actor: Actor = Depends(get_actor),
    service: BookingService = Depends(get_booking_service),
) -> BookingOut:
    """
    Move a booking through its lifecycle.

    Args:
        booking_id: Booking to act on
        payload: Action name plus optional reason, refund and notes

    Returns:
        BookingOut: The booking in its new state
    """
    try:
        booking = unwrap_or_http(service.perform_action(actor, booking_id, payload))
        return BookingOut.model_validate(booking)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(
            "booking_action_failed",
            booking_id=str(booking_id),
            action=payload.action.value,
            error=str(e),
        )
        raise HTTPException(status_code=500, detail="Internal server error")
