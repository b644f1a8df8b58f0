"""
Booking service: the transactional surface of the booking core.

Every public method returns ``Ok`` or ``Err`` (see ``domain.result``). Writes
run inside one ``store.transaction()`` each, so a failed step leaves nothing
behind. Creation and re-dating hold the property lock from the availability
check until the row is written.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional
from uuid import UUID, uuid4

import structlog

from booking_engine.config import AUTO_COMPLETE_AFTER_SECONDS, BOOKING_NUMBER_PREFIX
from booking_engine.db.store import BookingRepository, BookingStore
from booking_engine.domain.entities import (
    Actor,
    AvailabilityOverride,
    AvailabilityResult,
    Booking,
    BookingFilters,
    BookingPage,
    PriceBreakdown,
    PropertyRates,
)
from booking_engine.domain.enums import BookingAction, BookingStatus, UserRole
from booking_engine.domain.errors import (
    BookingError,
    NotFoundError,
    PropertyUnavailableError,
    UnauthorizedActionError,
)
from booking_engine.domain.result import Err, Result, returns_result
from booking_engine.metrics import (
    booking_conflicts,
    booking_transitions,
    bookings_created,
    quotes_total,
)
from booking_engine.schemas.availability import AvailabilityOverridePayload
from booking_engine.schemas.bookings import (
    BookingActionPayload,
    BookingCreatePayload,
    BookingUpdatePayload,
)
from booking_engine.services import availability
from booking_engine.services.booking_state import (
    apply_action,
    authorize_update,
    can_view,
    manages_property,
)
from booking_engine.services.pricing import build_quote
from booking_engine.utils.datetime import iter_nights, utc_now

logger = structlog.get_logger(__name__)

# Identity used by the completion sweep
SYSTEM_ACTOR = Actor(user_id=UUID(int=0), role=UserRole.SYSTEM)


def format_booking_number(year: int, sequence: int) -> str:
    """
    Format a human-readable booking number.

    Example:
        >>> format_booking_number(2025, 42)
        'BK2025-000042'
    """
    return f"{BOOKING_NUMBER_PREFIX}{year}-{sequence:06d}"


def _require_property(
    repo: BookingRepository, property_id: UUID, lock: bool = False
) -> PropertyRates:
    prop = repo.lock_property(property_id) if lock else repo.get_property(property_id)
    if prop is None:
        raise NotFoundError("Property", property_id)
    return prop


def _require_booking(
    repo: BookingRepository, booking_id: UUID, for_update: bool = False
) -> Booking:
    booking = repo.get_booking(booking_id, for_update=for_update)
    if booking is None:
        raise NotFoundError("Booking", booking_id)
    return booking


def _with_quote(booking: Booking, quote: PriceBreakdown) -> Booking:
    return replace(
        booking,
        nights=quote.nights,
        base_amount=quote.base_amount,
        cleaning_fee=quote.cleaning_fee,
        service_fee=quote.service_fee,
        taxes=quote.taxes,
        discounts=quote.discounts,
        total_amount=quote.total_amount,
    )


class BookingService:
    """
    Entry points for quoting, booking and managing bookings.

    Args:
        store (BookingStore): Source of read and transactional units of work.
        clock (Callable[[], datetime]): Current UTC time; injectable for tests.

    Example:
        >>> service = BookingService(SqlBookingStore(engine))
        >>> result = service.quote(property_id, date(2025, 6, 6), date(2025, 6, 8), adults=2)
        >>> result.value.total_amount
        Decimal('28350')
    """

    def __init__(self, store: BookingStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    # ------------------------------------------------------------------
    # Read-only
    # ------------------------------------------------------------------

    def check_availability(
        self,
        property_id: UUID,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[UUID] = None,
    ) -> Result[AvailabilityResult]:
        with self.store.read() as repo:
            return availability.check_availability(
                repo, property_id, check_in, check_out, exclude_booking_id
            )

    @returns_result
    def quote(
        self, property_id: UUID, check_in: date, check_out: date, adults: int
    ) -> PriceBreakdown:
        """
        Price a prospective stay. Nothing is reserved.

        Returns:
            Ok(PriceBreakdown), or Err with the reason the stay cannot be priced.
        """
        try:
            with self.store.read() as repo:
                prop = _require_property(repo, property_id)
                quote = build_quote(repo, prop, check_in, check_out, adults)
        except BookingError as e:
            quotes_total.labels(status=type(e).__name__).inc()
            raise

        quotes_total.labels(status="success").inc()
        return quote

    @returns_result
    def get_booking(self, actor: Actor, booking_id: UUID) -> Booking:
        """Fetch a booking visible to the actor: its guest, the host, an admin or the system."""
        with self.store.read() as repo:
            booking = _require_booking(repo, booking_id)
            prop = _require_property(repo, booking.property_id)

        if not can_view(actor, booking, prop):
            raise UnauthorizedActionError("Not authorized to view this booking")
        return booking

    @returns_result
    def search_bookings(self, actor: Actor, filters: BookingFilters) -> BookingPage:
        """
        List bookings with a summary, scoped by role.

        Customers only see their own bookings and hosts only bookings of their
        properties; admins and the system see everything the filters match.
        """
        if actor.role == UserRole.CUSTOMER:
            filters = replace(filters, customer_id=actor.user_id)
        elif actor.role == UserRole.PROPERTY_HOST:
            filters = replace(filters, host_id=actor.user_id)

        with self.store.read() as repo:
            bookings, total = repo.search_bookings(filters)
            summary = repo.booking_summary(filters)

        return BookingPage(
            bookings=bookings,
            total=total,
            page=filters.page,
            limit=filters.limit,
            summary=summary,
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @returns_result
    def create_booking(self, actor: Actor, payload: BookingCreatePayload) -> Booking:
        """
        Create a PENDING_APPROVAL booking for the acting user.

        The property row stays locked from the availability check until the
        booking is inserted, so of two concurrent requests for overlapping
        dates exactly one succeeds.

        Args:
            actor (Actor): The booking customer.
            payload (BookingCreatePayload): Property, dates, guests and contact details.

        Returns:
            Ok(Booking), or Err(NotFoundError | InvalidRangeError | InvalidStayLengthError |
            GuestCountExceededError | PropertyUnavailableError | UnauthorizedActionError).
        """
        if actor.role == UserRole.SYSTEM:
            raise UnauthorizedActionError("System actor cannot create bookings")

        now = self.clock()
        try:
            with self.store.transaction() as repo:
                prop = _require_property(repo, payload.property_id, lock=True)
                quote = build_quote(
                    repo, prop, payload.check_in, payload.check_out, payload.adults
                )
                sequence = repo.next_booking_sequence(now.year)

                booking = Booking(
                    id=uuid4(),
                    booking_number=format_booking_number(now.year, sequence),
                    property_id=prop.id,
                    customer_id=actor.user_id,
                    check_in=payload.check_in,
                    check_out=payload.check_out,
                    nights=quote.nights,
                    adults=payload.adults,
                    children=payload.children,
                    guest_name=payload.guest_name,
                    guest_email=str(payload.guest_email),
                    guest_phone=payload.guest_phone,
                    special_requests=payload.special_requests,
                    base_amount=quote.base_amount,
                    cleaning_fee=quote.cleaning_fee,
                    service_fee=quote.service_fee,
                    taxes=quote.taxes,
                    discounts=quote.discounts,
                    total_amount=quote.total_amount,
                    status=BookingStatus.PENDING_APPROVAL,
                )
                created = repo.insert_booking(booking)
        except PropertyUnavailableError:
            booking_conflicts.inc()
            raise

        bookings_created.inc()
        logger.info(
            "booking_created",
            booking_id=str(created.id),
            booking_number=created.booking_number,
            property_id=str(created.property_id),
            customer_id=str(created.customer_id),
            nights=created.nights,
            total_amount=str(created.total_amount),
        )
        return created

    @returns_result
    def update_booking(
        self, actor: Actor, booking_id: UUID, payload: BookingUpdatePayload
    ) -> Booking:
        """
        Change guest details, dates or guest counts of a booking.

        New dates or a new adult count re-run validation, availability (the
        booking's own interval excluded) and pricing, and replace every amount.
        Only the host or an admin may set ``admin_notes``.
        """
        try:
            with self.store.transaction() as repo:
                booking = _require_booking(repo, booking_id, for_update=True)
                prop = _require_property(repo, booking.property_id, lock=True)
                authorize_update(actor, booking, prop)

                changes: dict[str, Any] = payload.model_dump(
                    exclude_none=True,
                    exclude={"check_in", "check_out", "adults", "admin_notes"},
                )
                if "guest_email" in changes:
                    changes["guest_email"] = str(changes["guest_email"])

                if payload.admin_notes is not None:
                    if not manages_property(actor, prop):
                        raise UnauthorizedActionError(
                            "Only the host or an admin may set admin notes"
                        )
                    changes["admin_notes"] = payload.admin_notes

                updated = replace(booking, **changes)
                if payload.reprices:
                    updated = replace(
                        updated,
                        check_in=payload.check_in or booking.check_in,
                        check_out=payload.check_out or booking.check_out,
                        adults=payload.adults or booking.adults,
                    )
                    quote = build_quote(
                        repo,
                        prop,
                        updated.check_in,
                        updated.check_out,
                        updated.adults,
                        exclude_booking_id=booking.id,
                    )
                    updated = _with_quote(updated, quote)

                saved = repo.update_booking(replace(updated, updated_at=self.clock()))
        except BookingError as e:
            if isinstance(e, PropertyUnavailableError):
                booking_conflicts.inc()
            booking_transitions.labels(
                action=BookingAction.UPDATE.value, status=type(e).__name__
            ).inc()
            raise

        booking_transitions.labels(action=BookingAction.UPDATE.value, status="success").inc()
        logger.info(
            "booking_updated",
            booking_id=str(saved.id),
            repriced=payload.reprices,
            total_amount=str(saved.total_amount),
        )
        return saved

    @returns_result
    def perform_action(
        self, actor: Actor, booking_id: UUID, payload: BookingActionPayload
    ) -> Booking:
        """
        Apply a lifecycle action (approve, reject, confirm, check_in, check_out,
        complete, cancel) to a booking.

        Returns:
            Ok(Booking) in its new state, or Err(NotFoundError |
            UnauthorizedActionError | InvalidTransitionError).
        """
        action = payload.action
        try:
            with self.store.transaction() as repo:
                booking = _require_booking(repo, booking_id, for_update=True)
                prop = _require_property(repo, booking.property_id)
                updated = apply_action(
                    booking,
                    prop,
                    actor,
                    action,
                    self.clock(),
                    reason=payload.reason,
                    refund_amount=payload.refund_amount,
                    admin_notes=payload.admin_notes,
                )
                if updated is booking:
                    logger.info(
                        "booking_action_noop", booking_id=str(booking_id), action=action.value
                    )
                    return booking
                saved = repo.update_booking(updated)
        except BookingError as e:
            booking_transitions.labels(action=action.value, status=type(e).__name__).inc()
            raise

        booking_transitions.labels(action=action.value, status="success").inc()
        logger.info(
            "booking_status_changed",
            booking_id=str(saved.id),
            action=action.value,
            from_status=booking.status.value,
            to_status=saved.status.value,
            actor_id=str(actor.user_id),
        )
        return saved

    def complete_booking(self, actor: Actor, booking_id: UUID) -> Result[Booking]:
        """Complete a checked-out booking. Completing a completed booking is a no-op."""
        return self.perform_action(
            actor, booking_id, BookingActionPayload(action=BookingAction.COMPLETE)
        )

    def complete_due_bookings(
        self,
        now: Optional[datetime] = None,
        delay_seconds: int = AUTO_COMPLETE_AFTER_SECONDS,
    ) -> list[Booking]:
        """
        Complete every CHECKED_OUT booking whose check-out is at least
        ``delay_seconds`` old.

        Each booking completes in its own transaction; a failure is logged and
        the sweep moves on.

        Returns:
            list[Booking]: Bookings completed by this run.
        """
        cutoff = (now or self.clock()) - timedelta(seconds=delay_seconds)
        with self.store.read() as repo:
            due = repo.find_due_for_completion(cutoff)

        logger.info("completion_sweep_started", due_count=len(due), cutoff=cutoff.isoformat())

        completed: list[Booking] = []
        for booking_id in due:
            result = self.complete_booking(SYSTEM_ACTOR, booking_id)
            if isinstance(result, Err):
                logger.warning(
                    "booking_completion_skipped",
                    booking_id=str(booking_id),
                    error=result.error.message,
                )
                continue
            completed.append(result.value)

        logger.info("completion_sweep_finished", completed_count=len(completed))
        return completed

    @returns_result
    def set_availability(
        self, actor: Actor, property_id: UUID, payload: AvailabilityOverridePayload
    ) -> int:
        """
        Set host overrides for every date in ``[start_date, end_date)``.

        Returns:
            Ok(int) number of dates written, or Err(InvalidRangeError |
            NotFoundError | UnauthorizedActionError).
        """
        availability.validate_range(payload.start_date, payload.end_date)

        with self.store.transaction() as repo:
            prop = _require_property(repo, property_id, lock=True)
            if not manages_property(actor, prop):
                raise UnauthorizedActionError("Not authorized to manage this property")

            overrides = [
                AvailabilityOverride(
                    property_id=property_id,
                    date=night,
                    available=payload.available,
                    price=payload.price,
                    min_stay=payload.min_stay,
                    notes=payload.notes,
                )
                for night in iter_nights(payload.start_date, payload.end_date)
            ]
            count = repo.upsert_overrides(overrides)

        logger.info(
            "availability_updated",
            property_id=str(property_id),
            start_date=payload.start_date.isoformat(),
            end_date=payload.end_date.isoformat(),
            available=payload.available,
            dates=count,
        )
        return count
