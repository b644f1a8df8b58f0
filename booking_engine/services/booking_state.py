"""
Booking state machine.

    PENDING_APPROVAL -> APPROVED -> CONFIRMED -> CHECKED_IN -> CHECKED_OUT -> COMPLETED
           |               |
           +---------------+--> CANCELLED   (reject, cancel)

Each action names who may take it (an authorization predicate) and from which
statuses. Authorization is checked before the current status, so an outsider
learns nothing about a booking's state. The functions here are pure: they
return a new ``Booking`` and leave persistence to ``services.bookings``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Optional

from booking_engine.domain.entities import Actor, Booking, PropertyRates
from booking_engine.domain.enums import (
    BookingAction,
    BookingStatus,
    PaymentStatus,
    UserRole,
)
from booking_engine.domain.errors import InvalidTransitionError, UnauthorizedActionError
from booking_engine.domain.result import returns_result

Predicate = Callable[[Actor, Booking, PropertyRates], bool]


def manages_property(actor: Actor, prop: PropertyRates) -> bool:
    """The property's own host, or an admin."""
    return actor.role.is_admin or actor.user_id == prop.host_id


def is_property_manager(actor: Actor, booking: Booking, prop: PropertyRates) -> bool:
    return manages_property(actor, prop)


def is_booking_owner(actor: Actor, booking: Booking, prop: PropertyRates) -> bool:
    return actor.user_id == booking.customer_id


def is_scheduler(actor: Actor, booking: Booking, prop: PropertyRates) -> bool:
    return actor.role == UserRole.SYSTEM or actor.role.is_admin


def can_view(actor: Actor, booking: Booking, prop: PropertyRates) -> bool:
    return (
        is_booking_owner(actor, booking, prop)
        or is_property_manager(actor, booking, prop)
        or actor.role == UserRole.SYSTEM
    )


def can_update(actor: Actor, booking: Booking, prop: PropertyRates) -> bool:
    return is_booking_owner(actor, booking, prop) or is_property_manager(actor, booking, prop)


NON_TERMINAL = frozenset(status for status in BookingStatus if not status.is_terminal)


@dataclass(frozen=True)
class Transition:
    target: BookingStatus
    # (who, from which statuses); an actor matching several grants gets their union
    grants: tuple[tuple[Predicate, frozenset[BookingStatus]], ...]

    def sources_for(
        self, actor: Actor, booking: Booking, prop: PropertyRates
    ) -> Optional[frozenset[BookingStatus]]:
        """Statuses this actor may start from, or None if the actor may not act at all."""
        granted = [sources for allowed, sources in self.grants if allowed(actor, booking, prop)]
        if not granted:
            return None
        return frozenset().union(*granted)


TRANSITIONS: dict[BookingAction, Transition] = {
    BookingAction.APPROVE: Transition(
        target=BookingStatus.APPROVED,
        grants=((is_property_manager, frozenset({BookingStatus.PENDING_APPROVAL})),),
    ),
    BookingAction.REJECT: Transition(
        target=BookingStatus.CANCELLED,
        grants=((is_property_manager, frozenset({BookingStatus.PENDING_APPROVAL})),),
    ),
    BookingAction.CONFIRM: Transition(
        target=BookingStatus.CONFIRMED,
        grants=((is_property_manager, frozenset({BookingStatus.APPROVED})),),
    ),
    BookingAction.CHECK_IN: Transition(
        target=BookingStatus.CHECKED_IN,
        grants=((is_property_manager, frozenset({BookingStatus.CONFIRMED})),),
    ),
    BookingAction.CHECK_OUT: Transition(
        target=BookingStatus.CHECKED_OUT,
        grants=((is_property_manager, frozenset({BookingStatus.CHECKED_IN})),),
    ),
    BookingAction.COMPLETE: Transition(
        target=BookingStatus.COMPLETED,
        grants=((is_scheduler, frozenset({BookingStatus.CHECKED_OUT})),),
    ),
    BookingAction.CANCEL: Transition(
        target=BookingStatus.CANCELLED,
        grants=(
            (is_property_manager, NON_TERMINAL),
            (
                is_booking_owner,
                frozenset({BookingStatus.PENDING_APPROVAL, BookingStatus.APPROVED}),
            ),
        ),
    ),
}


def apply_action(
    booking: Booking,
    prop: PropertyRates,
    actor: Actor,
    action: BookingAction,
    now: datetime,
    reason: Optional[str] = None,
    refund_amount: Optional[Decimal] = None,
    admin_notes: Optional[str] = None,
) -> Booking:
    """
    Apply a state machine action and return the booking in its new state.

    ``complete`` on an already completed booking returns it unchanged, so a
    completion job may deliver the same action more than once.

    Raises:
        UnauthorizedActionError: The actor may not take this action on this booking.
        InvalidTransitionError: The booking's status is not a valid start for the action.
    """
    transition = TRANSITIONS.get(action)
    if transition is None:
        raise InvalidTransitionError(booking.status, action)

    sources = transition.sources_for(actor, booking, prop)
    if sources is None:
        raise UnauthorizedActionError(f"Not authorized to {action.value} this booking")

    if action == BookingAction.COMPLETE and booking.status == BookingStatus.COMPLETED:
        return booking

    if booking.status not in sources:
        raise InvalidTransitionError(booking.status, action)

    changes: dict[str, Any] = {"status": transition.target, "updated_at": now}
    if admin_notes is not None:
        changes["admin_notes"] = admin_notes

    if action == BookingAction.APPROVE:
        changes["approved_by"] = actor.user_id
        changes["approved_at"] = now
    elif action == BookingAction.CHECK_OUT:
        changes["checked_out_at"] = now
    elif action in (BookingAction.REJECT, BookingAction.CANCEL):
        changes["cancellation_reason"] = reason
        changes["cancellation_date"] = now
        if action == BookingAction.CANCEL and refund_amount:
            changes["refund_amount"] = refund_amount
            changes["payment_status"] = PaymentStatus.REFUNDED

    return replace(booking, **changes)


def authorize_update(actor: Actor, booking: Booking, prop: PropertyRates) -> None:
    """
    Check that the actor may change dates or guests of the booking.

    Cancelled bookings are frozen for everyone. Completed bookings are frozen
    for everyone except admins.

    Raises:
        UnauthorizedActionError: Actor is neither the guest, the host nor an admin.
        InvalidTransitionError: Booking is cancelled, or completed and the actor
            is not an admin.
    """
    if not can_update(actor, booking, prop):
        raise UnauthorizedActionError("Not authorized to update this booking")

    if booking.status == BookingStatus.CANCELLED:
        raise InvalidTransitionError(booking.status, BookingAction.UPDATE)
    if booking.status == BookingStatus.COMPLETED and not actor.role.is_admin:
        raise InvalidTransitionError(booking.status, BookingAction.UPDATE)


transition_booking = returns_result(apply_action)
