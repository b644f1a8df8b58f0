"""Closed enumerations shared by the models, the core services and the API."""

from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = "CUSTOMER"
    PROPERTY_HOST = "PROPERTY_HOST"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"
    SYSTEM = "SYSTEM"  # scheduled jobs, never a human user

    @property
    def is_admin(self) -> bool:
        return self in (UserRole.ADMIN, UserRole.SUPER_ADMIN)


class PropertyStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    MAINTENANCE = "MAINTENANCE"
    COMING_SOON = "COMING_SOON"
    SUSPENDED = "SUSPENDED"


class BookingStatus(str, Enum):
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_blocking(self) -> bool:
        return self in BLOCKING_STATUSES


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    REFUNDED = "REFUNDED"
    FAILED = "FAILED"


class BookingAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    CONFIRM = "confirm"
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    COMPLETE = "complete"
    CANCEL = "cancel"
    UPDATE = "update"  # date/guest change, same status


# Statuses that occupy a property's calendar
BLOCKING_STATUSES = frozenset(
    {
        BookingStatus.PENDING_APPROVAL,
        BookingStatus.APPROVED,
        BookingStatus.CONFIRMED,
        BookingStatus.CHECKED_IN,
    }
)

TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})
