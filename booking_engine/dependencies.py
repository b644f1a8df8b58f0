"""
FastAPI dependency injection providers.

Route handlers receive the booking service and the acting user through these
providers. Tests override them with app.dependency_overrides to run routes
against an in-memory store.
"""

from __future__ import annotations

from typing import Generator, Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.engine import Engine

from booking_engine.db.engine import engine
from booking_engine.db.store import BookingStore, SqlBookingStore
from booking_engine.domain.entities import Actor
from booking_engine.domain.enums import UserRole
from booking_engine.services.bookings import BookingService


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine
    """
    yield engine


def get_booking_store(db_engine: Engine = Depends(get_db_engine)) -> BookingStore:
    """
    Provide the PostgreSQL-backed booking store.

    Testing Example:
        >>> app.dependency_overrides[get_booking_store] = lambda: InMemoryBookingStore()
    """
    return SqlBookingStore(db_engine)


def get_booking_service(store: BookingStore = Depends(get_booking_store)) -> BookingService:
    return BookingService(store)


def get_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Actor:
    """
    Build the acting user from identity headers set by the upstream gateway.

    Authentication happens before this service; it only trusts the
    ``X-User-Id`` and ``X-User-Role`` headers.

    Raises:
        HTTPException: 401 if a header is missing or malformed.
    """
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id or X-User-Role header",
        )

    try:
        return Actor(user_id=UUID(x_user_id), role=UserRole(x_user_role))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid X-User-Id or X-User-Role header",
        )
