"""UTC datetime and calendar-date utilities."""

from datetime import date, datetime, timedelta, timezone
from typing import Iterator


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    Use this instead of datetime.now() or datetime.utcnow() so every stored
    timestamp is timezone-aware.
    """
    return datetime.now(timezone.utc)


def iter_nights(check_in: date, check_out: date) -> Iterator[date]:
    """
    Yield each night of a stay: check_in inclusive, check_out exclusive.

    Example:
        >>> list(iter_nights(date(2025, 6, 9), date(2025, 6, 11)))
        [datetime.date(2025, 6, 9), datetime.date(2025, 6, 10)]
    """
    current = check_in
    while current < check_out:
        yield current
        current += timedelta(days=1)


def nights_between(check_in: date, check_out: date) -> int:
    return (check_out - check_in).days


def is_weekend(day: date) -> bool:
    """Saturday or Sunday, by the date's own weekday (no timezone conversion)."""
    return day.weekday() >= 5
