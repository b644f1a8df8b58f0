import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse

import structlog

from booking_engine.config import AUTO_COMPLETE_AFTER_SECONDS
from booking_engine.db.engine import engine
from booking_engine.db.store import SqlBookingStore
from booking_engine.logging_config import setup_logging
from booking_engine.services.bookings import BookingService

setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    """
    Complete every CHECKED_OUT booking whose check-out is old enough.

    Meant to be run from cron or a Kubernetes CronJob. Safe to run repeatedly
    and concurrently: completion is idempotent and each booking row is locked
    while it is completed.
    """
    parser = argparse.ArgumentParser(description="Complete checked-out bookings")
    parser.add_argument(
        "--delay-seconds",
        type=int,
        default=AUTO_COMPLETE_AFTER_SECONDS,
        help="Minimum age of the check-out before a booking is completed",
    )
    args = parser.parse_args()

    service = BookingService(SqlBookingStore(engine))
    try:
        completed = service.complete_due_bookings(delay_seconds=args.delay_seconds)
    except Exception:
        logger.exception("completion_sweep_failed")
        raise

    logger.info(
        "completion_sweep_done",
        completed=[booking.booking_number for booking in completed],
    )


if __name__ == "__main__":
    main()
