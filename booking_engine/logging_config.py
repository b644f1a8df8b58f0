"""
structlog setup shared by the API process and the scripts.

Events are JSON lines unless LOG_LEVEL is DEBUG, when they are rendered for a
terminal. Values bound through ``structlog.contextvars`` (the request id set by
``RequestIDMiddleware``) are merged into every event.
"""

import logging
import sys

import structlog

from booking_engine.config import DEBUG, LOG_LEVEL

QUIET_LOGGERS = ("sqlalchemy.engine", "alembic", "uvicorn.access")


def setup_logging() -> None:
    """Configure structlog and route stdlib loggers (SQLAlchemy, uvicorn) to stdout."""
    level = logging.getLevelName(LOG_LEVEL)
    logging.basicConfig(stream=sys.stdout, level=level, format="%(name)s %(message)s")
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if DEBUG:
        processors += [structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer(colors=True)]
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
