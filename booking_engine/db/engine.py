"""
SQLAlchemy engine singleton with connection pooling.

Every request handler and job shares this engine; the booking store opens its
own connections and transactions from it.
"""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from booking_engine.config import DATABASE_URL

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")

engine: Engine = create_engine(
    DATABASE_URL,
    future=True,
    pool_size=10,
    max_overflow=20,
    pool_pre_ping=True,  # detect connections dropped by the server
    pool_recycle=3600,
    echo=False,
)


def check_engine_health() -> bool:
    """
    Check if the database is reachable.

    Used by the /ready endpoint and by the integration test suite to decide
    whether PostgreSQL-backed tests can run.

    Returns:
        bool: True if a trivial query succeeds, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
