from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every table lives in the ``rentals`` schema (see ``config.SCHEMA``) so the
    service can share a database with the rest of the marketplace.
    """

    pass
