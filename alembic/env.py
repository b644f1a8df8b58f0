from logging.config import fileConfig
from typing import Any

from sqlalchemy import engine_from_config, pool
from sqlalchemy.schema import CreateSchema

from alembic import context  # type: ignore[attr-defined]
from booking_engine.config import DATABASE_URL, SCHEMA
from booking_engine.models.availability import PropertyAvailability  # noqa: F401
from booking_engine.models.base import Base
from booking_engine.models.bookings import Booking, BookingNumberCounter  # noqa: F401
from booking_engine.models.properties import Property  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

config.set_main_option("sqlalchemy.url", DATABASE_URL)


def include_object(object_: Any, name: str, type_: str, reflected: bool, compare_to: Any) -> bool:
    """Only manage objects in the rentals schema; other services share the database."""
    return getattr(object_, "schema", SCHEMA) == SCHEMA


# Shared by offline and online runs; the version table lives next to the tables
CONFIGURE_OPTIONS: dict[str, Any] = {
    "target_metadata": Base.metadata,
    "include_schemas": True,
    "include_object": include_object,
    "version_table_schema": SCHEMA,
}


def run_migrations_offline() -> None:
    """Emit migration SQL to stdout without connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **CONFIGURE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Create the schema if needed, then apply migrations over one connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        connection.execute(CreateSchema(SCHEMA, if_not_exists=True))
        connection.commit()

        context.configure(connection=connection, **CONFIGURE_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
