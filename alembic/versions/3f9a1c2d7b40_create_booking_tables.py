"""Create properties, availability overrides, bookings and booking number counters

Revision ID: 3f9a1c2d7b40
Revises:
Create Date: 2025-06-02 10:14:08.311920

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "3f9a1c2d7b40"
down_revision = None
branch_labels = None
depends_on = None

SCHEMA = "rentals"
BLOCKING = "'APPROVED', 'CHECKED_IN', 'CONFIRMED', 'PENDING_APPROVAL'"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    op.create_table(
        "properties",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("host_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="ACTIVE"),
        sa.Column("base_rate", sa.Numeric(12, 2), nullable=False),
        sa.Column("weekend_premium", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("cleaning_fee", sa.Numeric(12, 2), nullable=True, server_default="0"),
        sa.Column("security_deposit", sa.Numeric(12, 2), nullable=True, server_default="0"),
        sa.Column("service_fee_rate", sa.Numeric(5, 4), nullable=True, server_default="0.05"),
        sa.Column("min_stay", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("max_stay", sa.Integer(), nullable=False, server_default="90"),
        sa.Column("max_guests", sa.Integer(), nullable=False),
        *_timestamps(),
        schema=SCHEMA,
    )
    op.create_index("ix_rentals_properties_host_id", "properties", ["host_id"], schema=SCHEMA)

    op.create_table(
        "property_availability",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "property_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey(f"{SCHEMA}.properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("available", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("price", sa.Numeric(12, 2), nullable=True),
        sa.Column("min_stay", sa.Integer(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("property_id", "date", name="uq_property_availability_date"),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_rentals_property_availability_property_id",
        "property_availability",
        ["property_id"],
        schema=SCHEMA,
    )

    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("booking_number", sa.String(length=32), nullable=False, unique=True),
        sa.Column(
            "property_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey(f"{SCHEMA}.properties.id"),
            nullable=False,
        ),
        sa.Column("customer_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column("nights", sa.Integer(), nullable=False),
        sa.Column("adults", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("children", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "status", sa.String(length=32), nullable=False, server_default="PENDING_APPROVAL"
        ),
        sa.Column("payment_status", sa.String(length=32), nullable=False, server_default="PENDING"),
        sa.Column("base_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("cleaning_fee", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("service_fee", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("taxes", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("discounts", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("refund_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("guest_name", sa.String(), nullable=False),
        sa.Column("guest_email", sa.String(), nullable=False),
        sa.Column("guest_phone", sa.String(), nullable=False),
        sa.Column("special_requests", sa.String(), nullable=True),
        sa.Column("admin_notes", sa.String(), nullable=True),
        sa.Column("cancellation_reason", sa.String(), nullable=True),
        sa.Column("cancellation_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("checked_out_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("check_out > check_in", name="ck_bookings_check_out_after_check_in"),
        schema=SCHEMA,
    )
    op.create_index("ix_rentals_bookings_property_id", "bookings", ["property_id"], schema=SCHEMA)
    op.create_index("ix_rentals_bookings_customer_id", "bookings", ["customer_id"], schema=SCHEMA)
    op.create_index("ix_rentals_bookings_status", "bookings", ["status"], schema=SCHEMA)

    # No two calendar-blocking bookings of one property may share a night
    op.execute(
        f"ALTER TABLE {SCHEMA}.bookings ADD CONSTRAINT ex_bookings_no_overlap "
        "EXCLUDE USING gist (property_id WITH =, daterange(check_in, check_out, '[)') WITH &&) "
        f"WHERE (status IN ({BLOCKING}))"
    )

    op.create_table(
        "booking_number_counters",
        sa.Column("year", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("last_value", sa.Integer(), nullable=False),
        schema=SCHEMA,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("booking_number_counters", schema=SCHEMA)
    op.drop_table("bookings", schema=SCHEMA)
    op.drop_table("property_availability", schema=SCHEMA)
    op.drop_table("properties", schema=SCHEMA)
