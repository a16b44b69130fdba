# backend/alembic/versions/001_digital_offices_schema.py
"""Accounts, services, weekly availability, bookings and reviews

Revision ID: 001_digital_offices_schema
Revises:
Create Date: 2026-01-12 00:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_digital_offices_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OVERLAP_CONSTRAINT = "bookings_no_overlap_per_provider"
ACCOUNT_TABLES = ("users", "experts", "organizations", "admins")


def _create_extension_prefer_extensions_schema(extension_name: str) -> None:
    """Create extension using extensions schema when available."""

    bind = op.get_bind()
    if bind is None or bind.dialect.name != "postgresql":
        return

    op.execute(
        f"""
        DO $$
        DECLARE
            extensions_schema_exists BOOLEAN;
            extension_installed BOOLEAN;
        BEGIN
            SELECT EXISTS (
                SELECT 1 FROM pg_namespace WHERE nspname = 'extensions'
            ) INTO extensions_schema_exists;

            SELECT EXISTS (
                SELECT 1 FROM pg_extension WHERE extname = '{extension_name}'
            ) INTO extension_installed;

            IF NOT extension_installed THEN
                IF extensions_schema_exists THEN
                    EXECUTE 'CREATE EXTENSION IF NOT EXISTS {extension_name} WITH SCHEMA extensions';
                ELSE
                    EXECUTE 'CREATE EXTENSION IF NOT EXISTS {extension_name}';
                END IF;
            END IF;
        END
        $$;
        """
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True
        ),
    ]


def upgrade() -> None:
    """Create the booking and scheduling schema."""
    bind = op.get_bind()
    is_postgres = bind is not None and bind.dialect.name == "postgresql"

    print("Creating account tables...")
    for table in ACCOUNT_TABLES:
        extra = (
            [sa.Column("company_name", sa.String(255), nullable=True)]
            if table == "organizations"
            else []
        )
        op.create_table(
            table,
            sa.Column("id", sa.String(36), nullable=False),
            sa.Column("email", sa.String(255), nullable=False),
            sa.Column("name", sa.String(255), nullable=False),
            *extra,
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(f"ix_{table}_email", table, ["email"], unique=True)

    print("Creating services table...")
    op.create_table(
        "services",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("duration_min", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expert_id", sa.String(36), nullable=True),
        sa.Column("organization_id", sa.String(36), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["expert_id"], ["experts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "(expert_id IS NULL) <> (organization_id IS NULL)", name="ck_services_single_owner"
        ),
        sa.CheckConstraint("duration_min >= 5", name="ck_services_duration"),
        sa.CheckConstraint("price >= 0", name="ck_services_price_non_negative"),
    )
    op.create_index("ix_services_is_active", "services", ["is_active"])
    op.create_index("ix_services_expert_id", "services", ["expert_id"])
    op.create_index("ix_services_organization_id", "services", ["organization_id"])

    print("Creating availability table...")
    op.create_table(
        "availability",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("expert_id", sa.String(36), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["expert_id"], ["experts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_day_of_week"),
        sa.CheckConstraint("start_time < end_time", name="ck_availability_time_order"),
    )
    op.create_index("idx_availability_expert_day", "availability", ["expert_id", "day_of_week"])

    print("Creating bookings table...")
    op.create_table(
        "bookings",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("service_id", sa.String(36), nullable=False),
        sa.Column("expert_id", sa.String(36), nullable=True),
        sa.Column("organization_id", sa.String(36), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["service_id"], ["services.id"]),
        sa.ForeignKeyConstraint(["expert_id"], ["experts.id"]),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED', 'NO_SHOW')",
            name="ck_bookings_status",
        ),
        sa.CheckConstraint(
            "(expert_id IS NULL) <> (organization_id IS NULL)", name="ck_bookings_single_provider"
        ),
        sa.CheckConstraint("start_time < end_time", name="ck_bookings_time_order"),
        sa.CheckConstraint("total_price >= 0", name="ck_bookings_price_non_negative"),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index(
        "ix_bookings_expert_window", "bookings", ["expert_id", "status", "start_time", "end_time"]
    )
    op.create_index(
        "ix_bookings_organization_window",
        "bookings",
        ["organization_id", "status", "start_time", "end_time"],
    )

    if is_postgres:
        print("Adding provider overlap exclusion constraint...")
        _create_extension_prefer_extensions_schema("btree_gist")
        op.execute(
            f"""
            ALTER TABLE bookings
              ADD CONSTRAINT {OVERLAP_CONSTRAINT}
              EXCLUDE USING gist (
                (coalesce(expert_id, organization_id)) WITH =,
                tstzrange(start_time, end_time, '[)') WITH &&
              )
              WHERE (status IN ('PENDING', 'CONFIRMED'))
            """
        )

    print("Creating reviews table...")
    op.create_table(
        "reviews",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("booking_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["booking_id"], ["bookings.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("booking_id", name="uq_reviews_booking_id"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )
    op.create_index("ix_reviews_user_id", "reviews", ["user_id"])

    print("Digital Offices schema created.")


def downgrade() -> None:
    """Drop the booking and scheduling schema."""
    bind = op.get_bind()
    is_postgres = bind is not None and bind.dialect.name == "postgresql"

    op.drop_index("ix_reviews_user_id", table_name="reviews")
    op.drop_table("reviews")

    if is_postgres:
        op.execute(f"ALTER TABLE bookings DROP CONSTRAINT IF EXISTS {OVERLAP_CONSTRAINT}")
    op.drop_index("ix_bookings_organization_window", table_name="bookings")
    op.drop_index("ix_bookings_expert_window", table_name="bookings")
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")

    op.drop_index("idx_availability_expert_day", table_name="availability")
    op.drop_table("availability")

    op.drop_index("ix_services_organization_id", table_name="services")
    op.drop_index("ix_services_expert_id", table_name="services")
    op.drop_index("ix_services_is_active", table_name="services")
    op.drop_table("services")

    for table in reversed(ACCOUNT_TABLES):
        op.drop_index(f"ix_{table}_email", table_name=table)
        op.drop_table(table)
