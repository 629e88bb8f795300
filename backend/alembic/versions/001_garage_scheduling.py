# backend/alembic/versions/001_garage_scheduling.py
"""Garage scheduling - reference data, appointments and overlap protection

Revision ID: 001_garage_scheduling
Revises:
Create Date: 2025-06-01 00:00:00.000000

Creates the operation catalog, staff with working windows and time off, bays,
customers, garage closures and opening hours, and appointments with their
segments.

On PostgreSQL, appointments and segments get a generated tsrange column and an
exclusion constraint each, so two overlapping rows for the same bay or the same
staff member can never both commit, whatever the application does.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_garage_scheduling"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


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
        END $$;
        """
    )


def upgrade() -> None:
    """Create garage scheduling tables."""
    print("Creating garage scheduling tables...")

    bind = op.get_bind()
    dialect_name = bind.dialect.name if bind is not None else "postgresql"
    is_postgres = dialect_name == "postgresql"

    op.create_table(
        "operations",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("required_role", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("duration_minutes > 0", name="check_operation_duration_positive"),
    )

    op.create_table(
        "staff_members",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "working_windows",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("staff_id", sa.String(26), nullable=False),
        sa.Column("weekday", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.ForeignKeyConstraint(["staff_id"], ["staff_members.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("weekday BETWEEN 0 AND 6", name="check_working_window_weekday"),
        sa.CheckConstraint("start_time < end_time", name="check_working_window_order"),
    )
    op.create_index(
        "idx_working_windows_weekday_staff", "working_windows", ["weekday", "staff_id"]
    )

    op.create_table(
        "staff_time_off",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("staff_id", sa.String(26), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("reason", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["staff_id"], ["staff_members.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("start_date <= end_date", name="check_time_off_date_order"),
    )
    op.create_index("idx_staff_time_off_dates", "staff_time_off", ["start_date", "end_date"])

    op.create_table(
        "bays",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "customers",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "garage_closures",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("closure_date", sa.Date(), nullable=False),
        sa.Column("closure_type", sa.String(20), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("closure_date", name="uq_garage_closures_date"),
        sa.CheckConstraint(
            "closure_type IN ('holiday', 'maintenance', 'other')",
            name="ck_garage_closures_type",
        ),
    )

    op.create_table(
        "garage_working_hours",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("weekday", sa.Integer(), nullable=False),
        sa.Column("opening_time", sa.Time(), nullable=False),
        sa.Column("closing_time", sa.Time(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("weekday", name="uq_garage_working_hours_weekday"),
        sa.CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_garage_working_hours_weekday"),
        sa.CheckConstraint("opening_time < closing_time", name="ck_garage_working_hours_order"),
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("customer_id", sa.String(26), nullable=False),
        sa.Column("bay_id", sa.String(26), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
        sa.ForeignKeyConstraint(["bay_id"], ["bays.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("start_time < end_time", name="check_appointment_time_order"),
    )
    op.create_index("idx_appointments_bay_date", "appointments", ["bay_id", "appointment_date"])
    op.create_index("ix_appointments_appointment_date", "appointments", ["appointment_date"])

    op.create_table(
        "appointment_segments",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("appointment_id", sa.String(26), nullable=False),
        sa.Column("operation_id", sa.String(26), nullable=False),
        sa.Column("staff_id", sa.String(26), nullable=False),
        sa.Column("segment_date", sa.Date(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.ForeignKeyConstraint(["appointment_id"], ["appointments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["operation_id"], ["operations.id"]),
        sa.ForeignKeyConstraint(["staff_id"], ["staff_members.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("start_time < end_time", name="check_segment_time_order"),
        sa.CheckConstraint("position >= 0", name="check_segment_position"),
    )
    op.create_index(
        "idx_segments_staff_date", "appointment_segments", ["staff_id", "segment_date"]
    )

    if is_postgres:
        _create_extension_prefer_extensions_schema("btree_gist")
        op.execute(
            """
            ALTER TABLE appointments
              ADD COLUMN IF NOT EXISTS appointment_span tsrange
              GENERATED ALWAYS AS (
                tsrange(
                  (appointment_date::timestamp + start_time),
                  (appointment_date::timestamp + end_time),
                  '[)'
                )
              ) STORED
            """
        )
        op.execute(
            """
            ALTER TABLE appointments
              ADD CONSTRAINT appointments_no_overlap_per_bay
              EXCLUDE USING gist (
                bay_id WITH =,
                appointment_span WITH &&
              )
            """
        )
        op.execute(
            """
            ALTER TABLE appointment_segments
              ADD COLUMN IF NOT EXISTS segment_span tsrange
              GENERATED ALWAYS AS (
                tsrange(
                  (segment_date::timestamp + start_time),
                  (segment_date::timestamp + end_time),
                  '[)'
                )
              ) STORED
            """
        )
        op.execute(
            """
            ALTER TABLE appointment_segments
              ADD CONSTRAINT appointment_segments_no_overlap_per_staff
              EXCLUDE USING gist (
                staff_id WITH =,
                segment_span WITH &&
              )
            """
        )

    print("Garage scheduling tables created")


def downgrade() -> None:
    """Drop garage scheduling tables."""
    print("Dropping garage scheduling tables...")

    bind = op.get_bind()
    dialect_name = bind.dialect.name if bind is not None else "postgresql"
    is_postgres = dialect_name == "postgresql"

    if is_postgres:
        op.execute(
            "ALTER TABLE appointment_segments "
            "DROP CONSTRAINT IF EXISTS appointment_segments_no_overlap_per_staff"
        )
        op.execute(
            "ALTER TABLE appointments DROP CONSTRAINT IF EXISTS appointments_no_overlap_per_bay"
        )

    op.drop_index("idx_segments_staff_date", table_name="appointment_segments")
    op.drop_table("appointment_segments")

    op.drop_index("ix_appointments_appointment_date", table_name="appointments")
    op.drop_index("idx_appointments_bay_date", table_name="appointments")
    op.drop_table("appointments")

    op.drop_table("garage_working_hours")
    op.drop_table("garage_closures")
    op.drop_table("customers")
    op.drop_table("bays")

    op.drop_index("idx_staff_time_off_dates", table_name="staff_time_off")
    op.drop_table("staff_time_off")
    op.drop_index("idx_working_windows_weekday_staff", table_name="working_windows")
    op.drop_table("working_windows")
    op.drop_table("staff_members")
    op.drop_table("operations")

    print("Garage scheduling tables dropped")
