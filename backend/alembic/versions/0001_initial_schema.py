"""Initial hotel schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "rooms",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("short_description", sa.String(length=512)),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("bed_type", sa.String(length=120), nullable=False),
        sa.Column("size", sa.Integer()),
        sa.Column("price_per_night", sa.Numeric(10, 2), nullable=False),
        sa.Column("amenities", sa.JSON(), nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("total_units", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("total_units >= 1", name="ck_rooms_total_units_positive"),
        sa.CheckConstraint("capacity >= 1", name="ck_rooms_capacity_positive"),
    )

    op.create_table(
        "room_availability_overrides",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "room_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("rooms.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("available_units", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("room_id", "date", name="uq_override_room_date"),
        sa.CheckConstraint(
            "available_units >= 0", name="ck_override_units_non_negative"
        ),
    )

    op.create_table(
        "room_blocked_dates",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "room_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("rooms.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("units_blocked", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(length=512)),
        *_timestamps(),
        sa.UniqueConstraint("room_id", "date", name="uq_blocked_room_date"),
        sa.CheckConstraint("units_blocked >= 1", name="ck_blocked_units_positive"),
    )

    booking_status_enum = sa.Enum(
        "PENDING",
        "CONFIRMED",
        "CANCELLED",
        "COMPLETED",
        "NO_SHOW",
        name="bookingstatus",
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("booking_number", sa.String(length=32), nullable=False, unique=True),
        sa.Column("reservation_group_id", sa.String(length=64)),
        sa.Column(
            "room_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("rooms.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("check_in_date", sa.Date(), nullable=False),
        sa.Column("check_out_date", sa.Date(), nullable=False),
        sa.Column("number_of_nights", sa.Integer(), nullable=False),
        sa.Column("number_of_guests", sa.Integer(), nullable=False),
        sa.Column("guest_name", sa.String(length=255), nullable=False),
        sa.Column("guest_email", sa.String(length=320), nullable=False),
        sa.Column("guest_phone", sa.String(length=64), nullable=False),
        sa.Column("special_requests", sa.Text()),
        sa.Column("price_per_night", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", booking_status_enum, nullable=False),
        sa.Column("status_history", sa.JSON(), nullable=False),
        sa.Column("admin_notes", sa.Text()),
        sa.Column("confirmed_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.CheckConstraint(
            "check_out_date > check_in_date",
            name="ck_bookings_checkout_after_checkin",
        ),
    )
    op.create_index(
        "ix_bookings_room_dates",
        "bookings",
        ["room_id", "check_in_date", "check_out_date"],
    )
    op.create_index("ix_bookings_group", "bookings", ["reservation_group_id"])

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column(
            "role", sa.Enum("ADMIN", "STAFF", name="userrole"), nullable=False
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
        ),
        sa.Column(
            "event_type",
            sa.Enum(
                "ADMIN_LOGIN",
                "ROOM_DELETED",
                "BOOKING_STATUS_CHANGED",
                "BOOKING_DELETED",
                "BOOKINGS_CLEANED_UP",
                "BOOKING_GROUPS_RECONCILED",
                name="auditeventtype",
            ),
            nullable=False,
        ),
        sa.Column("room_id", sa.Uuid(as_uuid=True)),
        sa.Column("booking_number", sa.String(length=32)),
        sa.Column("description", sa.String(length=1024)),
        sa.Column("details", sa.JSON()),
        sa.Column("ip_address", sa.String(length=64)),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_audit_events_room", "audit_events", ["room_id"])
    op.create_index(
        "ix_audit_events_booking_number", "audit_events", ["booking_number"]
    )


def downgrade() -> None:
    op.drop_index("ix_audit_events_booking_number", table_name="audit_events")
    op.drop_index("ix_audit_events_room", table_name="audit_events")
    op.drop_table("audit_events")
    op.drop_table("users")
    op.drop_index("ix_bookings_group", table_name="bookings")
    op.drop_index("ix_bookings_room_dates", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("room_blocked_dates")
    op.drop_table("room_availability_overrides")
    op.drop_table("rooms")
    sa.Enum(name="bookingstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="auditeventtype").drop(op.get_bind(), checkfirst=True)
