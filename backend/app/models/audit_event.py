"""Audit trail of back-office actions on rooms and bookings."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any, TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy import DateTime, Enum, ForeignKey, Index, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import utcnow

if TYPE_CHECKING:  # pragma: no cover
    from app.models.user import User


class AuditEventType(str, enum.Enum):
    """Kinds of admin actions that leave an audit row."""

    ADMIN_LOGIN = "ADMIN_LOGIN"
    ROOM_DELETED = "ROOM_DELETED"
    BOOKING_STATUS_CHANGED = "BOOKING_STATUS_CHANGED"
    BOOKING_DELETED = "BOOKING_DELETED"
    BOOKINGS_CLEANED_UP = "BOOKINGS_CLEANED_UP"
    BOOKING_GROUPS_RECONCILED = "BOOKING_GROUPS_RECONCILED"


class AuditEvent(Base):
    """Immutable record of one admin action.

    ``room_id`` and ``booking_number`` are plain columns rather than foreign
    keys so the trail outlives the room or booking it describes.
    """

    __tablename__ = "audit_events"
    __table_args__ = (
        Index("ix_audit_events_room", "room_id"),
        Index("ix_audit_events_booking_number", "booking_number"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL")
    )
    event_type: Mapped[AuditEventType] = mapped_column(
        Enum(AuditEventType, name="auditeventtype"), nullable=False
    )
    room_id: Mapped[uuid.UUID | None] = mapped_column(sa.Uuid(as_uuid=True))
    booking_number: Mapped[str | None] = mapped_column(String(32))
    description: Mapped[str | None] = mapped_column(String(1024))
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    ip_address: Mapped[str | None] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=sa.func.now(),
    )

    user: Mapped["User | None"] = relationship("User")
