"""Per-night capacity adjustments for a room."""

from __future__ import annotations

import uuid
import datetime as dt
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from app.models.room import Room


class RoomAvailabilityOverride(TimestampMixin, Base):
    """Replaces the room's unit count for a single night."""

    __tablename__ = "room_availability_overrides"
    __table_args__ = (
        UniqueConstraint("room_id", "date", name="uq_override_room_date"),
        CheckConstraint("available_units >= 0", name="ck_override_units_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    room_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    available_units: Mapped[int] = mapped_column(Integer, nullable=False)

    room: Mapped["Room"] = relationship("Room")


class RoomBlockedDate(TimestampMixin, Base):
    """Units withheld from sale for one night, e.g. for maintenance."""

    __tablename__ = "room_blocked_dates"
    __table_args__ = (
        UniqueConstraint("room_id", "date", name="uq_blocked_room_date"),
        CheckConstraint("units_blocked >= 1", name="ck_blocked_units_positive"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    room_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    units_blocked: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    reason: Mapped[str | None] = mapped_column(String(512))

    room: Mapped["Room"] = relationship("Room")
