"""Guest bookings."""
from __future__ import annotations

import datetime as dt
import enum
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from app.models.room import Room


class BookingStatus(str, enum.Enum):
    """Lifecycle states for bookings."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"


ACTIVE_BOOKING_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


class Booking(TimestampMixin, Base):
    """A reservation of one unit of a room type for ``[check_in, check_out)``."""

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint(
            "check_out_date > check_in_date", name="ck_bookings_checkout_after_checkin"
        ),
        Index("ix_bookings_room_dates", "room_id", "check_in_date", "check_out_date"),
        Index("ix_bookings_group", "reservation_group_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    booking_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    reservation_group_id: Mapped[str | None] = mapped_column(String(64))
    room_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("rooms.id", ondelete="RESTRICT"), nullable=False
    )
    check_in_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    check_out_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    number_of_nights: Mapped[int] = mapped_column(Integer, nullable=False)
    number_of_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    guest_name: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_email: Mapped[str] = mapped_column(String(320), nullable=False)
    guest_phone: Mapped[str] = mapped_column(String(64), nullable=False)
    special_requests: Mapped[str | None] = mapped_column(Text)
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus), default=BookingStatus.PENDING, nullable=False
    )
    status_history: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    admin_notes: Mapped[str | None] = mapped_column(Text)
    confirmed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True))

    room: Mapped["Room"] = relationship("Room", lazy="selectin")

    @property
    def group_key(self) -> str:
        """Reservation group id, or the booking's own id for singletons."""
        return self.reservation_group_id or str(self.id)

    def __repr__(self) -> str:
        return f"<Booking {self.booking_number} {self.status.value}>"
