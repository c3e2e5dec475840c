"""Room types offered by the hotel."""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import JSON, Boolean, CheckConstraint, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import TimestampMixin


class Room(TimestampMixin, Base):
    """A room type with ``total_units`` interchangeable physical rooms."""

    __tablename__ = "rooms"
    __table_args__ = (
        CheckConstraint("total_units >= 1", name="ck_rooms_total_units_positive"),
        CheckConstraint("capacity >= 1", name="ck_rooms_capacity_positive"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    short_description: Mapped[str | None] = mapped_column(String(512))
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    bed_type: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    size: Mapped[int | None] = mapped_column(Integer)
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    amenities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_units: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f"<Room {self.slug} units={self.total_units}>"
