"""Pydantic schemas for room types."""
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class RoomBase(BaseModel):
    """Shared room fields."""

    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    description: str = ""
    short_description: str | None = None
    capacity: int = Field(default=2, ge=1)
    bed_type: str = ""
    size: int | None = Field(default=None, ge=0)
    price_per_night: Decimal = Field(ge=Decimal("0"), max_digits=10, decimal_places=2)
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    is_active: bool = True
    display_order: int = 0
    total_units: int = Field(default=1, ge=1)


class RoomCreate(RoomBase):
    """Payload for creating a room type."""


class RoomUpdate(BaseModel):
    """Mutable room fields."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(
        default=None, min_length=1, max_length=255, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
    )
    description: str | None = None
    short_description: str | None = None
    capacity: int | None = Field(default=None, ge=1)
    bed_type: str | None = None
    size: int | None = Field(default=None, ge=0)
    price_per_night: Decimal | None = Field(
        default=None, ge=Decimal("0"), max_digits=10, decimal_places=2
    )
    amenities: list[str] | None = None
    images: list[str] | None = None
    is_active: bool | None = None
    display_order: int | None = None
    total_units: int | None = Field(default=None, ge=1)


class RoomRead(BaseModel):
    """Serialized room representation."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    description: str
    short_description: str | None = None
    capacity: int
    bed_type: str
    size: int | None = None
    price_per_night: Decimal
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    is_active: bool
    display_order: int
    total_units: int
    created_at: datetime
    updated_at: datetime


class RoomSummary(BaseModel):
    """Compact room reference embedded in bookings."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    images: list[str] = Field(default_factory=list)
