"""Schemas for room availability search and the admin calendar."""
from __future__ import annotations

import uuid
import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.room import RoomRead


class AvailabilitySearchResponse(BaseModel):
    """Rooms with at least one unit free on every night of the stay."""

    rooms: list[RoomRead]
    check_in: dt.date
    check_out: dt.date
    guests: int


class RoomWithQuantity(RoomRead):
    max_available_quantity: int


class QuantitySearchResponse(BaseModel):
    rooms: list[RoomWithQuantity]
    check_in: dt.date
    check_out: dt.date


class RoomNightAvailability(BaseModel):
    """Capacity of one room on one calendar day."""

    room_id: uuid.UUID
    room_name: str
    room_slug: str
    total_units: int
    available_units: int
    booked_units: int
    blocked_units: int
    occupied_units: int
    actually_available: int
    has_override: bool


class CalendarDay(BaseModel):
    date: dt.date
    availability: list[RoomNightAvailability]


class CalendarResponse(BaseModel):
    start_date: dt.date
    end_date: dt.date
    days: list[CalendarDay]


class OverrideUpsert(BaseModel):
    """Replace a room's unit count for one night."""

    room_id: uuid.UUID
    date: dt.date
    available_units: int = Field(ge=0)


class OverrideRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    room_id: uuid.UUID
    date: dt.date
    available_units: int
    created_at: dt.datetime
    updated_at: dt.datetime


class BlockedDateUpsert(BaseModel):
    """Withhold units of a room for one night."""

    date: dt.date
    units_blocked: int = Field(default=1, ge=1)
    reason: str | None = Field(default=None, max_length=512)


class BlockedDateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    room_id: uuid.UUID
    date: dt.date
    units_blocked: int
    reason: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime


class BlockedDateList(BaseModel):
    blocked_dates: list[BlockedDateRead]
