"""Pydantic schemas for bookings."""
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.booking import BookingStatus
from app.schemas.room import RoomSummary


class BookingCreate(BaseModel):
    """Public booking request."""

    room_id: uuid.UUID
    check_in_date: date
    check_out_date: date
    guest_name: str = Field(min_length=1, max_length=255)
    guest_email: EmailStr
    guest_phone: str = Field(min_length=5, max_length=64)
    number_of_guests: int = Field(default=1, ge=1)
    special_requests: str | None = Field(default=None, max_length=2000)
    reservation_group_id: str | None = Field(default=None, max_length=64)


class BookingUpdate(BaseModel):
    """Admin-editable booking fields."""

    status: BookingStatus | None = None
    admin_notes: str | None = None


class GuestBookingRead(BaseModel):
    """Booking as shown to the guest who made it."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    booking_number: str
    reservation_group_id: str | None = None
    room_id: uuid.UUID
    room: RoomSummary | None = None
    check_in_date: date
    check_out_date: date
    number_of_nights: int
    number_of_guests: int
    guest_name: str
    guest_email: str
    guest_phone: str
    special_requests: str | None = None
    price_per_night: Decimal
    total_price: Decimal
    status: BookingStatus
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class BookingRead(GuestBookingRead):
    """Full booking representation for the back office."""

    status_history: list[dict[str, Any]] = Field(default_factory=list)
    admin_notes: str | None = None


class BookingList(BaseModel):
    """Paginated admin booking listing."""

    bookings: list[BookingRead]
    total: int
    page: int
    limit: int


class GuestLookupRequest(BaseModel):
    """Booking reference plus the e-mail it was made with."""

    booking_number: str = Field(min_length=1, max_length=64)
    email: EmailStr


class GuestBookingsResponse(BaseModel):
    bookings: list[GuestBookingRead]


class GuestCancelResponse(BaseModel):
    booking: GuestBookingRead


class CleanupResponse(BaseModel):
    deleted: int


class GroupReconciliationRead(BaseModel):
    """One reservation group brought back to a single status."""

    group_id: str
    statuses: list[BookingStatus]
    resolved_status: BookingStatus
    updated: int
    overbooked_bookings: list[str] = Field(default_factory=list)


class ReconciliationResponse(BaseModel):
    groups: list[GroupReconciliationRead]
    updated: int
