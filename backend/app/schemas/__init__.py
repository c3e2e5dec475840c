"""Schema exports."""

from app.schemas.audit import AuditEventList, AuditEventRead
from app.schemas.auth import Token, UserRead
from app.schemas.availability import (
    AvailabilitySearchResponse,
    BlockedDateList,
    BlockedDateRead,
    BlockedDateUpsert,
    CalendarDay,
    CalendarResponse,
    OverrideRead,
    OverrideUpsert,
    QuantitySearchResponse,
    RoomNightAvailability,
    RoomWithQuantity,
)
from app.schemas.booking import (
    BookingCreate,
    BookingList,
    BookingRead,
    BookingUpdate,
    CleanupResponse,
    GroupReconciliationRead,
    GuestBookingRead,
    GuestBookingsResponse,
    GuestCancelResponse,
    GuestLookupRequest,
    ReconciliationResponse,
)
from app.schemas.room import RoomCreate, RoomRead, RoomSummary, RoomUpdate

__all__ = [
    "AuditEventList",
    "AuditEventRead",
    "AvailabilitySearchResponse",
    "BlockedDateList",
    "BlockedDateRead",
    "BlockedDateUpsert",
    "BookingCreate",
    "BookingList",
    "BookingRead",
    "BookingUpdate",
    "CalendarDay",
    "CalendarResponse",
    "CleanupResponse",
    "GroupReconciliationRead",
    "GuestBookingRead",
    "GuestBookingsResponse",
    "GuestCancelResponse",
    "GuestLookupRequest",
    "OverrideRead",
    "OverrideUpsert",
    "QuantitySearchResponse",
    "ReconciliationResponse",
    "RoomCreate",
    "RoomNightAvailability",
    "RoomRead",
    "RoomSummary",
    "RoomUpdate",
    "RoomWithQuantity",
    "Token",
    "UserRead",
]
