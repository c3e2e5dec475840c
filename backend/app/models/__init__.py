"""ORM models package export."""

from app.models.audit_event import AuditEvent, AuditEventType
from app.models.availability import RoomAvailabilityOverride, RoomBlockedDate
from app.models.booking import ACTIVE_BOOKING_STATUSES, Booking, BookingStatus
from app.models.room import Room
from app.models.user import User, UserRole

__all__ = [
    "ACTIVE_BOOKING_STATUSES",
    "AuditEvent",
    "AuditEventType",
    "Booking",
    "BookingStatus",
    "Room",
    "RoomAvailabilityOverride",
    "RoomBlockedDate",
    "User",
    "UserRole",
]
