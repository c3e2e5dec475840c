"""Service layer exports."""
from app.services import (
    audit_service,
    auth_service,
    availability_service,
    booking_service,
    room_service,
    user_service,
)

__all__ = [
    "audit_service",
    "auth_service",
    "availability_service",
    "booking_service",
    "room_service",
    "user_service",
]
