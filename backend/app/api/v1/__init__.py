"""Versioned API router."""

from fastapi import APIRouter

from . import audit, auth, availability, bookings, health, rooms

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
router.include_router(
    availability.router, prefix="/availability", tags=["availability"]
)
router.include_router(audit.router, prefix="/audit-events", tags=["audit"])

__all__ = ["router"]
