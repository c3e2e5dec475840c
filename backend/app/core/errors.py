"""Domain errors raised by the availability and booking services."""

from __future__ import annotations


class HotelError(Exception):
    """Base class for expected, caller-facing failures."""

    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(HotelError):
    """Malformed input, rejected before any transaction starts."""

    default_message = "Invalid request"


class RoomNotFound(HotelError):
    default_message = "Room not found"


class RoomNotAvailable(HotelError):
    default_message = "Room not available for selected dates"


class NotFoundOrUnauthorized(HotelError):
    """Raised for both unknown booking numbers and e-mail mismatches."""

    default_message = (
        "No booking found with that reference number and email address."
    )


class InvalidStatusTransition(HotelError):
    default_message = "Invalid booking status transition"


class ConstraintViolation(HotelError):
    """A store-level uniqueness or foreign-key constraint rejected a write."""

    default_message = "Request conflicts with existing data"


__all__ = [
    "ConstraintViolation",
    "HotelError",
    "InvalidStatusTransition",
    "NotFoundOrUnauthorized",
    "RoomNotAvailable",
    "RoomNotFound",
    "ValidationError",
]
