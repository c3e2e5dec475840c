"""Audit trail for admin actions on rooms and bookings."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit_event import AuditEvent, AuditEventType
from app.models.booking import Booking, BookingStatus
from app.models.user import User


async def record_event(
    session: AsyncSession,
    event_type: AuditEventType,
    *,
    user_id: uuid.UUID | None = None,
    room_id: uuid.UUID | None = None,
    booking_number: str | None = None,
    description: str | None = None,
    details: dict[str, Any] | None = None,
    ip_address: str | None = None,
) -> AuditEvent:
    """Persist one audit row and commit it."""
    event = AuditEvent(
        event_type=event_type,
        user_id=user_id,
        room_id=room_id,
        booking_number=booking_number,
        description=description,
        details=details,
        ip_address=ip_address,
    )
    session.add(event)
    await session.commit()
    await session.refresh(event)
    return event


async def record_login(
    session: AsyncSession, *, user: User, ip_address: str | None
) -> AuditEvent:
    return await record_event(
        session,
        AuditEventType.ADMIN_LOGIN,
        user_id=user.id,
        description=f"{user.email} signed in",
        ip_address=ip_address,
    )


async def record_room_deleted(
    session: AsyncSession,
    *,
    admin: User,
    room_id: uuid.UUID,
    slug: str,
    ip_address: str | None,
) -> AuditEvent:
    return await record_event(
        session,
        AuditEventType.ROOM_DELETED,
        user_id=admin.id,
        room_id=room_id,
        description=f"Deleted room {slug}",
        ip_address=ip_address,
    )


async def record_status_change(
    session: AsyncSession,
    *,
    admin: User,
    booking: Booking,
    previous: BookingStatus,
    ip_address: str | None,
) -> AuditEvent:
    """Log an admin moving ``booking`` from ``previous`` to its current status."""
    return await record_event(
        session,
        AuditEventType.BOOKING_STATUS_CHANGED,
        user_id=admin.id,
        room_id=booking.room_id,
        booking_number=booking.booking_number,
        description=f"{previous.value} -> {booking.status.value}",
        details={"from": previous.value, "to": booking.status.value},
        ip_address=ip_address,
    )


async def record_booking_deleted(
    session: AsyncSession,
    *,
    admin: User,
    room_id: uuid.UUID,
    booking_number: str,
    ip_address: str | None,
) -> AuditEvent:
    return await record_event(
        session,
        AuditEventType.BOOKING_DELETED,
        user_id=admin.id,
        room_id=room_id,
        booking_number=booking_number,
        description=f"Deleted booking {booking_number}",
        ip_address=ip_address,
    )


async def list_events(
    session: AsyncSession,
    *,
    room_id: uuid.UUID | None = None,
    booking_number: str | None = None,
    event_type: AuditEventType | None = None,
) -> Sequence[AuditEvent]:
    """Audit rows, newest first, optionally narrowed to a room or booking."""
    stmt = select(AuditEvent).order_by(AuditEvent.created_at.desc())
    if room_id is not None:
        stmt = stmt.where(AuditEvent.room_id == room_id)
    if booking_number is not None:
        stmt = stmt.where(AuditEvent.booking_number == booking_number)
    if event_type is not None:
        stmt = stmt.where(AuditEvent.event_type == event_type)
    result = await session.execute(stmt)
    return result.scalars().all()
