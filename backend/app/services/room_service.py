"""Room catalogue management."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConstraintViolation
from app.models.room import Room

logger = logging.getLogger(__name__)


async def list_rooms(
    session: AsyncSession, *, active_only: bool = False
) -> Sequence[Room]:
    stmt = select(Room).order_by(Room.display_order, Room.name)
    if active_only:
        stmt = stmt.where(Room.is_active.is_(True))
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_room(session: AsyncSession, room_id: uuid.UUID) -> Room | None:
    return await session.get(Room, room_id)


async def get_room_by_slug(session: AsyncSession, slug: str) -> Room | None:
    result = await session.execute(select(Room).where(Room.slug == slug))
    return result.scalar_one_or_none()


async def create_room(session: AsyncSession, **fields: Any) -> Room:
    """Persist a new room type."""
    room = Room(**fields)
    session.add(room)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConstraintViolation("A room with this slug already exists") from exc
    await session.refresh(room)
    return room


async def update_room(session: AsyncSession, *, room: Room, **fields: Any) -> Room:
    """Update mutable room fields.

    Existing bookings keep their own price snapshot, so changing
    ``price_per_night`` only affects bookings created afterwards.
    """
    for key, value in fields.items():
        setattr(room, key, value)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConstraintViolation("A room with this slug already exists") from exc
    await session.refresh(room)
    return room


async def delete_room(session: AsyncSession, *, room: Room) -> None:
    """Delete a room; rooms referenced by bookings cannot be removed."""
    room_id = room.id
    await session.delete(room)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        logger.info("Refused to delete room %s with existing bookings", room_id)
        raise ConstraintViolation(
            "Cannot delete room with existing bookings. "
            "Cancel or remove associated bookings first."
        ) from exc
