"""Room availability engine.

Capacity is piecewise per night: a room has ``total_units`` interchangeable
units, an admin may override that count for a single night, and may withhold
units for a night (blocked dates). Active bookings (PENDING or CONFIRMED)
occupy every night ``check_in <= night < check_out``.

All range operations load the overrides, blocks and overlapping bookings for
the range in a few queries and then fold the result night by night through
:meth:`CapacitySnapshot.night`, which is the single source of truth for the
remaining capacity of one night.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConstraintViolation, RoomNotFound, ValidationError
from app.models.availability import RoomAvailabilityOverride, RoomBlockedDate
from app.models.booking import ACTIVE_BOOKING_STATUSES, Booking
from app.models.room import Room

logger = logging.getLogger(__name__)

MAX_CALENDAR_DAYS = 366


def to_utc_date(value: date | datetime | str) -> date:
    """Return the UTC calendar date that identifies a night."""
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            value = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValidationError(f"Invalid date: {value!r}") from exc
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(UTC).date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"Invalid date: {value!r}")


def validate_stay(
    check_in: date | datetime | str, check_out: date | datetime | str
) -> tuple[date, date]:
    """Normalise a stay and reject empty or inverted ranges."""
    start = to_utc_date(check_in)
    end = to_utc_date(check_out)
    if end <= start:
        raise ValidationError("Check-out date must be after check-in date")
    return start, end


def iter_nights(check_in: date, check_out: date) -> Iterator[date]:
    """Yield each night of ``[check_in, check_out)``."""
    current = check_in
    while current < check_out:
        yield current
        current += timedelta(days=1)


@dataclass(frozen=True)
class NightlyCapacity:
    """Capacity breakdown for one room on one night."""

    night: date
    total_units: int
    available_units: int
    booked_units: int
    blocked_units: int
    has_override: bool

    @property
    def occupied_units(self) -> int:
        return self.booked_units + self.blocked_units

    @property
    def remaining(self) -> int:
        return max(0, self.available_units - self.occupied_units)


@dataclass
class CapacitySnapshot:
    """Overrides, blocks and active stays of one room over a date window."""

    room_id: uuid.UUID
    total_units: int
    overrides: dict[date, int] = field(default_factory=dict)
    blocks: dict[date, int] = field(default_factory=dict)
    stays: list[tuple[date, date]] = field(default_factory=list)

    def night(self, night: date) -> NightlyCapacity:
        override = self.overrides.get(night)
        booked = sum(1 for start, end in self.stays if start <= night < end)
        return NightlyCapacity(
            night=night,
            total_units=self.total_units,
            available_units=override if override is not None else self.total_units,
            booked_units=booked,
            blocked_units=self.blocks.get(night, 0),
            has_override=override is not None,
        )

    def nights(self, check_in: date, check_out: date) -> list[NightlyCapacity]:
        return [self.night(night) for night in iter_nights(check_in, check_out)]

    def is_available(self, check_in: date, check_out: date) -> bool:
        return all(item.remaining > 0 for item in self.nights(check_in, check_out))

    def max_quantity(self, check_in: date, check_out: date) -> int:
        return min(
            (item.remaining for item in self.nights(check_in, check_out)), default=0
        )


async def load_capacity_snapshots(
    session: AsyncSession,
    rooms: Sequence[Room],
    start: date,
    end: date,
    *,
    exclude_booking_id: uuid.UUID | None = None,
) -> dict[uuid.UUID, CapacitySnapshot]:
    """Batch-load capacity inputs for ``rooms`` over ``[start, end)``."""
    snapshots = {
        room.id: CapacitySnapshot(room_id=room.id, total_units=room.total_units)
        for room in rooms
    }
    if not snapshots or end <= start:
        return snapshots
    room_ids = list(snapshots)

    override_rows = await session.execute(
        select(
            RoomAvailabilityOverride.room_id,
            RoomAvailabilityOverride.date,
            RoomAvailabilityOverride.available_units,
        ).where(
            RoomAvailabilityOverride.room_id.in_(room_ids),
            RoomAvailabilityOverride.date >= start,
            RoomAvailabilityOverride.date < end,
        )
    )
    for room_id, night, units in override_rows.all():
        snapshots[room_id].overrides[night] = units

    block_rows = await session.execute(
        select(
            RoomBlockedDate.room_id,
            RoomBlockedDate.date,
            RoomBlockedDate.units_blocked,
        ).where(
            RoomBlockedDate.room_id.in_(room_ids),
            RoomBlockedDate.date >= start,
            RoomBlockedDate.date < end,
        )
    )
    for room_id, night, units in block_rows.all():
        snapshots[room_id].blocks[night] = units

    booking_stmt = select(
        Booking.room_id, Booking.check_in_date, Booking.check_out_date
    ).where(
        Booking.room_id.in_(room_ids),
        Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        Booking.check_in_date < end,
        Booking.check_out_date > start,
    )
    if exclude_booking_id is not None:
        booking_stmt = booking_stmt.where(Booking.id != exclude_booking_id)
    for room_id, check_in, check_out in (await session.execute(booking_stmt)).all():
        snapshots[room_id].stays.append((check_in, check_out))

    return snapshots


async def load_capacity_snapshot(
    session: AsyncSession,
    room: Room,
    start: date,
    end: date,
    *,
    exclude_booking_id: uuid.UUID | None = None,
) -> CapacitySnapshot:
    snapshots = await load_capacity_snapshots(
        session, [room], start, end, exclude_booking_id=exclude_booking_id
    )
    return snapshots[room.id]


async def nightly_availability(
    session: AsyncSession,
    room: Room,
    night: date | datetime | str,
    *,
    exclude_booking_id: uuid.UUID | None = None,
) -> int:
    """Return the number of free units of ``room`` on ``night`` (never negative)."""
    day = to_utc_date(night)
    snapshot = await load_capacity_snapshot(
        session,
        room,
        day,
        day + timedelta(days=1),
        exclude_booking_id=exclude_booking_id,
    )
    return snapshot.night(day).remaining


async def is_range_available(
    session: AsyncSession,
    room: Room,
    check_in: date | datetime | str,
    check_out: date | datetime | str,
    *,
    exclude_booking_id: uuid.UUID | None = None,
) -> bool:
    """True when every night of the stay has at least one free unit."""
    start, end = validate_stay(check_in, check_out)
    snapshot = await load_capacity_snapshot(
        session, room, start, end, exclude_booking_id=exclude_booking_id
    )
    return snapshot.is_available(start, end)


async def max_available_quantity(
    session: AsyncSession,
    room: Room,
    check_in: date | datetime | str,
    check_out: date | datetime | str,
) -> int:
    """Largest number of units bookable together for the whole stay."""
    start, end = validate_stay(check_in, check_out)
    snapshot = await load_capacity_snapshot(session, room, start, end)
    return snapshot.max_quantity(start, end)


async def _active_rooms(session: AsyncSession) -> list[Room]:
    result = await session.execute(
        select(Room)
        .where(Room.is_active.is_(True))
        .order_by(Room.display_order, Room.name)
    )
    return list(result.scalars().all())


async def search_available_rooms(
    session: AsyncSession,
    check_in: date | datetime | str,
    check_out: date | datetime | str,
    *,
    guests: int = 1,
) -> list[Room]:
    """Active rooms that fit ``guests`` and have a unit free on every night."""
    start, end = validate_stay(check_in, check_out)
    if guests < 1:
        raise ValidationError("Number of guests must be at least 1")
    rooms = [room for room in await _active_rooms(session) if room.capacity >= guests]
    snapshots = await load_capacity_snapshots(session, rooms, start, end)
    return [room for room in rooms if snapshots[room.id].is_available(start, end)]


async def search_rooms_with_quantity(
    session: AsyncSession,
    check_in: date | datetime | str,
    check_out: date | datetime | str,
) -> list[tuple[Room, int]]:
    """Active rooms paired with their bookable quantity, zero-quantity rooms dropped."""
    start, end = validate_stay(check_in, check_out)
    rooms = await _active_rooms(session)
    snapshots = await load_capacity_snapshots(session, rooms, start, end)
    results: list[tuple[Room, int]] = []
    for room in rooms:
        quantity = snapshots[room.id].max_quantity(start, end)
        if quantity > 0:
            results.append((room, quantity))
    return results


async def get_calendar(
    session: AsyncSession,
    start_date: date | datetime | str,
    end_date: date | datetime | str | None = None,
) -> list[dict[str, object]]:
    """Per-day availability of every active room for an inclusive date range."""
    start = to_utc_date(start_date)
    end = to_utc_date(end_date) if end_date is not None else start
    if end < start:
        raise ValidationError("end_date must be on or after start_date")
    if (end - start).days >= MAX_CALENDAR_DAYS:
        raise ValidationError(f"Calendar range is limited to {MAX_CALENDAR_DAYS} days")

    rooms = await _active_rooms(session)
    window_end = end + timedelta(days=1)
    snapshots = await load_capacity_snapshots(session, rooms, start, window_end)

    days: list[dict[str, object]] = []
    for night in iter_nights(start, window_end):
        entries = []
        for room in rooms:
            capacity = snapshots[room.id].night(night)
            entries.append(
                {
                    "room_id": room.id,
                    "room_name": room.name,
                    "room_slug": room.slug,
                    "total_units": capacity.total_units,
                    "available_units": capacity.available_units,
                    "booked_units": capacity.booked_units,
                    "blocked_units": capacity.blocked_units,
                    "occupied_units": capacity.occupied_units,
                    "actually_available": capacity.remaining,
                    "has_override": capacity.has_override,
                }
            )
        days.append({"date": night, "availability": entries})
    return days


async def _get_room(session: AsyncSession, room_id: uuid.UUID) -> Room:
    room = await session.get(Room, room_id)
    if room is None:
        raise RoomNotFound()
    return room


async def _commit(session: AsyncSession) -> None:
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConstraintViolation("A record for this room and date already exists") from exc


async def get_override(
    session: AsyncSession, *, room_id: uuid.UUID, night: date
) -> RoomAvailabilityOverride | None:
    result = await session.execute(
        select(RoomAvailabilityOverride).where(
            RoomAvailabilityOverride.room_id == room_id,
            RoomAvailabilityOverride.date == night,
        )
    )
    return result.scalar_one_or_none()


async def set_override(
    session: AsyncSession,
    *,
    room_id: uuid.UUID,
    night: date | datetime | str,
    available_units: int,
) -> RoomAvailabilityOverride:
    """Create or replace the unit count of a room for one night."""
    room = await _get_room(session, room_id)
    day = to_utc_date(night)
    if available_units < 0 or available_units > room.total_units:
        raise ValidationError(
            f"Available units must be between 0 and {room.total_units}"
        )

    override = await get_override(session, room_id=room_id, night=day)
    if override is None:
        override = RoomAvailabilityOverride(
            room_id=room_id, date=day, available_units=available_units
        )
        session.add(override)
    else:
        override.available_units = available_units
    await _commit(session)
    await session.refresh(override)
    logger.info(
        "Availability override for room %s on %s set to %s",
        room_id,
        day.isoformat(),
        available_units,
    )
    return override


async def delete_override(
    session: AsyncSession, *, room_id: uuid.UUID, night: date | datetime | str
) -> bool:
    """Remove an override; returns False when none existed."""
    override = await get_override(session, room_id=room_id, night=to_utc_date(night))
    if override is None:
        return False
    await session.delete(override)
    await session.commit()
    return True


async def list_blocked_dates(
    session: AsyncSession, *, room_id: uuid.UUID
) -> list[RoomBlockedDate]:
    await _get_room(session, room_id)
    result = await session.execute(
        select(RoomBlockedDate)
        .where(RoomBlockedDate.room_id == room_id)
        .order_by(RoomBlockedDate.date)
    )
    return list(result.scalars().all())


async def block_date(
    session: AsyncSession,
    *,
    room_id: uuid.UUID,
    night: date | datetime | str,
    units_blocked: int,
    reason: str | None = None,
) -> RoomBlockedDate:
    """Create or replace the withheld unit count of a room for one night."""
    room = await _get_room(session, room_id)
    day = to_utc_date(night)
    if units_blocked < 1 or units_blocked > room.total_units:
        raise ValidationError(
            f"Blocked units must be between 1 and {room.total_units}"
        )

    result = await session.execute(
        select(RoomBlockedDate).where(
            RoomBlockedDate.room_id == room_id, RoomBlockedDate.date == day
        )
    )
    blocked = result.scalar_one_or_none()
    if blocked is None:
        blocked = RoomBlockedDate(
            room_id=room_id, date=day, units_blocked=units_blocked, reason=reason
        )
        session.add(blocked)
    else:
        blocked.units_blocked = units_blocked
        blocked.reason = reason
    await _commit(session)
    await session.refresh(blocked)
    logger.info("Blocked %s unit(s) of room %s on %s", units_blocked, room_id, day)
    return blocked


async def unblock_date(
    session: AsyncSession, *, room_id: uuid.UUID, blocked_date_id: uuid.UUID
) -> bool:
    """Delete a blocked date by id; returns False when it does not exist."""
    blocked = await session.get(RoomBlockedDate, blocked_date_id)
    if blocked is None or blocked.room_id != room_id:
        return False
    await session.delete(blocked)
    await session.commit()
    return True
