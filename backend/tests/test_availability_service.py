"""Availability engine tests."""
from __future__ import annotations

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.core.errors import RoomNotFound, ValidationError
from app.models import BookingStatus, RoomAvailabilityOverride, RoomBlockedDate
from app.services import availability_service
from conftest import build_booking, build_room

pytestmark = pytest.mark.asyncio

JUNE_1 = date(2030, 6, 1)


async def test_checkout_night_is_not_occupied(sessionmaker) -> None:
    async with sessionmaker() as session:
        room = build_room(total_units=1)
        session.add(room)
        await session.flush()
        session.add(build_booking(room, JUNE_1, date(2030, 6, 3)))
        await session.commit()

        assert await availability_service.nightly_availability(session, room, date(2030, 6, 2)) == 0
        assert await availability_service.nightly_availability(session, room, date(2030, 6, 3)) == 1
        # a stay starting on the previous guest's check-out day fits
        assert await availability_service.is_range_available(
            session, room, date(2030, 6, 3), date(2030, 6, 5)
        )
        assert not await availability_service.is_range_available(
            session, room, date(2030, 5, 30), JUNE_1 + timedelta(days=1)
        )


async def test_only_active_bookings_consume_units(sessionmaker) -> None:
    async with sessionmaker() as session:
        room = build_room(total_units=2)
        session.add(room)
        await session.flush()
        session.add_all(
            [
                build_booking(room, JUNE_1, date(2030, 6, 2), status=BookingStatus.CONFIRMED, number="BK1"),
                build_booking(room, JUNE_1, date(2030, 6, 2), status=BookingStatus.CANCELLED, number="BK2"),
                build_booking(room, JUNE_1, date(2030, 6, 2), status=BookingStatus.NO_SHOW, number="BK3"),
            ]
        )
        await session.commit()

        assert await availability_service.nightly_availability(session, room, JUNE_1) == 1


async def test_override_replaces_base_units(sessionmaker) -> None:
    async with sessionmaker() as session:
        room = build_room(total_units=4)
        session.add(room)
        await session.flush()
        session.add(RoomAvailabilityOverride(room_id=room.id, date=JUNE_1, available_units=1))
        session.add(build_booking(room, JUNE_1, date(2030, 6, 2)))
        await session.commit()

        assert await availability_service.nightly_availability(session, room, JUNE_1) == 0
        assert await availability_service.nightly_availability(session, room, date(2030, 6, 2)) == 4


async def test_zero_override_closes_the_night(sessionmaker) -> None:
    async with sessionmaker() as session:
        room = build_room(total_units=3)
        session.add(room)
        await session.flush()
        session.add(RoomAvailabilityOverride(room_id=room.id, date=date(2030, 6, 2), available_units=0))
        await session.commit()

        assert not await availability_service.is_range_available(
            session, room, JUNE_1, date(2030, 6, 4)
        )
        assert await availability_service.max_available_quantity(
            session, room, JUNE_1, date(2030, 6, 4)
        ) == 0


async def test_blocked_units_are_subtracted(sessionmaker) -> None:
    async with sessionmaker() as session:
        room = build_room(total_units=3)
        session.add(room)
        await session.flush()
        session.add(RoomBlockedDate(room_id=room.id, date=JUNE_1, units_blocked=2))
        session.add(build_booking(room, JUNE_1, date(2030, 6, 2)))
        await session.commit()

        assert await availability_service.nightly_availability(session, room, JUNE_1) == 0


async def test_overbooked_night_never_goes_negative(sessionmaker) -> None:
    async with sessionmaker() as session:
        room = build_room(total_units=2)
        session.add(room)
        await session.flush()
        session.add_all(
            [
                build_booking(room, JUNE_1, date(2030, 6, 2), number="BK1"),
                build_booking(room, JUNE_1, date(2030, 6, 2), number="BK2"),
            ]
        )
        session.add(RoomAvailabilityOverride(room_id=room.id, date=JUNE_1, available_units=1))
        await session.commit()

        assert await availability_service.nightly_availability(session, room, JUNE_1) == 0


async def test_max_quantity_is_minimum_over_nights(sessionmaker) -> None:
    async with sessionmaker() as session:
        room = build_room(total_units=4)
        session.add(room)
        await session.flush()
        session.add(build_booking(room, date(2030, 6, 2), date(2030, 6, 3), number="BK1"))
        session.add(RoomBlockedDate(room_id=room.id, date=date(2030, 6, 3), units_blocked=2))
        await session.commit()

        assert await availability_service.max_available_quantity(
            session, room, JUNE_1, date(2030, 6, 4)
        ) == 2
        assert await availability_service.max_available_quantity(
            session, room, JUNE_1, date(2030, 6, 2)
        ) == 4


async def test_excluded_booking_is_ignored(sessionmaker) -> None:
    async with sessionmaker() as session:
        room = build_room(total_units=1)
        session.add(room)
        await session.flush()
        booking = build_booking(room, JUNE_1, date(2030, 6, 3))
        session.add(booking)
        await session.commit()

        assert not await availability_service.is_range_available(session, room, JUNE_1, date(2030, 6, 3))
        assert await availability_service.is_range_available(
            session, room, JUNE_1, date(2030, 6, 3), exclude_booking_id=booking.id
        )


async def test_empty_or_inverted_range_is_rejected(sessionmaker) -> None:
    async with sessionmaker() as session:
        room = build_room()
        session.add(room)
        await session.commit()

        with pytest.raises(ValidationError):
            await availability_service.is_range_available(session, room, JUNE_1, JUNE_1)
        with pytest.raises(ValidationError):
            await availability_service.max_available_quantity(
                session, room, date(2030, 6, 3), JUNE_1
            )


async def test_search_filters_by_guests_and_activity(sessionmaker) -> None:
    async with sessionmaker() as session:
        double = build_room(slug="double", capacity=2, total_units=1, display_order=1)
        triple = build_room(slug="triple", name="Triple", capacity=3, total_units=1, display_order=2)
        hidden = build_room(slug="hidden", name="Hidden", capacity=4, is_active=False)
        session.add_all([double, triple, hidden])
        await session.flush()
        session.add(build_booking(triple, JUNE_1, date(2030, 6, 2)))
        await session.commit()

        rooms = await availability_service.search_available_rooms(
            session, JUNE_1, date(2030, 6, 3), guests=2
        )
        assert [room.slug for room in rooms] == ["double"]

        rooms = await availability_service.search_available_rooms(
            session, date(2030, 6, 2), date(2030, 6, 3), guests=3
        )
        assert [room.slug for room in rooms] == ["triple"]

        with pytest.raises(ValidationError):
            await availability_service.search_available_rooms(
                session, JUNE_1, date(2030, 6, 2), guests=0
            )


async def test_search_with_quantity_drops_sold_out_rooms(sessionmaker) -> None:
    async with sessionmaker() as session:
        double = build_room(slug="double", total_units=3, display_order=1)
        single = build_room(slug="single", name="Single", total_units=1, display_order=2)
        session.add_all([double, single])
        await session.flush()
        session.add(build_booking(single, JUNE_1, date(2030, 6, 2), number="BK1"))
        session.add(build_booking(double, JUNE_1, date(2030, 6, 2), number="BK2"))
        await session.commit()

        results = await availability_service.search_rooms_with_quantity(
            session, JUNE_1, date(2030, 6, 3)
        )
        assert [(room.slug, quantity) for room, quantity in results] == [("double", 2)]


async def test_calendar_reports_breakdown(sessionmaker) -> None:
    async with sessionmaker() as session:
        room = build_room(total_units=3)
        session.add(room)
        await session.flush()
        session.add(RoomAvailabilityOverride(room_id=room.id, date=JUNE_1, available_units=2))
        session.add(RoomBlockedDate(room_id=room.id, date=JUNE_1, units_blocked=1))
        session.add(build_booking(room, JUNE_1, date(2030, 6, 2)))
        await session.commit()

        days = await availability_service.get_calendar(session, JUNE_1, date(2030, 6, 2))
        assert [day["date"] for day in days] == [JUNE_1, date(2030, 6, 2)]
        first = days[0]["availability"][0]
        assert first["total_units"] == 3
        assert first["available_units"] == 2
        assert first["booked_units"] == 1
        assert first["blocked_units"] == 1
        assert first["occupied_units"] == 2
        assert first["actually_available"] == 0
        assert first["has_override"] is True
        second = days[1]["availability"][0]
        assert second["actually_available"] == 3
        assert second["has_override"] is False

        with pytest.raises(ValidationError):
            await availability_service.get_calendar(session, date(2030, 6, 2), JUNE_1)


async def test_override_bounds_and_upsert(sessionmaker) -> None:
    async with sessionmaker() as session:
        room = build_room(total_units=2)
        session.add(room)
        await session.commit()

        with pytest.raises(ValidationError):
            await availability_service.set_override(
                session, room_id=room.id, night=JUNE_1, available_units=3
            )
        first = await availability_service.set_override(
            session, room_id=room.id, night=JUNE_1, available_units=1
        )
        second = await availability_service.set_override(
            session, room_id=room.id, night=JUNE_1, available_units=0
        )
        assert first.id == second.id
        assert second.available_units == 0

        assert await availability_service.delete_override(session, room_id=room.id, night=JUNE_1)
        assert not await availability_service.delete_override(session, room_id=room.id, night=JUNE_1)
        assert await availability_service.nightly_availability(session, room, JUNE_1) == 2


async def test_block_date_upsert_and_unblock(sessionmaker) -> None:
    async with sessionmaker() as session:
        room = build_room(total_units=2, price_per_night=Decimal("40.00"))
        session.add(room)
        await session.commit()

        with pytest.raises(ValidationError):
            await availability_service.block_date(
                session, room_id=room.id, night=JUNE_1, units_blocked=3
            )
        blocked = await availability_service.block_date(
            session, room_id=room.id, night=JUNE_1, units_blocked=1, reason="Painting"
        )
        again = await availability_service.block_date(
            session, room_id=room.id, night=JUNE_1, units_blocked=2, reason="Plumbing"
        )
        assert blocked.id == again.id
        listed = await availability_service.list_blocked_dates(session, room_id=room.id)
        assert [(item.units_blocked, item.reason) for item in listed] == [(2, "Plumbing")]
        assert await availability_service.nightly_availability(session, room, JUNE_1) == 0

        assert await availability_service.unblock_date(
            session, room_id=room.id, blocked_date_id=blocked.id
        )
        assert await availability_service.nightly_availability(session, room, JUNE_1) == 2


async def test_maintenance_on_unknown_room_raises(sessionmaker) -> None:
    async with sessionmaker() as session:
        with pytest.raises(RoomNotFound):
            await availability_service.set_override(
                session, room_id=uuid.uuid4(), night=JUNE_1, available_units=0
            )
