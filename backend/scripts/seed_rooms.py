"""Seed the default room catalogue."""
from __future__ import annotations

import asyncio
from decimal import Decimal

from sqlalchemy import select

from app.db.session import get_sessionmaker
from app.models.room import Room

COMMON_AMENITIES = [
    "Air conditioning",
    "Private bathroom",
    "Walk-in shower",
    "Free WiFi",
    "Flat-screen TV",
    "Garden view",
]

DEFAULT_ROOMS = [
    {
        "name": "Deluxe Double Room",
        "slug": "deluxe-double-room",
        "description": (
            "Spacious double room featuring air conditioning, a private entrance, "
            "balcony and a private bathroom with walk-in shower."
        ),
        "short_description": "Elegant room with balcony and garden views",
        "capacity": 2,
        "bed_type": "1 Large Double Bed",
        "size": 35,
        "price_per_night": Decimal("55.00"),
        "display_order": 1,
        "total_units": 4,
    },
    {
        "name": "Double Room With Garden View",
        "slug": "double-room-garden-view",
        "description": "Quiet double room overlooking the garden.",
        "short_description": "Garden views from a private terrace",
        "capacity": 2,
        "bed_type": "1 Large Double Bed",
        "size": 35,
        "price_per_night": Decimal("53.00"),
        "display_order": 2,
        "total_units": 2,
    },
    {
        "name": "Deluxe Twin Room",
        "slug": "deluxe-twin-room",
        "description": "Twin room with two single beds and a private bathroom.",
        "short_description": "Two single beds, ideal for friends",
        "capacity": 2,
        "bed_type": "2 Single Beds",
        "size": 35,
        "price_per_night": Decimal("55.00"),
        "display_order": 3,
        "total_units": 2,
    },
    {
        "name": "Deluxe Triple Room",
        "slug": "deluxe-triple-room",
        "description": (
            "Spacious triple room featuring a private entrance, balcony with "
            "garden views and private bathroom."
        ),
        "short_description": "Perfect for families with balcony views",
        "capacity": 3,
        "bed_type": "1 Single Bed & 1 Large Double Bed",
        "size": 35,
        "price_per_night": Decimal("60.00"),
        "display_order": 4,
        "total_units": 2,
    },
]


async def seed_rooms() -> int:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        created = 0
        for data in DEFAULT_ROOMS:
            existing = await session.execute(select(Room).where(Room.slug == data["slug"]))
            if existing.scalar_one_or_none() is None:
                session.add(Room(amenities=list(COMMON_AMENITIES), images=[], **data))
                created += 1
        if created:
            await session.commit()
        print(f"Seeded {created} room(s).")
        return created


def main() -> None:
    asyncio.run(seed_rooms())


if __name__ == "__main__":
    main()
