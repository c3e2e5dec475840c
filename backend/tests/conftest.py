"""Test fixtures for the hotel booking backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator
from datetime import date
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ["RATE_LIMIT_ENABLED"] = "false"

from app.core.config import get_settings
from app.core.security import get_password_hash
from app.db.base import Base
from app.db.session import dispose_engine, get_sessionmaker
from app.main import app
from app.models import Booking, BookingStatus, Room, User, UserRole

ADMIN_EMAIL = "manager@gardenboutiquehotel.com"
ADMIN_PASSWORD = "Passw0rd!"


def build_room(**overrides: Any) -> Room:
    """Return an unsaved room with sensible defaults."""
    data: dict[str, Any] = {
        "name": "Deluxe Double Room",
        "slug": "deluxe-double-room",
        "description": "Balcony with garden views",
        "capacity": 2,
        "bed_type": "1 Large Double Bed",
        "size": 35,
        "price_per_night": Decimal("55.00"),
        "amenities": ["Free WiFi"],
        "images": [],
        "is_active": True,
        "display_order": 1,
        "total_units": 2,
    }
    data.update(overrides)
    return Room(**data)


def build_booking(
    room: Room,
    check_in: date,
    check_out: date,
    *,
    status: BookingStatus = BookingStatus.PENDING,
    number: str = "BK1",
    **overrides: Any,
) -> Booking:
    """Return an unsaved booking of one unit of ``room``."""
    nights = (check_out - check_in).days
    data: dict[str, Any] = {
        "booking_number": number,
        "room_id": room.id,
        "check_in_date": check_in,
        "check_out_date": check_out,
        "number_of_nights": nights,
        "number_of_guests": 1,
        "guest_name": "Ada Guest",
        "guest_email": "ada@example.com",
        "guest_phone": "+15550001",
        "price_per_night": room.price_per_night,
        "total_price": room.price_per_night * nights,
        "status": status,
        "status_history": [],
    }
    data.update(overrides)
    return Booking(**data)


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def sessionmaker(
    reset_database: None, db_url: str
) -> async_sessionmaker[AsyncSession]:
    return get_sessionmaker(db_url)


@pytest_asyncio.fixture()
async def app_context(
    sessionmaker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[dict[str, Any]]:
    """Yield an async client plus a seeded admin and two rooms."""
    async with sessionmaker() as session:
        admin = User(
            email=ADMIN_EMAIL,
            name="Hotel Manager",
            hashed_password=get_password_hash(ADMIN_PASSWORD),
            role=UserRole.ADMIN,
            is_active=True,
        )
        double = build_room(total_units=2)
        triple = build_room(
            name="Deluxe Triple Room",
            slug="deluxe-triple-room",
            capacity=3,
            price_per_night=Decimal("60.00"),
            display_order=2,
            total_units=1,
        )
        session.add_all([admin, double, triple])
        await session.commit()

        context: dict[str, Any] = {
            "admin_email": ADMIN_EMAIL,
            "admin_password": ADMIN_PASSWORD,
            "double_room_id": double.id,
            "triple_room_id": triple.id,
        }

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context


async def authenticate(client: AsyncClient, email: str, password: str) -> dict[str, str]:
    """Log in through the token endpoint and return auth headers."""
    response = await client.post(
        "/api/v1/auth/token",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest_asyncio.fixture()
async def admin_headers(app_context: dict[str, Any]) -> dict[str, str]:
    return await authenticate(
        app_context["client"], app_context["admin_email"], app_context["admin_password"]
    )
