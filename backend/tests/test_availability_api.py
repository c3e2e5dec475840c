"""Admin availability calendar API tests."""
from __future__ import annotations

from typing import Any

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_calendar_requires_admin(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.get("/api/v1/availability/calendar", params={"date": "2030-06-01"})
    assert response.status_code == 401


async def test_override_round_trip_through_calendar(
    app_context: dict[str, Any], admin_headers: dict[str, str]
) -> None:
    client: AsyncClient = app_context["client"]
    room_id = str(app_context["double_room_id"])

    response = await client.put(
        "/api/v1/availability/overrides",
        json={"room_id": room_id, "date": "2030-06-02", "available_units": 1},
        headers=admin_headers,
    )
    assert response.status_code == 200, response.text
    assert response.json()["available_units"] == 1

    too_many = await client.put(
        "/api/v1/availability/overrides",
        json={"room_id": room_id, "date": "2030-06-02", "available_units": 9},
        headers=admin_headers,
    )
    assert too_many.status_code == 400

    calendar = await client.get(
        "/api/v1/availability/calendar",
        params={"start_date": "2030-06-01", "end_date": "2030-06-03"},
        headers=admin_headers,
    )
    assert calendar.status_code == 200
    days = calendar.json()["days"]
    assert [day["date"] for day in days] == ["2030-06-01", "2030-06-02", "2030-06-03"]
    second = next(item for item in days[1]["availability"] if item["room_id"] == room_id)
    assert second["available_units"] == 1
    assert second["has_override"] is True
    first = next(item for item in days[0]["availability"] if item["room_id"] == room_id)
    assert first["actually_available"] == 2

    search = await client.get(
        "/api/v1/rooms/availability-with-quantity",
        params={"check_in": "2030-06-01", "check_out": "2030-06-03"},
    )
    quantities = {room["slug"]: room["max_available_quantity"] for room in search.json()["rooms"]}
    assert quantities["deluxe-double-room"] == 1

    removed = await client.delete(
        "/api/v1/availability/overrides",
        params={"room_id": room_id, "date": "2030-06-02"},
        headers=admin_headers,
    )
    assert removed.status_code == 204
    missing = await client.delete(
        "/api/v1/availability/overrides",
        params={"room_id": room_id, "date": "2030-06-02"},
        headers=admin_headers,
    )
    assert missing.status_code == 404


async def test_single_day_calendar_and_validation(
    app_context: dict[str, Any], admin_headers: dict[str, str]
) -> None:
    client: AsyncClient = app_context["client"]
    single = await client.get(
        "/api/v1/availability/calendar", params={"date": "2030-06-01"}, headers=admin_headers
    )
    assert single.status_code == 200
    body = single.json()
    assert len(body["days"]) == 1
    assert len(body["days"][0]["availability"]) == 2

    missing = await client.get("/api/v1/availability/calendar", headers=admin_headers)
    assert missing.status_code == 400

    inverted = await client.get(
        "/api/v1/availability/calendar",
        params={"start_date": "2030-06-03", "end_date": "2030-06-01"},
        headers=admin_headers,
    )
    assert inverted.status_code == 400
