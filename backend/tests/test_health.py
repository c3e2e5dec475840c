"""Health endpoint and application middleware tests."""
from __future__ import annotations

import uuid
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from app.api import deps
from app.main import app

pytestmark = pytest.mark.asyncio


async def test_healthcheck_returns_ok(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["database"] == "ok"
    assert payload["service"] == "Garden Boutique Hotel API"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "max-age" in response.headers["Strict-Transport-Security"]
    assert response.headers["X-Request-ID"]


async def test_request_id_is_echoed(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    request_id = uuid.uuid4().hex
    response = await client.get("/api/v1/health", headers={"X-Request-ID": request_id})
    assert response.headers["X-Request-ID"] == request_id


async def test_malformed_request_id_is_replaced(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "not a uuid"})
    assert response.headers["X-Request-ID"] != "not a uuid"
    assert uuid.UUID(response.headers["X-Request-ID"])


async def test_unhandled_errors_return_generic_500(reset_database: None) -> None:
    async def _broken_session():
        raise RuntimeError("could not connect to postgres://hotel:s3cret@db/hotel")
        yield  # pragma: no cover

    app.dependency_overrides[deps.get_db_session] = _broken_session
    try:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/api/v1/rooms")
    finally:
        app.dependency_overrides.pop(deps.get_db_session, None)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert "Traceback" not in response.text
    assert "s3cret" not in response.text
