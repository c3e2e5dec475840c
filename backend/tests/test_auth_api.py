"""Admin authentication tests."""
from __future__ import annotations

from typing import Any

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.core.config import get_settings
from app.core.security import get_password_hash
from app.models import AuditEvent, AuditEventType, User, UserRole
from app.services.bootstrap_service import ensure_default_admin

pytestmark = pytest.mark.asyncio


async def test_login_and_me(app_context: dict[str, Any], sessionmaker) -> None:
    client: AsyncClient = app_context["client"]
    bad = await client.post(
        "/api/v1/auth/token",
        data={"username": app_context["admin_email"], "password": "wrong"},
    )
    assert bad.status_code == 401

    good = await client.post(
        "/api/v1/auth/token",
        data={"username": app_context["admin_email"], "password": app_context["admin_password"]},
    )
    assert good.status_code == 200
    token = good.json()["access_token"]

    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == app_context["admin_email"]

    garbage = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer nope"})
    assert garbage.status_code == 401

    async with sessionmaker() as session:
        events = (await session.execute(select(AuditEvent.event_type))).scalars().all()
    assert events == [AuditEventType.ADMIN_LOGIN]


async def test_staff_cannot_use_admin_routes(app_context: dict[str, Any], sessionmaker) -> None:
    async with sessionmaker() as session:
        session.add(
            User(
                email="desk@gardenboutiquehotel.com",
                name="Front Desk",
                hashed_password=get_password_hash("Desk-pass1"),
                role=UserRole.STAFF,
            )
        )
        await session.commit()

    client: AsyncClient = app_context["client"]
    token = await client.post(
        "/api/v1/auth/token",
        data={"username": "desk@gardenboutiquehotel.com", "password": "Desk-pass1"},
    )
    headers = {"Authorization": f"Bearer {token.json()['access_token']}"}
    response = await client.get("/api/v1/bookings", headers=headers)
    assert response.status_code == 403


async def test_default_admin_bootstrap(reset_database: None, sessionmaker, monkeypatch) -> None:
    monkeypatch.setenv("ADMIN_EMAIL", "Owner@Example.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "Sup3r-secret")
    get_settings.cache_clear()
    try:
        await ensure_default_admin()
        await ensure_default_admin()
    finally:
        monkeypatch.delenv("ADMIN_EMAIL")
        monkeypatch.delenv("ADMIN_PASSWORD")
        get_settings.cache_clear()

    async with sessionmaker() as session:
        users = (await session.execute(select(User))).scalars().all()
    assert [(user.email, user.role) for user in users] == [("owner@example.com", UserRole.ADMIN)]
