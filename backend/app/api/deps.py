"""Common API dependencies."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from limits import RateLimitItem, parse
from limits.aio.storage import Storage
from limits.aio.strategies import MovingWindowRateLimiter
from limits.storage import storage_from_string
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.security import decode_access_token
from app.db.session import get_session
from app.models.user import User, UserRole
from app.services import user_service

settings = get_settings()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_v1_prefix}/auth/token")
optional_oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.api_v1_prefix}/auth/token", auto_error=False
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


async def _user_from_token(session: AsyncSession, token: str) -> User | None:
    try:
        payload = decode_access_token(token)
    except JWTError:
        return None
    subject = payload.get("sub")
    if subject is None:
        return None
    try:
        user_id = uuid.UUID(subject)
    except (ValueError, TypeError):
        return None
    user = await user_service.get_user(session, user_id)
    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> User:
    """Authenticate request via bearer token."""
    user = await _user_from_token(session, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Restrict the route to back-office administrators."""
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required"
        )
    return current_user


async def get_optional_admin(
    token: Annotated[str | None, Depends(optional_oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> User | None:
    """Admin user behind the bearer token, or ``None`` for public callers."""
    if not token:
        return None
    user = await _user_from_token(session, token)
    if user is None or user.role != UserRole.ADMIN:
        return None
    return user


def _limiter_storage() -> Storage:
    if settings.redis_url:
        return storage_from_string(f"async+{settings.redis_url}", implementation="redispy")
    return storage_from_string("async+memory://")


_limiter = MovingWindowRateLimiter(_limiter_storage())


def _parse_rate(value: str, fallback: str) -> RateLimitItem:
    try:
        return parse(value)
    except ValueError:
        return parse(fallback)


def rate_limit(value: str, *, fallback: str = "100/minute"):
    """Dependency enforcing a ``"20/minute"`` style rule per client address."""
    item = _parse_rate(value, fallback)

    async def _dependency(request: Request) -> None:
        if not get_settings().rate_limit_enabled:
            return None
        client = request.client.host if request.client else "anonymous"
        if not await _limiter.hit(item, request.url.path, client):
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests, please try again later",
            )

    return Depends(_dependency)
