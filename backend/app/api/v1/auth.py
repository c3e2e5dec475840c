"""Authentication endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.config import get_settings
from app.models.user import User
from app.schemas.auth import Token, UserRead
from app.services import audit_service
from app.services.auth_service import authenticate_user, create_access_token_for_user

router = APIRouter()

_settings = get_settings()

_LOGIN_RATE_DEP = deps.rate_limit(_settings.rate_limit_login, fallback="10/minute")


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post(
    "/token",
    response_model=Token,
    summary="Obtain access token",
    dependencies=[_LOGIN_RATE_DEP],
)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    request: Request,
) -> Token:
    """Validate admin credentials and issue a bearer token."""
    user = await authenticate_user(
        session, email=form_data.username, password=form_data.password
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = create_access_token_for_user(user)
    await audit_service.record_login(session, user=user, ip_address=client_ip(request))
    return Token(access_token=access_token)


@router.get("/me", response_model=UserRead, summary="Current admin user")
async def read_current_user(
    current_user: Annotated[User, Depends(deps.get_current_admin)],
) -> UserRead:
    return UserRead.model_validate(current_user)
