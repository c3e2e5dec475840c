"""Admin availability calendar and per-night overrides."""

from __future__ import annotations

import uuid
import datetime as dt
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.errors import ConstraintViolation, RoomNotFound, ValidationError
from app.models.user import User
from app.schemas.availability import CalendarResponse, OverrideRead, OverrideUpsert
from app.services import availability_service

router = APIRouter()


@router.get(
    "/calendar",
    response_model=CalendarResponse,
    summary="Per-room availability for a date or date range",
)
async def get_calendar(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _admin: Annotated[User, Depends(deps.get_current_admin)],
    date: dt.date | None = None,
    start_date: dt.date | None = None,
    end_date: dt.date | None = None,
) -> CalendarResponse:
    """Use ``date`` for a single day or ``start_date``/``end_date`` (inclusive)."""
    start = date or start_date
    if start is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either date or start_date is required",
        )
    end = start if date is not None else (end_date or start)
    try:
        days = await availability_service.get_calendar(session, start, end)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message
        ) from exc
    return CalendarResponse.model_validate(
        {"start_date": start, "end_date": end, "days": days}
    )


@router.put(
    "/overrides",
    response_model=OverrideRead,
    summary="Set the unit count of a room for one night",
)
async def set_override(
    payload: OverrideUpsert,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _admin: Annotated[User, Depends(deps.get_current_admin)],
) -> OverrideRead:
    try:
        override = await availability_service.set_override(
            session,
            room_id=payload.room_id,
            night=payload.date,
            available_units=payload.available_units,
        )
    except RoomNotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=exc.message
        ) from exc
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message
        ) from exc
    except ConstraintViolation as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=exc.message
        ) from exc
    return OverrideRead.model_validate(override)


@router.delete(
    "/overrides",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a per-night override",
)
async def delete_override(
    room_id: uuid.UUID,
    date: dt.date,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _admin: Annotated[User, Depends(deps.get_current_admin)],
) -> Response:
    removed = await availability_service.delete_override(
        session, room_id=room_id, night=date
    )
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Override not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
