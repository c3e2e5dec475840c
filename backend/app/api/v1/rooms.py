"""Room catalogue, availability search and blocked-date endpoints."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.api.v1.auth import client_ip
from app.core.errors import ConstraintViolation, RoomNotFound, ValidationError
from app.models.room import Room
from app.models.user import User
from app.schemas.availability import (
    AvailabilitySearchResponse,
    BlockedDateList,
    BlockedDateRead,
    BlockedDateUpsert,
    QuantitySearchResponse,
    RoomWithQuantity,
)
from app.schemas.room import RoomCreate, RoomRead, RoomUpdate
from app.services import audit_service, availability_service, room_service

router = APIRouter()


async def _get_room_or_404(session: AsyncSession, room_id: uuid.UUID) -> Room:
    room = await room_service.get_room(session, room_id)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return room


@router.get("", response_model=list[RoomRead], summary="List rooms")
async def list_rooms(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    admin: Annotated[User | None, Depends(deps.get_optional_admin)],
    active_only: bool = True,
) -> list[RoomRead]:
    """Active rooms; admins may pass ``active_only=false`` to include inactive ones."""
    rooms = await room_service.list_rooms(
        session, active_only=active_only or admin is None
    )
    return [RoomRead.model_validate(room) for room in rooms]


@router.get(
    "/check-availability",
    response_model=AvailabilitySearchResponse,
    summary="Rooms available for a stay",
)
async def check_availability(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    check_in: date,
    check_out: date,
    guests: Annotated[int, Query(ge=1)] = 1,
) -> AvailabilitySearchResponse:
    """Active rooms with a free unit on every night of ``[check_in, check_out)``."""
    try:
        rooms = await availability_service.search_available_rooms(
            session, check_in, check_out, guests=guests
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message
        ) from exc
    return AvailabilitySearchResponse(
        rooms=[RoomRead.model_validate(room) for room in rooms],
        check_in=check_in,
        check_out=check_out,
        guests=guests,
    )


@router.get(
    "/availability-with-quantity",
    response_model=QuantitySearchResponse,
    summary="Rooms with bookable quantity for a stay",
)
async def availability_with_quantity(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    check_in: date,
    check_out: date,
) -> QuantitySearchResponse:
    try:
        results = await availability_service.search_rooms_with_quantity(
            session, check_in, check_out
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message
        ) from exc
    rooms = [
        RoomWithQuantity(
            **RoomRead.model_validate(room).model_dump(),
            max_available_quantity=quantity,
        )
        for room, quantity in results
    ]
    return QuantitySearchResponse(rooms=rooms, check_in=check_in, check_out=check_out)


@router.get("/slug/{slug}", response_model=RoomRead, summary="Get room by slug")
async def get_room_by_slug(
    slug: str,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> RoomRead:
    room = await room_service.get_room_by_slug(session, slug)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return RoomRead.model_validate(room)


@router.get("/{room_id}", response_model=RoomRead, summary="Get room")
async def get_room(
    room_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> RoomRead:
    room = await _get_room_or_404(session, room_id)
    return RoomRead.model_validate(room)


@router.post(
    "",
    response_model=RoomRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create room",
)
async def create_room(
    payload: RoomCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _admin: Annotated[User, Depends(deps.get_current_admin)],
) -> RoomRead:
    try:
        room = await room_service.create_room(session, **payload.model_dump())
    except ConstraintViolation as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc
    return RoomRead.model_validate(room)


@router.patch("/{room_id}", response_model=RoomRead, summary="Update room")
async def update_room(
    room_id: uuid.UUID,
    payload: RoomUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _admin: Annotated[User, Depends(deps.get_current_admin)],
) -> RoomRead:
    room = await _get_room_or_404(session, room_id)
    try:
        room = await room_service.update_room(
            session, room=room, **payload.model_dump(exclude_unset=True)
        )
    except ConstraintViolation as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc
    return RoomRead.model_validate(room)


@router.delete(
    "/{room_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete room"
)
async def delete_room(
    room_id: uuid.UUID,
    request: Request,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    admin: Annotated[User, Depends(deps.get_current_admin)],
) -> Response:
    room = await _get_room_or_404(session, room_id)
    slug = room.slug
    try:
        await room_service.delete_room(session, room=room)
    except ConstraintViolation as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc
    await audit_service.record_room_deleted(
        session, admin=admin, room_id=room_id, slug=slug, ip_address=client_ip(request)
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{room_id}/blocked-dates",
    response_model=BlockedDateList,
    summary="List blocked dates for a room",
)
async def list_blocked_dates(
    room_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _admin: Annotated[User, Depends(deps.get_current_admin)],
) -> BlockedDateList:
    try:
        blocked = await availability_service.list_blocked_dates(session, room_id=room_id)
    except RoomNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    return BlockedDateList(
        blocked_dates=[BlockedDateRead.model_validate(item) for item in blocked]
    )


@router.put(
    "/{room_id}/blocked-dates",
    response_model=BlockedDateRead,
    summary="Block units of a room for a date",
)
async def block_date(
    room_id: uuid.UUID,
    payload: BlockedDateUpsert,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _admin: Annotated[User, Depends(deps.get_current_admin)],
) -> BlockedDateRead:
    try:
        blocked = await availability_service.block_date(
            session,
            room_id=room_id,
            night=payload.date,
            units_blocked=payload.units_blocked,
            reason=payload.reason,
        )
    except RoomNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except ConstraintViolation as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc
    return BlockedDateRead.model_validate(blocked)


@router.delete(
    "/{room_id}/blocked-dates",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a blocked date",
)
async def unblock_date(
    room_id: uuid.UUID,
    blocked_date_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _admin: Annotated[User, Depends(deps.get_current_admin)],
) -> Response:
    removed = await availability_service.unblock_date(
        session, room_id=room_id, blocked_date_id=blocked_date_id
    )
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Blocked date not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
