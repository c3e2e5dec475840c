"""Booking endpoints for guests and the back office."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.api.v1.auth import client_ip
from app.core.config import get_settings
from app.core.errors import (
    ConstraintViolation,
    InvalidStatusTransition,
    NotFoundOrUnauthorized,
    RoomNotAvailable,
    RoomNotFound,
    ValidationError,
)
from app.db.session import get_sessionmaker
from app.models.audit_event import AuditEventType
from app.models.booking import Booking, BookingStatus
from app.models.user import User
from app.schemas.booking import (
    BookingCreate,
    BookingList,
    BookingRead,
    BookingUpdate,
    CleanupResponse,
    GroupReconciliationRead,
    GuestBookingRead,
    GuestBookingsResponse,
    GuestCancelResponse,
    GuestLookupRequest,
    ReconciliationResponse,
)
from app.services import audit_service, booking_service

router = APIRouter()

_settings = get_settings()

_GUEST_RATE_DEP = deps.rate_limit(_settings.rate_limit_guest, fallback="20/minute")
_CREATE_RATE_DEP = deps.rate_limit(_settings.rate_limit_default, fallback="100/minute")


async def _get_booking_or_404(session: AsyncSession, booking_id: uuid.UUID) -> Booking:
    booking = await booking_service.get_booking(session, booking_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
        )
    return booking


@router.post(
    "",
    response_model=GuestBookingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create booking",
    dependencies=[_CREATE_RATE_DEP],
)
async def create_booking(payload: BookingCreate) -> GuestBookingRead:
    """Reserve one unit of a room; the stay is re-checked inside the transaction."""
    try:
        result = await booking_service.create_booking_with_retry(
            get_sessionmaker(), **payload.model_dump()
        )
        booking = result.unwrap()
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message
        ) from exc
    except RoomNotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=exc.message
        ) from exc
    except (RoomNotAvailable, ConstraintViolation) as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=exc.message
        ) from exc
    return GuestBookingRead.model_validate(booking)


@router.post(
    "/guest",
    response_model=GuestBookingsResponse,
    summary="Look up bookings by reference and e-mail",
    dependencies=[_GUEST_RATE_DEP],
)
async def lookup_guest_bookings(
    payload: GuestLookupRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> GuestBookingsResponse:
    try:
        bookings = await booking_service.lookup_guest_bookings(
            session, booking_number=payload.booking_number, email=payload.email
        )
    except NotFoundOrUnauthorized as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=exc.message
        ) from exc
    return GuestBookingsResponse(
        bookings=[GuestBookingRead.model_validate(item) for item in bookings]
    )


@router.post(
    "/guest/cancel",
    response_model=GuestCancelResponse,
    summary="Cancel a booking (and its reservation group) as the guest",
    dependencies=[_GUEST_RATE_DEP],
)
async def cancel_guest_booking(
    payload: GuestLookupRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> GuestCancelResponse:
    try:
        booking = await booking_service.cancel_guest_booking(
            session, booking_number=payload.booking_number, email=payload.email
        )
    except NotFoundOrUnauthorized as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=exc.message
        ) from exc
    except InvalidStatusTransition as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message
        ) from exc
    return GuestCancelResponse(booking=GuestBookingRead.model_validate(booking))


@router.get("", response_model=BookingList, summary="List bookings")
async def list_bookings(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _admin: Annotated[User, Depends(deps.get_current_admin)],
    status_filter: Annotated[BookingStatus | None, Query(alias="status")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> BookingList:
    bookings, total = await booking_service.list_bookings(
        session, status=status_filter, page=page, limit=limit
    )
    return BookingList(
        bookings=[BookingRead.model_validate(item) for item in bookings],
        total=total,
        page=page,
        limit=limit,
    )


@router.post(
    "/cleanup",
    response_model=CleanupResponse,
    summary="Delete cancelled bookings from previous months",
)
async def cleanup_cancelled_bookings(
    request: Request,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    admin: Annotated[User, Depends(deps.get_current_admin)],
) -> CleanupResponse:
    deleted = await booking_service.cleanup_cancelled_bookings(session)
    await audit_service.record_event(
        session,
        AuditEventType.BOOKINGS_CLEANED_UP,
        user_id=admin.id,
        description=f"Removed {deleted} cancelled booking(s) from previous months",
        details={"deleted": deleted},
        ip_address=client_ip(request),
    )
    return CleanupResponse(deleted=deleted)


@router.post(
    "/reconcile-groups",
    response_model=ReconciliationResponse,
    summary="Bring reservation groups back to a single status",
)
async def reconcile_groups(
    request: Request,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    admin: Annotated[User, Depends(deps.get_current_admin)],
) -> ReconciliationResponse:
    report = await booking_service.reconcile_group_statuses(session)
    groups = [
        GroupReconciliationRead(
            group_id=item.group_id,
            statuses=list(item.statuses),
            resolved_status=item.resolved_status,
            updated=item.updated,
            overbooked_bookings=list(item.overbooked),
        )
        for item in report
    ]
    updated = sum(item.updated for item in report)
    if groups:
        await audit_service.record_event(
            session,
            AuditEventType.BOOKING_GROUPS_RECONCILED,
            user_id=admin.id,
            description=f"Reconciled {len(groups)} reservation group(s)",
            details={
                "groups": [item.group_id for item in groups],
                "updated": updated,
                "overbooked": [n for item in groups for n in item.overbooked_bookings],
            },
            ip_address=client_ip(request),
        )
    return ReconciliationResponse(groups=groups, updated=updated)


@router.get("/{booking_id}", response_model=BookingRead, summary="Get booking")
async def get_booking(
    booking_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _admin: Annotated[User, Depends(deps.get_current_admin)],
) -> BookingRead:
    booking = await _get_booking_or_404(session, booking_id)
    return BookingRead.model_validate(booking)


@router.patch("/{booking_id}", response_model=BookingRead, summary="Update booking")
async def update_booking(
    booking_id: uuid.UUID,
    payload: BookingUpdate,
    request: Request,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    admin: Annotated[User, Depends(deps.get_current_admin)],
) -> BookingRead:
    booking = await _get_booking_or_404(session, booking_id)
    previous = booking.status
    try:
        booking = await booking_service.update_booking(
            session,
            booking=booking,
            status=payload.status,
            admin_notes=payload.admin_notes,
        )
    except InvalidStatusTransition as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message
        ) from exc
    if booking.status != previous:
        await audit_service.record_status_change(
            session,
            admin=admin,
            booking=booking,
            previous=previous,
            ip_address=client_ip(request),
        )
    return BookingRead.model_validate(booking)


@router.delete(
    "/{booking_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete booking"
)
async def delete_booking(
    booking_id: uuid.UUID,
    request: Request,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    admin: Annotated[User, Depends(deps.get_current_admin)],
) -> Response:
    booking = await _get_booking_or_404(session, booking_id)
    room_id, booking_number = booking.room_id, booking.booking_number
    await booking_service.delete_booking(session, booking=booking)
    await audit_service.record_booking_deleted(
        session,
        admin=admin,
        room_id=room_id,
        booking_number=booking_number,
        ip_address=client_ip(request),
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
