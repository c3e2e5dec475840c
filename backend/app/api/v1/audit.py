"""Back-office audit trail."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.models.audit_event import AuditEventType
from app.models.user import User
from app.schemas.audit import AuditEventList, AuditEventRead
from app.services import audit_service

router = APIRouter()


@router.get("", response_model=AuditEventList, summary="List audit events")
async def list_audit_events(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _admin: Annotated[User, Depends(deps.get_current_admin)],
    room_id: uuid.UUID | None = None,
    booking_number: str | None = None,
    event_type: AuditEventType | None = None,
) -> AuditEventList:
    events = await audit_service.list_events(
        session, room_id=room_id, booking_number=booking_number, event_type=event_type
    )
    return AuditEventList(events=[AuditEventRead.model_validate(item) for item in events])
