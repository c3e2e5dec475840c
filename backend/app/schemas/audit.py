"""Audit trail schemas."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from app.models.audit_event import AuditEventType


class AuditEventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    event_type: AuditEventType
    user_id: uuid.UUID | None = None
    room_id: uuid.UUID | None = None
    booking_number: str | None = None
    description: str | None = None
    details: dict[str, Any] | None = None
    ip_address: str | None = None
    created_at: datetime


class AuditEventList(BaseModel):
    events: list[AuditEventRead]
