# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from app.models.enums import RecordType

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateTimeRecordPayload(BaseModel):
    """Request body for logging a new interval.

    Dates and times are kept as raw strings so that format errors surface
    as ``ValidationError`` with a corrective message.
    """

    user_id: str | None = None
    name: str = ""
    date: str
    start_time: str
    end_time: str
    type: str = RecordType.WORK
    description: str | None = None


class UpdateTimeRecordPayload(BaseModel):
    """Partial update of a logged interval."""

    name: str | None = None
    date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    type: str | None = None
    description: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TimeRecordResponse(BaseModel):
    """Response schema for a single time record."""

    id: uuid.UUID
    user_id: str
    name: str
    date: date
    type: RecordType
    start_time: str
    end_time: str
    total_hours: float
    description: str | None
    created_at: datetime


class TimeRecordListResponse(BaseModel):
    """List of time records, newest first."""

    items: list[TimeRecordResponse]
    total: int = Field(ge=0)
