# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from app.models.enums import ApprovalStatus, ConversionType


class SubmitConversionPayload(BaseModel):
    """Request body for redeeming extra hours."""

    user_id: str | None = None
    hours: float = Field(allow_inf_nan=False)
    amount: float = Field(default=0.0, allow_inf_nan=False)
    type: ConversionType
    date: str | None = None


class ConversionResponse(BaseModel):
    """Response schema for an hour conversion."""

    id: uuid.UUID
    user_id: str
    hours: float
    amount: float
    type: ConversionType
    date: date
    status: ApprovalStatus
    requested_by: str
    approved_by: str | None
    approved_at: datetime | None
    time_record_id: uuid.UUID | None
    created_at: datetime


class ConversionListResponse(BaseModel):
    """A user's conversions, newest first."""

    items: list[ConversionResponse]
    total: int
