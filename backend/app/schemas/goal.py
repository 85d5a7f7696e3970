# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from app.models.enums import ApprovalStatus


class SubmitGoalPayload(BaseModel):
    """Request body for requesting (or, as admin, setting) a monthly goal."""

    user_id: str | None = None
    month: str
    hours_goal: float = Field(allow_inf_nan=False)


class GoalResponse(BaseModel):
    """Response schema for a monthly goal request."""

    id: uuid.UUID
    user_id: str
    month: str
    hours_goal: float
    status: ApprovalStatus
    requested_by: str
    approved_by: str | None
    approved_at: datetime | None
    created_at: datetime


class GoalListResponse(BaseModel):
    """A user's goal requests, newest month first."""

    items: list[GoalResponse]
    total: int


class MonthGoalResponse(BaseModel):
    """Authoritative goal for a month plus the latest request for it."""

    month: str
    hours_goal: float
    latest_request: GoalResponse | None
