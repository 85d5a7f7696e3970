# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel

from app.models.enums import ApprovalStatus, ConversionType, DecisionAction


class DecisionPayload(BaseModel):
    """Request body for approve/reject actions."""

    action: DecisionAction


class PendingGoal(BaseModel):
    """Pending goal request annotated with the requester's identity."""

    id: uuid.UUID
    user_id: str
    user_email: str
    user_name: str
    month: str
    hours_goal: float
    status: ApprovalStatus
    created_at: datetime


class PendingConversion(BaseModel):
    """Pending conversion request annotated with the requester's identity."""

    id: uuid.UUID
    user_id: str
    user_email: str
    user_name: str
    hours: float
    amount: float
    type: ConversionType
    date: date
    status: ApprovalStatus
    created_at: datetime


class PendingApprovalsResponse(BaseModel):
    """Everything waiting on an admin decision."""

    conversions: list[PendingConversion]
    goals: list[PendingGoal]
    total: int
