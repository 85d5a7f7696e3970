from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from app.models.base import ApprovalMixin, TimestampMixin, UUIDBase


class MonthlyGoal(UUIDBase, ApprovalMixin, TimestampMixin, table=True):
    """A requested or approved hour target for one calendar month."""

    __tablename__ = "monthly_goal"
    __table_args__ = (sa.Index("ix_monthly_goal_user_month", "user_id", "month"),)

    user_id: str = Field(max_length=128, index=True)
    month: str = Field(max_length=7)
    hours_goal: float
