from __future__ import annotations

from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from app.models.base import TimestampMixin, UUIDBase


class AIReport(UUIDBase, TimestampMixin, table=True):
    """Generated performance summary for one user and month."""

    __tablename__ = "ai_report"
    __table_args__ = (sa.Index("ix_ai_report_user_month", "user_id", "month"),)

    user_id: str = Field(max_length=128, index=True)
    user_name: str = Field(max_length=255)
    user_email: str | None = Field(default=None, max_length=255)
    month: str = Field(max_length=7)
    report_content: str = Field(sa_type=sa.Text)
    generated_by: str = Field(max_length=128)
    generated_by_name: str = Field(max_length=255)
    stats: dict[str, Any] = Field(default_factory=dict, sa_type=sa.JSON)
