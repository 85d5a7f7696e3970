# ruff: noqa: TC003
from __future__ import annotations

import datetime

import sqlalchemy as sa
from sqlmodel import Field

from app.models.base import TimestampMixin, UUIDBase
from app.models.enums import RecordType


class TimeRecord(UUIDBase, TimestampMixin, table=True):
    """One logged work or time-off interval on a single calendar day."""

    __tablename__ = "time_record"
    __table_args__ = (sa.Index("ix_time_record_user_date", "user_id", "date"),)

    user_id: str = Field(max_length=128, index=True)
    name: str = Field(default="", max_length=100)
    date: datetime.date
    type: str = Field(default=RecordType.WORK, max_length=20)
    start_time: str = Field(max_length=5)
    end_time: str = Field(max_length=5)
    total_hours: float
    description: str | None = Field(default=None, sa_type=sa.Text)
