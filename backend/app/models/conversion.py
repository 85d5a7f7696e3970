# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from app.models.base import ApprovalMixin, TimestampMixin, UUIDBase


class HourConversion(UUIDBase, ApprovalMixin, TimestampMixin, table=True):
    """Redemption of accumulated extra hours as money or reserved time off.

    Conversions generated from a time-off record carry that record's id in
    ``time_record_id`` and are created already approved.
    """

    __tablename__ = "hour_conversion"
    __table_args__ = (sa.Index("ix_hour_conversion_user_status", "user_id", "status"),)

    user_id: str = Field(max_length=128, index=True)
    hours: float
    amount: float = Field(default=0.0)
    type: str = Field(max_length=20)
    date: datetime.date
    time_record_id: uuid.UUID | None = Field(default=None, index=True, sa_type=sa.Uuid)
