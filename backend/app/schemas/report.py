# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

# ---------------------------------------------------------------------------
# Rankings
# ---------------------------------------------------------------------------


class UserRanking(BaseModel):
    """One user's monthly totals in the admin ranking."""

    user_id: str
    display_name: str
    email: str | None
    total_work_hours: float
    total_time_off_hours: float
    net_hours: float
    monthly_goal: float
    difference: float
    is_over_goal: bool
    records_count: int


class RankingResponse(BaseModel):
    month: str
    rankings: list[UserRanking]
    total: int


# ---------------------------------------------------------------------------
# AI reports
# ---------------------------------------------------------------------------


class GenerateReportPayload(BaseModel):
    user_id: str
    month: str
    force_regenerate: bool = False


class ReportStats(BaseModel):
    """Month figures the report prose is written from."""

    total_work_hours: float
    total_time_off_hours: float
    net_hours: float
    monthly_goal: float
    goal_difference: float
    records_count: int


class ReportResponse(BaseModel):
    id: uuid.UUID
    user_id: str
    user_name: str
    user_email: str | None
    month: str
    report_content: str
    generated_by: str
    generated_by_name: str
    stats: ReportStats
    created_at: datetime


class GenerateReportResponse(BaseModel):
    report: ReportResponse
    is_existing: bool


class ReportListResponse(BaseModel):
    items: list[ReportResponse]
    total: int
