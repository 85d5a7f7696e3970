# ruff: noqa: TC001, TC003
from __future__ import annotations

from datetime import date

from pydantic import BaseModel, computed_field

from app.schemas.conversion import ConversionResponse
from app.schemas.time_record import TimeRecordResponse


class AccumulatedHours(BaseModel):
    """Per-user rollup of extra hours and what has been redeemed.

    ``available_hours`` is the raw balance and may be negative;
    ``display_available_hours`` is the same value floored at zero.
    """

    total_extra_hours: float
    available_hours: float
    converted_to_money: float
    used_for_time_off: float

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_available_hours(self) -> float:
        return max(0.0, self.available_hours)


class DailyStats(BaseModel):
    date: date
    total_hours: float
    records: list[TimeRecordResponse]


class MonthlyStats(BaseModel):
    month: str
    total_hours: float
    goal: float
    difference: float
    is_over_goal: bool
    working_days: int


class DashboardResponse(BaseModel):
    """Everything the dashboard renders for one user."""

    user_id: str
    daily_stats: DailyStats
    monthly_stats: MonthlyStats
    accumulated_hours: AccumulatedHours
    hour_conversions: list[ConversionResponse]
