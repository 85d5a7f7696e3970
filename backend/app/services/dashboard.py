from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from app.exceptions import ForbiddenError
from app.schemas.dashboard import DailyStats, DashboardResponse, MonthlyStats
from app.services.accumulation import compute_accumulated_hours
from app.services.conversion import build_conversion_response, get_user_conversions
from app.services.goal import get_approved_goals
from app.services.hours import current_month, daily_total, monthly_total, parse_date, validate_month, working_days
from app.services.time_record import build_time_record_response, get_user_records

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthenticatedPrincipal


async def get_dashboard(
    session: AsyncSession,
    principal: AuthenticatedPrincipal,
    user_id: str | None = None,
    day: str | None = None,
    month: str | None = None,
) -> DashboardResponse:
    """Daily and monthly figures plus the extra-hours balance for one user."""
    target = user_id or principal.subject_id
    if not principal.can_access(target):
        raise ForbiddenError("You can only access your own dashboard")

    selected_day = parse_date(day) if day else date.today()
    selected_month = validate_month(month) if month else current_month()

    records = await get_user_records(session, target)
    approved_goals = await get_approved_goals(session, target)
    conversions = await get_user_conversions(session, target)

    goal = approved_goals.get(selected_month, 0.0)
    net = monthly_total(records, selected_month)
    difference = net - goal

    return DashboardResponse(
        user_id=target,
        daily_stats=DailyStats(
            date=selected_day,
            total_hours=daily_total(records, selected_day),
            records=[build_time_record_response(r) for r in records if r.date == selected_day],
        ),
        monthly_stats=MonthlyStats(
            month=selected_month,
            total_hours=net,
            goal=goal,
            difference=abs(difference),
            is_over_goal=goal > 0 and difference > 0,
            working_days=working_days(records, selected_month),
        ),
        accumulated_hours=compute_accumulated_hours(records, approved_goals, conversions),
        hour_conversions=[build_conversion_response(c) for c in conversions],
    )
