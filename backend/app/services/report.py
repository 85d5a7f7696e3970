# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlmodel import col

from app.exceptions import NotFoundError
from app.models.enums import RecordType
from app.models.goal import MonthlyGoal
from app.models.report import AIReport
from app.models.time_record import TimeRecord
from app.schemas.report import (
    GenerateReportResponse,
    RankingResponse,
    ReportListResponse,
    ReportResponse,
    ReportStats,
    UserRanking,
)
from app.services.approval import UserLookup
from app.services.goal import authoritative_goals, get_month_goal_hours
from app.services.hours import month_bounds, split_totals, validate_month
from app.services.store import commit, fetch_all, fetch_one

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql import Select

    from app.schemas.auth import AuthenticatedPrincipal
    from app.services.generator import ReportGenerator
    from app.services.identity import IdentityService

logger = logging.getLogger(__name__)

_REPORT_LISTING_LIMIT = 200


def _month_records_query(month: str) -> Select[Any]:
    start, end = month_bounds(month)
    return select(TimeRecord).where(col(TimeRecord.date) >= start, col(TimeRecord.date) < end)


# ---------------------------------------------------------------------------
# Rankings
# ---------------------------------------------------------------------------


async def get_rankings(session: AsyncSession, identity: IdentityService, month: str) -> RankingResponse:
    """Users with records in the month, highest net hours first.

    A user without an approved goal for the month ranks against a goal of 0
    and is never reported as over goal.
    """
    month = validate_month(month)
    records: Sequence[TimeRecord] = await fetch_all(session, _month_records_query(month))
    by_user: dict[str, list[TimeRecord]] = defaultdict(list)
    for record in records:
        by_user[record.user_id].append(record)

    goals = await fetch_all(session, select(MonthlyGoal).where(col(MonthlyGoal.month) == month))
    goals_by_user: dict[str, list[MonthlyGoal]] = defaultdict(list)
    for goal in goals:
        goals_by_user[goal.user_id].append(goal)

    lookup = UserLookup(identity)
    rankings: list[UserRanking] = []
    for user_id, user_records in by_user.items():
        work, time_off, count = split_totals(user_records, month)
        goal_hours = authoritative_goals(goals_by_user.get(user_id, [])).get(month, 0.0)
        net = work - time_off
        email, name = await lookup.resolve(user_id)
        rankings.append(
            UserRanking(
                user_id=user_id,
                display_name=name,
                email=email,
                total_work_hours=work,
                total_time_off_hours=time_off,
                net_hours=net,
                monthly_goal=goal_hours,
                difference=net - goal_hours,
                is_over_goal=goal_hours > 0 and net > goal_hours,
                records_count=count,
            )
        )

    rankings.sort(key=lambda r: r.net_hours, reverse=True)
    return RankingResponse(month=month, rankings=rankings, total=len(rankings))


# ---------------------------------------------------------------------------
# AI reports
# ---------------------------------------------------------------------------


def build_report_response(report: AIReport) -> ReportResponse:
    return ReportResponse(
        id=report.id,
        user_id=report.user_id,
        user_name=report.user_name,
        user_email=report.user_email,
        month=report.month,
        report_content=report.report_content,
        generated_by=report.generated_by,
        generated_by_name=report.generated_by_name,
        stats=ReportStats.model_validate(report.stats),
        created_at=report.created_at,
    )


def build_report_prompt(user_name: str, month: str, stats: ReportStats, records: Sequence[TimeRecord]) -> str:
    """Prompt asking for an HR-style performance analysis of one month."""
    work_count = sum(1 for r in records if r.type == RecordType.WORK)
    time_off_count = sum(1 for r in records if r.type == RecordType.TIME_OFF)
    described = [r for r in records if r.description and r.description.strip()]

    if described:
        activities = "\n".join(
            f"{i}. Date: {r.date.isoformat()} | Type: {'Work' if r.type == RecordType.WORK else 'Time off'}"
            f" | Hours: {r.total_hours:g}h\n   Activity: {r.description}"
            for i, r in enumerate(sorted(described, key=lambda r: r.date), start=1)
        )
    else:
        activities = "No detailed descriptions available."

    sign = "+" if stats.goal_difference > 0 else ""
    return f"""You are an HR analyst specialised in performance and productivity analysis.
Analyse the collaborator data below and write a professional, detailed report.

**COLLABORATOR:** {user_name}
**PERIOD:** {month}

**STATISTICS:**
- Monthly goal: {stats.monthly_goal:g} hours
- Hours worked: {stats.total_work_hours:.1f} hours
- Time off: {stats.total_time_off_hours:.1f} hours
- Net total: {stats.net_hours:.1f} hours
- Difference from goal: {sign}{stats.goal_difference:.1f} hours
- Total records: {stats.records_count}
- Work records: {work_count}
- Time-off records: {time_off_count}

**ACTIVITY DESCRIPTIONS:**
{activities}

**REPORT INSTRUCTIONS:**
1. Give an overall analysis of the collaborator's performance
2. Highlight strengths and areas for improvement
3. Assess productivity based on the activity descriptions
4. Comment on how the monthly goal was met
5. Identify work patterns, if any
6. Suggest recommendations for the manager
7. Keep a professional but approachable tone
8. Organise the report in clear titled sections

**FORMAT:**
Use Markdown with ## section titles, bullet lists, bold highlights and well organised paragraphs."""


async def _get_existing_report(session: AsyncSession, user_id: str, month: str) -> AIReport | None:
    return await fetch_one(
        session,
        select(AIReport)
        .where(col(AIReport.user_id) == user_id, col(AIReport.month) == month)
        .order_by(col(AIReport.created_at).desc()),
    )


async def generate_report(
    session: AsyncSession,
    identity: IdentityService,
    generator: ReportGenerator,
    admin: AuthenticatedPrincipal,
    user_id: str,
    month: str,
    force_regenerate: bool = False,
) -> GenerateReportResponse:
    """Return the stored report for a user and month, or write a new one.

    1. Reuse the latest stored report unless regeneration is forced.
    2. Gather month statistics and activity descriptions.
    3. Ask the generator for the report text.
    4. Persist and return it.
    """
    month = validate_month(month)
    if not force_regenerate:
        existing = await _get_existing_report(session, user_id, month)
        if existing is not None:
            return GenerateReportResponse(report=build_report_response(existing), is_existing=True)

    subject = await identity.get_user(user_id)
    user_name = subject.label if subject is not None else "Collaborator"
    user_email = subject.email if subject is not None else None

    records = await fetch_all(session, _month_records_query(month).where(col(TimeRecord.user_id) == user_id))
    work, time_off, count = split_totals(records, month)
    goal_hours = await get_month_goal_hours(session, user_id, month)
    stats = ReportStats(
        total_work_hours=work,
        total_time_off_hours=time_off,
        net_hours=work - time_off,
        monthly_goal=goal_hours,
        goal_difference=work - time_off - goal_hours,
        records_count=count,
    )

    content = await generator.generate(build_report_prompt(user_name, month, stats, records))

    author = await identity.get_user(admin.subject_id)
    report = AIReport(
        user_id=user_id,
        user_name=user_name,
        user_email=user_email,
        month=month,
        report_content=content,
        generated_by=admin.subject_id,
        generated_by_name=author.label if author is not None else "Admin",
        stats=stats.model_dump(),
    )
    session.add(report)
    await commit(session)
    await session.refresh(report)
    logger.info("Report %s generated for %s/%s by %s", report.id, user_id, month, admin.subject_id)
    return GenerateReportResponse(report=build_report_response(report), is_existing=False)


async def list_reports(session: AsyncSession, user_id: str | None = None) -> ReportListResponse:
    """Stored reports, newest first, optionally for one user."""
    query = select(AIReport)
    if user_id is not None:
        query = query.where(col(AIReport.user_id) == user_id)
    reports = await fetch_all(session, query.order_by(col(AIReport.created_at).desc()).limit(_REPORT_LISTING_LIMIT))
    return ReportListResponse(items=[build_report_response(r) for r in reports], total=len(reports))


async def delete_report(session: AsyncSession, report_id: uuid.UUID) -> None:
    report = await session.get(AIReport, report_id)
    if report is None:
        raise NotFoundError("Report not found")
    await session.delete(report)
    await commit(session)
