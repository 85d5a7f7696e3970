from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from app.exceptions import ConflictError, ForbiddenError, ValidationError
from app.models.enums import ApprovalStatus
from app.models.goal import MonthlyGoal
from app.schemas.goal import GoalListResponse, GoalResponse, MonthGoalResponse
from app.services.approval import apply_submission
from app.services.hours import validate_month
from app.services.store import commit, fetch_all, fetch_one

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthenticatedPrincipal
    from app.schemas.goal import SubmitGoalPayload

logger = logging.getLogger(__name__)

# 31 days * 24 hours.
MAX_HOURS_GOAL = 744.0


def build_goal_response(goal: MonthlyGoal) -> GoalResponse:
    """Map a goal model to its response schema."""
    return GoalResponse(
        id=goal.id,
        user_id=goal.user_id,
        month=goal.month,
        hours_goal=goal.hours_goal,
        status=ApprovalStatus(goal.status),
        requested_by=goal.requested_by,
        approved_by=goal.approved_by,
        approved_at=goal.approved_at,
        created_at=goal.created_at,
    )


def authoritative_goals(goals: Iterable[MonthlyGoal]) -> dict[str, float]:
    """Map each month to the hours of its most recently created approved goal.

    Pending and rejected requests are history only and never count.
    """
    latest: dict[str, MonthlyGoal] = {}
    for goal in goals:
        if goal.status != ApprovalStatus.APPROVED:
            continue
        current = latest.get(goal.month)
        if current is None or goal.created_at > current.created_at:
            latest[goal.month] = goal
    return {month: goal.hours_goal for month, goal in latest.items()}


async def get_user_goals(session: AsyncSession, user_id: str) -> list[MonthlyGoal]:
    return await fetch_all(
        session,
        select(MonthlyGoal)
        .where(col(MonthlyGoal.user_id) == user_id)
        .order_by(col(MonthlyGoal.month).desc(), col(MonthlyGoal.created_at).desc()),
    )


async def get_approved_goals(session: AsyncSession, user_id: str) -> dict[str, float]:
    """Authoritative approved goal hours per month for a user."""
    goals = await fetch_all(
        session,
        select(MonthlyGoal).where(
            col(MonthlyGoal.user_id) == user_id,
            col(MonthlyGoal.status) == ApprovalStatus.APPROVED.value,
        ),
    )
    return authoritative_goals(goals)


async def get_month_goal_hours(session: AsyncSession, user_id: str, month: str) -> float:
    """Approved goal for one month, 0 when none has been approved."""
    goal = await fetch_one(
        session,
        select(MonthlyGoal)
        .where(
            col(MonthlyGoal.user_id) == user_id,
            col(MonthlyGoal.month) == month,
            col(MonthlyGoal.status) == ApprovalStatus.APPROVED.value,
        )
        .order_by(col(MonthlyGoal.created_at).desc()),
    )
    return goal.hours_goal if goal is not None else 0.0


async def submit_goal(
    session: AsyncSession,
    principal: AuthenticatedPrincipal,
    payload: SubmitGoalPayload,
) -> GoalResponse:
    """Request a monthly goal; admins set it directly.

    A second pending request for the same user and month is refused so an
    admin never has to pick between competing pending goals.
    """
    user_id = payload.user_id or principal.subject_id
    if not principal.can_access(user_id):
        raise ForbiddenError("You can only request goals for yourself")

    month = validate_month(payload.month)
    if not math.isfinite(payload.hours_goal) or payload.hours_goal <= 0 or payload.hours_goal > MAX_HOURS_GOAL:
        raise ValidationError(f"hoursGoal must be greater than 0 and at most {MAX_HOURS_GOAL:g}")

    pending = await fetch_one(
        session,
        select(MonthlyGoal).where(
            col(MonthlyGoal.user_id) == user_id,
            col(MonthlyGoal.month) == month,
            col(MonthlyGoal.status) == ApprovalStatus.PENDING.value,
        ),
    )
    if pending is not None:
        raise ConflictError(f"A goal request for {month} is already pending approval")

    goal = MonthlyGoal(user_id=user_id, month=month, hours_goal=payload.hours_goal, requested_by=principal.subject_id)
    apply_submission(goal, principal)
    session.add(goal)
    await commit(session)
    await session.refresh(goal)
    logger.info("Goal %s for %s/%s submitted as %s", goal.id, user_id, month, goal.status)
    return build_goal_response(goal)


async def list_goals(session: AsyncSession, principal: AuthenticatedPrincipal, user_id: str) -> GoalListResponse:
    if not principal.can_access(user_id):
        raise ForbiddenError("You can only access your own monthly goals")
    goals = await get_user_goals(session, user_id)
    return GoalListResponse(items=[build_goal_response(g) for g in goals], total=len(goals))


async def get_month_goal(
    session: AsyncSession,
    principal: AuthenticatedPrincipal,
    user_id: str,
    month: str,
) -> MonthGoalResponse:
    """Authoritative goal hours for a month plus the latest request of any status."""
    if not principal.can_access(user_id):
        raise ForbiddenError("You can only access your own monthly goals")
    month = validate_month(month)
    latest = await fetch_one(
        session,
        select(MonthlyGoal)
        .where(col(MonthlyGoal.user_id) == user_id, col(MonthlyGoal.month) == month)
        .order_by(col(MonthlyGoal.created_at).desc()),
    )
    return MonthGoalResponse(
        month=month,
        hours_goal=await get_month_goal_hours(session, user_id, month),
        latest_request=build_goal_response(latest) if latest is not None else None,
    )
