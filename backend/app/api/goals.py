# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from app.api.deps import AdminDep, AuthDep
from app.db import SessionDep
from app.models.enums import ApprovalKind
from app.schemas.approval import DecisionPayload
from app.schemas.goal import GoalListResponse, GoalResponse, MonthGoalResponse, SubmitGoalPayload
from app.services import approval as approval_service
from app.services import goal as goal_service

goals_router = APIRouter(prefix="/monthly-goals", tags=["monthly-goals"])


@goals_router.get("", response_model=GoalListResponse)
async def list_goals(
    session: SessionDep,
    auth: AuthDep,
    user_id: str | None = Query(default=None, alias="userId"),
) -> GoalListResponse:
    """Goal history of a user, newest month first."""
    return await goal_service.list_goals(session, auth, user_id or auth.subject_id)


@goals_router.get("/{month}", response_model=MonthGoalResponse)
async def get_month_goal(
    month: str,
    session: SessionDep,
    auth: AuthDep,
    user_id: str | None = Query(default=None, alias="userId"),
) -> MonthGoalResponse:
    """Authoritative goal for a month and the latest request for it."""
    return await goal_service.get_month_goal(session, auth, user_id or auth.subject_id, month)


@goals_router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
async def submit_goal(
    payload: SubmitGoalPayload,
    session: SessionDep,
    auth: AuthDep,
) -> GoalResponse:
    """Request a monthly goal. Goals set by an admin are approved immediately."""
    return await goal_service.submit_goal(session, auth, payload)


@goals_router.post("/{goal_id}/decision", response_model=GoalResponse)
async def decide_goal(
    goal_id: uuid.UUID,
    payload: DecisionPayload,
    session: SessionDep,
    auth: AdminDep,
) -> GoalResponse:
    """Approve or reject a pending goal (admin only)."""
    goal = await approval_service.decide(session, ApprovalKind.GOAL, goal_id, auth, payload.action)
    return goal_service.build_goal_response(goal)
