# ruff: noqa: B008
from __future__ import annotations

from fastapi import APIRouter, Query

from app.api.deps import AuthDep
from app.db import SessionDep
from app.schemas.dashboard import DashboardResponse
from app.services.dashboard import get_dashboard

dashboard_router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@dashboard_router.get("", response_model=DashboardResponse)
async def dashboard(
    session: SessionDep,
    auth: AuthDep,
    day: str | None = Query(default=None, alias="date"),
    month: str | None = Query(default=None),
    user_id: str | None = Query(default=None, alias="userId"),
) -> DashboardResponse:
    """Daily and monthly stats plus the extra-hours balance. Defaults to today and the caller."""
    return await get_dashboard(session, auth, user_id=user_id, day=day, month=month)
