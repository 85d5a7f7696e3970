# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from app.api.deps import AdminDep, GeneratorDep, IdentityDep
from app.db import SessionDep
from app.schemas.approval import PendingApprovalsResponse
from app.schemas.report import GenerateReportPayload, GenerateReportResponse, RankingResponse, ReportListResponse
from app.schemas.user import (
    AuthorizeUserPayload,
    DeletedDataResponse,
    EmailPayload,
    ManagedUserListResponse,
    UserActionResponse,
)
from app.services import access as access_service
from app.services import report as report_service
from app.services import user as user_service
from app.services.approval import list_pending_approvals

admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.get("/pending-approvals", response_model=PendingApprovalsResponse)
async def pending_approvals(
    session: SessionDep,
    identity: IdentityDep,
    auth: AdminDep,
) -> PendingApprovalsResponse:
    """Pending goals and conversions with requester details, newest first."""
    return await list_pending_approvals(session, identity)


# ---------------------------------------------------------------------------
# User management
# ---------------------------------------------------------------------------


@admin_router.get("/users", response_model=ManagedUserListResponse)
async def list_users(
    session: SessionDep,
    identity: IdentityDep,
    auth: AdminDep,
) -> ManagedUserListResponse:
    return await access_service.list_managed_users(session, identity)


@admin_router.post("/users", response_model=UserActionResponse)
async def authorize_user(
    payload: AuthorizeUserPayload,
    session: SessionDep,
    identity: IdentityDep,
    auth: AdminDep,
) -> UserActionResponse:
    """Authorize an email, pre-authorizing it if nobody has signed in with it yet."""
    return await access_service.authorize_user(session, identity, auth, payload.email, payload.role)


@admin_router.delete("/users", response_model=UserActionResponse)
async def revoke_user(
    session: SessionDep,
    identity: IdentityDep,
    auth: AdminDep,
    email: str = Query(min_length=3),
) -> UserActionResponse:
    """Revoke a user's access or drop a pending pre-authorization."""
    return await access_service.revoke_user(session, identity, auth, email)


@admin_router.post("/users/promote", response_model=UserActionResponse)
async def promote_user(
    payload: EmailPayload,
    identity: IdentityDep,
    auth: AdminDep,
) -> UserActionResponse:
    return await access_service.promote_user(identity, auth, payload.email)


@admin_router.post("/users/demote", response_model=UserActionResponse)
async def demote_user(
    payload: EmailPayload,
    identity: IdentityDep,
    auth: AdminDep,
) -> UserActionResponse:
    return await access_service.demote_user(identity, auth, payload.email)


@admin_router.delete("/users/{user_id}/data", response_model=DeletedDataResponse)
async def delete_user_data(
    user_id: str,
    session: SessionDep,
    auth: AdminDep,
) -> DeletedDataResponse:
    """Delete every stored record, goal, conversion, setting and profile of a user."""
    return await user_service.delete_all_user_data(session, user_id)


# ---------------------------------------------------------------------------
# Rankings and reports
# ---------------------------------------------------------------------------


@admin_router.get("/rankings", response_model=RankingResponse)
async def rankings(
    session: SessionDep,
    identity: IdentityDep,
    auth: AdminDep,
    month: str = Query(),
) -> RankingResponse:
    """Users with records in the month, ordered by net hours."""
    return await report_service.get_rankings(session, identity, month)


@admin_router.post("/reports", response_model=GenerateReportResponse)
async def generate_report(
    payload: GenerateReportPayload,
    session: SessionDep,
    identity: IdentityDep,
    generator: GeneratorDep,
    auth: AdminDep,
) -> GenerateReportResponse:
    """Return the stored report for the month, generating one if needed or forced."""
    return await report_service.generate_report(
        session, identity, generator, auth, payload.user_id, payload.month, payload.force_regenerate
    )


@admin_router.get("/reports", response_model=ReportListResponse)
async def list_reports(
    session: SessionDep,
    auth: AdminDep,
    user_id: str | None = Query(default=None, alias="userId"),
) -> ReportListResponse:
    return await report_service.list_reports(session, user_id)


@admin_router.delete("/reports/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report(
    report_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> None:
    await report_service.delete_report(session, report_id)
