# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from app.api.deps import AdminDep, AuthDep
from app.db import SessionDep
from app.models.enums import ApprovalKind
from app.schemas.approval import DecisionPayload
from app.schemas.conversion import ConversionListResponse, ConversionResponse, SubmitConversionPayload
from app.schemas.dashboard import AccumulatedHours
from app.services import approval as approval_service
from app.services import conversion as conversion_service

conversions_router = APIRouter(prefix="/hour-conversions", tags=["hour-conversions"])


@conversions_router.get("", response_model=ConversionListResponse)
async def list_conversions(
    session: SessionDep,
    auth: AuthDep,
    user_id: str | None = Query(default=None, alias="userId"),
) -> ConversionListResponse:
    """Conversion history of a user, newest first."""
    return await conversion_service.list_conversions(session, auth, user_id or auth.subject_id)


@conversions_router.get("/balance", response_model=AccumulatedHours)
async def get_balance(
    session: SessionDep,
    auth: AuthDep,
    user_id: str | None = Query(default=None, alias="userId"),
) -> AccumulatedHours:
    """Current extra-hours balance of a user."""
    return await conversion_service.get_balance(session, auth, user_id or auth.subject_id)


@conversions_router.post("", response_model=ConversionResponse, status_code=status.HTTP_201_CREATED)
async def submit_conversion(
    payload: SubmitConversionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> ConversionResponse:
    """Request to redeem extra hours as money or time off."""
    return await conversion_service.submit_conversion(session, auth, payload)


@conversions_router.post("/{conversion_id}/decision", response_model=ConversionResponse)
async def decide_conversion(
    conversion_id: uuid.UUID,
    payload: DecisionPayload,
    session: SessionDep,
    auth: AdminDep,
) -> ConversionResponse:
    """Approve or reject a pending conversion (admin only)."""
    conversion = await approval_service.decide(session, ApprovalKind.CONVERSION, conversion_id, auth, payload.action)
    return conversion_service.build_conversion_response(conversion)
