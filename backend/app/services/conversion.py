# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from app.exceptions import ForbiddenError
from app.models.conversion import HourConversion
from app.models.enums import ApprovalStatus, ConversionType
from app.models.time_record import TimeRecord
from app.schemas.conversion import ConversionListResponse, ConversionResponse
from app.services.accumulation import compute_accumulated_hours, validate_conversion_request
from app.services.approval import apply_submission
from app.services.goal import get_approved_goals
from app.services.hours import parse_date
from app.services.store import commit, fetch_all

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthenticatedPrincipal
    from app.schemas.conversion import SubmitConversionPayload
    from app.schemas.dashboard import AccumulatedHours

logger = logging.getLogger(__name__)


def build_conversion_response(conversion: HourConversion) -> ConversionResponse:
    """Map a conversion model to its response schema."""
    return ConversionResponse(
        id=conversion.id,
        user_id=conversion.user_id,
        hours=conversion.hours,
        amount=conversion.amount,
        type=ConversionType(conversion.type),
        date=conversion.date,
        status=ApprovalStatus(conversion.status),
        requested_by=conversion.requested_by,
        approved_by=conversion.approved_by,
        approved_at=conversion.approved_at,
        time_record_id=conversion.time_record_id,
        created_at=conversion.created_at,
    )


async def get_user_conversions(session: AsyncSession, user_id: str) -> list[HourConversion]:
    return await fetch_all(
        session,
        select(HourConversion)
        .where(col(HourConversion.user_id) == user_id)
        .order_by(col(HourConversion.date).desc(), col(HourConversion.created_at).desc()),
    )


async def get_accumulated_hours(session: AsyncSession, user_id: str) -> AccumulatedHours:
    """Recompute a user's extra-hours balance from the store."""
    records = await fetch_all(session, select(TimeRecord).where(col(TimeRecord.user_id) == user_id))
    approved_goals = await get_approved_goals(session, user_id)
    conversions = await get_user_conversions(session, user_id)
    return compute_accumulated_hours(records, approved_goals, conversions)


async def get_balance(session: AsyncSession, principal: AuthenticatedPrincipal, user_id: str) -> AccumulatedHours:
    if not principal.can_access(user_id):
        raise ForbiddenError("You can only access your own balance")
    return await get_accumulated_hours(session, user_id)


async def submit_conversion(
    session: AsyncSession,
    principal: AuthenticatedPrincipal,
    payload: SubmitConversionPayload,
) -> ConversionResponse:
    """Request to redeem extra hours as money or time off.

    The balance check reads the current balance and then inserts; two
    concurrent requests can both pass it.
    """
    user_id = payload.user_id or principal.subject_id
    if not principal.can_access(user_id):
        raise ForbiddenError("You can only create your own hour conversions")

    conversion_date = parse_date(payload.date) if payload.date else date.today()
    accumulated = await get_accumulated_hours(session, user_id)
    validate_conversion_request(payload.hours, payload.amount, payload.type, accumulated.available_hours)

    conversion = HourConversion(
        user_id=user_id,
        hours=payload.hours,
        amount=payload.amount if payload.type == ConversionType.MONEY else 0.0,
        type=payload.type.value,
        date=conversion_date,
        requested_by=principal.subject_id,
    )
    apply_submission(conversion, principal)
    session.add(conversion)
    await commit(session)
    await session.refresh(conversion)
    logger.info("Conversion %s of %.2fh for %s submitted as %s", conversion.id, conversion.hours, user_id, conversion.status)
    return build_conversion_response(conversion)


async def list_conversions(
    session: AsyncSession,
    principal: AuthenticatedPrincipal,
    user_id: str,
) -> ConversionListResponse:
    if not principal.can_access(user_id):
        raise ForbiddenError("You can only access your own hour conversions")
    conversions = await get_user_conversions(session, user_id)
    return ConversionListResponse(items=[build_conversion_response(c) for c in conversions], total=len(conversions))


async def get_linked_conversion(session: AsyncSession, time_record_id: uuid.UUID) -> HourConversion | None:
    rows = await fetch_all(
        session, select(HourConversion).where(col(HourConversion.time_record_id) == time_record_id)
    )
    return rows[0] if rows else None
