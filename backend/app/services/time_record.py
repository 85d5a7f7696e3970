# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from app.exceptions import ForbiddenError, NotFoundError
from app.models.conversion import HourConversion
from app.models.enums import ApprovalStatus, ConversionType, RecordType
from app.models.time_record import TimeRecord
from app.schemas.time_record import TimeRecordListResponse, TimeRecordResponse
from app.services.conversion import get_linked_conversion
from app.services.hours import calculate_total_hours, parse_date, validate_record_type
from app.services.store import commit, fetch_all, fetch_one

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthenticatedPrincipal
    from app.schemas.time_record import CreateTimeRecordPayload, UpdateTimeRecordPayload

logger = logging.getLogger(__name__)

_NAME_MAX_LENGTH = 100
_DESCRIPTION_MAX_LENGTH = 10_000
_ALL_RECORDS_LIMIT = 1000


def _clean(value: str | None, max_length: int) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()[:max_length]
    return cleaned or None


def build_time_record_response(record: TimeRecord) -> TimeRecordResponse:
    """Map a time record model to its response schema."""
    return TimeRecordResponse(
        id=record.id,
        user_id=record.user_id,
        name=record.name,
        date=record.date,
        type=RecordType(record.type),
        start_time=record.start_time,
        end_time=record.end_time,
        total_hours=record.total_hours,
        description=record.description,
        created_at=record.created_at,
    )


async def _get_owned_record_or_404(
    session: AsyncSession,
    principal: AuthenticatedPrincipal,
    record_id: uuid.UUID,
) -> TimeRecord:
    """Fetch a record the caller may mutate: its creator or an admin."""
    record = await fetch_one(session, select(TimeRecord).where(col(TimeRecord.id) == record_id))
    if record is None:
        raise NotFoundError("Time record not found")
    if not principal.can_access(record.user_id):
        raise ForbiddenError("You can only modify your own records")
    return record


# ---------------------------------------------------------------------------
# Linked time-off conversion
# ---------------------------------------------------------------------------


async def sync_time_off_conversion(session: AsyncSession, record: TimeRecord) -> None:
    """Keep the pre-approved time-off conversion of a record in step with it.

    Runs after the record itself is committed. Failures are logged and
    swallowed: the record write stands even when this bookkeeping does not.
    """
    try:
        linked = await get_linked_conversion(session, record.id)
        if record.type == RecordType.TIME_OFF:
            if linked is None:
                now = datetime.now(UTC)
                session.add(
                    HourConversion(
                        user_id=record.user_id,
                        hours=record.total_hours,
                        amount=0.0,
                        type=ConversionType.TIME_OFF.value,
                        date=record.date,
                        status=ApprovalStatus.APPROVED.value,
                        requested_by=record.user_id,
                        approved_by=record.user_id,
                        approved_at=now,
                        time_record_id=record.id,
                    )
                )
            else:
                linked.hours = record.total_hours
                linked.date = record.date
        elif linked is not None:
            await session.delete(linked)
        await commit(session)
    except Exception:
        logger.exception("Failed to sync time-off conversion for record %s", record.id)
        await session.rollback()


async def remove_time_off_conversion(session: AsyncSession, record_id: uuid.UUID) -> None:
    """Delete the conversion linked to a deleted record, best effort."""
    try:
        linked = await get_linked_conversion(session, record_id)
        if linked is not None:
            await session.delete(linked)
            await commit(session)
    except Exception:
        logger.exception("Failed to remove time-off conversion for record %s", record_id)
        await session.rollback()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_time_record(
    session: AsyncSession,
    principal: AuthenticatedPrincipal,
    payload: CreateTimeRecordPayload,
) -> TimeRecordResponse:
    """Log a work or time-off interval.

    1. Check the caller may write for the target user.
    2. Validate date, times and type; derive total hours.
    3. Persist the record.
    4. For time off, create the linked pre-approved conversion (best effort).
    """
    user_id = payload.user_id or principal.subject_id
    if not principal.can_access(user_id):
        raise ForbiddenError("You can only create records for yourself")

    record_date = parse_date(payload.date)
    record_type = validate_record_type(payload.type)
    total_hours = calculate_total_hours(payload.start_time, payload.end_time)

    record = TimeRecord(
        user_id=user_id,
        name=_clean(payload.name, _NAME_MAX_LENGTH) or "",
        date=record_date,
        type=record_type.value,
        start_time=payload.start_time,
        end_time=payload.end_time,
        total_hours=total_hours,
        description=_clean(payload.description, _DESCRIPTION_MAX_LENGTH),
    )
    session.add(record)
    await commit(session)
    await session.refresh(record)

    if record.type == RecordType.TIME_OFF:
        await sync_time_off_conversion(session, record)
        await session.refresh(record)

    return build_time_record_response(record)


async def update_time_record(
    session: AsyncSession,
    principal: AuthenticatedPrincipal,
    record_id: uuid.UUID,
    payload: UpdateTimeRecordPayload,
) -> TimeRecordResponse:
    """Apply a partial update, recomputing total hours when times change."""
    record = await _get_owned_record_or_404(session, principal, record_id)
    was_time_off = record.type == RecordType.TIME_OFF

    if payload.name is not None:
        record.name = _clean(payload.name, _NAME_MAX_LENGTH) or ""
    if payload.date is not None:
        record.date = parse_date(payload.date)
    if payload.type is not None:
        record.type = validate_record_type(payload.type).value
    if payload.description is not None:
        record.description = _clean(payload.description, _DESCRIPTION_MAX_LENGTH)

    start_time = payload.start_time if payload.start_time is not None else record.start_time
    end_time = payload.end_time if payload.end_time is not None else record.end_time
    if payload.start_time is not None or payload.end_time is not None:
        record.total_hours = calculate_total_hours(start_time, end_time)
        record.start_time = start_time
        record.end_time = end_time

    await commit(session)
    await session.refresh(record)

    if was_time_off or record.type == RecordType.TIME_OFF:
        await sync_time_off_conversion(session, record)
        await session.refresh(record)

    return build_time_record_response(record)


async def delete_time_record(
    session: AsyncSession,
    principal: AuthenticatedPrincipal,
    record_id: uuid.UUID,
) -> None:
    """Permanently delete a record and its linked time-off conversion."""
    record = await _get_owned_record_or_404(session, principal, record_id)
    was_time_off = record.type == RecordType.TIME_OFF
    await session.delete(record)
    await commit(session)
    logger.info("Time record %s deleted by %s", record_id, principal.subject_id)

    if was_time_off:
        await remove_time_off_conversion(session, record_id)


async def get_user_records(session: AsyncSession, user_id: str) -> list[TimeRecord]:
    """All of a user's records, newest date first, then newest created."""
    return await fetch_all(
        session,
        select(TimeRecord)
        .where(col(TimeRecord.user_id) == user_id)
        .order_by(col(TimeRecord.date).desc(), col(TimeRecord.created_at).desc()),
    )


async def list_time_records(
    session: AsyncSession,
    principal: AuthenticatedPrincipal,
    user_id: str | None = None,
) -> TimeRecordListResponse:
    """List a user's records; admins may omit the user to see everyone's."""
    if user_id is None and principal.is_admin:
        records = await fetch_all(
            session,
            select(TimeRecord)
            .order_by(col(TimeRecord.date).desc(), col(TimeRecord.created_at).desc())
            .limit(_ALL_RECORDS_LIMIT),
        )
    else:
        target = user_id or principal.subject_id
        if not principal.can_access(target):
            raise ForbiddenError("You can only access your own records")
        records = await get_user_records(session, target)

    return TimeRecordListResponse(
        items=[build_time_record_response(r) for r in records],
        total=len(records),
    )
