# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from app.api.deps import AuthDep
from app.db import SessionDep
from app.schemas.time_record import (
    CreateTimeRecordPayload,
    TimeRecordListResponse,
    TimeRecordResponse,
    UpdateTimeRecordPayload,
)
from app.services import time_record as time_record_service

time_records_router = APIRouter(prefix="/time-records", tags=["time-records"])


@time_records_router.get("", response_model=TimeRecordListResponse)
async def list_time_records(
    session: SessionDep,
    auth: AuthDep,
    user_id: str | None = Query(default=None, alias="userId"),
) -> TimeRecordListResponse:
    """List a user's records, newest first. Admins may omit userId to see everyone."""
    return await time_record_service.list_time_records(session, auth, user_id)


@time_records_router.post("", response_model=TimeRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_time_record(
    payload: CreateTimeRecordPayload,
    session: SessionDep,
    auth: AuthDep,
) -> TimeRecordResponse:
    """Log a work or time-off interval."""
    return await time_record_service.create_time_record(session, auth, payload)


@time_records_router.patch("/{record_id}", response_model=TimeRecordResponse)
async def update_time_record(
    record_id: uuid.UUID,
    payload: UpdateTimeRecordPayload,
    session: SessionDep,
    auth: AuthDep,
) -> TimeRecordResponse:
    """Partially update a record (owner or admin)."""
    return await time_record_service.update_time_record(session, auth, record_id, payload)


@time_records_router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_time_record(
    record_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> None:
    """Permanently delete a record (owner or admin)."""
    await time_record_service.delete_time_record(session, auth, record_id)
