from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select
from sqlmodel import col

from app.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.conversion import HourConversion
from app.models.enums import WorkingDays
from app.models.goal import MonthlyGoal
from app.models.time_record import TimeRecord
from app.models.user import UserProfile, UserSettings
from app.schemas.user import DeletedDataResponse, ProfileResponse, SettingsResponse
from app.services.hours import time_to_minutes
from app.services.store import commit, fetch_one

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthenticatedPrincipal
    from app.schemas.user import CreateProfilePayload, UpdateSettingsPayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


def _build_profile_response(profile: UserProfile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        name=profile.name,
        slug=profile.slug,
        email=profile.email,
        created_at=profile.created_at,
    )


async def create_profile(
    session: AsyncSession,
    principal: AuthenticatedPrincipal,
    payload: CreateProfilePayload,
) -> ProfileResponse:
    """Create the caller's own profile. Slugs are unique across users."""
    name = payload.name.strip()
    if not name:
        raise ValidationError("name must not be blank")
    if await session.get(UserProfile, principal.subject_id) is not None:
        raise ConflictError("Profile already exists")
    taken = await fetch_one(session, select(UserProfile).where(col(UserProfile.slug) == payload.slug))
    if taken is not None:
        raise ConflictError(f"Slug '{payload.slug}' is already taken")

    profile = UserProfile(
        id=principal.subject_id,
        name=name,
        slug=payload.slug,
        email=payload.email or principal.email,
    )
    session.add(profile)
    await commit(session)
    await session.refresh(profile)
    return _build_profile_response(profile)


async def get_profile(session: AsyncSession, principal: AuthenticatedPrincipal, user_id: str) -> ProfileResponse:
    if not principal.can_access(user_id):
        raise ForbiddenError("You can only access your own user data")
    profile = await session.get(UserProfile, user_id)
    if profile is None:
        raise NotFoundError("Profile not found")
    return _build_profile_response(profile)


async def get_profile_by_slug(session: AsyncSession, slug: str) -> ProfileResponse:
    profile = await fetch_one(session, select(UserProfile).where(col(UserProfile.slug) == slug))
    if profile is None:
        raise NotFoundError("Profile not found")
    return _build_profile_response(profile)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def _build_settings_response(user_id: str, settings: UserSettings | None) -> SettingsResponse:
    if settings is None:
        return SettingsResponse(
            user_id=user_id,
            default_start_time=None,
            default_end_time=None,
            working_days=WorkingDays.WEEKDAYS,
            github_username=None,
            github_project_id=None,
            github_branch=None,
            created_at=None,
            updated_at=None,
        )
    return SettingsResponse(
        user_id=settings.user_id,
        default_start_time=settings.default_start_time,
        default_end_time=settings.default_end_time,
        working_days=WorkingDays(settings.working_days),
        github_username=settings.github_username,
        github_project_id=settings.github_project_id,
        github_branch=settings.github_branch,
        created_at=settings.created_at,
        updated_at=settings.updated_at,
    )


async def get_user_settings_row(session: AsyncSession, user_id: str) -> UserSettings | None:
    return await fetch_one(session, select(UserSettings).where(col(UserSettings.user_id) == user_id))


async def get_settings_for(session: AsyncSession, principal: AuthenticatedPrincipal, user_id: str) -> SettingsResponse:
    """A user's settings, or the defaults when none were saved."""
    if not principal.can_access(user_id):
        raise ForbiddenError("You can only access your own settings")
    return _build_settings_response(user_id, await get_user_settings_row(session, user_id))


async def save_settings(
    session: AsyncSession,
    principal: AuthenticatedPrincipal,
    payload: UpdateSettingsPayload,
) -> SettingsResponse:
    """Upsert the caller's own settings."""
    try:
        working_days = WorkingDays(payload.working_days)
    except ValueError:
        raise ValidationError("Invalid workingDays value") from None
    if payload.default_start_time:
        time_to_minutes(payload.default_start_time, "defaultStartTime")
    if payload.default_end_time:
        time_to_minutes(payload.default_end_time, "defaultEndTime")

    settings = await get_user_settings_row(session, principal.subject_id)
    if settings is None:
        settings = UserSettings(user_id=principal.subject_id)
        session.add(settings)

    settings.default_start_time = payload.default_start_time or None
    settings.default_end_time = payload.default_end_time or None
    settings.working_days = working_days.value
    settings.github_username = payload.github_username or None
    settings.github_project_id = payload.github_project_id or None
    settings.github_branch = payload.github_branch or None
    settings.updated_at = datetime.now(UTC)

    await commit(session)
    await session.refresh(settings)
    return _build_settings_response(principal.subject_id, settings)


# ---------------------------------------------------------------------------
# Data removal
# ---------------------------------------------------------------------------


async def delete_all_user_data(session: AsyncSession, user_id: str) -> DeletedDataResponse:
    """Batch-delete every document stored for a user in one transaction."""
    deleted = 0
    for model in (TimeRecord, MonthlyGoal, HourConversion, UserSettings):
        count = (
            await session.execute(select(func.count()).select_from(model).where(col(model.user_id) == user_id))
        ).scalar_one()
        if count:
            await session.execute(delete(model).where(col(model.user_id) == user_id))
            deleted += count

    profile = await session.get(UserProfile, user_id)
    if profile is not None:
        await session.delete(profile)
        deleted += 1

    if deleted:
        await commit(session)
    logger.info("Deleted %d documents for user %s", deleted, user_id)
    return DeletedDataResponse(user_id=user_id, deleted_count=deleted)
