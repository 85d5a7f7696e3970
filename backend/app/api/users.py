from __future__ import annotations

from fastapi import APIRouter, status

from app.api.deps import AuthDep
from app.db import SessionDep
from app.schemas.user import CreateProfilePayload, ProfileResponse, SettingsResponse, UpdateSettingsPayload
from app.services import user as user_service

users_router = APIRouter(prefix="/users", tags=["users"])
settings_router = APIRouter(prefix="/user-settings", tags=["user-settings"])


@users_router.post("", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    payload: CreateProfilePayload,
    session: SessionDep,
    auth: AuthDep,
) -> ProfileResponse:
    """Create the caller's own profile."""
    return await user_service.create_profile(session, auth, payload)


@users_router.get("/by-slug/{slug}", response_model=ProfileResponse)
async def get_profile_by_slug(
    slug: str,
    session: SessionDep,
    auth: AuthDep,
) -> ProfileResponse:
    """Look up a profile by its public slug."""
    return await user_service.get_profile_by_slug(session, slug)


@users_router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    session: SessionDep,
    auth: AuthDep,
) -> ProfileResponse:
    return await user_service.get_profile(session, auth, user_id)


@settings_router.get("", response_model=SettingsResponse)
async def get_settings(
    session: SessionDep,
    auth: AuthDep,
) -> SettingsResponse:
    """The caller's settings, or defaults when none were saved."""
    return await user_service.get_settings_for(session, auth, auth.subject_id)


@settings_router.put("", response_model=SettingsResponse)
async def save_settings(
    payload: UpdateSettingsPayload,
    session: SessionDep,
    auth: AuthDep,
) -> SettingsResponse:
    """Create or replace the caller's settings."""
    return await user_service.save_settings(session, auth, payload)
