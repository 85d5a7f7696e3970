# ruff: noqa: TC001, TC003
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.models.enums import UserRole, WorkingDays

# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class CreateProfilePayload(BaseModel):
    """Request body for creating the caller's own profile."""

    name: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=1, max_length=100, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    email: str | None = Field(default=None, max_length=255)


class ProfileResponse(BaseModel):
    id: str
    name: str
    slug: str
    email: str | None
    created_at: datetime


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class UpdateSettingsPayload(BaseModel):
    """Request body for saving the caller's settings."""

    default_start_time: str | None = None
    default_end_time: str | None = None
    working_days: str = WorkingDays.WEEKDAYS
    github_username: str | None = Field(default=None, max_length=100)
    github_project_id: str | None = Field(default=None, max_length=100)
    github_branch: str | None = Field(default=None, max_length=255)


class SettingsResponse(BaseModel):
    user_id: str
    default_start_time: str | None
    default_end_time: str | None
    working_days: WorkingDays
    github_username: str | None
    github_project_id: str | None
    github_branch: str | None
    created_at: datetime | None
    updated_at: datetime | None


# ---------------------------------------------------------------------------
# Admin user management
# ---------------------------------------------------------------------------


class AuthorizeUserPayload(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    role: UserRole = UserRole.COLLABORATOR


class EmailPayload(BaseModel):
    email: str = Field(min_length=3, max_length=255)


class ManagedUser(BaseModel):
    """Active identity-provider user or a pending pre-authorization."""

    uid: str | None = None
    email: str | None
    display_name: str | None = None
    role: UserRole
    status: Literal["active", "pending"]
    added_by: str | None = None
    added_at: datetime | None = None


class ManagedUserListResponse(BaseModel):
    users: list[ManagedUser]


class UserActionResponse(BaseModel):
    success: bool = True
    message: str
    pre_authorized: bool = False


class DeletedDataResponse(BaseModel):
    user_id: str
    deleted_count: int
