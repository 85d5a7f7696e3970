# ruff: noqa: TC003
from __future__ import annotations

from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from app.models.enums import UserRole, WorkingDays


def _now_utc() -> datetime:
    return datetime.now(UTC)


class UserProfile(SQLModel, table=True):
    """Display profile of an identity-provider user."""

    __tablename__ = "user_profile"

    id: str = Field(primary_key=True, max_length=128)
    name: str = Field(max_length=100)
    slug: str = Field(max_length=100, unique=True, index=True)
    email: str | None = Field(default=None, max_length=255)
    created_at: datetime = Field(
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )


class UserSettings(SQLModel, table=True):
    """Per-user preferences for the record form and commit lookups."""

    __tablename__ = "user_settings"

    user_id: str = Field(primary_key=True, max_length=128)
    default_start_time: str | None = Field(default=None, max_length=5)
    default_end_time: str | None = Field(default=None, max_length=5)
    working_days: str = Field(default=WorkingDays.WEEKDAYS, max_length=20)
    github_username: str | None = Field(default=None, max_length=100)
    github_project_id: str | None = Field(default=None, max_length=100)
    github_branch: str | None = Field(default=None, max_length=255)
    created_at: datetime = Field(
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )


class PreAuthorizedEmail(SQLModel, table=True):
    """Email granted a role before its owner first signs in."""

    __tablename__ = "pre_authorized_email"

    email: str = Field(primary_key=True, max_length=255)
    role: str = Field(default=UserRole.COLLABORATOR, max_length=20)
    added_by: str = Field(max_length=255)
    added_at: datetime = Field(
        default_factory=_now_utc,
        index=True,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
