"""Tests for credential resolution and the authorization bootstrap."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from app.models.enums import UserRole
from app.models.user import PreAuthorizedEmail
from app.services.access import should_bootstrap_admin
from app.services.identity import IdentityUser, InMemoryIdentityService, set_identity_service

from conftest import bearer

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

NEWCOMER = IdentityUser(uid="carol-uid", email="Carol@Example.com", display_name="Carol")
NEWCOMER_HEADERS = bearer("carol-token")


@pytest.mark.parametrize(("count", "expected"), [(0, True), (1, False), (7, False)])
def test_should_bootstrap_admin(count: int, expected: bool) -> None:
    assert should_bootstrap_admin(count) is expected


async def test_authorized_user_gets_role(async_client: AsyncClient) -> None:
    response = await async_client.get("/auth/check", headers={"Authorization": "Bearer alice-token"})
    assert response.status_code == 200
    data = response.json()
    assert data["authorized"] is True
    assert data["role"] == "collaborator"
    assert data["first_user"] is False


async def test_first_user_becomes_admin(async_client: AsyncClient) -> None:
    identity = InMemoryIdentityService()
    identity.seed(NEWCOMER, "carol-token")
    identity.seed(IdentityUser(uid="dave-uid", email="dave@example.com"), "dave-token")
    set_identity_service(identity)

    response = await async_client.get("/auth/check", headers=NEWCOMER_HEADERS)
    data = response.json()
    assert data["authorized"] is True
    assert data["role"] == "admin"
    assert data["first_user"] is True

    # The bootstrap happens once; the next newcomer is not promoted.
    response = await async_client.get("/auth/check", headers={"Authorization": "Bearer dave-token"})
    assert response.json()["authorized"] is False

    response = await async_client.get("/admin/users", headers=NEWCOMER_HEADERS)
    assert response.status_code == 200


async def test_pre_authorized_email_is_granted_on_check(
    async_client: AsyncClient,
    db_session: AsyncSession,
    identity: InMemoryIdentityService,
) -> None:
    identity.seed(NEWCOMER, "carol-token")
    db_session.add(PreAuthorizedEmail(email="carol@example.com", role=UserRole.ADMIN.value, added_by="admin-uid"))
    await db_session.commit()

    response = await async_client.get("/auth/check", headers=NEWCOMER_HEADERS)
    data = response.json()
    assert data["authorized"] is True
    assert data["auto_authorized"] is True
    assert data["role"] == "admin"

    user = await identity.get_user("carol-uid")
    assert user is not None
    assert user.authorized is True


async def test_unknown_user_stays_unauthorized(async_client: AsyncClient, identity: InMemoryIdentityService) -> None:
    identity.seed(NEWCOMER, "carol-token")

    response = await async_client.get("/auth/check", headers=NEWCOMER_HEADERS)
    assert response.status_code == 200
    assert response.json()["authorized"] is False

    response = await async_client.get("/time-records", headers=NEWCOMER_HEADERS)
    assert response.status_code == 401
    assert response.json()["detail"] == "User is not authorized"


@pytest.mark.parametrize(
    "header",
    [None, "Basic YWxpY2U6c2VjcmV0", "Bearer ", "Bearer forged-token"],
)
async def test_bad_credentials_are_rejected(async_client: AsyncClient, header: str | None) -> None:
    headers = {"Authorization": header} if header is not None else {}
    response = await async_client.get("/auth/check", headers=headers)
    assert response.status_code == 401
    assert response.json()["error"] == "UnauthenticatedError"


async def test_admin_routes_require_admin(async_client: AsyncClient) -> None:
    response = await async_client.get("/admin/pending-approvals", headers={"Authorization": "Bearer alice-token"})
    assert response.status_code == 403
    assert response.json()["error"] == "ForbiddenError"
