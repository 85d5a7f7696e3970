from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db import get_session
from app.main import app
from app.models import SQLModel, UserRole
from app.schemas.auth import AuthenticatedPrincipal
from app.services.generator import set_report_generator
from app.services.github import set_github_client
from app.services.identity import IdentityUser, InMemoryIdentityService, set_identity_service

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

ADMIN_ID = "admin-uid"
ALICE_ID = "alice-uid"
BOB_ID = "bob-uid"

ADMIN_TOKEN = "admin-token"
ALICE_TOKEN = "alice-token"
BOB_TOKEN = "bob-token"


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


ADMIN_HEADERS = bearer(ADMIN_TOKEN)
ALICE_HEADERS = bearer(ALICE_TOKEN)
BOB_HEADERS = bearer(BOB_TOKEN)

ADMIN = AuthenticatedPrincipal(subject_id=ADMIN_ID, email="admin@example.com", role=UserRole.ADMIN)
ALICE = AuthenticatedPrincipal(subject_id=ALICE_ID, email="alice@example.com", role=UserRole.COLLABORATOR)
BOB = AuthenticatedPrincipal(subject_id=BOB_ID, email="bob@example.com", role=UserRole.COLLABORATOR)


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory SQLite database per test."""
    _engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def identity() -> Iterator[InMemoryIdentityService]:
    """Identity provider with one admin and two collaborators."""
    service = InMemoryIdentityService()
    service.seed(
        IdentityUser(
            uid=ADMIN_ID, email="admin@example.com", display_name="Ada Admin", authorized=True, role=UserRole.ADMIN
        ),
        ADMIN_TOKEN,
    )
    service.seed(
        IdentityUser(
            uid=ALICE_ID,
            email="alice@example.com",
            display_name="Alice",
            authorized=True,
            role=UserRole.COLLABORATOR,
        ),
        ALICE_TOKEN,
    )
    service.seed(
        IdentityUser(
            uid=BOB_ID, email="bob@example.com", display_name="Bob", authorized=True, role=UserRole.COLLABORATOR
        ),
        BOB_TOKEN,
    )
    set_identity_service(service)
    yield service
    set_identity_service(InMemoryIdentityService())


@pytest.fixture(autouse=True)
def _reset_collaborators() -> Iterator[None]:
    yield
    set_report_generator(None)
    set_github_client(None)


@pytest.fixture
async def async_client(db_session: AsyncSession, identity: InMemoryIdentityService) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
