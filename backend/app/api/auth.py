from __future__ import annotations

from fastapi import APIRouter

from app.api.deps import IdentityDep, VerifiedUserDep
from app.db import SessionDep
from app.schemas.auth import AuthCheckResponse
from app.services.access import check_authorization

auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.get("/check", response_model=AuthCheckResponse)
async def auth_check(
    session: SessionDep,
    identity: IdentityDep,
    user: VerifiedUserDep,
) -> AuthCheckResponse:
    """Resolve the caller's authorization, granting access on first sign-in where allowed."""
    return await check_authorization(session, identity, user)
