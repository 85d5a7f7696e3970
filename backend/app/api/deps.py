# ruff: noqa: B008
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header

from app.exceptions import ForbiddenError, UnauthenticatedError
from app.schemas.auth import AuthenticatedPrincipal
from app.services.generator import ReportGenerator, get_report_generator
from app.services.identity import IdentityService, IdentityUser, get_identity_service

IdentityDep = Annotated[IdentityService, Depends(get_identity_service)]
GeneratorDep = Annotated[ReportGenerator, Depends(get_report_generator)]


async def get_verified_user(
    identity: IdentityDep,
    authorization: str | None = Header(default=None),
) -> IdentityUser:
    """Resolve the bearer credential to an identity-provider user."""
    if not authorization:
        raise UnauthenticatedError("Missing authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedError("Authorization header must be a bearer token")
    return await identity.verify_token(token.strip())


VerifiedUserDep = Annotated[IdentityUser, Depends(get_verified_user)]


async def get_principal(user: VerifiedUserDep) -> AuthenticatedPrincipal:
    """Require an authorized user and expose it as the request principal."""
    if not user.authorized or user.role is None:
        raise UnauthenticatedError("User is not authorized")
    return AuthenticatedPrincipal(subject_id=user.uid, email=user.email, role=user.role)


AuthDep = Annotated[AuthenticatedPrincipal, Depends(get_principal)]


async def require_admin(auth: AuthDep) -> AuthenticatedPrincipal:
    """Require admin role for the request."""
    if not auth.is_admin:
        raise ForbiddenError("Admin access required")
    return auth


AdminDep = Annotated[AuthenticatedPrincipal, Depends(require_admin)]
