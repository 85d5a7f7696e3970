"""Authorization bootstrap and admin management of who may use the service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.enums import UserRole
from app.models.user import PreAuthorizedEmail
from app.schemas.auth import AuthCheckResponse
from app.schemas.user import ManagedUser, ManagedUserListResponse, UserActionResponse
from app.services.store import commit, fetch_all, fetch_one

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthenticatedPrincipal
    from app.services.identity import IdentityService, IdentityUser

logger = logging.getLogger(__name__)


def should_bootstrap_admin(authorized_user_count: int) -> bool:
    """The first caller to authenticate before anyone is authorized becomes admin."""
    return authorized_user_count == 0


async def _count_authorized(identity: IdentityService, role: UserRole | None = None) -> int:
    users = await identity.list_users()
    return sum(1 for u in users if u.authorized and (role is None or u.role == role))


async def get_pre_authorized_email(session: AsyncSession, email: str) -> PreAuthorizedEmail | None:
    return await fetch_one(
        session, select(PreAuthorizedEmail).where(col(PreAuthorizedEmail.email) == email.lower())
    )


async def check_authorization(
    session: AsyncSession,
    identity: IdentityService,
    user: IdentityUser,
) -> AuthCheckResponse:
    """Resolve whether a verified user may use the service, granting access on first login.

    Order: existing claims, first-user bootstrap, pre-authorized email.
    """
    if user.authorized and user.role is not None:
        return AuthCheckResponse(authorized=True, uid=user.uid, email=user.email, role=user.role)

    if not user.email:
        return AuthCheckResponse(authorized=False, uid=user.uid)

    if should_bootstrap_admin(await _count_authorized(identity)):
        await identity.set_claims(user.uid, authorized=True, role=UserRole.ADMIN)
        logger.info("Bootstrapped %s as the first admin", user.email)
        return AuthCheckResponse(
            authorized=True, uid=user.uid, email=user.email, role=UserRole.ADMIN, first_user=True
        )

    pre_authorized = await get_pre_authorized_email(session, user.email)
    if pre_authorized is not None:
        role = UserRole(pre_authorized.role)
        await identity.set_claims(user.uid, authorized=True, role=role)
        logger.info("Auto-authorized pre-approved email %s as %s", user.email, role)
        return AuthCheckResponse(
            authorized=True, uid=user.uid, email=user.email, role=role, auto_authorized=True
        )

    return AuthCheckResponse(authorized=False, uid=user.uid, email=user.email)


# ---------------------------------------------------------------------------
# Admin user management
# ---------------------------------------------------------------------------


async def list_managed_users(session: AsyncSession, identity: IdentityService) -> ManagedUserListResponse:
    """Active users then pending pre-authorizations; admins first, then by email."""
    active = [
        ManagedUser(
            uid=u.uid,
            email=u.email,
            display_name=u.display_name,
            role=u.role or UserRole.COLLABORATOR,
            status="active",
        )
        for u in await identity.list_users()
        if u.authorized
    ]
    pre_authorized = await fetch_all(
        session, select(PreAuthorizedEmail).order_by(col(PreAuthorizedEmail.added_at).desc())
    )
    pending = [
        ManagedUser(
            email=p.email,
            role=UserRole(p.role),
            status="pending",
            added_by=p.added_by,
            added_at=p.added_at,
        )
        for p in pre_authorized
    ]
    users = sorted(
        active + pending,
        key=lambda u: (u.status != "active", u.role != UserRole.ADMIN, (u.email or "").lower()),
    )
    return ManagedUserListResponse(users=users)


async def authorize_user(
    session: AsyncSession,
    identity: IdentityService,
    admin: AuthenticatedPrincipal,
    email: str,
    role: UserRole,
) -> UserActionResponse:
    """Authorize a known user, or pre-authorize an email nobody has signed in with yet."""
    target = await identity.get_user_by_email(email)
    if target is None:
        existing = await get_pre_authorized_email(session, email)
        if existing is None:
            session.add(PreAuthorizedEmail(email=email.lower(), role=role.value, added_by=admin.email or admin.subject_id))
        else:
            existing.role = role.value
            existing.added_by = admin.email or admin.subject_id
        await commit(session)
        return UserActionResponse(
            message=f"Email {email} pre-authorized as {role}; access is granted on first sign-in",
            pre_authorized=True,
        )

    if target.authorized:
        raise ConflictError("User is already authorized")

    await identity.set_claims(target.uid, authorized=True, role=role)
    logger.info("%s authorized %s as %s", admin.subject_id, email, role)
    return UserActionResponse(message=f"User {email} authorized as {role}")


async def revoke_user(
    session: AsyncSession,
    identity: IdentityService,
    admin: AuthenticatedPrincipal,
    email: str,
) -> UserActionResponse:
    """Remove a user's authorization (or a pending pre-authorization)."""
    pre_authorized = await get_pre_authorized_email(session, email)
    target = await identity.get_user_by_email(email)

    if target is None:
        if pre_authorized is None:
            raise NotFoundError("Email not found")
        await session.delete(pre_authorized)
        await commit(session)
        return UserActionResponse(message=f"Email {email} removed from the pre-authorized list")

    if target.role == UserRole.ADMIN and target.authorized and await _count_authorized(identity, UserRole.ADMIN) <= 1:
        raise ValidationError("Cannot remove the last administrator")

    await identity.set_claims(target.uid, authorized=False, role=None)
    if pre_authorized is not None:
        await session.delete(pre_authorized)
        await commit(session)
    logger.info("%s revoked access of %s", admin.subject_id, email)
    return UserActionResponse(message=f"Authorization of {email} removed")


async def _get_authorized_user(identity: IdentityService, email: str) -> IdentityUser:
    target = await identity.get_user_by_email(email)
    if target is None:
        raise NotFoundError("User not found")
    if not target.authorized:
        raise ValidationError("User is not authorized")
    return target


async def promote_user(identity: IdentityService, admin: AuthenticatedPrincipal, email: str) -> UserActionResponse:
    target = await _get_authorized_user(identity, email)
    if target.role == UserRole.ADMIN:
        raise ValidationError("User is already an administrator")
    await identity.set_claims(target.uid, authorized=True, role=UserRole.ADMIN)
    logger.info("%s promoted %s to admin", admin.subject_id, email)
    return UserActionResponse(message=f"User {email} promoted to administrator")


async def demote_user(identity: IdentityService, admin: AuthenticatedPrincipal, email: str) -> UserActionResponse:
    target = await _get_authorized_user(identity, email)
    if target.role != UserRole.ADMIN:
        raise ValidationError("User is not an administrator")
    if await _count_authorized(identity, UserRole.ADMIN) <= 1:
        raise ValidationError("Cannot demote the last administrator")
    await identity.set_claims(target.uid, authorized=True, role=UserRole.COLLABORATOR)
    logger.info("%s demoted %s to collaborator", admin.subject_id, email)
    return UserActionResponse(message=f"User {email} demoted to collaborator")
