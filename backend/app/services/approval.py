# ruff: noqa: TC003
"""Approval state machine shared by monthly goals and hour conversions.

    pending --approve--> approved
    pending --reject---> rejected

Approved and rejected are terminal; trying again means submitting a new
request with a new id. Admin submissions skip ``pending`` entirely.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from app.exceptions import ForbiddenError, InvalidStateError, NotFoundError
from app.models.conversion import HourConversion
from app.models.enums import ApprovalKind, ApprovalStatus, ConversionType, DecisionAction
from app.models.goal import MonthlyGoal
from app.schemas.approval import PendingApprovalsResponse, PendingConversion, PendingGoal
from app.services.store import commit, fetch_all, fetch_one

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.models.base import ApprovalMixin
    from app.schemas.auth import AuthenticatedPrincipal
    from app.services.identity import IdentityService

logger = logging.getLogger(__name__)

_MODELS: dict[ApprovalKind, type[MonthlyGoal] | type[HourConversion]] = {
    ApprovalKind.GOAL: MonthlyGoal,
    ApprovalKind.CONVERSION: HourConversion,
}

_LABELS = {
    ApprovalKind.GOAL: "Goal",
    ApprovalKind.CONVERSION: "Conversion",
}

PENDING_LISTING_LIMIT = 100
UNKNOWN_USER = "Unknown"


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def apply_submission(entity: ApprovalMixin, requester: AuthenticatedPrincipal, now: datetime | None = None) -> None:
    """Set the initial workflow state of a freshly built entity."""
    entity.requested_by = requester.subject_id
    if requester.is_admin:
        entity.status = ApprovalStatus.APPROVED.value
        entity.approved_by = requester.subject_id
        entity.approved_at = now or datetime.now(UTC)
    else:
        entity.status = ApprovalStatus.PENDING.value
        entity.approved_by = None
        entity.approved_at = None


def apply_decision(
    entity: ApprovalMixin,
    kind: ApprovalKind,
    admin: AuthenticatedPrincipal,
    action: DecisionAction,
    now: datetime | None = None,
) -> None:
    """Move a pending entity to its terminal state."""
    if not admin.is_admin:
        raise ForbiddenError("Admin access required")
    if entity.status != ApprovalStatus.PENDING:
        raise InvalidStateError(f"{_LABELS[kind]} is not pending (current status: {entity.status})")
    entity.status = (ApprovalStatus.APPROVED if action == DecisionAction.APPROVE else ApprovalStatus.REJECTED).value
    entity.approved_by = admin.subject_id
    entity.approved_at = now or datetime.now(UTC)


async def decide(
    session: AsyncSession,
    kind: ApprovalKind,
    entity_id: uuid.UUID,
    admin: AuthenticatedPrincipal,
    action: DecisionAction,
) -> MonthlyGoal | HourConversion:
    """Approve or reject a pending goal or conversion."""
    if not admin.is_admin:
        raise ForbiddenError("Admin access required")

    model = _MODELS[kind]
    entity = await fetch_one(session, select(model).where(col(model.id) == entity_id))
    if entity is None:
        raise NotFoundError(f"{_LABELS[kind]} not found")

    apply_decision(entity, kind, admin, action)
    await commit(session)
    await session.refresh(entity)
    logger.info("%s %s %s by %s", _LABELS[kind], entity_id, entity.status, admin.subject_id)
    return entity


# ---------------------------------------------------------------------------
# Pending listings
# ---------------------------------------------------------------------------


class UserLookup:
    """Resolves requester identities once per listing, degrading to 'Unknown'."""

    def __init__(self, identity: IdentityService) -> None:
        self._identity = identity
        self._cache: dict[str, tuple[str, str]] = {}

    async def resolve(self, user_id: str) -> tuple[str, str]:
        """Return (email, display name) for a user id."""
        if user_id in self._cache:
            return self._cache[user_id]
        try:
            user = await self._identity.get_user(user_id)
        except Exception:
            logger.warning("Identity lookup failed for %s", user_id, exc_info=True)
            user = None
        if user is None:
            resolved = (UNKNOWN_USER, UNKNOWN_USER)
        else:
            email = user.email or UNKNOWN_USER
            resolved = (email, user.display_name or email)
        self._cache[user_id] = resolved
        return resolved


async def _pending(session: AsyncSession, kind: ApprovalKind, limit: int) -> list[MonthlyGoal | HourConversion]:
    model = _MODELS[kind]
    return await fetch_all(
        session,
        select(model)
        .where(col(model.status) == ApprovalStatus.PENDING.value)
        .order_by(col(model.created_at).desc())
        .limit(limit),
    )


async def list_pending_goals(
    session: AsyncSession,
    identity: IdentityService,
    limit: int = PENDING_LISTING_LIMIT,
    lookup: UserLookup | None = None,
) -> list[PendingGoal]:
    lookup = lookup or UserLookup(identity)
    items: list[PendingGoal] = []
    for goal in await _pending(session, ApprovalKind.GOAL, limit):
        email, name = await lookup.resolve(goal.user_id)
        items.append(
            PendingGoal(
                id=goal.id,
                user_id=goal.user_id,
                user_email=email,
                user_name=name,
                month=goal.month,
                hours_goal=goal.hours_goal,
                status=ApprovalStatus(goal.status),
                created_at=goal.created_at,
            )
        )
    return items


async def list_pending_conversions(
    session: AsyncSession,
    identity: IdentityService,
    limit: int = PENDING_LISTING_LIMIT,
    lookup: UserLookup | None = None,
) -> list[PendingConversion]:
    lookup = lookup or UserLookup(identity)
    items: list[PendingConversion] = []
    for conversion in await _pending(session, ApprovalKind.CONVERSION, limit):
        email, name = await lookup.resolve(conversion.user_id)
        items.append(
            PendingConversion(
                id=conversion.id,
                user_id=conversion.user_id,
                user_email=email,
                user_name=name,
                hours=conversion.hours,
                amount=conversion.amount,
                type=ConversionType(conversion.type),
                date=conversion.date,
                status=ApprovalStatus(conversion.status),
                created_at=conversion.created_at,
            )
        )
    return items


async def list_pending_approvals(session: AsyncSession, identity: IdentityService) -> PendingApprovalsResponse:
    """Pending conversions and goals, newest first, with requester identity."""
    lookup = UserLookup(identity)
    conversions = await list_pending_conversions(session, identity, lookup=lookup)
    goals = await list_pending_goals(session, identity, lookup=lookup)
    return PendingApprovalsResponse(
        conversions=conversions,
        goals=goals,
        total=len(conversions) + len(goals),
    )
