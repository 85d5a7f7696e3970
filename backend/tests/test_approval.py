"""Tests for the goal/conversion approval state machine."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

import pytest

from app.exceptions import ForbiddenError, InvalidStateError, NotFoundError
from app.models.conversion import HourConversion
from app.models.enums import ApprovalKind, ApprovalStatus, DecisionAction
from app.models.goal import MonthlyGoal
from app.services.approval import apply_decision, apply_submission, decide, list_pending_approvals
from app.services.identity import IdentityUser, InMemoryIdentityService

from conftest import ADMIN, ALICE

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthenticatedPrincipal


def _goal(requester: AuthenticatedPrincipal, month: str = "2024-03") -> MonthlyGoal:
    goal = MonthlyGoal(user_id=ALICE.subject_id, month=month, hours_goal=160.0, requested_by=requester.subject_id)
    apply_submission(goal, requester)
    return goal


# ---------------------------------------------------------------------------
# Pure transitions
# ---------------------------------------------------------------------------


def test_collaborator_submission_is_pending() -> None:
    goal = _goal(ALICE)
    assert goal.status == ApprovalStatus.PENDING
    assert goal.approved_by is None
    assert goal.approved_at is None


def test_admin_submission_is_approved_immediately() -> None:
    goal = _goal(ADMIN)
    assert goal.status == ApprovalStatus.APPROVED
    assert goal.approved_by == ADMIN.subject_id
    assert goal.approved_at is not None


@pytest.mark.parametrize(
    ("action", "expected"),
    [(DecisionAction.APPROVE, ApprovalStatus.APPROVED), (DecisionAction.REJECT, ApprovalStatus.REJECTED)],
)
def test_decision_reaches_terminal_state(action: DecisionAction, expected: ApprovalStatus) -> None:
    goal = _goal(ALICE)
    apply_decision(goal, ApprovalKind.GOAL, ADMIN, action)
    assert goal.status == expected
    assert goal.approved_by == ADMIN.subject_id


@pytest.mark.parametrize("second", [DecisionAction.APPROVE, DecisionAction.REJECT])
def test_second_decision_fails_and_keeps_first_outcome(second: DecisionAction) -> None:
    goal = _goal(ALICE)
    apply_decision(goal, ApprovalKind.GOAL, ADMIN, DecisionAction.APPROVE)

    with pytest.raises(InvalidStateError, match="not pending"):
        apply_decision(goal, ApprovalKind.GOAL, ADMIN, second)
    assert goal.status == ApprovalStatus.APPROVED


def test_collaborator_cannot_decide() -> None:
    goal = _goal(ALICE)
    with pytest.raises(ForbiddenError):
        apply_decision(goal, ApprovalKind.GOAL, ALICE, DecisionAction.APPROVE)
    assert goal.status == ApprovalStatus.PENDING


# ---------------------------------------------------------------------------
# Persisted decisions
# ---------------------------------------------------------------------------


async def test_decide_twice_raises_invalid_state(db_session: AsyncSession) -> None:
    goal = _goal(ALICE)
    db_session.add(goal)
    await db_session.commit()

    decided = await decide(db_session, ApprovalKind.GOAL, goal.id, ADMIN, DecisionAction.REJECT)
    assert decided.status == ApprovalStatus.REJECTED

    with pytest.raises(InvalidStateError):
        await decide(db_session, ApprovalKind.GOAL, goal.id, ADMIN, DecisionAction.APPROVE)

    await db_session.refresh(goal)
    assert goal.status == ApprovalStatus.REJECTED


async def test_decide_missing_entity(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await decide(db_session, ApprovalKind.CONVERSION, uuid.uuid4(), ADMIN, DecisionAction.APPROVE)


async def test_decide_checks_role_before_existence(db_session: AsyncSession) -> None:
    with pytest.raises(ForbiddenError):
        await decide(db_session, ApprovalKind.GOAL, uuid.uuid4(), ALICE, DecisionAction.APPROVE)


# ---------------------------------------------------------------------------
# Pending listing
# ---------------------------------------------------------------------------


class _FailingIdentity(InMemoryIdentityService):
    async def get_user(self, uid: str) -> IdentityUser | None:
        raise ConnectionError("identity provider unreachable")


async def test_pending_listing_annotates_requester(db_session: AsyncSession) -> None:
    identity = InMemoryIdentityService()
    identity.seed(IdentityUser(uid=ALICE.subject_id, email="alice@example.com", display_name="Alice", authorized=True))

    db_session.add(_goal(ALICE))
    db_session.add(_goal(ADMIN, month="2024-04"))
    conversion = HourConversion(
        user_id=ALICE.subject_id,
        hours=2.0,
        amount=40.0,
        type="money",
        date=date(2024, 3, 10),
        requested_by=ALICE.subject_id,
    )
    apply_submission(conversion, ALICE)
    db_session.add(conversion)
    await db_session.commit()

    result = await list_pending_approvals(db_session, identity)

    assert result.total == 2
    assert [g.month for g in result.goals] == ["2024-03"]
    assert result.goals[0].user_name == "Alice"
    assert result.goals[0].user_email == "alice@example.com"
    assert result.conversions[0].hours == 2.0


async def test_pending_listing_degrades_to_unknown(db_session: AsyncSession) -> None:
    db_session.add(_goal(ALICE))
    await db_session.commit()

    result = await list_pending_approvals(db_session, _FailingIdentity())

    assert result.goals[0].user_name == "Unknown"
    assert result.goals[0].user_email == "Unknown"
