"""Tests for hour conversion requests, the balance check and decisions."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest

from app.models.goal import MonthlyGoal
from app.models.time_record import TimeRecord

from conftest import ADMIN_HEADERS, ALICE_HEADERS, BOB_HEADERS

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

CONVERSIONS_URL = "/hour-conversions"


@pytest.fixture
async def alice_with_extra_hours(db_session: AsyncSession) -> None:
    """200h worked in March 2024 against an approved 176h goal: 24 extra hours."""
    for day in range(1, 21):
        db_session.add(
            TimeRecord(
                user_id="alice-uid",
                date=date(2024, 3, day),
                type="work",
                start_time="08:00",
                end_time="18:00",
                total_hours=10.0,
            )
        )
    db_session.add(
        MonthlyGoal(
            user_id="alice-uid",
            month="2024-03",
            hours_goal=176.0,
            status="approved",
            requested_by="admin-uid",
            approved_by="admin-uid",
        )
    )
    await db_session.commit()


async def _request(client: AsyncClient, headers: dict[str, str] = ALICE_HEADERS, **overrides: object):
    payload: dict[str, object] = {"hours": 4, "amount": 100, "type": "money", "date": "2024-04-02"}
    payload.update(overrides)
    return await client.post(CONVERSIONS_URL, json=payload, headers=headers)


@pytest.mark.usefixtures("alice_with_extra_hours")
async def test_conversion_bound(async_client: AsyncClient) -> None:
    response = await _request(async_client, headers=ADMIN_HEADERS, user_id="alice-uid", hours=5)
    assert response.status_code == 201
    assert response.json()["status"] == "approved"

    balance = await async_client.get(f"{CONVERSIONS_URL}/balance", headers=ALICE_HEADERS)
    assert balance.json()["available_hours"] == 19.0

    response = await _request(async_client, hours=20)
    assert response.status_code == 400
    assert response.json()["error"] == "InsufficientHoursError"
    assert "maximum available: 19h" in response.json()["detail"]

    response = await _request(async_client, hours=19)
    assert response.status_code == 201
    assert response.json()["status"] == "pending"


@pytest.mark.usefixtures("alice_with_extra_hours")
@pytest.mark.parametrize(
    "body",
    [
        '{"hours": NaN, "type": "money", "amount": 100}',
        '{"hours": 2, "type": "money", "amount": NaN}',
        '{"hours": Infinity, "type": "time_off"}',
    ],
)
async def test_non_finite_numbers_are_rejected(async_client: AsyncClient, body: str) -> None:
    response = await async_client.post(
        CONVERSIONS_URL, content=body, headers={**ALICE_HEADERS, "Content-Type": "application/json"}
    )
    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"

    listing = await async_client.get(CONVERSIONS_URL, headers=ALICE_HEADERS)
    assert listing.json()["total"] == 0


@pytest.mark.usefixtures("alice_with_extra_hours")
async def test_pending_conversion_does_not_reduce_balance(async_client: AsyncClient) -> None:
    response = await _request(async_client, hours=10)
    assert response.status_code == 201

    balance = await async_client.get(f"{CONVERSIONS_URL}/balance", headers=ALICE_HEADERS)
    assert balance.json()["available_hours"] == 24.0


@pytest.mark.usefixtures("alice_with_extra_hours")
async def test_approving_conversion_reduces_balance(async_client: AsyncClient) -> None:
    conversion = (await _request(async_client, hours=10)).json()

    response = await async_client.post(
        f"{CONVERSIONS_URL}/{conversion['id']}/decision", json={"action": "approve"}, headers=ADMIN_HEADERS
    )
    assert response.status_code == 200
    assert response.json()["approved_by"] == "admin-uid"

    balance = (await async_client.get(f"{CONVERSIONS_URL}/balance", headers=ALICE_HEADERS)).json()
    assert balance["available_hours"] == 14.0
    assert balance["converted_to_money"] == 10.0


@pytest.mark.usefixtures("alice_with_extra_hours")
async def test_time_off_conversion_forces_zero_amount(async_client: AsyncClient) -> None:
    response = await _request(async_client, type="time_off", amount=250)
    assert response.status_code == 201
    assert response.json()["amount"] == 0.0


@pytest.mark.usefixtures("alice_with_extra_hours")
async def test_money_conversion_requires_amount(async_client: AsyncClient) -> None:
    response = await _request(async_client, amount=0)
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


async def test_no_goal_means_no_balance(async_client: AsyncClient) -> None:
    response = await _request(async_client, hours=1)
    assert response.status_code == 400
    assert response.json()["error"] == "InsufficientHoursError"


async def test_cannot_request_for_another_user(async_client: AsyncClient) -> None:
    response = await _request(async_client, headers=BOB_HEADERS, user_id="alice-uid")
    assert response.status_code == 403

    response = await async_client.get(CONVERSIONS_URL, params={"userId": "alice-uid"}, headers=BOB_HEADERS)
    assert response.status_code == 403


@pytest.mark.usefixtures("alice_with_extra_hours")
async def test_list_conversions(async_client: AsyncClient) -> None:
    await _request(async_client, hours=1, date="2024-04-01")
    await _request(async_client, hours=2, date="2024-04-03")

    response = await async_client.get(CONVERSIONS_URL, headers=ALICE_HEADERS)
    assert response.status_code == 200
    assert [c["hours"] for c in response.json()["items"]] == [2.0, 1.0]
