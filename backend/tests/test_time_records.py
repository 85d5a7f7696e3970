"""Tests for the time ledger endpoints and the linked time-off conversion."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from sqlalchemy import select

from app.models.conversion import HourConversion

from conftest import ADMIN_HEADERS, ALICE_HEADERS, BOB_HEADERS

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

RECORDS_URL = "/time-records"


def _record_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "name": "Sprint work",
        "date": "2024-03-04",
        "start_time": "09:00",
        "end_time": "18:00",
        "type": "work",
        "description": "Implemented the export",
    }
    payload.update(overrides)
    return payload


async def _create(client: AsyncClient, headers: dict[str, str] = ALICE_HEADERS, **overrides: object) -> dict:
    response = await client.post(RECORDS_URL, json=_record_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def _conversions(db_session: AsyncSession) -> list[HourConversion]:
    return list((await db_session.execute(select(HourConversion))).scalars().all())


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def test_create_record_computes_total(async_client: AsyncClient) -> None:
    data = await _create(async_client)
    assert data["total_hours"] == 9.0
    assert data["user_id"] == "alice-uid"
    assert data["type"] == "work"


async def test_record_round_trip_preserves_fields(async_client: AsyncClient) -> None:
    created = await _create(async_client, date="2024-02-29", start_time="22:00", end_time="06:30", type="work")

    response = await async_client.get(RECORDS_URL, headers=ALICE_HEADERS)
    assert response.status_code == 200
    [stored] = response.json()["items"]
    for field in ("date", "type", "start_time", "end_time", "total_hours"):
        assert stored[field] == created[field]
    assert stored["date"] == "2024-02-29"
    assert stored["total_hours"] == 8.5


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"start_time": "09:00", "end_time": "09:00"}, "must differ"),
        ({"start_time": "9:00"}, "HH:MM"),
        ({"date": "2024-02-30"}, "calendar date"),
        ({"type": "holiday"}, "Invalid type"),
    ],
)
async def test_create_record_validation(async_client: AsyncClient, overrides: dict, message: str) -> None:
    response = await async_client.post(RECORDS_URL, json=_record_payload(**overrides), headers=ALICE_HEADERS)
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"
    assert message in response.json()["detail"]


async def test_collaborator_cannot_create_for_another_user(async_client: AsyncClient) -> None:
    response = await async_client.post(
        RECORDS_URL, json=_record_payload(user_id="bob-uid"), headers=ALICE_HEADERS
    )
    assert response.status_code == 403


async def test_admin_can_create_for_another_user(async_client: AsyncClient) -> None:
    data = await _create(async_client, headers=ADMIN_HEADERS, user_id="bob-uid")
    assert data["user_id"] == "bob-uid"


async def test_name_and_description_are_trimmed(async_client: AsyncClient) -> None:
    data = await _create(async_client, name="  " + "n" * 150, description="   ")
    assert data["name"] == "n" * 100
    assert data["description"] is None


async def test_missing_credential_is_unauthenticated(async_client: AsyncClient) -> None:
    response = await async_client.get(RECORDS_URL)
    assert response.status_code == 401
    response = await async_client.get(RECORDS_URL, headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


# ---------------------------------------------------------------------------
# Linked time-off conversion
# ---------------------------------------------------------------------------


async def test_time_off_record_creates_one_approved_conversion(
    async_client: AsyncClient, db_session: AsyncSession
) -> None:
    record = await _create(async_client, type="time_off", start_time="13:00", end_time="17:00")

    conversions = await _conversions(db_session)
    assert len(conversions) == 1
    [conversion] = conversions
    assert conversion.type == "time_off"
    assert conversion.hours == 4.0
    assert conversion.status == "approved"
    assert conversion.user_id == "alice-uid"
    assert str(conversion.time_record_id) == record["id"]


async def test_work_record_creates_no_conversion(async_client: AsyncClient, db_session: AsyncSession) -> None:
    await _create(async_client)
    assert await _conversions(db_session) == []


async def test_update_keeps_linked_conversion_in_step(async_client: AsyncClient, db_session: AsyncSession) -> None:
    record = await _create(async_client, type="time_off", start_time="13:00", end_time="17:00")

    response = await async_client.patch(
        f"{RECORDS_URL}/{record['id']}", json={"end_time": "19:00"}, headers=ALICE_HEADERS
    )
    assert response.status_code == 200
    assert response.json()["total_hours"] == 6.0
    [conversion] = await _conversions(db_session)
    await db_session.refresh(conversion)
    assert conversion.hours == 6.0

    response = await async_client.patch(f"{RECORDS_URL}/{record['id']}", json={"type": "work"}, headers=ALICE_HEADERS)
    assert response.status_code == 200
    assert await _conversions(db_session) == []


async def test_delete_removes_linked_conversion(async_client: AsyncClient, db_session: AsyncSession) -> None:
    record = await _create(async_client, type="time_off", start_time="13:00", end_time="17:00")

    response = await async_client.delete(f"{RECORDS_URL}/{record['id']}", headers=ALICE_HEADERS)
    assert response.status_code == 204
    assert await _conversions(db_session) == []


async def test_conversion_failure_does_not_fail_record(async_client: AsyncClient, db_session: AsyncSession) -> None:
    with patch(
        "app.services.time_record.get_linked_conversion",
        side_effect=RuntimeError("store unavailable"),
    ):
        response = await async_client.post(
            RECORDS_URL, json=_record_payload(type="time_off"), headers=ALICE_HEADERS
        )

    assert response.status_code == 201
    assert await _conversions(db_session) == []
    listing = await async_client.get(RECORDS_URL, headers=ALICE_HEADERS)
    assert listing.json()["total"] == 1


# ---------------------------------------------------------------------------
# Update / delete / list
# ---------------------------------------------------------------------------


async def test_update_recomputes_total(async_client: AsyncClient) -> None:
    record = await _create(async_client)
    response = await async_client.patch(
        f"{RECORDS_URL}/{record['id']}", json={"start_time": "10:00", "name": "Review"}, headers=ALICE_HEADERS
    )
    assert response.status_code == 200
    data = response.json()
    assert data["total_hours"] == 8.0
    assert data["name"] == "Review"


async def test_update_missing_record(async_client: AsyncClient) -> None:
    response = await async_client.patch(f"{RECORDS_URL}/{uuid.uuid4()}", json={"name": "x"}, headers=ALICE_HEADERS)
    assert response.status_code == 404


async def test_other_collaborator_cannot_modify(async_client: AsyncClient) -> None:
    record = await _create(async_client)

    response = await async_client.patch(f"{RECORDS_URL}/{record['id']}", json={"name": "x"}, headers=BOB_HEADERS)
    assert response.status_code == 403
    response = await async_client.delete(f"{RECORDS_URL}/{record['id']}", headers=BOB_HEADERS)
    assert response.status_code == 403


async def test_admin_can_delete_any_record(async_client: AsyncClient) -> None:
    record = await _create(async_client)
    response = await async_client.delete(f"{RECORDS_URL}/{record['id']}", headers=ADMIN_HEADERS)
    assert response.status_code == 204


async def test_list_orders_newest_date_first(async_client: AsyncClient) -> None:
    await _create(async_client, date="2024-03-01")
    await _create(async_client, date="2024-03-05")
    await _create(async_client, date="2024-03-03")

    response = await async_client.get(RECORDS_URL, headers=ALICE_HEADERS)
    assert [r["date"] for r in response.json()["items"]] == ["2024-03-05", "2024-03-03", "2024-03-01"]


async def test_listing_scope(async_client: AsyncClient) -> None:
    await _create(async_client)
    await _create(async_client, headers=BOB_HEADERS)

    response = await async_client.get(RECORDS_URL, headers=ADMIN_HEADERS)
    assert response.json()["total"] == 2

    response = await async_client.get(RECORDS_URL, params={"userId": "bob-uid"}, headers=ALICE_HEADERS)
    assert response.status_code == 403

    response = await async_client.get(RECORDS_URL, headers=BOB_HEADERS)
    assert [r["user_id"] for r in response.json()["items"]] == ["bob-uid"]
