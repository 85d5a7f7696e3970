"""Tests for the dashboard endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

from conftest import ADMIN_HEADERS, ALICE_HEADERS, BOB_HEADERS

if TYPE_CHECKING:
    from httpx import AsyncClient


async def _log(client: AsyncClient, day: str, start: str, end: str, record_type: str = "work") -> None:
    response = await client.post(
        "/time-records",
        json={"date": day, "start_time": start, "end_time": end, "type": record_type},
        headers=ALICE_HEADERS,
    )
    assert response.status_code == 201


async def test_dashboard_without_goal(async_client: AsyncClient) -> None:
    await _log(async_client, "2024-03-04", "09:00", "18:00")
    await _log(async_client, "2024-03-04", "19:00", "21:00")
    await _log(async_client, "2024-03-05", "09:00", "17:00")

    response = await async_client.get(
        "/dashboard", params={"date": "2024-03-04", "month": "2024-03"}, headers=ALICE_HEADERS
    )
    assert response.status_code == 200
    data = response.json()

    assert data["user_id"] == "alice-uid"
    assert data["daily_stats"]["total_hours"] == 11.0
    assert len(data["daily_stats"]["records"]) == 2

    monthly = data["monthly_stats"]
    assert monthly["total_hours"] == 19.0
    assert monthly["goal"] == 0.0
    assert monthly["is_over_goal"] is False
    assert monthly["working_days"] == 2

    assert data["accumulated_hours"]["total_extra_hours"] == 0.0


async def test_dashboard_with_goal_and_time_off(async_client: AsyncClient) -> None:
    response = await async_client.post(
        "/monthly-goals",
        json={"user_id": "alice-uid", "month": "2024-03", "hours_goal": 10},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 201

    await _log(async_client, "2024-03-04", "08:00", "20:00")
    await _log(async_client, "2024-03-05", "08:00", "12:00")
    await _log(async_client, "2024-03-06", "13:00", "15:00", record_type="time_off")

    data = (await async_client.get("/dashboard", params={"month": "2024-03"}, headers=ALICE_HEADERS)).json()

    monthly = data["monthly_stats"]
    assert monthly["total_hours"] == 14.0
    assert monthly["goal"] == 10.0
    assert monthly["difference"] == 4.0
    assert monthly["is_over_goal"] is True

    accumulated = data["accumulated_hours"]
    assert accumulated["total_extra_hours"] == 4.0
    assert accumulated["used_for_time_off"] == 2.0
    assert accumulated["available_hours"] == 2.0
    assert [c["type"] for c in data["hour_conversions"]] == ["time_off"]


async def test_dashboard_under_goal_reports_absolute_difference(async_client: AsyncClient) -> None:
    await async_client.post(
        "/monthly-goals",
        json={"user_id": "alice-uid", "month": "2024-03", "hours_goal": 40},
        headers=ADMIN_HEADERS,
    )
    await _log(async_client, "2024-03-04", "09:00", "17:00")

    monthly = (await async_client.get("/dashboard", params={"month": "2024-03"}, headers=ALICE_HEADERS)).json()[
        "monthly_stats"
    ]
    assert monthly["difference"] == 32.0
    assert monthly["is_over_goal"] is False


async def test_dashboard_access(async_client: AsyncClient) -> None:
    response = await async_client.get("/dashboard", params={"userId": "alice-uid"}, headers=BOB_HEADERS)
    assert response.status_code == 403

    response = await async_client.get("/dashboard", params={"userId": "alice-uid"}, headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert response.json()["user_id"] == "alice-uid"


async def test_dashboard_rejects_bad_month(async_client: AsyncClient) -> None:
    response = await async_client.get("/dashboard", params={"month": "March"}, headers=ALICE_HEADERS)
    assert response.status_code == 400
