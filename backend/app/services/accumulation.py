"""Extra-hours aggregation and conversion bounds."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Protocol

from app.exceptions import InsufficientHoursError, ValidationError
from app.models.enums import ApprovalStatus, ConversionType
from app.schemas.dashboard import AccumulatedHours
from app.services.hours import group_by_month, monthly_total

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from app.services.hours import LedgerEntry


class ConversionEntry(Protocol):
    type: str
    status: str
    hours: float


def compute_extra_hours(records: Sequence[LedgerEntry], approved_goals: Mapping[str, float]) -> float:
    """Sum the positive excess of net hours over each month's approved goal.

    A month without an approved goal (goal 0) never produces extra hours.
    """
    total = 0.0
    for month, month_records in group_by_month(records).items():
        goal = approved_goals.get(month, 0.0)
        if goal <= 0:
            continue
        net = monthly_total(month_records, month)
        if net > goal:
            total += net - goal
    return total


def compute_accumulated_hours(
    records: Sequence[LedgerEntry],
    approved_goals: Mapping[str, float],
    conversions: Iterable[ConversionEntry],
) -> AccumulatedHours:
    """Roll records, approved goals and conversions into one balance.

    Only approved conversions count. Time-off conversions generated from
    time-off records are created approved, so they are always included.
    The returned ``available_hours`` is not clamped.
    """
    total_extra = compute_extra_hours(records, approved_goals)
    converted_to_money = 0.0
    used_for_time_off = 0.0
    for conversion in conversions:
        if conversion.status != ApprovalStatus.APPROVED:
            continue
        if conversion.type == ConversionType.MONEY:
            converted_to_money += conversion.hours
        elif conversion.type == ConversionType.TIME_OFF:
            used_for_time_off += conversion.hours

    return AccumulatedHours(
        total_extra_hours=total_extra,
        available_hours=total_extra - converted_to_money - used_for_time_off,
        converted_to_money=converted_to_money,
        used_for_time_off=used_for_time_off,
    )


def validate_conversion_request(
    hours: float,
    amount: float,
    conversion_type: ConversionType,
    available_hours: float,
) -> None:
    """Reject a conversion that is malformed or exceeds the balance."""
    if not math.isfinite(hours) or hours <= 0:
        raise ValidationError("hours must be greater than 0")
    if conversion_type == ConversionType.MONEY and (not math.isfinite(amount) or amount <= 0):
        raise ValidationError("amount must be greater than 0 for money conversions")
    if hours > available_hours:
        raise InsufficientHoursError(
            f"Requested {hours:g}h exceeds available extra hours (maximum available: {max(0.0, available_hours):g}h)"
        )
