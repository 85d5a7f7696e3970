"""Time ledger arithmetic: parsing, the midnight wrap rule, and day/month totals.

Everything here is a pure function over already-loaded records so that the
dashboard, the aggregator and the reports share one definition of a total.
"""

from __future__ import annotations

import re
from collections import defaultdict
from datetime import date
from typing import TYPE_CHECKING, Protocol

from app.exceptions import ValidationError
from app.models.enums import RecordType

if TYPE_CHECKING:
    from collections.abc import Iterable

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

MINUTES_PER_DAY = 24 * 60


class LedgerEntry(Protocol):
    """Anything carrying the three fields the totals read."""

    date: date
    type: str
    total_hours: float


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string that names a real calendar day."""
    if not _DATE_RE.match(value):
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid calendar date: {value}") from None


def time_to_minutes(value: str, field: str = "time") -> int:
    """Convert a two-digit ``HH:MM`` wall-clock time to minutes after midnight."""
    match = _TIME_RE.match(value)
    if match is None:
        raise ValidationError(f"Invalid {field} format. Use HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def validate_month(value: str) -> str:
    if not _MONTH_RE.match(value):
        raise ValidationError("Invalid month format. Use YYYY-MM")
    return value


def validate_record_type(value: str) -> RecordType:
    try:
        return RecordType(value)
    except ValueError:
        raise ValidationError('Invalid type. Must be "work" or "time_off"') from None


def calculate_total_hours(start_time: str, end_time: str) -> float:
    """Hours between two wall-clock times, wrapping past midnight.

    An end time earlier than the start time means the interval crossed
    midnight. Equal times are rejected: a record cannot be zero-length.
    """
    start = time_to_minutes(start_time, "startTime")
    end = time_to_minutes(end_time, "endTime")
    if start == end:
        raise ValidationError("startTime and endTime must differ")
    return ((end - start + MINUTES_PER_DAY) % MINUTES_PER_DAY) / 60


def month_of(day: date) -> str:
    return day.strftime("%Y-%m")


def current_month() -> str:
    return month_of(date.today())


def month_bounds(month: str) -> tuple[date, date]:
    """First day of ``month`` and first day of the following month."""
    year, number = (int(part) for part in validate_month(month).split("-"))
    start = date(year, number, 1)
    end = date(year + 1, 1, 1) if number == 12 else date(year, number + 1, 1)
    return start, end


def group_by_month(records: Iterable[LedgerEntry]) -> dict[str, list[LedgerEntry]]:
    """Bucket records by their ``YYYY-MM`` month."""
    grouped: dict[str, list[LedgerEntry]] = defaultdict(list)
    for record in records:
        grouped[month_of(record.date)].append(record)
    return dict(grouped)


def daily_total(records: Iterable[LedgerEntry], day: date) -> float:
    """Raw sum of ``total_hours`` on one day, regardless of record type."""
    return sum(r.total_hours for r in records if r.date == day)


def split_totals(records: Iterable[LedgerEntry], month: str) -> tuple[float, float, int]:
    """Return (work hours, time-off hours, record count) for a month."""
    work = 0.0
    time_off = 0.0
    count = 0
    for record in records:
        if month_of(record.date) != month:
            continue
        count += 1
        if record.type == RecordType.WORK:
            work += record.total_hours
        elif record.type == RecordType.TIME_OFF:
            time_off += record.total_hours
    return work, time_off, count


def monthly_total(records: Iterable[LedgerEntry], month: str) -> float:
    """Net hours for a month: work minus time off."""
    work, time_off, _ = split_totals(records, month)
    return work - time_off


def working_days(records: Iterable[LedgerEntry], month: str) -> int:
    """Number of distinct days in the month that have at least one record."""
    return len({r.date for r in records if month_of(r.date) == month})
