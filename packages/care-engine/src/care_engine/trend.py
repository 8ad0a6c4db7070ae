from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone
from typing import Any

from care_engine.models import (
    AppointmentStatus,
    RegistrationCount,
    RegistrationPoint,
    StatusCount,
    TimestampedRecord,
    TrendPoint,
)

TREND_WINDOW_DAYS = 30
TREND_SAMPLE_STEP = 3
REGISTRATION_WINDOW_DAYS = 7

_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def to_calendar_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        return to_calendar_date(parsed)
    return None


def format_day_label(day: date) -> str:
    return f"{_MONTH_ABBREVIATIONS[day.month - 1]} {day.day}"


def trend_window(today: date, days: int = TREND_WINDOW_DAYS) -> list[date]:
    if days <= 0:
        raise ValueError("days must be > 0")
    end = to_calendar_date(today)
    if end is None:
        raise ValueError("today must be a date")
    return [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def _empty_buckets(window: list[date]) -> dict[date, dict[AppointmentStatus, int]]:
    return {day: {status: 0 for status in AppointmentStatus} for day in window}


def _to_points(window: list[date], buckets: dict[date, dict[AppointmentStatus, int]]) -> list[TrendPoint]:
    return [
        TrendPoint(
            label=format_day_label(day),
            scheduled=buckets[day][AppointmentStatus.SCHEDULED],
            completed=buckets[day][AppointmentStatus.COMPLETED],
            cancelled=buckets[day][AppointmentStatus.CANCELLED],
        )
        for index, day in enumerate(window)
        if index % TREND_SAMPLE_STEP == 0
    ]


def aggregate_trend(records: Iterable[TimestampedRecord], today: date) -> list[TrendPoint]:
    window = trend_window(today)
    buckets = _empty_buckets(window)
    for record in records:
        day = to_calendar_date(record.timestamp)
        if day not in buckets:
            continue
        buckets[day][AppointmentStatus.parse(record.status)] += 1
    return _to_points(window, buckets)


def aggregate_status_counts(rows: Iterable[StatusCount], today: date) -> list[TrendPoint]:
    window = trend_window(today)
    buckets = _empty_buckets(window)
    for row in rows:
        day = to_calendar_date(row.date)
        if day not in buckets or row.count <= 0:
            continue
        buckets[day][AppointmentStatus.parse(row.status)] += row.count
    return _to_points(window, buckets)


def registration_trend(
    rows: Iterable[RegistrationCount],
    today: date,
    days: int = REGISTRATION_WINDOW_DAYS,
) -> list[RegistrationPoint]:
    window = trend_window(today, days=days)
    patients: Counter[date] = Counter()
    doctors: Counter[date] = Counter()
    for row in rows:
        day = to_calendar_date(row.date)
        if day is None:
            continue
        if row.role == "patient":
            patients[day] += row.count
        elif row.role == "doctor":
            doctors[day] += row.count
    return [
        RegistrationPoint(label=format_day_label(day), patients=patients[day], doctors=doctors[day])
        for day in window
    ]


def status_distribution(records: Iterable[TimestampedRecord]) -> dict[str, int]:
    counts = {status.value: 0 for status in AppointmentStatus}
    for record in records:
        counts[AppointmentStatus.parse(record.status).value] += 1
    return counts
