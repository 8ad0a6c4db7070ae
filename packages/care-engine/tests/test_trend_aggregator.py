from datetime import date, datetime, timedelta, timezone

import pytest

from care_engine.models import (
    AppointmentStatus,
    RegistrationCount,
    StatusCount,
    TimestampedRecord,
    TrendPoint,
)
from care_engine.trend import (
    aggregate_status_counts,
    aggregate_trend,
    format_day_label,
    registration_trend,
    status_distribution,
    to_calendar_date,
    trend_window,
)

TODAY = date(2026, 3, 30)


def test_trend_always_has_ten_points() -> None:
    assert len(aggregate_trend([], TODAY)) == 10


def test_daily_completed_records_fill_every_sampled_point() -> None:
    records = [
        TimestampedRecord(timestamp=TODAY - timedelta(days=offset), status=AppointmentStatus.COMPLETED)
        for offset in range(30)
    ]

    points = aggregate_trend(records, TODAY)

    assert len(points) == 10
    assert all(point.completed == 1 for point in points)
    assert all(point.scheduled == 0 and point.cancelled == 0 for point in points)


def test_records_outside_window_are_ignored() -> None:
    records = [
        TimestampedRecord(timestamp=TODAY - timedelta(days=30)),
        TimestampedRecord(timestamp=TODAY + timedelta(days=1)),
    ]

    points = aggregate_trend(records, TODAY)

    assert points == aggregate_trend([], TODAY)


def test_window_starts_29_days_before_today() -> None:
    window = trend_window(TODAY)

    assert window[0] == TODAY - timedelta(days=29)
    assert window[-1] == TODAY
    assert len(window) == 30


def test_sampled_points_are_every_third_day() -> None:
    points = aggregate_trend([], TODAY)
    window = trend_window(TODAY)

    assert [point.label for point in points] == [format_day_label(window[i]) for i in range(0, 30, 3)]
    assert points[0].label == "Mar 1"


def test_unknown_status_counts_as_scheduled() -> None:
    oldest = TODAY - timedelta(days=29)
    records = [
        TimestampedRecord(timestamp=datetime(oldest.year, oldest.month, oldest.day, 15, 30), status="no-show"),  # type: ignore[arg-type]
        TimestampedRecord(timestamp=oldest, status=AppointmentStatus.CANCELLED),
    ]

    first = aggregate_trend(records, TODAY)[0]

    assert first == TrendPoint(label="Mar 1", scheduled=1, completed=0, cancelled=1)


def test_days_between_samples_do_not_show_up() -> None:
    records = [TimestampedRecord(timestamp=TODAY - timedelta(days=28))]
    assert all(point.scheduled == 0 for point in aggregate_trend(records, TODAY))


def test_aggregate_trend_is_deterministic() -> None:
    records = [
        TimestampedRecord(timestamp="2026-03-10T08:00:00Z", status=AppointmentStatus.COMPLETED),
        TimestampedRecord(timestamp="2026-03-04", status=AppointmentStatus.CANCELLED),
        TimestampedRecord(timestamp="not-a-date"),
        TimestampedRecord(timestamp=None),
    ]

    assert aggregate_trend(records, TODAY) == aggregate_trend(records, TODAY)


def test_aware_timestamps_are_bucketed_by_utc_date() -> None:
    kst = timezone(timedelta(hours=9))
    assert to_calendar_date(datetime(2026, 3, 2, 1, 0, tzinfo=kst)) == date(2026, 3, 1)


def test_today_accepts_datetime() -> None:
    assert aggregate_trend([], datetime(2026, 3, 30, 23, 59)) == aggregate_trend([], TODAY)


def test_aggregate_status_counts_sums_grouped_rows() -> None:
    rows = [
        StatusCount(date="2026-03-01", status=AppointmentStatus.COMPLETED, count=4),
        StatusCount(date="2026-03-01", status=AppointmentStatus.SCHEDULED, count=2),
        StatusCount(date="2026-01-01", status=AppointmentStatus.SCHEDULED, count=7),
    ]

    points = aggregate_status_counts(rows, TODAY)

    assert points[0] == TrendPoint(label="Mar 1", scheduled=2, completed=4, cancelled=0)
    assert sum(point.scheduled for point in points) == 2


def test_registration_trend_covers_seven_days() -> None:
    rows = [
        RegistrationCount(date="2026-03-30", role="patient", count=3),
        RegistrationCount(date="2026-03-30", role="doctor", count=1),
        RegistrationCount(date="2026-03-24", role="patient", count=2),
        RegistrationCount(date="2026-03-20", role="patient", count=9),
    ]

    points = registration_trend(rows, TODAY)

    assert len(points) == 7
    assert points[0].label == "Mar 24"
    assert points[0].patients == 2
    assert points[-1].patients == 3
    assert points[-1].doctors == 1


def test_status_distribution_counts_each_status() -> None:
    records = [
        TimestampedRecord(timestamp=TODAY, status=AppointmentStatus.COMPLETED),
        TimestampedRecord(timestamp=TODAY),
        TimestampedRecord(timestamp=TODAY),
    ]
    assert status_distribution(records) == {"scheduled": 2, "completed": 1, "cancelled": 0}


def test_trend_window_rejects_non_positive_days() -> None:
    with pytest.raises(ValueError):
        trend_window(TODAY, days=0)
