import datetime as dt

import pytest

from coach_context.analysis.patterns import (
    avg_ride_duration,
    avg_rides_per_week,
    avg_weighted_power,
    consistency_score,
    days_since_last_ride,
    days_since_rest_day,
    preferred_days,
)
from coach_context.config.settings import EngineConfig
from coach_context.models.snapshot import RecentRide, WeeklySummary


def make_week(offset: int, hours: float, ride_count: int = 1, power: int | None = None) -> WeeklySummary:
    return WeeklySummary(
        week_offset=offset,
        total_tss=int(hours * 50),
        hours=hours,
        ride_count=ride_count if hours else 0,
        avg_normalized_power=power,
    )


# -----------------------------
# Preferred days
# -----------------------------


def test_preferred_days_ranked_by_frequency(now, make_session):
    # NOW is a Wednesday
    sessions = [
        make_session(days_ago=0),  # Wednesday
        make_session(days_ago=7),  # Wednesday
        make_session(days_ago=14),  # Wednesday
        make_session(days_ago=3),  # Sunday
        make_session(days_ago=10),  # Sunday
        make_session(days_ago=1),  # Tuesday
    ]

    assert preferred_days(sessions, now) == ["Wednesday", "Sunday"]


def test_preferred_days_ties_follow_weekday_order(now, make_session):
    sessions = [
        make_session(days_ago=3),  # Sunday
        make_session(days_ago=1),  # Tuesday
        make_session(days_ago=2),  # Monday
    ]

    assert preferred_days(sessions, now) == ["Monday", "Tuesday"]


def test_preferred_days_fewer_than_two(now, make_session):
    assert preferred_days([make_session(days_ago=1)], now) == ["Tuesday"]
    assert preferred_days([], now) == []


def test_preferred_days_ignores_sessions_beyond_lookback(now, make_session):
    sessions = [make_session(days_ago=12 * 7 + 1) for _ in range(5)] + [make_session(days_ago=1)]

    assert preferred_days(sessions, now) == ["Tuesday"]


# -----------------------------
# Consistency
# -----------------------------


def test_consistency_neutral_without_training():
    weeks = [make_week(i, 0) for i in range(6)]

    assert consistency_score(weeks, 8) == 50
    assert consistency_score([], 8) == 50


@pytest.mark.parametrize("target", [None, 0, -5])
def test_consistency_neutral_without_target(target):
    assert consistency_score([make_week(0, 8)], target) == 50


@pytest.mark.parametrize(
    ("hours", "expected"),
    [
        (8, 100),
        (4, 50),
        (12, 50),  # ratio 1.5 -> (2 - 1.5) * 100
        (20, 50),  # ratio capped at 1.5
        (10, 75),
        (2, 25),
    ],
)
def test_consistency_week_scores(hours: float, expected: int):
    assert consistency_score([make_week(0, hours)], 8) == expected


def test_consistency_averages_training_weeks_only():
    weeks = [make_week(0, 8), make_week(1, 4), make_week(2, 0)]

    assert consistency_score(weeks, 8) == 75


@pytest.mark.parametrize("hours", [0.1, 1, 5, 7.9, 8, 8.1, 11, 12, 13, 40])
def test_consistency_is_bounded(hours: float):
    score = consistency_score([make_week(0, hours), make_week(1, hours / 2)], 8)

    assert 0 <= score <= 100


def test_consistency_respects_ratio_cap_config():
    config = EngineConfig(consistency_ratio_cap=2.0)

    # ratio 2.0 -> (2 - 2) * 100 = 0
    assert consistency_score([make_week(0, 16)], 8, config) == 0


# -----------------------------
# Recency and streaks
# -----------------------------


def test_days_since_last_ride_sentinel(now):
    assert days_since_last_ride([], now) == 999


def test_days_since_last_ride_floors_whole_days(now, make_session):
    sessions = [make_session(days_ago=9), make_session(days_ago=2.9), make_session(days_ago=5)]

    assert days_since_last_ride(sessions, now) == 2


def test_days_since_last_ride_today(now, make_session):
    assert days_since_last_ride([make_session(days_ago=0.1)], now) == 0


def test_rest_streak_counts_consecutive_training_days(now, make_session):
    sessions = [
        make_session(days_ago=0),
        make_session(days_ago=0.2),
        make_session(days_ago=1),
        make_session(days_ago=2),
        make_session(days_ago=4),
    ]

    assert days_since_rest_day(sessions, now) == 3


def test_rest_streak_zero_when_no_session_today(now, make_session):
    sessions = [make_session(days_ago=1), make_session(days_ago=2)]

    assert days_since_rest_day(sessions, now) == 0
    assert days_since_rest_day([], now) == 0


def test_rest_streak_capped_at_scan_length(now, make_session):
    sessions = [make_session(days_ago=i) for i in range(30)]

    assert days_since_rest_day(sessions, now) == 14


def test_rest_streak_uses_calendar_days_in_now_timezone(make_session):
    # 01:00 local on Wednesday; the session at 23:00 UTC the previous day is Tuesday in UTC
    # but Wednesday in UTC+2
    tz = dt.timezone(dt.timedelta(hours=2))
    local_now = dt.datetime(2026, 10, 14, 1, 0, tzinfo=tz)
    session = make_session(days_ago=0).model_copy(update={"recorded_at": dt.datetime(2026, 10, 13, 23, 0, tzinfo=dt.UTC)})

    assert days_since_rest_day([session], local_now) == 1


# -----------------------------
# Averages
# -----------------------------


def test_avg_rides_per_week_over_active_weeks():
    weeks = [make_week(0, 5, ride_count=3), make_week(1, 4, ride_count=4), make_week(2, 0)]

    assert avg_rides_per_week(weeks) == 3.5
    assert avg_rides_per_week([make_week(0, 0)]) == 0.0


def test_avg_ride_duration():
    rides = [
        RecentRide(date=dt.date(2026, 10, 13), duration=60, tss=50, type="endurance"),
        RecentRide(date=dt.date(2026, 10, 12), duration=95, tss=80, type="tempo"),
    ]

    assert avg_ride_duration(rides) == 78
    assert avg_ride_duration([]) == 0


def test_avg_weighted_power_uses_first_four_weeks():
    weeks = [
        make_week(0, 5, power=210),
        make_week(1, 5, power=None),
        make_week(2, 5, power=200),
        make_week(3, 5, power=205),
        make_week(4, 5, power=400),
    ]

    assert avg_weighted_power(weeks) == 205
    assert avg_weighted_power([make_week(0, 5)]) is None
