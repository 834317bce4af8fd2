"""Behavioral training patterns.

Preferred days, streak length, recency and weekly consistency. All functions
are pure and take ``now`` explicitly; calendar days are evaluated in the
timezone of ``now``.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import date, datetime, timedelta

from coach_context.config.settings import EngineConfig
from coach_context.core.rounding import round_half_up, round_tenths
from coach_context.models.session import SessionRecord
from coach_context.models.snapshot import RecentRide, WeeklySummary

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def local_date(moment: datetime, now: datetime) -> date:
    return moment.astimezone(now.tzinfo).date()


def day_name(day: date) -> str:
    return DAY_NAMES[day.weekday()]


def preferred_days(
    sessions: Iterable[SessionRecord],
    now: datetime,
    config: EngineConfig | None = None,
) -> list[str]:
    """Most frequent training weekdays over the lookback window.

    Ties are broken by weekday order (Monday first) so the result does not
    depend on repository ordering.
    """
    config = config or EngineConfig()
    since = now - timedelta(weeks=config.preferred_days_weeks)

    counts = Counter(
        local_date(s.recorded_at, now).weekday() for s in sessions if since <= s.recorded_at <= now
    )
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [DAY_NAMES[weekday] for weekday, _ in ranked[: config.preferred_days_count]]


def consistency_score(
    weekly_summaries: list[WeeklySummary],
    target_hours_per_week: float | None,
    config: EngineConfig | None = None,
) -> int:
    """Score how closely weekly hours track the target, in [0, 100].

    Each week with training scores ratio * 100 up to the target and falls off
    symmetrically above it (ratio capped at the configured maximum). Weeks
    without training are skipped. Returns the neutral score when nothing
    qualifies or no target is set.
    """
    config = config or EngineConfig()
    if not target_hours_per_week or target_hours_per_week <= 0:
        return config.neutral_consistency_score

    week_scores = []
    for week in weekly_summaries:
        if week.hours <= 0:
            continue
        ratio = min(week.hours / target_hours_per_week, config.consistency_ratio_cap)
        week_score = (2 - ratio) * 100 if ratio > 1 else ratio * 100
        week_scores.append(max(0.0, min(100.0, week_score)))

    if not week_scores:
        return config.neutral_consistency_score

    return max(0, min(100, round_half_up(sum(week_scores) / len(week_scores))))


def days_since_last_ride(
    sessions: Iterable[SessionRecord],
    now: datetime,
    config: EngineConfig | None = None,
) -> int:
    """Whole days since the most recent session, sentinel when there are none."""
    config = config or EngineConfig()
    past = sorted((s.recorded_at for s in sessions if s.recorded_at <= now), reverse=True)
    if not past:
        return config.no_ride_sentinel_days
    return (now - past[0]) // timedelta(days=1)


def days_since_rest_day(
    sessions: Iterable[SessionRecord],
    now: datetime,
    config: EngineConfig | None = None,
) -> int:
    """Length of the current unbroken run of training days, counting back from today.

    Scans at most ``rest_scan_days`` calendar days and stops at the first day
    without a session. This is the current streak, not the literal distance to
    the last rest day.
    """
    config = config or EngineConfig()
    training_days = {local_date(s.recorded_at, now) for s in sessions if s.recorded_at <= now}
    today = now.date()

    streak = 0
    for days_ago in range(config.rest_scan_days):
        if today - timedelta(days=days_ago) not in training_days:
            break
        streak += 1
    return streak


def avg_rides_per_week(weekly_summaries: list[WeeklySummary]) -> float:
    """Mean ride count over weeks that have at least one ride."""
    active_weeks = [w.ride_count for w in weekly_summaries if w.ride_count > 0]
    if not active_weeks:
        return 0.0
    return round_tenths(sum(active_weeks) / len(active_weeks))


def avg_ride_duration(recent_rides: list[RecentRide]) -> int:
    if not recent_rides:
        return 0
    return round_half_up(sum(r.duration for r in recent_rides) / len(recent_rides))


def avg_weighted_power(weekly_summaries: list[WeeklySummary], weeks: int = 4) -> int | None:
    powers = [w.avg_normalized_power for w in weekly_summaries[:weeks] if w.avg_normalized_power]
    if not powers:
        return None
    return round_half_up(sum(powers) / len(powers))
