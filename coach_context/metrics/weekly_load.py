"""Weekly load rollups.

Builds a fixed-length list of WeeklySummary entries from estimated TSS.
Week 0 is the 7 days ending at ``now``; weeks with no sessions are
zero-filled, never omitted.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from coach_context.config.settings import EngineConfig
from coach_context.core.rounding import round_half_up, round_tenths
from coach_context.metrics.tss import estimate_tss
from coach_context.models.session import SessionRecord
from coach_context.models.snapshot import WeeklySummary

WEEK = timedelta(days=7)


@dataclass
class _WeekAccumulator:
    tss: float = 0.0
    hours: float = 0.0
    ride_count: int = 0
    power_total: float = 0.0
    power_count: int = 0

    def to_summary(self, week_offset: int) -> WeeklySummary:
        avg_np = round_half_up(self.power_total / self.power_count) if self.power_count > 0 else None
        return WeeklySummary(
            week_offset=week_offset,
            total_tss=round_half_up(self.tss),
            hours=round_tenths(self.hours),
            ride_count=self.ride_count,
            avg_normalized_power=avg_np,
        )


def week_offset(recorded_at: datetime, now: datetime) -> int:
    """Whole weeks between ``recorded_at`` and ``now`` (negative for future timestamps)."""
    return (now - recorded_at) // WEEK


def build_weekly_summaries(
    sessions: Iterable[SessionRecord],
    now: datetime,
    weeks_back: int = 6,
    config: EngineConfig | None = None,
) -> list[WeeklySummary]:
    """Roll sessions up into exactly ``weeks_back`` weekly summaries.

    Args:
        sessions: Sessions in any order; those outside [now - weeks_back weeks, now]
            are discarded even if the query already bounded them
        now: Reference instant, captured once per request
        weeks_back: Number of summaries to emit
        config: Engine configuration for TSS estimation

    Returns:
        Summaries ordered by week_offset ascending from 0
    """
    config = config or EngineConfig()
    weeks: dict[int, _WeekAccumulator] = {}

    for session in sessions:
        offset = week_offset(session.recorded_at, now)
        if offset < 0 or offset >= weeks_back:
            continue

        week = weeks.setdefault(offset, _WeekAccumulator())
        week.tss += estimate_tss(session, config)
        week.hours += (session.duration_seconds or 0) / 3600
        week.ride_count += 1

        # Sessions without power stay out of the average entirely
        power = session.reported_power
        if power > 0:
            week.power_total += power
            week.power_count += 1

    return [weeks.get(offset, _WeekAccumulator()).to_summary(offset) for offset in range(weeks_back)]
