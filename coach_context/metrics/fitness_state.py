"""Acute/chronic load balance (ATL, CTL, TSB).

These are plain trailing-window averages of daily TSS:
- ATL = sum(TSS over trailing 7 days) / 7
- CTL = sum(TSS over trailing 42 days) / 42
- TSB = CTL - ATL

Windows are measured back from ``now`` and do not align to week boundaries,
so they are computed from their own session sets rather than weekly buckets.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from coach_context.config.settings import EngineConfig
from coach_context.core.rounding import round_half_up
from coach_context.metrics.tss import estimate_tss
from coach_context.models.session import SessionRecord
from coach_context.models.snapshot import FitnessState


def window_start(now: datetime, days: int) -> datetime:
    return now - timedelta(days=days)


def windowed_tss(
    sessions: Iterable[SessionRecord],
    now: datetime,
    days: int,
    config: EngineConfig | None = None,
) -> float:
    """Sum estimated TSS for sessions recorded in [now - days, now]."""
    config = config or EngineConfig()
    since = window_start(now, days)
    return sum(estimate_tss(s, config) for s in sessions if since <= s.recorded_at <= now)


def trailing_load(
    sessions: Iterable[SessionRecord],
    now: datetime,
    days: int,
    config: EngineConfig | None = None,
) -> int:
    """Average daily TSS over a trailing window; 0 when the window is empty."""
    total = windowed_tss(sessions, now, days, config)
    if total == 0:
        return 0
    return round_half_up(total / days)


def compute_fitness_state(atl: int, ctl: int) -> FitnessState:
    return FitnessState(atl=atl, ctl=ctl, tsb=ctl - atl)
