from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from coach_context.config.settings import EngineConfig
from coach_context.core.rounding import round_half_up
from coach_context.models.session import SessionRecord


def best_sustained_power(
    sessions: Iterable[SessionRecord],
    now: datetime,
    weeks_back: int,
    config: EngineConfig | None = None,
) -> int | None:
    """Best 20-minute power proxy over the trailing ``weeks_back`` weeks.

    Highest normalized (or average) power among sessions lasting at least
    ``best_effort_min_seconds``. None when no qualifying session reports power.
    """
    config = config or EngineConfig()
    since = now - timedelta(weeks=weeks_back)

    best = max(
        (
            s.reported_power
            for s in sessions
            if since <= s.recorded_at <= now and (s.duration_seconds or 0) >= config.best_effort_min_seconds
        ),
        default=0,
    )
    return round_half_up(best) if best > 0 else None
