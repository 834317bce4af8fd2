"""Trend classification.

Compares the two most recent weeks against the two weeks before them to
label training load and power trajectory.
"""

from __future__ import annotations

from statistics import mean

from coach_context.config.settings import EngineConfig
from coach_context.models.snapshot import LoadTrend, PowerTrend, WeeklySummary


def compute_load_trend(weekly_summaries: list[WeeklySummary], config: EngineConfig | None = None) -> LoadTrend:
    """Label load trajectory from weeks 0-1 vs. weeks 2-3.

    Args:
        weekly_summaries: Summaries ordered by week_offset ascending
        config: Engine configuration holding the change thresholds

    Returns:
        "building" | "maintaining" | "recovering" | "declining"

    Rules:
        - Fewer than 3 weeks: "maintaining"
        - A missing week 3 counts as 0 TSS
        - No prior load: "building" (ratio undefined, any recent work is growth)
    """
    config = config or EngineConfig()
    if len(weekly_summaries) < 3:
        return "maintaining"

    recent = (weekly_summaries[0].total_tss + weekly_summaries[1].total_tss) / 2
    week_3_tss = weekly_summaries[3].total_tss if len(weekly_summaries) > 3 else 0
    prior = (weekly_summaries[2].total_tss + week_3_tss) / 2

    if prior == 0:
        return "building"

    change = (recent - prior) / prior
    if change > config.load_building_threshold:
        return "building"
    if change < config.load_declining_threshold:
        return "declining"
    if change < config.load_recovering_threshold:
        return "recovering"
    return "maintaining"


def compute_power_trend(weekly_summaries: list[WeeklySummary], config: EngineConfig | None = None) -> PowerTrend:
    """Label power trajectory from average normalized power of weeks 0-1 vs. weeks 2-3.

    Weeks without power are ignored; if either side has none the trend is "stable".
    """
    config = config or EngineConfig()
    recent_weeks = [w.avg_normalized_power for w in weekly_summaries[0:2] if w.avg_normalized_power]
    prior_weeks = [w.avg_normalized_power for w in weekly_summaries[2:4] if w.avg_normalized_power]

    if not recent_weeks or not prior_weeks:
        return "stable"

    prior_avg = mean(prior_weeks)
    change = (mean(recent_weeks) - prior_avg) / prior_avg

    if change > config.power_trend_threshold:
        return "improving"
    if change < -config.power_trend_threshold:
        return "declining"
    return "stable"
