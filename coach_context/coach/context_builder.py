"""Build the compact coaching context snapshot.

The builder reads from the activity and profile repositories and returns a
ContextSnapshot. It performs no writes and no caching.

Flow:
1. Capture ``now`` once; every window below is measured from it
2. Resolve profile (active plan -> profile -> defaults)
3. Fan out six independent reads and aggregations, join on one barrier
4. Derive trends and patterns from the joined results

Fan-out is fail-fast: if any sub-query raises, the siblings are cancelled and
a single ContextSynthesisError is raised. A partial snapshot is never returned.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from datetime import UTC, datetime, timedelta
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field, field_validator

from coach_context.analysis.patterns import (
    avg_ride_duration,
    avg_rides_per_week,
    avg_weighted_power,
    consistency_score,
    day_name,
    days_since_last_ride,
    days_since_rest_day,
    local_date,
    preferred_days,
)
from coach_context.analysis.trends import compute_load_trend, compute_power_trend
from coach_context.coach.errors import ContextConfigurationError, ContextSynthesisError
from coach_context.config.settings import EngineConfig, settings
from coach_context.core.rounding import round_half_up
from coach_context.metrics.fitness_state import compute_fitness_state, trailing_load, window_start
from coach_context.metrics.power import best_sustained_power
from coach_context.metrics.ride_classifier import classify_ride
from coach_context.metrics.tss import estimate_tss
from coach_context.metrics.weekly_load import build_weekly_summaries
from coach_context.models.profile import AthleteProfile
from coach_context.models.session import SessionRecord
from coach_context.models.snapshot import (
    ContextSnapshot,
    LoadSection,
    PatternsSection,
    PerformanceSection,
    ProfileSection,
    RecentRide,
    WeeklySummary,
)
from coach_context.repositories.base import ActivityRepository, ProfileRepository


class ContextRequest(BaseModel):
    """Validated input for one snapshot build."""

    user_id: str = Field(..., min_length=1)
    weeks_back: int = Field(default_factory=lambda: settings.weeks_back, ge=1)
    include_recent_rides: int = Field(default_factory=lambda: settings.include_recent_rides, ge=0)
    now: datetime | None = None

    @field_validator("now")
    @classmethod
    def ensure_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


def resolve_profile(
    profile: AthleteProfile | None,
    active_plan: AthleteProfile | None,
    config: EngineConfig,
) -> ProfileSection:
    """Merge active plan over profile, then apply configured defaults.

    Zero and empty values count as missing.
    """
    profile = profile or AthleteProfile()
    active_plan = active_plan or AthleteProfile()

    return ProfileSection(
        ftp=active_plan.ftp or profile.ftp or config.default_ftp,
        resting_hr=active_plan.resting_hr or profile.resting_hr or None,
        max_hr=active_plan.max_hr or profile.max_hr or None,
        weekly_hours_target=active_plan.weekly_hours_target or profile.weekly_hours_target or config.default_weekly_hours_target,
        goal=active_plan.goal or profile.goal or None,
    )


def project_recent_ride(session: SessionRecord, ftp: int, now: datetime, config: EngineConfig) -> RecentRide:
    return RecentRide(
        date=local_date(session.recorded_at, now),
        duration=round_half_up((session.duration_seconds or 0) / 60),
        tss=estimate_tss(session, config),
        type=classify_ride(session.normalized_power, session.average_power, ftp, config.ride_thresholds),
        title=session.title or None,
    )


class CoachingContextBuilder:
    """Assembles ContextSnapshot values from repository reads."""

    def __init__(
        self,
        activities: ActivityRepository | None,
        profiles: ProfileRepository | None,
        config: EngineConfig | None = None,
    ):
        if activities is None:
            raise ContextConfigurationError("An activity repository is required to build coaching context")
        if profiles is None:
            raise ContextConfigurationError("A profile repository is required to build coaching context")
        self.activities = activities
        self.profiles = profiles
        self.config = config or settings.engine

    async def build(self, request: ContextRequest) -> ContextSnapshot:
        now = request.now or datetime.now(UTC)
        user_id = request.user_id
        config = self.config

        logger.debug(
            f"[CONTEXT] Building coaching context for user_id={user_id} "
            f"weeks_back={request.weeks_back} recent={request.include_recent_rides} now={now.isoformat()}"
        )

        active_plan, profile = await asyncio.gather(
            self.profiles.get_active_plan(user_id),
            self.profiles.get_profile(user_id),
        )
        profile_section = resolve_profile(profile, active_plan, config)

        results = await self._fan_out(
            user_id,
            {
                "weekly_summaries": self._weekly_summaries(user_id, now, request.weeks_back),
                "atl": self._trailing_load(user_id, now, config.atl_days),
                "ctl": self._trailing_load(user_id, now, config.ctl_days),
                "recent_sessions": self._recent_sessions(user_id, now, request.include_recent_rides),
                "training_days": self._training_days(user_id, now),
                "best_20_min_power": self._best_effort(user_id, now, request.weeks_back),
            },
        )

        weekly_summaries: list[WeeklySummary] = results["weekly_summaries"]
        recent_sessions: list[SessionRecord] = results["recent_sessions"]
        training_days: list[SessionRecord] = results["training_days"]
        fitness = compute_fitness_state(atl=results["atl"], ctl=results["ctl"])

        recent_rides = [
            project_recent_ride(s, profile_section.ftp, now, config)
            for s in recent_sessions[: request.include_recent_rides]
        ]
        today = now.date()

        snapshot = ContextSnapshot(
            profile=profile_section,
            load=LoadSection(
                weekly_tss=[w.total_tss for w in weekly_summaries],
                weekly_hours=[w.hours for w in weekly_summaries],
                ctl=fitness.ctl,
                atl=fitness.atl,
                tsb=fitness.tsb,
                load_trend=compute_load_trend(weekly_summaries, config),
            ),
            performance=PerformanceSection(
                avg_weighted_power=avg_weighted_power(weekly_summaries),
                best_20_min_power=results["best_20_min_power"],
                power_trend=compute_power_trend(weekly_summaries, config),
            ),
            patterns=PatternsSection(
                avg_rides_per_week=avg_rides_per_week(weekly_summaries),
                avg_ride_duration=avg_ride_duration(recent_rides),
                preferred_days=preferred_days(training_days, now, config),
                days_since_last_ride=days_since_last_ride(recent_sessions, now, config),
                days_since_rest_day=days_since_rest_day(training_days, now, config),
                consistency_score=consistency_score(weekly_summaries, profile_section.weekly_hours_target, config),
            ),
            recent_rides=recent_rides,
            today=today,
            day_of_week=day_name(today),
        )

        logger.info(
            f"[CONTEXT] Coaching context built for user_id={user_id}: "
            f"ctl={fitness.ctl} atl={fitness.atl} tsb={fitness.tsb} "
            f"load_trend={snapshot.load.load_trend} recent_rides={len(recent_rides)}"
        )
        return snapshot

    async def _fan_out(self, user_id: str, stages: dict[str, Awaitable[Any]]) -> dict[str, Any]:
        """Run all stages concurrently and join on a single barrier."""
        tasks = {name: asyncio.ensure_future(stage) for name, stage in stages.items()}
        try:
            values = await asyncio.gather(*tasks.values())
        except Exception as e:
            for task in tasks.values():
                task.cancel()
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            stage = next(
                (name for name, task in tasks.items() if task.done() and not task.cancelled() and task.exception() is e),
                "unknown",
            )
            logger.error(f"[CONTEXT] Sub-query {stage} failed for user_id={user_id}: {e!r}")
            raise ContextSynthesisError(user_id, stage, e) from e
        return dict(zip(tasks.keys(), values, strict=True))

    # -----------------------------
    # Fan-out stages
    # -----------------------------

    async def _weekly_summaries(self, user_id: str, now: datetime, weeks_back: int) -> list[WeeklySummary]:
        sessions = await self.activities.query(user_id, now - timedelta(weeks=weeks_back), until=now)
        return build_weekly_summaries(sessions, now, weeks_back, self.config)

    async def _trailing_load(self, user_id: str, now: datetime, days: int) -> int:
        sessions = await self.activities.query(user_id, window_start(now, days), until=now)
        return trailing_load(sessions, now, days, self.config)

    async def _recent_sessions(self, user_id: str, now: datetime, limit: int) -> list[SessionRecord]:
        # At least one record is needed for days-since-last-ride even when no rides are listed
        sessions = await self.activities.query(user_id, until=now, limit=max(limit, 1))
        return sorted(sessions, key=lambda s: s.recorded_at, reverse=True)

    async def _training_days(self, user_id: str, now: datetime) -> list[SessionRecord]:
        return await self.activities.query(user_id, now - timedelta(weeks=self.config.preferred_days_weeks), until=now)

    async def _best_effort(self, user_id: str, now: datetime, weeks_back: int) -> int | None:
        sessions = await self.activities.query(
            user_id,
            now - timedelta(weeks=weeks_back),
            until=now,
            min_duration_seconds=self.config.best_effort_min_seconds,
        )
        return best_sustained_power(sessions, now, weeks_back, self.config)


async def build_coaching_context(
    user_id: str,
    activities: ActivityRepository | None,
    profiles: ProfileRepository | None,
    *,
    weeks_back: int | None = None,
    include_recent_rides: int | None = None,
    now: datetime | None = None,
    config: EngineConfig | None = None,
) -> ContextSnapshot:
    """Build a coaching context snapshot for one user.

    Args:
        user_id: User to build the snapshot for (required)
        activities: Activity repository
        profiles: Profile / active plan repository
        weeks_back: Number of weekly summaries (default from settings, 6)
        include_recent_rides: Length of the recent rides list (default from settings, 5)
        now: Reference instant; defaults to the current UTC time, read once
        config: Engine configuration override

    Returns:
        ContextSnapshot

    Raises:
        pydantic.ValidationError: Invalid request parameters (e.g. empty user_id)
        ContextConfigurationError: Missing repository
        ContextSynthesisError: A fan-out sub-query failed
    """
    overrides: dict[str, Any] = {"user_id": user_id, "now": now}
    if weeks_back is not None:
        overrides["weeks_back"] = weeks_back
    if include_recent_rides is not None:
        overrides["include_recent_rides"] = include_recent_rides

    builder = CoachingContextBuilder(activities, profiles, config)
    return await builder.build(ContextRequest(**overrides))
