"""SQLAlchemy read repositories.

Queries run synchronously in the default executor so several of them can be
awaited together by the context builder.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from coach_context.db.models import AthleteProfileRow, Ride, TrainingPlan
from coach_context.db.session import get_session
from coach_context.models.profile import AthleteProfile
from coach_context.models.session import SessionRecord


def _to_record(ride: Ride) -> SessionRecord:
    return SessionRecord(
        recorded_at=ride.recorded_at,
        duration_seconds=ride.duration_seconds,
        distance_km=ride.distance_km,
        elevation_gain_m=ride.elevation_gain_m,
        average_power=ride.average_power,
        normalized_power=ride.normalized_power,
        training_stress_score=ride.training_stress_score,
        title=ride.name,
    )


class SqlActivityRepository:
    """Activity repository over the ``rides`` table."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._session_factory = session_factory

    def _query_sync(
        self,
        user_id: str,
        since: datetime | None,
        until: datetime | None,
        min_duration_seconds: int | None,
        limit: int | None,
    ) -> list[SessionRecord]:
        stmt = select(Ride).where(Ride.user_id == user_id)
        if since is not None:
            stmt = stmt.where(Ride.recorded_at >= since.astimezone(UTC))
        if until is not None:
            stmt = stmt.where(Ride.recorded_at <= until.astimezone(UTC))
        if min_duration_seconds is not None:
            stmt = stmt.where(Ride.duration_seconds >= min_duration_seconds)
        if limit is not None:
            stmt = stmt.order_by(Ride.recorded_at.desc()).limit(limit)

        with get_session(self._session_factory) as session:
            rides = session.execute(stmt).scalars().all()
            records = [_to_record(ride) for ride in rides]

        logger.debug(f"[REPO] Loaded {len(records)} rides for user_id={user_id} since={since} until={until} limit={limit}")
        return records

    async def query(
        self,
        user_id: str,
        since: datetime | None = None,
        *,
        until: datetime | None = None,
        min_duration_seconds: int | None = None,
        limit: int | None = None,
    ) -> list[SessionRecord]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._query_sync, user_id, since, until, min_duration_seconds, limit)


class SqlProfileRepository:
    """Profile repository over ``athlete_profiles`` and ``training_plans``."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._session_factory = session_factory

    def _profile_sync(self, user_id: str) -> AthleteProfile | None:
        with get_session(self._session_factory) as session:
            row = session.get(AthleteProfileRow, user_id)
            if row is None:
                return None
            return AthleteProfile(
                ftp=row.ftp,
                resting_hr=row.resting_hr,
                max_hr=row.max_hr,
                weekly_hours_target=row.weekly_hours_target,
                goal=row.primary_goal,
            )

    def _active_plan_sync(self, user_id: str) -> AthleteProfile | None:
        stmt = select(TrainingPlan).where(TrainingPlan.user_id == user_id, TrainingPlan.status == "active")
        with get_session(self._session_factory) as session:
            plan = session.execute(stmt).scalars().first()
            if plan is None:
                return None
            return AthleteProfile(
                ftp=plan.ftp,
                resting_hr=plan.resting_hr,
                max_hr=plan.max_hr,
                weekly_hours_target=plan.hours_per_week,
                goal=plan.goal_type,
            )

    async def get_profile(self, user_id: str) -> AthleteProfile | None:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._profile_sync, user_id)

    async def get_active_plan(self, user_id: str) -> AthleteProfile | None:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._active_plan_sync, user_id)
