"""In-memory repositories.

Used by tests and by the CLI when sessions are loaded from JSON files.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from coach_context.models.profile import AthleteProfile
from coach_context.models.session import SessionRecord


class InMemoryActivityRepository:
    """Activity repository over a fixed per-user list of sessions."""

    def __init__(self, sessions_by_user: dict[str, Iterable[SessionRecord]] | None = None):
        self._sessions: dict[str, list[SessionRecord]] = {
            user_id: list(sessions) for user_id, sessions in (sessions_by_user or {}).items()
        }

    def add(self, user_id: str, session: SessionRecord) -> None:
        self._sessions.setdefault(user_id, []).append(session)

    async def query(
        self,
        user_id: str,
        since: datetime | None = None,
        *,
        until: datetime | None = None,
        min_duration_seconds: int | None = None,
        limit: int | None = None,
    ) -> list[SessionRecord]:
        sessions = [
            s
            for s in self._sessions.get(user_id, [])
            if (since is None or s.recorded_at >= since)
            and (until is None or s.recorded_at <= until)
            and (min_duration_seconds is None or (s.duration_seconds or 0) >= min_duration_seconds)
        ]
        if limit is not None:
            sessions = sorted(sessions, key=lambda s: s.recorded_at, reverse=True)[:limit]
        return sessions


class InMemoryProfileRepository:
    def __init__(
        self,
        profiles: dict[str, AthleteProfile] | None = None,
        active_plans: dict[str, AthleteProfile] | None = None,
    ):
        self._profiles = dict(profiles or {})
        self._active_plans = dict(active_plans or {})

    async def get_profile(self, user_id: str) -> AthleteProfile | None:
        return self._profiles.get(user_id)

    async def get_active_plan(self, user_id: str) -> AthleteProfile | None:
        return self._active_plans.get(user_id)
