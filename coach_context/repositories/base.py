"""Read contracts for the engine's external collaborators.

The engine only reads. Storage, schema and write paths belong to whoever
implements these protocols.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from coach_context.models.profile import AthleteProfile
from coach_context.models.session import SessionRecord


class ActivityRepository(Protocol):
    """Source of session records for a user."""

    async def query(
        self,
        user_id: str,
        since: datetime | None = None,
        *,
        until: datetime | None = None,
        min_duration_seconds: int | None = None,
        limit: int | None = None,
    ) -> list[SessionRecord]:
        """Return sessions recorded between ``since`` and ``until``.

        Args:
            user_id: Owner of the sessions
            since: Inclusive lower bound on recorded_at (None = unbounded)
            until: Inclusive upper bound on recorded_at (None = unbounded)
            min_duration_seconds: Keep only sessions at least this long
            limit: Return only the N most recent matching sessions

        Returns:
            Session records in no guaranteed order
        """
        ...


class ProfileRepository(Protocol):
    """Source of athlete profile and active training plan settings."""

    async def get_profile(self, user_id: str) -> AthleteProfile | None: ...

    async def get_active_plan(self, user_id: str) -> AthleteProfile | None: ...
