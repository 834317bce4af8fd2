"""Root conftest for all tests.

Shared fixtures: a pinned reference time and a session record factory.
"""

import datetime as dt

import pytest

from coach_context.models.session import SessionRecord

# Wednesday
NOW = dt.datetime(2026, 10, 14, 18, 0, tzinfo=dt.UTC)


@pytest.fixture
def now() -> dt.datetime:
    return NOW


@pytest.fixture
def make_session():
    """Factory for session records placed relative to NOW."""

    def _make(
        *,
        days_ago: float = 0,
        duration_seconds: int | None = 3600,
        elevation_gain_m: float | None = None,
        normalized_power: float | None = None,
        average_power: float | None = None,
        training_stress_score: float | None = None,
        title: str | None = None,
    ) -> SessionRecord:
        return SessionRecord(
            recorded_at=NOW - dt.timedelta(days=days_ago),
            duration_seconds=duration_seconds,
            elevation_gain_m=elevation_gain_m,
            normalized_power=normalized_power,
            average_power=average_power,
            training_stress_score=training_stress_score,
            title=title,
        )

    return _make
