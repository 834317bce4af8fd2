from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_validator


class SessionRecord(BaseModel):
    """One completed exercise session as read from the activity store.

    Only ``recorded_at`` is required. Every other field may be missing and is
    defaulted by the estimators, never by the record itself.
    """

    model_config = ConfigDict(frozen=True)

    recorded_at: datetime
    duration_seconds: int | None = None
    distance_km: float | None = None
    elevation_gain_m: float | None = None
    average_power: float | None = None
    normalized_power: float | None = None
    training_stress_score: float | None = None
    title: str | None = None

    @field_validator("recorded_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def reported_power(self) -> float:
        """Normalized power, falling back to average power, 0 when neither is known."""
        return self.normalized_power or self.average_power or 0
