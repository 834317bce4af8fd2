"""Context Snapshot - the engine's only output.

Value objects only. A snapshot is created per request, has no identity and
is never persisted by the engine.
"""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

RideType = Literal["easy", "endurance", "tempo", "threshold", "vo2max", "race"]
LoadTrend = Literal["building", "maintaining", "recovering", "declining"]
PowerTrend = Literal["improving", "stable", "declining"]

RIDE_TYPE_ORDER: tuple[RideType, ...] = ("easy", "endurance", "tempo", "threshold", "vo2max", "race")


class WeeklySummary(BaseModel):
    """Aggregate over one 7-day window; week_offset 0 is the current week."""

    model_config = ConfigDict(frozen=True)

    week_offset: int = Field(..., ge=0)
    total_tss: int = Field(..., ge=0)
    hours: float = Field(..., ge=0)
    ride_count: int = Field(..., ge=0)
    avg_normalized_power: int | None = None


class FitnessState(BaseModel):
    model_config = ConfigDict(frozen=True)

    atl: int = Field(..., ge=0)
    ctl: int = Field(..., ge=0)
    tsb: int


class RecentRide(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date
    duration: int = Field(..., ge=0, description="Minutes")
    tss: float
    type: RideType
    title: str | None = None


class ProfileSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    ftp: int
    resting_hr: int | None
    max_hr: int | None
    weekly_hours_target: float
    goal: str | None


class LoadSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    weekly_tss: list[int]
    weekly_hours: list[float]
    ctl: int
    atl: int
    tsb: int
    load_trend: LoadTrend


class PerformanceSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    avg_weighted_power: int | None
    best_20_min_power: int | None
    power_trend: PowerTrend


class PatternsSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    avg_rides_per_week: float
    avg_ride_duration: int
    preferred_days: list[str]
    days_since_last_ride: int
    days_since_rest_day: int
    consistency_score: int = Field(..., ge=0, le=100)


class ContextSnapshot(BaseModel):
    """Compact training snapshot handed to coaching and planning consumers."""

    model_config = ConfigDict(frozen=True)

    profile: ProfileSection
    load: LoadSection
    performance: PerformanceSection
    patterns: PatternsSection
    recent_rides: list[RecentRide]
    today: date
    day_of_week: str
