"""Read-side mappings of the activity store tables.

The tables are owned and migrated elsewhere. These mappings only cover the
columns the context engine reads.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class Ride(Base):
    """Completed ride / session record.

    Schema:
    - id: UUID primary key
    - user_id: Owner (indexed)
    - recorded_at: Session start timestamp (UTC, indexed)
    - duration_seconds, distance_km, elevation_gain_m: Optional volume fields
    - average_power, normalized_power: Optional power fields (watts)
    - training_stress_score: Device/platform TSS when known
    - name: Optional display title
    """

    __tablename__ = "rides"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    distance_km: Mapped[float | None] = mapped_column(Float, nullable=True)
    elevation_gain_m: Mapped[float | None] = mapped_column(Float, nullable=True)
    average_power: Mapped[float | None] = mapped_column(Float, nullable=True)
    normalized_power: Mapped[float | None] = mapped_column(Float, nullable=True)
    training_stress_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (Index("idx_rides_user_recorded_at", "user_id", "recorded_at"),)


class AthleteProfileRow(Base):
    __tablename__ = "athlete_profiles"

    user_id: Mapped[str] = mapped_column(String, primary_key=True)
    ftp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    resting_hr: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_hr: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weekly_hours_target: Mapped[float | None] = mapped_column(Float, nullable=True)
    primary_goal: Mapped[str | None] = mapped_column(String, nullable=True)


class TrainingPlan(Base):
    """Training plan settings; at most one plan per user has status "active"."""

    __tablename__ = "training_plans"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    ftp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    resting_hr: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_hr: Mapped[int | None] = mapped_column(Integer, nullable=True)
    hours_per_week: Mapped[float | None] = mapped_column(Float, nullable=True)
    goal_type: Mapped[str | None] = mapped_column(String, nullable=True)
