from __future__ import annotations

import os
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues.

    SQLite is only meant for local development. Set COACH_CONTEXT_DATABASE_URL
    to point the read repositories at the real activity store.
    """
    db_url = os.getenv("COACH_CONTEXT_DATABASE_URL", "")
    if db_url:
        logger.info(f"Using COACH_CONTEXT_DATABASE_URL from environment: {db_url}")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "coach_context.db"
    db_url = f"sqlite:///{db_path.resolve()}"
    logger.warning(f"Using SQLite database (LOCAL DEV ONLY): {db_url}")
    return db_url


class RideThresholds(BaseModel):
    """Upper-exclusive intensity factor bounds (power / FTP) for ride types.

    Anything at or above ``vo2max`` is a race effort.
    """

    model_config = ConfigDict(frozen=True)

    easy: float = 0.55
    endurance: float = 0.75
    tempo: float = 0.87
    threshold: float = 0.95
    vo2max: float = 1.05

    @model_validator(mode="after")
    def validate_increasing(self) -> RideThresholds:
        bounds = [self.easy, self.endurance, self.tempo, self.threshold, self.vo2max]
        if any(lower >= upper for lower, upper in zip(bounds, bounds[1:], strict=False)):
            raise ValueError(f"Ride thresholds must be strictly increasing, got {bounds}")
        return self


class EngineConfig(BaseModel):
    """Defaults, windows and thresholds used by the context engine.

    Passed explicitly through every computation so tests can override any
    single value without touching process settings.
    """

    model_config = ConfigDict(frozen=True)

    # --- Profile defaults ---
    default_ftp: int = Field(default=250, gt=0)
    default_weekly_hours_target: float = Field(default=8.0, gt=0)

    # --- TSS fallback estimate ---
    tss_per_hour: float = 50.0
    tss_per_elevation_unit: float = 10.0
    elevation_unit_m: float = 300.0
    default_duration_seconds: int = 3600

    # --- Ride classification ---
    ride_thresholds: RideThresholds = Field(default_factory=RideThresholds)

    # --- Fitness windows (days) ---
    atl_days: int = Field(default=7, ge=1)
    ctl_days: int = Field(default=42, ge=1)

    # --- Patterns ---
    preferred_days_weeks: int = Field(default=12, ge=1)
    preferred_days_count: int = Field(default=2, ge=1)
    rest_scan_days: int = Field(default=14, ge=1)
    best_effort_min_seconds: int = 1200
    consistency_ratio_cap: float = 1.5
    neutral_consistency_score: int = 50
    no_ride_sentinel_days: int = 999

    # --- Trends ---
    load_building_threshold: float = 0.15
    load_recovering_threshold: float = -0.15
    load_declining_threshold: float = -0.30
    power_trend_threshold: float = 0.05


class Settings(BaseSettings):
    log_level: str = Field(default="INFO")
    log_file: str | None = Field(default=None)
    log_rotation: str = Field(default="10 MB", description="Log file rotation size or interval")
    log_retention: str = Field(default="7 days", description="How long rotated log files are kept")
    log_json: bool = Field(default=False, description="Write the log file as JSON lines")
    log_components: list[str] = Field(
        default_factory=list,
        description="Only show tagged messages from these components (CONTEXT, CACHE, REPO); empty shows all",
    )
    database_url: str = Field(default_factory=get_database_url)

    weeks_back: int = Field(default=6, ge=1, description="Default number of weekly summaries in a snapshot")
    include_recent_rides: int = Field(default=5, ge=0, description="Default length of the recent rides list")

    cache_ttl_seconds: float = Field(default=3600.0, gt=0, description="Snapshot cache TTL (outside the engine)")
    cache_max_entries: int = Field(default=500, ge=1, description="Snapshot cache size that triggers eviction")

    engine: EngineConfig = Field(default_factory=EngineConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="COACH_CONTEXT_",
        env_nested_delimiter="__",
        extra="ignore",
    )


settings = Settings()
