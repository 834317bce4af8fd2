from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class AthleteProfile(BaseModel):
    """Athlete settings as stored by the profile or the active training plan.

    Any field may be absent. The context builder resolves the active plan
    first, then the profile, then configured defaults.
    """

    model_config = ConfigDict(frozen=True)

    ftp: int | None = None
    resting_hr: int | None = None
    max_hr: int | None = None
    weekly_hours_target: float | None = None
    goal: str | None = None
