"""Training stress estimation for a single session.

Priority order:
1. Recorded training stress score (when present and positive)
2. Duration + elevation heuristic

The heuristic is deliberately simple and is not a physiological model.
"""

from __future__ import annotations

from coach_context.config.settings import EngineConfig
from coach_context.core.rounding import round_half_up
from coach_context.models.session import SessionRecord

_DEFAULT_CONFIG = EngineConfig()


def estimate_tss(session: SessionRecord, config: EngineConfig = _DEFAULT_CONFIG) -> float:
    """Return the training stress for one session.

    Args:
        session: Session record (any optional field may be missing)
        config: Engine configuration holding the fallback constants

    Returns:
        Recorded TSS verbatim when known, otherwise
        ``round(hours * tss_per_hour + elevation / elevation_unit * tss_per_elevation_unit)``.
        Never negative, always a float.
    """
    if session.training_stress_score is not None and session.training_stress_score > 0:
        return float(session.training_stress_score)

    duration_seconds = session.duration_seconds or config.default_duration_seconds
    elevation_m = session.elevation_gain_m or 0

    base_tss = (max(duration_seconds, 0) / 3600) * config.tss_per_hour
    elevation_factor = (max(elevation_m, 0) / config.elevation_unit_m) * config.tss_per_elevation_unit

    return float(round_half_up(base_tss + elevation_factor))
