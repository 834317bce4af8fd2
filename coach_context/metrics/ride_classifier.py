from __future__ import annotations

from coach_context.config.settings import RideThresholds
from coach_context.models.snapshot import RideType

_DEFAULT_THRESHOLDS = RideThresholds()


def intensity_factor(power: float, ftp: float | None) -> float | None:
    """Relative intensity (power / FTP), None when FTP is unknown."""
    if not ftp or ftp <= 0:
        return None
    return power / ftp


def classify_ride(
    normalized_power: float | None,
    average_power: float | None,
    ftp: float | None,
    thresholds: RideThresholds = _DEFAULT_THRESHOLDS,
) -> RideType:
    """Bucket a session into an intensity category.

    Uses normalized power, then average power, then 0. Without a usable FTP
    the intensity cannot be computed and the ride counts as endurance.
    """
    power = normalized_power or average_power or 0
    intensity = intensity_factor(power, ftp)
    if intensity is None:
        return "endurance"

    if intensity < thresholds.easy:
        return "easy"
    if intensity < thresholds.endurance:
        return "endurance"
    if intensity < thresholds.tempo:
        return "tempo"
    if intensity < thresholds.threshold:
        return "threshold"
    if intensity < thresholds.vo2max:
        return "vo2max"
    return "race"
