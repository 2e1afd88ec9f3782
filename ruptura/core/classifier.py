"""Damage classification — maps one reading to a severity level 1–5.

Decision order is evaluated top-down and the first match wins:

    5  collapse flag set
    4  intensity >= 6  OR  displacement > 80 mm
    3  intensity >= 5  OR  displacement > 50 mm
    2  intensity >= 4  OR  displacement > 20 mm
    1  otherwise

The collapse flag is ground truth and overrides both numeric channels.
Below it, intensity and displacement are alternative evidence for the same
tier: either one crossing its threshold is sufficient.

Pure function.  No side effects, no clock, no randomness.
"""

from __future__ import annotations

import math
from numbers import Integral, Real

from ruptura.domain.errors import InvalidDisplacementError, InvalidIntensityError

MIN_INTENSITY = 0
MAX_INTENSITY = 7

# (severity, minimum intensity, displacement strictly above), highest first
SEVERITY_THRESHOLDS: tuple[tuple[int, int, float], ...] = (
    (4, 6, 80.0),
    (3, 5, 50.0),
    (2, 4, 20.0),
)

COLLAPSE_SEVERITY = 5
BASELINE_SEVERITY = 1


def validate_intensity(seismic_intensity: object) -> int:
    """Return *seismic_intensity* as an int or raise InvalidIntensityError."""
    if isinstance(seismic_intensity, bool) or not isinstance(seismic_intensity, Integral):
        raise InvalidIntensityError(
            f"seismic intensity must be an integer, got {seismic_intensity!r}"
        )
    value = int(seismic_intensity)
    if not MIN_INTENSITY <= value <= MAX_INTENSITY:
        raise InvalidIntensityError(
            f"seismic intensity {value} outside [{MIN_INTENSITY}, {MAX_INTENSITY}]"
        )
    return value


def validate_displacement(displacement_mm: object) -> float:
    """Return *displacement_mm* as a float or raise InvalidDisplacementError."""
    if isinstance(displacement_mm, bool) or not isinstance(displacement_mm, Real):
        raise InvalidDisplacementError(
            f"displacement must be a number, got {displacement_mm!r}"
        )
    value = float(displacement_mm)
    if math.isnan(value) or value < 0.0:
        raise InvalidDisplacementError(f"displacement must be >= 0 mm, got {value}")
    return value


def classify(displacement_mm: float, seismic_intensity: int, collapse_flag: bool) -> int:
    """Return the severity level for a reading.

    Raises:
        InvalidIntensityError: intensity is not an integer in [0, 7].
        InvalidDisplacementError: displacement is negative or not a number.
    """
    intensity = validate_intensity(seismic_intensity)
    displacement = validate_displacement(displacement_mm)

    if collapse_flag:
        return COLLAPSE_SEVERITY

    for severity, min_intensity, displacement_above in SEVERITY_THRESHOLDS:
        if intensity >= min_intensity or displacement > displacement_above:
            return severity

    return BASELINE_SEVERITY
