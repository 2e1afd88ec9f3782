"""Urgency scoring — severity weighted by building occupancy.

    base  = severity * 20
    score = min(100, floor(base * multiplier))

Floor, not round, so scores are biased downward.  Multipliers are applied
in integer tenths so the result never depends on binary float rounding.
The table is fixed; changing it requires bumping RULE_TABLE_VERSION in
core.engine so historical assessments stay reproducible.
"""

from __future__ import annotations

from types import MappingProxyType

from ruptura.domain.enums import BuildingCategory

BASE_SCORE_PER_LEVEL = 20
MAX_URGENCY = 100

CATEGORY_MULTIPLIERS = MappingProxyType({
    BuildingCategory.HOSPITAL: 2.0,
    BuildingCategory.SCHOOL: 1.8,
    BuildingCategory.SHOPPING_MALL: 1.6,
    BuildingCategory.OFFICE: 1.2,
    BuildingCategory.RESIDENTIAL: 1.0,
    BuildingCategory.INDUSTRIAL: 0.8,
    BuildingCategory.UNKNOWN: 1.0,
})

_MULTIPLIER_TENTHS = {
    category: round(multiplier * 10)
    for category, multiplier in CATEGORY_MULTIPLIERS.items()
}


def score(severity_level: int, building_category: BuildingCategory) -> int:
    """Return the 0–100 urgency score for a severity level and category."""
    if not 1 <= severity_level <= 5:
        raise ValueError(f"severity level must be in [1, 5], got {severity_level}")
    category = BuildingCategory(building_category)
    base = severity_level * BASE_SCORE_PER_LEVEL
    return min(MAX_URGENCY, base * _MULTIPLIER_TENTHS[category] // 10)
