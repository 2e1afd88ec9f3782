"""AssessmentEngine — the single canonical damage-assessment rule chain.

Design principles:
    1. Pure: accepts reading fields, returns a DamageAssessment.
    2. No side effects, no state mutation, no I/O, no randomness.
    3. The timestamp is an input, so identical inputs give identical output
       and any historical assessment can be replayed exactly.
    4. Rule tables are fixed and versioned, not configurable.

Chain:
    classify(displacement, intensity, collapse)   → severity_level
    score(severity_level, building_category)      → urgency_score
    dispatch(severity_level)                      → teams, notify_external
"""

from __future__ import annotations

from datetime import datetime

from ruptura.core.classifier import classify
from ruptura.core.dispatcher import dispatch
from ruptura.core.urgency import score
from ruptura.domain.assessment import DamageAssessment
from ruptura.domain.enums import BuildingCategory

# Bump whenever a threshold, multiplier or dispatch row changes.
RULE_TABLE_VERSION = 1

EMERGENCY_SEVERITY = 4


class AssessmentEngine:
    """Deterministic rule engine shared by every execution surface.

    The ledger, the HTTP/WebSocket transports and the offline demo all go
    through this class; none of them re-implement a threshold.
    """

    rule_table_version = RULE_TABLE_VERSION

    def assess(
        self,
        displacement_mm: float,
        seismic_intensity: int,
        collapse_flag: bool,
        building_category: BuildingCategory,
        assessed_at: datetime,
    ) -> DamageAssessment:
        """Run the full rule chain for one reading.

        Raises:
            InvalidIntensityError, InvalidDisplacementError: propagated from
            the classifier before anything else is computed.
        """
        severity = classify(displacement_mm, seismic_intensity, collapse_flag)
        urgency = score(severity, building_category)
        decision = dispatch(severity)

        return DamageAssessment(
            severity_level=severity,
            urgency_score=urgency,
            response_teams=decision.response_teams,
            notify_external=decision.notify_external,
            assessed_at=assessed_at,
            rule_table_version=self.rule_table_version,
        )

    @staticmethod
    def emergency_message(
        displacement_mm: float,
        seismic_intensity: int,
        collapse_flag: bool,
    ) -> str:
        """Describe which signal put an already-classified reading into the
        emergency tiers.  Without collapse, level 4 means JMA >= 6 or
        displacement above 80mm.
        """
        if collapse_flag:
            return "Structural collapse detected"
        if seismic_intensity >= 6:
            return "Severe seismic intensity"
        return "Critical displacement"
