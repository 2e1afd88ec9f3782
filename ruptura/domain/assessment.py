"""DamageAssessment — the derived verdict for exactly one SensorReading.

Assessments are never revised in place.  A corrected reading produces a
new reading and a new assessment; history stays untouched.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from ruptura.domain.enums import ResponseTeam
from ruptura.domain.reading import SensorReading


class DamageAssessment(BaseModel):
    """Severity, urgency and dispatch decision for a single reading."""

    severity_level: int = Field(..., ge=1, le=5, description="1 = minimal, 5 = critical/collapsed")
    urgency_score: int = Field(..., ge=0, le=100)
    response_teams: tuple[ResponseTeam, ...] = Field(
        ..., description="Teams in dispatch priority order, no duplicates"
    )
    notify_external: bool = Field(..., description="Whether the crisis system is informed")
    assessed_at: datetime
    rule_table_version: int = Field(..., ge=1)

    model_config = {"frozen": True}

    @property
    def is_emergency(self) -> bool:
        return self.severity_level >= 4


class LedgerEntry(BaseModel):
    """One atomic unit of the append-only log: a reading and its assessment."""

    entry_id: UUID
    position: int = Field(..., ge=0, description="Index in the ledger, in submission order")
    reading: SensorReading
    assessment: DamageAssessment

    model_config = {"frozen": True}

    def summary(self) -> dict:
        return {
            "entry_id": str(self.entry_id),
            "position": self.position,
            "sensor_id": self.reading.sensor_id,
            "severity_level": self.assessment.severity_level,
            "urgency_score": self.assessment.urgency_score,
            "notify_external": self.assessment.notify_external,
            "recorded_at": self.reading.recorded_at.isoformat(),
        }
