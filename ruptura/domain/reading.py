"""Sensor reading models — the inbound payload and the recorded fact.

A ``ReadingSubmission`` is what a caller sends: it is typed but not
range-checked, because intensity and displacement limits are domain rules
that must surface as ``InvalidIntensity`` / ``InvalidDisplacement`` from
the classifier rather than as generic schema errors.

A ``SensorReading`` is what the ledger keeps once the submission has been
accepted.  It is immutable and carries the ingestion timestamp assigned by
the ledger, never one supplied by the client.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from ruptura.domain.categories import resolve_category
from ruptura.domain.enums import BuildingCategory


# ── Inbound ──────────────────────────────────────────────────────────────────

class ReadingSubmission(BaseModel):
    """A raw reading as delivered by a data source or transport."""

    sensor_id: str = Field(..., min_length=1, max_length=256)
    displacement_mm: float = Field(..., description="Measured structural displacement in millimetres")
    # Fractional values pass through so the classifier reports InvalidIntensity
    seismic_intensity: Union[int, float] = Field(..., description="JMA seismic intensity scale value")
    collapse_flag: bool = Field(default=False, description="Sensing unit detected total structural failure")
    building_category: Optional[BuildingCategory] = Field(
        default=None,
        description="Occupancy type of the structure; ledger default applies when absent",
    )

    model_config = {"frozen": True}

    @field_validator("building_category", mode="before")
    @classmethod
    def _resolve_label(cls, value: Any) -> Optional[BuildingCategory]:
        return resolve_category(value)


# ── Recorded ─────────────────────────────────────────────────────────────────

class SensorReading(BaseModel):
    """An accepted reading.  Immutable fact of the ledger."""

    reading_id: UUID
    sensor_id: str = Field(..., min_length=1)
    displacement_mm: float = Field(..., ge=0.0)
    seismic_intensity: int = Field(..., ge=0, le=7)
    collapse_flag: bool
    building_category: BuildingCategory
    recorded_at: datetime

    model_config = {"frozen": True}
