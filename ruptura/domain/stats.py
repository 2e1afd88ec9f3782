"""SystemStats — aggregate counters derived from the ledger.

Every counter is monotonic and can be recomputed by replaying the log.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SystemStats(BaseModel):
    """Immutable snapshot of the ledger's aggregate counters."""

    total_sensors: int = Field(0, ge=0)
    total_events_processed: int = Field(0, ge=0)
    total_emergency_events: int = Field(0, ge=0, description="Assessments with severity >= 4")
    total_notifications_sent: int = Field(0, ge=0, description="Assessments with notify_external")

    model_config = {"frozen": True}
