"""SensorRecord — registry entry for one physical sensing unit.

Lifecycle:  registered (active) → deactivated
    - Records are never deleted.
    - Deactivation is irreversible; there is no reactivate operation.
"""

from __future__ import annotations

from datetime import datetime

from ruptura.foundation.clock import utc_now


class SensorRecord:
    """A mutable registry entry.

    Thread-safety note:
        Records are mutated *only* while the caller holds the
        AssessmentLedger lock.  They are not themselves locked.
    """

    __slots__ = ("sensor_id", "registered_at", "active", "last_reading_at")

    def __init__(self, sensor_id: str, registered_at: datetime | None = None) -> None:
        self.sensor_id: str = sensor_id
        self.registered_at: datetime = registered_at or utc_now()
        self.active: bool = True
        self.last_reading_at: datetime | None = None

    # ── Mutation ─────────────────────────────────────────────────────────

    def deactivate(self) -> None:
        self.active = False

    def mark_reading(self, at: datetime) -> None:
        self.last_reading_at = at

    # ── Summary ──────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "sensor_id": self.sensor_id,
            "registered_at": self.registered_at.isoformat(),
            "active": self.active,
            "last_reading_at": (
                self.last_reading_at.isoformat() if self.last_reading_at else None
            ),
        }

    def __repr__(self) -> str:
        state = "active" if self.active else "inactive"
        return f"SensorRecord(id={self.sensor_id!r}, {state})"
