"""SensorRegistry — known sensor identities and their liveness.

The registry holds SensorRecords in registration order.  It gatekeeps
ingestion: only registered, active sensors may submit readings, and
unknown IDs are rejected rather than auto-created.

The registry itself is not locked.  The AssessmentLedger owns it and
calls it only while holding its own lock.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ruptura.domain.errors import (
    DuplicateSensorError,
    SensorInactiveError,
    UnknownSensorError,
)
from ruptura.domain.sensor import SensorRecord

logger = logging.getLogger(__name__)


class SensorRegistry:
    """In-memory registry of sensors, ordered by registration."""

    def __init__(self) -> None:
        self._records: dict[str, SensorRecord] = {}

    # ── Mutation ─────────────────────────────────────────────────────────

    def register(self, sensor_id: str, at: datetime | None = None) -> SensorRecord:
        """Create an active record for *sensor_id*.

        Raises:
            DuplicateSensorError: The ID is already registered, active or not.
        """
        if not isinstance(sensor_id, str) or not sensor_id:
            raise ValueError("sensor_id must be a non-empty string")
        if sensor_id in self._records:
            raise DuplicateSensorError(sensor_id)
        record = SensorRecord(sensor_id, registered_at=at)
        self._records[sensor_id] = record
        logger.info("Registered sensor %s", sensor_id)
        return record

    def deactivate(self, sensor_id: str) -> SensorRecord:
        """Mark a sensor inactive.  Irreversible.

        Raises:
            UnknownSensorError: The ID was never registered.
        """
        record = self._records.get(sensor_id)
        if record is None:
            raise UnknownSensorError(sensor_id)
        record.deactivate()
        logger.info("Deactivated sensor %s", sensor_id)
        return record

    # ── Queries ──────────────────────────────────────────────────────────

    def get(self, sensor_id: str) -> SensorRecord | None:
        return self._records.get(sensor_id)

    def is_active(self, sensor_id: str) -> bool:
        """Permissive check: unknown sensors are simply reported inactive."""
        record = self._records.get(sensor_id)
        return record is not None and record.active

    def require_active(self, sensor_id: str) -> SensorRecord:
        """Strict check used by ingestion.

        Raises:
            UnknownSensorError: Not registered.
            SensorInactiveError: Registered but deactivated.
        """
        record = self._records.get(sensor_id)
        if record is None:
            raise UnknownSensorError(sensor_id)
        if not record.active:
            raise SensorInactiveError(sensor_id)
        return record

    def list_ids(self) -> list[str]:
        """All sensor IDs ever registered, in registration order."""
        return list(self._records)

    @property
    def records(self) -> list[SensorRecord]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, sensor_id: object) -> bool:
        return sensor_id in self._records
