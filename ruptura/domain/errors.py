"""Error taxonomy surfaced to ledger callers.

Each error carries a stable ``kind`` so transports (HTTP, WebSocket, CLI)
can report it without matching on class names.  None of these are retried
internally: the core performs no I/O, so every failure is terminal for the
call that raised it and leaves the ledger untouched.
"""

from __future__ import annotations


class RupturaError(Exception):
    """Base class for all domain errors."""

    kind: str = "RupturaError"

    def __init__(self, message: str, sensor_id: str | None = None) -> None:
        self.sensor_id = sensor_id
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"kind": self.kind, "detail": str(self), "sensor_id": self.sensor_id}


# ── Registry / identity ──────────────────────────────────────────────────────

class DuplicateSensorError(RupturaError):
    kind = "DuplicateSensor"

    def __init__(self, sensor_id: str) -> None:
        super().__init__(f"Sensor '{sensor_id}' is already registered", sensor_id)


class UnknownSensorError(RupturaError):
    kind = "UnknownSensor"

    def __init__(self, sensor_id: str) -> None:
        super().__init__(f"Sensor '{sensor_id}' is not registered", sensor_id)


class SensorInactiveError(RupturaError):
    kind = "SensorInactive"

    def __init__(self, sensor_id: str) -> None:
        super().__init__(f"Sensor '{sensor_id}' has been deactivated", sensor_id)


# ── Input validation ─────────────────────────────────────────────────────────

class InvalidIntensityError(RupturaError):
    kind = "InvalidIntensity"


class InvalidDisplacementError(RupturaError):
    kind = "InvalidDisplacement"


# ── Queries ──────────────────────────────────────────────────────────────────

class NoDataAvailableError(RupturaError):
    """Query-side "not found".  Not a fault."""

    kind = "NoDataAvailable"

    def __init__(self, sensor_id: str) -> None:
        super().__init__(f"No readings recorded for sensor '{sensor_id}'", sensor_id)
