"""Ledger events — the observable stream consumed by dashboards and relays.

Events are emitted after the ledger commits a submission.  Their payloads
are built from the committed reading and assessment, so an observer never
sees a value that differs from what was stored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Union

from pydantic import BaseModel, Field

from ruptura.domain.enums import LedgerEventType, ResponseTeam


class LedgerEvent(BaseModel):
    """Common envelope for every emitted event."""

    sequence: int = Field(..., ge=1, description="Strictly increasing across the whole ledger")
    sensor_id: str
    timestamp: datetime

    model_config = {"frozen": True}

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


class SensorDataReceived(LedgerEvent):
    event_type: Literal[LedgerEventType.SENSOR_DATA_RECEIVED] = LedgerEventType.SENSOR_DATA_RECEIVED
    displacement_mm: float
    seismic_intensity: int
    collapse_flag: bool


class DamageAssessed(LedgerEvent):
    event_type: Literal[LedgerEventType.DAMAGE_ASSESSED] = LedgerEventType.DAMAGE_ASSESSED
    severity_level: int
    urgency_score: int
    response_teams: tuple[ResponseTeam, ...]


class EmergencyTriggered(LedgerEvent):
    event_type: Literal[LedgerEventType.EMERGENCY_TRIGGERED] = LedgerEventType.EMERGENCY_TRIGGERED
    severity_level: int
    message: str


class CrisisSystemNotified(LedgerEvent):
    event_type: Literal[LedgerEventType.CRISIS_SYSTEM_NOTIFIED] = LedgerEventType.CRISIS_SYSTEM_NOTIFIED
    severity_level: int
    urgency_score: int


AnyLedgerEvent = Union[SensorDataReceived, DamageAssessed, EmergencyTriggered, CrisisSystemNotified]
