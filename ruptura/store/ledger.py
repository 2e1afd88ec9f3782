"""AssessmentLedger — append-only store of readings, assessments and events.

Design notes:
    - An asyncio.Lock guards every mutation so concurrent WebSocket and
      HTTP handlers see strictly serialised state transitions.
    - submit_reading() computes everything first (registry gate, rule
      chain, event payloads) and only then commits.  Any error raised
      before the commit leaves the ledger exactly as it was.
    - Entries live in one list (the arena) in submission order; a
      per-sensor index points at positions for "latest" and history.
    - Counters only ever increase.  replay_stats() recomputes them from
      the log so the invariant can be checked at any time.
    - Events are delivered to observers after the commit, still under the
      lock, so every observer sees the global sequence order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from ruptura.core.engine import EMERGENCY_SEVERITY, AssessmentEngine
from ruptura.domain.assessment import DamageAssessment, LedgerEntry
from ruptura.domain.categories import resolve_category
from ruptura.domain.enums import BuildingCategory
from ruptura.domain.errors import NoDataAvailableError, UnknownSensorError
from ruptura.domain.events import (
    AnyLedgerEvent,
    CrisisSystemNotified,
    DamageAssessed,
    EmergencyTriggered,
    SensorDataReceived,
)
from ruptura.domain.reading import ReadingSubmission, SensorReading
from ruptura.domain.sensor import SensorRecord
from ruptura.domain.stats import SystemStats
from ruptura.foundation.clock import utc_now
from ruptura.foundation.identifiers import new_id
from ruptura.store.registry import SensorRegistry

logger = logging.getLogger(__name__)


class LedgerObserver(Protocol):
    """Receives every event the ledger emits, in sequence order."""

    def on_event(self, event: AnyLedgerEvent) -> None:
        ...


class AssessmentLedger:
    """Async-safe, in-memory, append-only assessment ledger.

    Args:
        engine: Rule engine used to assess readings.
        registry: Sensor registry; a fresh one is created when omitted.
        default_category: Building category applied when a submission
             does not name one.
    """

    def __init__(
        self,
        engine: AssessmentEngine | None = None,
        registry: SensorRegistry | None = None,
        default_category: BuildingCategory = BuildingCategory.RESIDENTIAL,
    ) -> None:
        self._engine = engine or AssessmentEngine()
        self._registry = registry or SensorRegistry()
        self._default_category = BuildingCategory(default_category)
        self._lock = asyncio.Lock()

        self._entries: list[LedgerEntry] = []
        self._by_sensor: dict[str, list[int]] = {}
        self._events: list[AnyLedgerEvent] = []
        self._observers: list[LedgerObserver] = []

        self._total_events = 0
        self._total_emergencies = 0
        self._total_notifications = 0

    # ── Registry operations ──────────────────────────────────────────────

    async def register_sensor(self, sensor_id: str) -> SensorRecord:
        """Register a new sensor.  Raises DuplicateSensorError if known."""
        async with self._lock:
            return self._registry.register(sensor_id, at=utc_now())

    async def deactivate_sensor(self, sensor_id: str) -> SensorRecord:
        """Deactivate a sensor.  Raises UnknownSensorError if not registered."""
        async with self._lock:
            return self._registry.deactivate(sensor_id)

    async def is_active(self, sensor_id: str) -> bool:
        async with self._lock:
            return self._registry.is_active(sensor_id)

    async def list_sensor_ids(self) -> list[str]:
        async with self._lock:
            return self._registry.list_ids()

    async def list_sensors(self) -> list[dict]:
        """Registry records as dicts, in registration order."""
        async with self._lock:
            return [record.to_dict() for record in self._registry.records]

    # ── Ingestion ────────────────────────────────────────────────────────

    async def submit_reading(
        self,
        sensor_id: str,
        displacement_mm: float,
        seismic_intensity: int,
        collapse_flag: bool,
        building_category: BuildingCategory | str | None = None,
    ) -> DamageAssessment:
        """Assess a reading and append it to the ledger.

        This is the single ingestion entry point used by every transport.

        Raises:
            UnknownSensorError, SensorInactiveError: registry gate.
            InvalidIntensityError, InvalidDisplacementError: rule engine.
        """
        async with self._lock:
            record = self._registry.require_active(sensor_id)

            # Unlisted labels resolve to UNKNOWN, absent ones to the default
            category = resolve_category(building_category) or self._default_category
            now = utc_now()
            assessment = self._engine.assess(
                displacement_mm,
                seismic_intensity,
                collapse_flag,
                category,
                assessed_at=now,
            )
            reading = SensorReading(
                reading_id=new_id(),
                sensor_id=sensor_id,
                displacement_mm=float(displacement_mm),
                seismic_intensity=int(seismic_intensity),
                collapse_flag=bool(collapse_flag),
                building_category=category,
                recorded_at=now,
            )
            entry = LedgerEntry(
                entry_id=new_id(),
                position=len(self._entries),
                reading=reading,
                assessment=assessment,
            )
            events = self._build_events(entry)

            # ── Commit ───────────────────────────────────────────────
            self._entries.append(entry)
            self._by_sensor.setdefault(sensor_id, []).append(entry.position)
            record.mark_reading(now)
            self._total_events += 1
            if assessment.severity_level >= EMERGENCY_SEVERITY:
                self._total_emergencies += 1
            if assessment.notify_external:
                self._total_notifications += 1
            self._events.extend(events)

            logger.debug(
                "Recorded reading for %s → severity=%d urgency=%d (entry %d)",
                sensor_id,
                assessment.severity_level,
                assessment.urgency_score,
                entry.position,
            )
            if assessment.severity_level >= EMERGENCY_SEVERITY:
                logger.info(
                    "Emergency at sensor %s: severity %d, teams=%s",
                    sensor_id,
                    assessment.severity_level,
                    [team.value for team in assessment.response_teams],
                )

            self._emit(events)
            return assessment

    async def submit(self, submission: ReadingSubmission) -> DamageAssessment:
        """Convenience wrapper taking a validated ReadingSubmission."""
        return await self.submit_reading(
            submission.sensor_id,
            submission.displacement_mm,
            submission.seismic_intensity,
            submission.collapse_flag,
            submission.building_category,
        )

    # ── Queries ──────────────────────────────────────────────────────────

    async def get_reading(self, sensor_id: str) -> SensorReading:
        """Most recent reading for *sensor_id*.  Raises NoDataAvailableError."""
        async with self._lock:
            return self._latest(sensor_id).reading

    async def get_assessment(self, sensor_id: str) -> DamageAssessment:
        """Most recent assessment for *sensor_id*.  Raises NoDataAvailableError."""
        async with self._lock:
            return self._latest(sensor_id).assessment

    async def history(self, sensor_id: str) -> list[LedgerEntry]:
        """Every entry recorded for *sensor_id*, oldest first."""
        async with self._lock:
            if sensor_id not in self._registry:
                raise UnknownSensorError(sensor_id)
            return [self._entries[pos] for pos in self._by_sensor.get(sensor_id, [])]

    async def get_stats(self) -> SystemStats:
        async with self._lock:
            return SystemStats(
                total_sensors=len(self._registry),
                total_events_processed=self._total_events,
                total_emergency_events=self._total_emergencies,
                total_notifications_sent=self._total_notifications,
            )

    async def replay_stats(self) -> SystemStats:
        """Recompute the counters from the registry and the log."""
        async with self._lock:
            return SystemStats(
                total_sensors=len(self._registry),
                total_events_processed=len(self._entries),
                total_emergency_events=sum(
                    1 for e in self._entries
                    if e.assessment.severity_level >= EMERGENCY_SEVERITY
                ),
                total_notifications_sent=sum(
                    1 for e in self._entries if e.assessment.notify_external
                ),
            )

    async def events_since(self, sequence: int = 0, limit: int | None = None) -> list[AnyLedgerEvent]:
        """Events with a sequence number greater than *sequence*, in order."""
        async with self._lock:
            # sequences are 1-based and contiguous, so they index the list
            start = max(sequence, 0)
            end = None if limit is None else start + max(limit, 0)
            return self._events[start:end]

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    # ── Observers ────────────────────────────────────────────────────────

    def subscribe(self, observer: LedgerObserver) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: LedgerObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    # ── Internals ────────────────────────────────────────────────────────

    def _latest(self, sensor_id: str) -> LedgerEntry:
        """Must be called while holding self._lock."""
        positions = self._by_sensor.get(sensor_id)
        if not positions:
            raise NoDataAvailableError(sensor_id)
        return self._entries[positions[-1]]

    def _build_events(self, entry: LedgerEntry) -> list[AnyLedgerEvent]:
        """Must be called while holding self._lock.  Does not mutate."""
        reading, assessment = entry.reading, entry.assessment
        seq = len(self._events)
        common = {"sensor_id": reading.sensor_id, "timestamp": reading.recorded_at}

        events: list[AnyLedgerEvent] = [
            SensorDataReceived(
                sequence=seq + 1,
                displacement_mm=reading.displacement_mm,
                seismic_intensity=reading.seismic_intensity,
                collapse_flag=reading.collapse_flag,
                **common,
            ),
            DamageAssessed(
                sequence=seq + 2,
                severity_level=assessment.severity_level,
                urgency_score=assessment.urgency_score,
                response_teams=assessment.response_teams,
                **common,
            ),
        ]
        if assessment.severity_level >= EMERGENCY_SEVERITY:
            events.append(EmergencyTriggered(
                sequence=seq + len(events) + 1,
                severity_level=assessment.severity_level,
                message=self._engine.emergency_message(
                    reading.displacement_mm,
                    reading.seismic_intensity,
                    reading.collapse_flag,
                ),
                **common,
            ))
        if assessment.notify_external:
            events.append(CrisisSystemNotified(
                sequence=seq + len(events) + 1,
                severity_level=assessment.severity_level,
                urgency_score=assessment.urgency_score,
                **common,
            ))
        return events

    def _emit(self, events: list[AnyLedgerEvent]) -> None:
        """Deliver committed events.  Observer failures never touch state."""
        for event in events:
            for observer in list(self._observers):
                try:
                    observer.on_event(event)
                except Exception as exc:
                    logger.error(
                        "Ledger observer %r failed on %s: %s",
                        observer,
                        event.event_type.value,
                        exc,
                        exc_info=True,
                    )
