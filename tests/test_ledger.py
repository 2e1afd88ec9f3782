"""Tests for the AssessmentLedger.

Covers the end-to-end scenarios, registry gating, atomicity on failure,
event emission order and payloads, counters and replay, history, and
observers.  Uses clock patching via ruptura.store.ledger.utc_now.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from ruptura.domain.enums import BuildingCategory, LedgerEventType, ResponseTeam
from ruptura.domain.errors import (
    DuplicateSensorError,
    InvalidDisplacementError,
    InvalidIntensityError,
    NoDataAvailableError,
    SensorInactiveError,
    UnknownSensorError,
)
from ruptura.domain.reading import ReadingSubmission
from ruptura.store.ledger import AssessmentLedger

from tests.test_reading import _valid_submission


# ── Helpers ──────────────────────────────────────────────────────────────────

_BASE = datetime(2026, 2, 6, 1, 17, 0, tzinfo=timezone.utc)


def _patched_now(dt: datetime):
    """Freeze utc_now() at the ledger module level."""
    return patch("ruptura.store.ledger.utc_now", return_value=dt)


class _Recorder:
    def __init__(self) -> None:
        self.events = []

    def on_event(self, event) -> None:
        self.events.append(event)


class _Exploding:
    def on_event(self, event) -> None:
        raise RuntimeError("observer down")


@pytest.fixture
def ledger() -> AssessmentLedger:
    return AssessmentLedger()


async def _registered(ledger: AssessmentLedger, *sensor_ids: str) -> AssessmentLedger:
    for sid in sensor_ids:
        await ledger.register_sensor(sid)
    return ledger


# ── Scenarios ────────────────────────────────────────────────────────────────

class TestScenarios:
    @pytest.mark.asyncio
    async def test_minor_residential(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        a = await ledger.submit_reading("S-001", 15, 3, False, BuildingCategory.RESIDENTIAL)
        assert a.severity_level == 1
        assert a.urgency_score == 20
        assert [t.value for t in a.response_teams] == ["Monitoring"]
        assert a.notify_external is False

    @pytest.mark.asyncio
    async def test_severe_hospital_triggers_emergency(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-002")
        recorder = _Recorder()
        ledger.subscribe(recorder)

        a = await ledger.submit_reading("S-002", 90, 6, False, BuildingCategory.HOSPITAL)

        assert a.severity_level == 4
        assert a.urgency_score == 100
        assert [t.value for t in a.response_teams] == [
            "CrisisCoordination", "MedicalTeams", "SearchRescue",
        ]
        assert a.notify_external is True
        types = [e.event_type for e in recorder.events]
        assert LedgerEventType.EMERGENCY_TRIGGERED in types

    @pytest.mark.asyncio
    async def test_collapse_overrides(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-003")
        a = await ledger.submit_reading("S-003", 120, 7, True, BuildingCategory.SHOPPING_MALL)
        assert a.severity_level == 5
        assert a.urgency_score == 100
        assert ResponseTeam.EMERGENCY_AIRLIFT in a.response_teams
        assert a.notify_external is True

    @pytest.mark.asyncio
    async def test_missing_category_uses_default(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        await ledger.submit_reading("S-001", 30, 2, False)
        reading = await ledger.get_reading("S-001")
        assert reading.building_category == BuildingCategory.RESIDENTIAL

    @pytest.mark.asyncio
    async def test_configured_default_category(self) -> None:
        ledger = AssessmentLedger(default_category=BuildingCategory.UNKNOWN)
        await _registered(ledger, "S-001")
        a = await ledger.submit_reading("S-001", 30, 2, False)
        assert a.urgency_score == 40
        assert (await ledger.get_reading("S-001")).building_category == BuildingCategory.UNKNOWN

    @pytest.mark.asyncio
    async def test_submit_accepts_submission_model(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        sub = ReadingSubmission.model_validate(
            _valid_submission(displacement_mm=55, building_category="school")
        )
        a = await ledger.submit(sub)
        assert a.severity_level == 3
        assert a.urgency_score == 100

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "label, expected",
        [
            ("Hospital", BuildingCategory.HOSPITAL),
            ("ShoppingMall", BuildingCategory.SHOPPING_MALL),
            ("Shopping Mall", BuildingCategory.SHOPPING_MALL),
            ("Okul", BuildingCategory.SCHOOL),
            (BuildingCategory.INDUSTRIAL, BuildingCategory.INDUSTRIAL),
        ],
    )
    async def test_display_labels_resolve(
        self, ledger: AssessmentLedger, label, expected: BuildingCategory
    ) -> None:
        await _registered(ledger, "S-001")
        await ledger.submit_reading("S-001", 30, 2, False, label)
        assert (await ledger.get_reading("S-001")).building_category == expected

    @pytest.mark.asyncio
    async def test_unlisted_label_scores_neutral(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        a = await ledger.submit_reading("S-001", 90, 6, False, "Ticari")
        assert a.urgency_score == 80
        assert (await ledger.get_reading("S-001")).building_category == BuildingCategory.UNKNOWN


# ── Gating & atomicity ───────────────────────────────────────────────────────

class TestGatingAndAtomicity:
    @pytest.mark.asyncio
    async def test_unknown_sensor_rejected_without_mutation(self, ledger: AssessmentLedger) -> None:
        before = await ledger.get_stats()
        with pytest.raises(UnknownSensorError):
            await ledger.submit_reading("ghost", 15, 3, False)
        assert await ledger.get_stats() == before
        assert await ledger.events_since(0) == []
        assert await ledger.list_sensor_ids() == []

    @pytest.mark.asyncio
    async def test_inactive_sensor_rejected(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        await ledger.deactivate_sensor("S-001")
        with pytest.raises(SensorInactiveError):
            await ledger.submit_reading("S-001", 15, 3, False)
        assert (await ledger.get_stats()).total_events_processed == 0

    @pytest.mark.asyncio
    async def test_invalid_intensity_leaves_state_unchanged(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        good = await ledger.submit_reading("S-001", 15, 3, False)
        stats_before = await ledger.get_stats()
        events_before = await ledger.events_since(0)

        with pytest.raises(InvalidIntensityError):
            await ledger.submit_reading("S-001", 15, 9, False)

        assert await ledger.get_stats() == stats_before
        assert await ledger.get_assessment("S-001") == good
        assert await ledger.events_since(0) == events_before
        assert len(await ledger.history("S-001")) == 1

    @pytest.mark.asyncio
    async def test_invalid_displacement_does_not_touch_last_reading(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        with pytest.raises(InvalidDisplacementError):
            await ledger.submit_reading("S-001", -1, 3, False)
        sensors = await ledger.list_sensors()
        assert sensors[0]["last_reading_at"] is None

    @pytest.mark.asyncio
    async def test_fractional_intensity_rejected(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        sub = ReadingSubmission.model_validate(_valid_submission(seismic_intensity=4.5))
        with pytest.raises(InvalidIntensityError):
            await ledger.submit(sub)
        assert ledger.entry_count == 0


# ── Registry through the ledger ──────────────────────────────────────────────

class TestLedgerRegistry:
    @pytest.mark.asyncio
    async def test_register_counts_sensors(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "A", "B")
        assert (await ledger.get_stats()).total_sensors == 2

    @pytest.mark.asyncio
    async def test_duplicate(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "A")
        with pytest.raises(DuplicateSensorError):
            await ledger.register_sensor("A")

    @pytest.mark.asyncio
    async def test_deactivate_unknown(self, ledger: AssessmentLedger) -> None:
        with pytest.raises(UnknownSensorError):
            await ledger.deactivate_sensor("ghost")

    @pytest.mark.asyncio
    async def test_is_active(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "A")
        assert await ledger.is_active("A")
        assert not await ledger.is_active("ghost")
        await ledger.deactivate_sensor("A")
        assert not await ledger.is_active("A")

    @pytest.mark.asyncio
    async def test_deactivated_sensors_still_listed(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "A", "B", "C")
        await ledger.deactivate_sensor("B")
        assert await ledger.list_sensor_ids() == ["A", "B", "C"]
        assert (await ledger.get_stats()).total_sensors == 3


# ── Queries ──────────────────────────────────────────────────────────────────

class TestQueries:
    @pytest.mark.asyncio
    async def test_no_data_available(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        with pytest.raises(NoDataAvailableError):
            await ledger.get_assessment("S-001")
        with pytest.raises(NoDataAvailableError):
            await ledger.get_reading("S-001")

    @pytest.mark.asyncio
    async def test_no_data_for_unknown_sensor(self, ledger: AssessmentLedger) -> None:
        with pytest.raises(NoDataAvailableError):
            await ledger.get_assessment("ghost")

    @pytest.mark.asyncio
    async def test_latest_wins_history_keeps_all(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        await ledger.submit_reading("S-001", 15, 3, False)
        await ledger.submit_reading("S-001", 95, 3, False)

        latest = await ledger.get_assessment("S-001")
        assert latest.severity_level == 4

        history = await ledger.history("S-001")
        assert [e.assessment.severity_level for e in history] == [1, 4]
        assert [e.position for e in history] == [0, 1]

    @pytest.mark.asyncio
    async def test_history_is_per_sensor(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "A", "B")
        await ledger.submit_reading("A", 10, 1, False)
        await ledger.submit_reading("B", 10, 1, False)
        await ledger.submit_reading("A", 10, 1, False)
        assert [e.position for e in await ledger.history("A")] == [0, 2]
        assert [e.position for e in await ledger.history("B")] == [1]

    @pytest.mark.asyncio
    async def test_concurrent_submissions_all_recorded(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        await asyncio.gather(*(
            ledger.submit_reading("S-001", float(i), 1, False) for i in range(50)
        ))

        history = await ledger.history("S-001")
        assert len(history) == 50
        assert [e.position for e in history] == list(range(50))
        latest = await ledger.get_reading("S-001")
        assert latest == history[-1].reading

        events = await ledger.events_since(0)
        assert [e.sequence for e in events] == list(range(1, len(events) + 1))
        stats = await ledger.get_stats()
        assert stats.total_events_processed == 50
        assert await ledger.replay_stats() == stats

    @pytest.mark.asyncio
    async def test_history_unknown_sensor(self, ledger: AssessmentLedger) -> None:
        with pytest.raises(UnknownSensorError):
            await ledger.history("ghost")

    @pytest.mark.asyncio
    async def test_timestamps_assigned_at_ingestion(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        with _patched_now(_BASE):
            a = await ledger.submit_reading("S-001", 10, 1, False)
        reading = await ledger.get_reading("S-001")
        assert reading.recorded_at == _BASE
        assert a.assessed_at == _BASE
        sensors = await ledger.list_sensors()
        assert sensors[0]["last_reading_at"] == _BASE.isoformat()


# ── Counters ─────────────────────────────────────────────────────────────────

class TestCounters:
    @pytest.mark.asyncio
    async def test_counters_across_all_levels(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        for displacement, intensity, collapse in [
            (15, 3, False),   # 1
            (45, 4, False),   # 2
            (65, 5, False),   # 3
            (90, 6, False),   # 4
            (120, 7, True),   # 5
        ]:
            await ledger.submit_reading("S-001", displacement, intensity, collapse)

        stats = await ledger.get_stats()
        assert stats.total_sensors == 1
        assert stats.total_events_processed == 5
        assert stats.total_emergency_events == 2
        assert stats.total_notifications_sent == 4

    @pytest.mark.asyncio
    async def test_counters_are_monotonic(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        previous = await ledger.get_stats()
        for displacement in (5, 95, 30, -1, 60, 10):
            try:
                await ledger.submit_reading("S-001", displacement, 2, False)
            except InvalidDisplacementError:
                pass
            current = await ledger.get_stats()
            assert current.total_events_processed >= previous.total_events_processed
            assert current.total_emergency_events >= previous.total_emergency_events
            assert current.total_notifications_sent >= previous.total_notifications_sent
            previous = current

    @pytest.mark.asyncio
    async def test_replay_matches_counters(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "A", "B")
        await ledger.submit_reading("A", 90, 6, False, BuildingCategory.HOSPITAL)
        await ledger.submit_reading("B", 5, 1, False)
        await ledger.submit_reading("A", 25, 2, False)
        assert await ledger.replay_stats() == await ledger.get_stats()


# ── Events ───────────────────────────────────────────────────────────────────

class TestEvents:
    @pytest.mark.asyncio
    async def test_minimal_reading_emits_two_events(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        await ledger.submit_reading("S-001", 15, 3, False)
        events = await ledger.events_since(0)
        assert [e.event_type for e in events] == [
            LedgerEventType.SENSOR_DATA_RECEIVED,
            LedgerEventType.DAMAGE_ASSESSED,
        ]

    @pytest.mark.asyncio
    async def test_level_3_adds_notification_only(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        await ledger.submit_reading("S-001", 65, 5, False)
        types = [e.event_type for e in await ledger.events_since(0)]
        assert types == [
            LedgerEventType.SENSOR_DATA_RECEIVED,
            LedgerEventType.DAMAGE_ASSESSED,
            LedgerEventType.CRISIS_SYSTEM_NOTIFIED,
        ]

    @pytest.mark.asyncio
    async def test_emergency_emits_all_four_in_order(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        await ledger.submit_reading("S-001", 120, 7, True, BuildingCategory.SHOPPING_MALL)
        events = await ledger.events_since(0)
        assert [e.event_type for e in events] == [
            LedgerEventType.SENSOR_DATA_RECEIVED,
            LedgerEventType.DAMAGE_ASSESSED,
            LedgerEventType.EMERGENCY_TRIGGERED,
            LedgerEventType.CRISIS_SYSTEM_NOTIFIED,
        ]
        assert [e.sequence for e in events] == [1, 2, 3, 4]
        assert events[2].message == "Structural collapse detected"

    @pytest.mark.asyncio
    async def test_event_payloads_match_storage(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "S-001")
        with _patched_now(_BASE):
            await ledger.submit_reading("S-001", 90, 6, False, BuildingCategory.HOSPITAL)
        reading = await ledger.get_reading("S-001")
        assessment = await ledger.get_assessment("S-001")
        received, assessed, emergency, notified = await ledger.events_since(0)

        assert received.displacement_mm == reading.displacement_mm
        assert received.seismic_intensity == reading.seismic_intensity
        assert received.collapse_flag == reading.collapse_flag
        assert assessed.severity_level == assessment.severity_level
        assert assessed.urgency_score == assessment.urgency_score
        assert assessed.response_teams == assessment.response_teams
        assert emergency.severity_level == 4
        assert emergency.message == "Severe seismic intensity"
        assert notified.urgency_score == assessment.urgency_score
        assert {e.timestamp for e in (received, assessed, emergency, notified)} == {_BASE}

    @pytest.mark.asyncio
    async def test_sequences_continue_across_submissions(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "A", "B")
        await ledger.submit_reading("A", 10, 1, False)
        await ledger.submit_reading("B", 30, 1, False)
        events = await ledger.events_since(0)
        assert [e.sequence for e in events] == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_events_since_and_limit(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "A")
        await ledger.submit_reading("A", 10, 1, False)
        await ledger.submit_reading("A", 10, 1, False)
        tail = await ledger.events_since(2)
        assert [e.sequence for e in tail] == [3, 4]
        assert [e.sequence for e in await ledger.events_since(0, limit=3)] == [1, 2, 3]
        assert await ledger.events_since(10) == []


# ── Observers ────────────────────────────────────────────────────────────────

class TestObservers:
    @pytest.mark.asyncio
    async def test_observer_sees_events_in_order(self, ledger: AssessmentLedger) -> None:
        recorder = _Recorder()
        ledger.subscribe(recorder)
        await _registered(ledger, "A")
        await ledger.submit_reading("A", 65, 5, False)
        assert recorder.events == await ledger.events_since(0)

    @pytest.mark.asyncio
    async def test_failing_observer_does_not_break_ingestion(self, ledger: AssessmentLedger) -> None:
        recorder = _Recorder()
        ledger.subscribe(_Exploding())
        ledger.subscribe(recorder)
        await _registered(ledger, "A")

        a = await ledger.submit_reading("A", 90, 6, False)

        assert a.severity_level == 4
        assert len(recorder.events) == 4
        assert (await ledger.get_stats()).total_events_processed == 1

    @pytest.mark.asyncio
    async def test_unsubscribe(self, ledger: AssessmentLedger) -> None:
        recorder = _Recorder()
        ledger.subscribe(recorder)
        ledger.unsubscribe(recorder)
        await _registered(ledger, "A")
        await ledger.submit_reading("A", 10, 1, False)
        assert recorder.events == []

    @pytest.mark.asyncio
    async def test_clock_only_read_once_per_submission(self, ledger: AssessmentLedger) -> None:
        await _registered(ledger, "A")
        ticks = iter([_BASE, _BASE + timedelta(seconds=1)])
        with patch("ruptura.store.ledger.utc_now", side_effect=lambda: next(ticks)):
            a = await ledger.submit_reading("A", 10, 1, False)
        reading = await ledger.get_reading("A")
        assert reading.recorded_at == a.assessed_at == _BASE
