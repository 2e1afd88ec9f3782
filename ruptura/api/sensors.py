"""REST endpoints over the AssessmentLedger.

Paths (prefix /api):
    POST /sensors                         register a sensor
    POST /sensors/{sensor_id}/deactivate  deactivate (irreversible)
    GET  /sensors                         registry in registration order
    POST /readings                        submit a reading → assessment
    GET  /sensors/{sensor_id}/reading     latest reading
    GET  /sensors/{sensor_id}/assessment  latest assessment
    GET  /sensors/{sensor_id}/history     every entry for the sensor
    GET  /stats                           aggregate counters
    GET  /events?since=N                  poll the event stream

Handlers are thin: every rule lives in the ledger and the engine.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from ruptura.domain.errors import (
    DuplicateSensorError,
    InvalidDisplacementError,
    InvalidIntensityError,
    NoDataAvailableError,
    RupturaError,
    SensorInactiveError,
    UnknownSensorError,
)
from ruptura.domain.reading import ReadingSubmission
from ruptura.store.ledger import AssessmentLedger

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[RupturaError], int] = {
    DuplicateSensorError: 409,
    SensorInactiveError: 409,
    UnknownSensorError: 404,
    NoDataAvailableError: 404,
    InvalidIntensityError: 422,
    InvalidDisplacementError: 422,
}


class SensorRegistration(BaseModel):
    sensor_id: str = Field(..., min_length=1, max_length=256)


def _http_error(exc: RupturaError) -> HTTPException:
    status = _STATUS_BY_ERROR.get(type(exc), 400)
    return HTTPException(status_code=status, detail={"kind": exc.kind, "detail": str(exc)})


def create_sensor_router(
    ledger: AssessmentLedger,
    event_poll_limit: int = 200,
) -> APIRouter:
    """Factory that wires the REST endpoints to a concrete AssessmentLedger."""

    router = APIRouter(prefix="/api", tags=["ledger"])

    # ── Registry ─────────────────────────────────────────────────────

    @router.post("/sensors", status_code=201)
    async def register_sensor(body: SensorRegistration) -> dict[str, Any]:
        try:
            record = await ledger.register_sensor(body.sensor_id)
        except RupturaError as exc:
            raise _http_error(exc) from exc
        return record.to_dict()

    @router.post("/sensors/{sensor_id}/deactivate")
    async def deactivate_sensor(sensor_id: str) -> dict[str, Any]:
        try:
            record = await ledger.deactivate_sensor(sensor_id)
        except RupturaError as exc:
            raise _http_error(exc) from exc
        return record.to_dict()

    @router.get("/sensors")
    async def list_sensors() -> dict[str, Any]:
        sensors = await ledger.list_sensors()
        return {"sensors": sensors, "count": len(sensors)}

    # ── Ingestion ────────────────────────────────────────────────────

    @router.post("/readings")
    async def submit_reading(body: ReadingSubmission) -> dict[str, Any]:
        try:
            assessment = await ledger.submit(body)
        except RupturaError as exc:
            logger.warning("Rejected reading from %s: %s", body.sensor_id, exc)
            raise _http_error(exc) from exc
        return {"sensor_id": body.sensor_id, "assessment": assessment.model_dump(mode="json")}

    # ── Queries ──────────────────────────────────────────────────────

    @router.get("/sensors/{sensor_id}/reading")
    async def get_reading(sensor_id: str) -> dict[str, Any]:
        try:
            reading = await ledger.get_reading(sensor_id)
        except RupturaError as exc:
            raise _http_error(exc) from exc
        return reading.model_dump(mode="json")

    @router.get("/sensors/{sensor_id}/assessment")
    async def get_assessment(sensor_id: str) -> dict[str, Any]:
        try:
            assessment = await ledger.get_assessment(sensor_id)
        except RupturaError as exc:
            raise _http_error(exc) from exc
        return assessment.model_dump(mode="json")

    @router.get("/sensors/{sensor_id}/history")
    async def get_history(sensor_id: str) -> dict[str, Any]:
        try:
            entries = await ledger.history(sensor_id)
        except RupturaError as exc:
            raise _http_error(exc) from exc
        return {
            "sensor_id": sensor_id,
            "entries": [entry.model_dump(mode="json") for entry in entries],
            "count": len(entries),
        }

    @router.get("/stats")
    async def get_stats() -> dict[str, Any]:
        stats = await ledger.get_stats()
        return stats.model_dump()

    @router.get("/events")
    async def poll_events(since: int = Query(0, ge=0)) -> dict[str, Any]:
        events = await ledger.events_since(since, limit=event_poll_limit)
        last = events[-1].sequence if events else since
        return {"events": [event.to_dict() for event in events], "last_sequence": last}

    return router
