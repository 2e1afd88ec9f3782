"""WebSocket endpoint for reading ingestion.

Path: /ws/reading

Accepts JSON matching the ReadingSubmission schema, validates it at the
boundary, submits it to the AssessmentLedger, and acknowledges with the
resulting assessment.  If strict validation fails, falls back to the
adapter registry (Omron D7S and contract-call payloads).

Domain errors are reported back on the socket; the connection stays open.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ruptura.adapters.registry import AdaptationError, AdapterRegistry, NoAdapterFoundError
from ruptura.domain.errors import RupturaError
from ruptura.domain.reading import ReadingSubmission
from ruptura.store.ledger import AssessmentLedger

logger = logging.getLogger(__name__)


def create_reading_router(
    ledger: AssessmentLedger,
    adapter_registry: AdapterRegistry | None = None,
) -> APIRouter:
    """Factory that wires the reading endpoint to a concrete AssessmentLedger.

    Args:
        ledger: The AssessmentLedger to submit readings to.
        adapter_registry: Optional AdapterRegistry for fallback conversion.
    """

    router = APIRouter()

    @router.websocket("/ws/reading")
    async def ingest_reading(websocket: WebSocket) -> None:
        await websocket.accept()
        logger.info("Reading source connected")

        try:
            while True:
                raw = await websocket.receive_json()

                # ── Validate at the boundary ─────────────────────────────
                try:
                    submission = ReadingSubmission.model_validate(raw)
                except ValidationError:
                    submission = None

                if submission is None and (adapter_registry is None or not isinstance(raw, dict)):
                    await websocket.send_json({
                        "status": "error",
                        "kind": "InvalidPayload",
                        "detail": "Payload does not match the reading schema",
                    })
                    continue

                # ── Submit to ledger ─────────────────────────────────────
                try:
                    if submission is not None:
                        assessment = await ledger.submit(submission)
                    else:
                        # Vendor feed shape, route through its adapter
                        submission, assessment = await adapter_registry.submit(raw, ledger)
                except (AdaptationError, NoAdapterFoundError) as exc:
                    logger.debug("Adapter fallback failed: %s", exc)
                    await websocket.send_json({
                        "status": "error",
                        "kind": "InvalidPayload",
                        "detail": str(exc),
                    })
                    continue
                except RupturaError as exc:
                    logger.warning("Rejected reading from %s: %s", exc.sensor_id, exc)
                    await websocket.send_json({"status": "error", **exc.to_dict()})
                    continue

                # ── Acknowledge ──────────────────────────────────────────
                await websocket.send_json({
                    "status": "accepted",
                    "sensor_id": submission.sensor_id,
                    "assessment": assessment.model_dump(mode="json"),
                })

        except WebSocketDisconnect:
            logger.info("Reading source disconnected")

    return router
