"""Dashboard WebSocket — pushes live ledger events to connected frontends.

Architecture:
    Sensor  →  /ws/reading or POST /api/readings  →  AssessmentLedger commits
                                                          ↓
                                              emits events to observers
                                                          ↓
    FE      ←  /ws/dashboard  ←  DashboardManager broadcasts each event

The DashboardManager is a ledger observer.  The ledger calls it
synchronously; it schedules the actual network sends as background tasks
so ingestion never waits on a slow client.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ruptura.domain.events import AnyLedgerEvent
from ruptura.services.connection_manager import ConnectionManager
from ruptura.store.ledger import AssessmentLedger

logger = logging.getLogger(__name__)


class DashboardManager:
    """Ledger observer that fans events out to dashboard clients."""

    def __init__(self, connections: ConnectionManager | None = None) -> None:
        self._connections = connections or ConnectionManager()
        self._pending: set[asyncio.Task] = set()

    @property
    def connections(self) -> ConnectionManager:
        return self._connections

    @property
    def client_count(self) -> int:
        return self._connections.active_count

    def on_event(self, event: AnyLedgerEvent) -> None:
        if not self._connections.active_count:
            return  # No frontends connected, skip

        # Recipients are fixed now; later joiners get this event from catch-up
        payload = event.to_dict()
        task = asyncio.get_running_loop().create_task(
            self._connections.broadcast_json(payload, self._connections.snapshot())
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


def create_dashboard_router(
    ledger: AssessmentLedger,
    manager: DashboardManager,
    replay_count: int = 20,
) -> APIRouter:
    """Factory that wires the dashboard endpoint to a ledger + manager.

    Newly connected clients first receive the last *replay_count* events
    so a dashboard opened mid-incident is not blank.  Events committed
    while the replay is being sent are caught up from the ledger, and the
    client joins the live broadcast only once nothing is outstanding, so
    every event arrives exactly once and in sequence order.
    """

    router = APIRouter()

    @router.websocket("/ws/dashboard")
    async def stream_events(websocket: WebSocket) -> None:
        await websocket.accept()

        try:
            backlog = await ledger.events_since(0)
            cursor = backlog[-1].sequence if backlog else 0
            pending = backlog[-replay_count:] if replay_count > 0 else []
            while pending:
                for event in pending:
                    await websocket.send_json(event.to_dict())
                pending = await ledger.events_since(cursor)
                if pending:
                    cursor = pending[-1].sequence

            # No await between the last empty catch-up and joining
            manager.connections.attach(websocket)
            logger.info("Dashboard client connected (%d total)", manager.client_count)

            while True:
                # Keep the connection alive; events are pushed server-side
                await websocket.receive_text()

        except WebSocketDisconnect:
            manager.connections.disconnect(websocket)
            logger.info("Dashboard client disconnected (%d remaining)", manager.client_count)

    return router
