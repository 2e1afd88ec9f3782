"""Manages active WebSocket connections for broadcasting ledger events to UI clients."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks frontend WebSocket connections.  Used from the event loop only.

    Accepting a socket and joining the broadcast set are separate steps so
    a client can be brought up to date before live events reach it.
    """

    def __init__(self) -> None:
        self._connections: list[WebSocket] = []

    def attach(self, websocket: WebSocket) -> None:
        if websocket not in self._connections:
            self._connections.append(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._connections:
            self._connections.remove(websocket)

    def snapshot(self) -> list[WebSocket]:
        return list(self._connections)

    @property
    def active_count(self) -> int:
        return len(self._connections)

    async def broadcast_json(
        self,
        data: dict[str, Any],
        recipients: Iterable[WebSocket] | None = None,
    ) -> None:
        """Send a JSON payload to *recipients*, default every attached client.

        Clients whose send fails are dropped.
        """
        targets = self.snapshot() if recipients is None else list(recipients)
        for ws in targets:
            if ws not in self._connections:
                continue
            try:
                await ws.send_json(data)
            except Exception as exc:
                logger.warning("Dropping dashboard client after failed send: %s", exc)
                self.disconnect(ws)
