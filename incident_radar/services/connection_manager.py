"""Manages dashboard WebSocket connections for broadcasting cluster results."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks connected map clients; not shared across worker processes."""

    def __init__(self) -> None:
        self._connections: list[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.append(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._connections:
            self._connections.remove(websocket)

    @property
    def active_count(self) -> int:
        return len(self._connections)

    async def broadcast_json(self, data: dict[str, Any]) -> None:
        """Send a JSON payload to every connected client, dropping dead ones."""
        for ws in list(self._connections):
            try:
                await ws.send_json(data)
            except (WebSocketDisconnect, RuntimeError, OSError) as exc:
                logger.warning("Dropping dashboard client after send failure: %s", exc)
                self.disconnect(ws)
