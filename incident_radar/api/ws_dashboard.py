"""WebSocket endpoint: streams published cluster results to map clients.

Path: /ws/dashboard

    storage feed  →  /ws/incidents   →  SnapshotFeed recomputes
                                              ↓
    map clients   ←  /ws/dashboard   ←  broadcast of each published result

Superseded computations are never broadcast.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from incident_radar.api.dependencies import ui_manager
from incident_radar.api.serializers import result_payload
from incident_radar.domain.cluster import ClusterResult
from incident_radar.store.snapshot_feed import SnapshotFeed

logger = logging.getLogger(__name__)


async def broadcast_result(result: ClusterResult) -> None:
    """Feed listener that pushes a published result to every map client."""
    if ui_manager.active_count:
        await ui_manager.broadcast_json(result_payload(result))


def create_dashboard_router(feed: SnapshotFeed) -> APIRouter:
    """Factory for the dashboard stream; sends the latest result on connect."""

    router = APIRouter()

    @router.websocket("/ws/dashboard")
    async def stream_clusters(websocket: WebSocket) -> None:
        await ui_manager.connect(websocket)
        logger.info("Dashboard client connected — total: %d", ui_manager.active_count)

        latest = await feed.latest()
        if latest is not None:
            await websocket.send_json(result_payload(latest))

        try:
            while True:
                # Keep the connection alive; results are pushed server-side
                await websocket.receive_text()

        except WebSocketDisconnect:
            ui_manager.disconnect(websocket)
            logger.info("Dashboard client disconnected — total: %d", ui_manager.active_count)

    return router
