"""WebSocket endpoint for the live incident feed.

Path: /ws/incidents

Each message is a full snapshot (SnapshotRequest JSON).  The snapshot is
recomputed through the SnapshotFeed; the reply is the published result,
or a "superseded" frame when a newer snapshot overtook it.  Published
results are also pushed to dashboard clients by the feed's listeners.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from incident_radar.core.geo import InvalidCoordinate
from incident_radar.models.requests import SnapshotRequest
from incident_radar.store.snapshot_feed import SnapshotFeed

logger = logging.getLogger(__name__)


def create_incident_feed_router(feed: SnapshotFeed) -> APIRouter:
    """Factory that wires the feed endpoint to a concrete SnapshotFeed."""

    router = APIRouter()

    @router.websocket("/ws/incidents")
    async def ingest_snapshots(websocket: WebSocket) -> None:
        await websocket.accept()
        logger.info("Incident feed connected")

        try:
            while True:
                raw = await websocket.receive_text()

                # ── Validate at the boundary ─────────────────────────────
                try:
                    request = SnapshotRequest.model_validate_json(raw)
                except ValidationError as exc:
                    await websocket.send_json({
                        "status": "error",
                        "detail": f"Snapshot validation failed: {exc.error_count()} error(s)",
                    })
                    continue

                # ── Recompute ────────────────────────────────────────────
                try:
                    result = await feed.submit(request.incidents, now=request.now)
                except InvalidCoordinate as exc:
                    await websocket.send_json({"status": "error", "detail": str(exc)})
                    continue

                # ── Acknowledge ──────────────────────────────────────────
                if result is None:
                    await websocket.send_json({"status": "superseded"})
                    continue
                await websocket.send_json({
                    "status": "published",
                    "sequence": result.sequence,
                    "cluster_count": len(result.clusters),
                    "unclustered_count": result.unclustered_count,
                })

        except WebSocketDisconnect:
            logger.info("Incident feed disconnected")

    return router

