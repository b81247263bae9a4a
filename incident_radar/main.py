"""incident-radar — spatial clustering and danger scoring for incident reports.

This is the application entry point.  It wires the ClusterEngine,
SnapshotFeed, ZoneRegistry and the HTTP/WebSocket endpoints together.
"""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI

from incident_radar.api.clusters import create_cluster_router
from incident_radar.api.dependencies import ui_manager
from incident_radar.api.ws_dashboard import broadcast_result, create_dashboard_router
from incident_radar.api.ws_incidents import create_incident_feed_router
from incident_radar.config import settings
from incident_radar.core.cluster_config import ClusterConfig
from incident_radar.core.cluster_engine import ClusterEngine
from incident_radar.store.snapshot_feed import SnapshotFeed
from incident_radar.store.zone_registry import ZoneRegistry

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

# ── Engine ───────────────────────────────────────────────────────────────────

engine = ClusterEngine(ClusterConfig.from_settings(settings))

# ── State ────────────────────────────────────────────────────────────────────

feed = SnapshotFeed(engine)
feed.subscribe(broadcast_result)

zones = (
    ZoneRegistry.from_json_file(settings.zones_file)
    if settings.zones_file
    else ZoneRegistry()
)

# ── App ──────────────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    description="Proximity clustering, danger scoring and admission control",
    version="0.1.0",
)

# ── Routes ───────────────────────────────────────────────────────────────────

app.include_router(create_cluster_router(feed, zones))
app.include_router(create_incident_feed_router(feed))
app.include_router(create_dashboard_router(feed))


# ── Health ───────────────────────────────────────────────────────────────────

@app.get("/health")
async def health() -> dict:
    latest = await feed.latest()
    return {
        "status": "ok",
        "radius_meters": engine.config.radius_meters,
        "max_cluster_size": engine.config.max_cluster_size,
        "zones": zones.names,
        "dashboard_clients": ui_manager.active_count,
        "feed": feed.stats,
        "latest": latest.summary() if latest is not None else None,
    }


def run() -> None:
    """Serve the app with uvicorn (the ``incident-radar`` console script)."""
    uvicorn.run("incident_radar.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
