"""REST endpoints for cluster results, admission control and zone lookups.

Paths:
    POST /api/snapshot                 replace the snapshot and recompute
    GET  /api/clusters                 latest published result
    GET  /api/clusters/zones           per-zone results for the snapshot
    GET  /api/incidents/summary        status counts for the snapshot
    POST /api/reports/admission        capacity gate for a new report
    GET  /api/zones/{name}/contains    point-in-zone test
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from incident_radar.api.serializers import admission_payload, result_payload
from incident_radar.core.geo import InvalidCoordinate
from incident_radar.models.requests import AdmissionRequest, SnapshotRequest
from incident_radar.store.filters import summarize_statuses
from incident_radar.store.snapshot_feed import SnapshotFeed
from incident_radar.store.zone_registry import UnknownZoneError, ZoneRegistry

logger = logging.getLogger(__name__)


def create_cluster_router(feed: SnapshotFeed, zones: ZoneRegistry) -> APIRouter:
    """Factory that wires the cluster endpoints to a feed and zone registry."""

    router = APIRouter(prefix="/api", tags=["clusters"])

    @router.post("/snapshot")
    async def submit_snapshot(body: SnapshotRequest) -> dict[str, Any]:
        try:
            result = await feed.submit(body.incidents, now=body.now)
        except InvalidCoordinate as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if result is None:
            return {"status": "superseded"}
        return {"status": "published", "result": result_payload(result)}

    @router.get("/clusters")
    async def latest_clusters() -> dict[str, Any]:
        result = await feed.latest()
        if result is None:
            raise HTTPException(status_code=404, detail="No snapshot has been published yet")
        return result_payload(result)

    @router.get("/clusters/zones")
    async def clusters_by_zone() -> dict[str, Any]:
        results = await feed.zone_results()
        return {zone: result_payload(r) for zone, r in results.items()}

    @router.get("/incidents/summary")
    async def status_summary() -> dict[str, int]:
        return summarize_statuses(await feed.snapshot())

    @router.post("/reports/admission")
    async def check_admission(body: AdmissionRequest) -> dict[str, Any]:
        try:
            decision = await feed.admit(body.candidate, now=body.now)
        except InvalidCoordinate as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return admission_payload(decision)

    @router.get("/zones/{name}/contains")
    async def zone_contains(name: str, lat: float, lon: float) -> dict[str, Any]:
        try:
            inside = zones.contains(name, lat, lon)
        except UnknownZoneError as exc:
            raise HTTPException(status_code=404, detail=f"Zone {name} not found") from exc
        return {"zone": zones.normalize(name), "latitude": lat, "longitude": lon, "inside": inside}

    return router
