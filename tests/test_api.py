"""Tests for the HTTP and WebSocket surface."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from incident_radar.api.clusters import create_cluster_router
from incident_radar.api.ws_dashboard import broadcast_result, create_dashboard_router
from incident_radar.api.ws_incidents import create_incident_feed_router
from incident_radar.store.snapshot_feed import SnapshotFeed
from incident_radar.store.zone_registry import ZoneRegistry

from tests.test_incident import _offset, _valid_incident

NOW = "2026-01-01T12:00:00+00:00"
CARIG_SUR = [_offset(-500, -500), _offset(-500, 500), _offset(500, 500), _offset(500, -500)]


def _snapshot(count: int, prefix: str = "r") -> dict:
    incidents = []
    for i in range(count):
        lat, lon = _offset(0, 5.0 * i)
        incidents.append(_valid_incident(id=f"{prefix}-{i}", latitude=lat, longitude=lon))
    return {"incidents": incidents, "now": NOW}


@pytest.fixture
def client():
    feed = SnapshotFeed()
    feed.subscribe(broadcast_result)
    app = FastAPI()
    app.include_router(create_cluster_router(feed, ZoneRegistry({"Carig Sur": CARIG_SUR})))
    app.include_router(create_incident_feed_router(feed))
    app.include_router(create_dashboard_router(feed))
    with TestClient(app) as test_client:
        yield test_client


class TestSnapshotEndpoints:
    def test_clusters_404_before_first_snapshot(self, client: TestClient) -> None:
        assert client.get("/api/clusters").status_code == 404

    def test_submit_snapshot(self, client: TestClient) -> None:
        resp = client.post("/api/snapshot", json=_snapshot(3))
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "published"
        result = body["result"]
        assert result["sequence"] == 1
        assert result["clusters"][0]["member_ids"] == ["r-0", "r-1", "r-2"]
        assert result["clusters"][0]["risk_label"] == "High"
        assert result["full_cluster"] is None

        latest = client.get("/api/clusters").json()
        assert latest["sequence"] == 1

    def test_capacity_notice_in_payload(self, client: TestClient) -> None:
        result = client.post("/api/snapshot", json=_snapshot(10)).json()["result"]
        assert result["unclustered_count"] == 2
        assert result["capacity_notices"][0]["excluded_ids"] == ["r-8", "r-9"]
        assert result["full_cluster"]["size"] == 8

    def test_non_finite_coordinate_is_400(self, client: TestClient) -> None:
        resp = client.post(
            "/api/snapshot",
            content='{"incidents": [{"id": "bad", "latitude": NaN, "longitude": 121.75}]}',
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 400
        assert "Invalid latitude or longitude" in resp.json()["detail"]

    def test_out_of_range_latitude_is_422(self, client: TestClient) -> None:
        body = {"incidents": [_valid_incident(latitude=95.0)]}
        assert client.post("/api/snapshot", json=body).status_code == 422

    def test_clusters_by_zone(self, client: TestClient) -> None:
        client.post("/api/snapshot", json=_snapshot(2))
        by_zone = client.get("/api/clusters/zones").json()
        assert list(by_zone) == ["Carig Sur"]

    def test_status_summary(self, client: TestClient) -> None:
        snapshot = _snapshot(2)
        snapshot["incidents"][1]["status"] = "pending"
        client.post("/api/snapshot", json=snapshot)
        summary = client.get("/api/incidents/summary").json()
        assert summary == {"total": 2, "pending": 1, "verified": 1, "resolved": 0, "rejected": 0}


class TestAdmissionEndpoint:
    def test_rejects_ninth_report(self, client: TestClient) -> None:
        client.post("/api/snapshot", json=_snapshot(8))
        lat, lon = _offset(0, 12)
        candidate = _valid_incident(id="new", latitude=lat, longitude=lon)
        resp = client.post("/api/reports/admission", json={"candidate": candidate, "now": NOW})
        assert resp.status_code == 200
        body = resp.json()
        assert body["outcome"] == "reject_full"
        assert body["accepted"] is False
        assert body["cluster_size"] == 9
        assert body["reason"].startswith("Maximum of 8 incidents")

    def test_accepts_far_report(self, client: TestClient) -> None:
        client.post("/api/snapshot", json=_snapshot(8))
        lat, lon = _offset(9_000, 0)
        candidate = _valid_incident(id="new", latitude=lat, longitude=lon)
        body = client.post("/api/reports/admission", json={"candidate": candidate}).json()
        assert body["accepted"] is True
        assert body["center"] is None


class TestZoneEndpoint:
    def test_inside(self, client: TestClient) -> None:
        lat, lon = _offset(0, 0)
        body = client.get("/api/zones/carig sur/contains", params={"lat": lat, "lon": lon}).json()
        assert body["zone"] == "Carig Sur"
        assert body["inside"] is True

    def test_unknown_zone_is_404(self, client: TestClient) -> None:
        resp = client.get("/api/zones/Atlantis/contains", params={"lat": 0, "lon": 0})
        assert resp.status_code == 404


class TestWebSockets:
    def test_incident_feed_acknowledges(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/incidents") as ws:
            ws.send_json(_snapshot(2))
            frame = ws.receive_json()
        assert frame == {
            "status": "published",
            "sequence": 1,
            "cluster_count": 1,
            "unclustered_count": 0,
        }

    def test_incident_feed_reports_invalid_snapshot(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/incidents") as ws:
            ws.send_json({"incidents": [{"latitude": "north"}]})
            frame = ws.receive_json()
        assert frame["status"] == "error"
        assert "validation failed" in frame["detail"]

    def test_incident_feed_survives_malformed_json(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/incidents") as ws:
            ws.send_text("not json")
            frame = ws.receive_json()
            assert frame["status"] == "error"

            ws.send_json(_snapshot(2))
            assert ws.receive_json()["status"] == "published"

    def test_dashboard_receives_latest_and_pushes(self, client: TestClient) -> None:
        client.post("/api/snapshot", json=_snapshot(2, prefix="a"))
        with client.websocket_connect("/ws/dashboard") as dashboard:
            initial = dashboard.receive_json()
            assert initial["sequence"] == 1

            client.post("/api/snapshot", json=_snapshot(3, prefix="b"))
            pushed = dashboard.receive_json()
            assert pushed["sequence"] == 2
            assert pushed["clusters"][0]["member_ids"] == ["b-0", "b-1", "b-2"]
