"""Tests for the canonical Incident model and caller-side filters."""

import math
from datetime import datetime, timezone

import pytest

from incident_radar.domain.enums import IncidentStatus
from incident_radar.domain.incident import Incident
from incident_radar.store.filters import clusterable, for_display, summarize_statuses

# Carig Sur, Tuguegarao
ORIGIN = (17.6560, 121.7500)
METERS_PER_DEGREE = 6_371_000.0 * math.pi / 180


def _offset(north_m: float = 0.0, east_m: float = 0.0) -> tuple[float, float]:
    """(lat, lon) displaced from ORIGIN by the given meters."""
    lat = ORIGIN[0] + north_m / METERS_PER_DEGREE
    lon = ORIGIN[1] + east_m / (METERS_PER_DEGREE * math.cos(math.radians(ORIGIN[0])))
    return lat, lon


def _valid_incident(**overrides) -> dict:
    """Return a valid incident dict, with optional overrides."""
    base = {
        "id": "r-1",
        "latitude": ORIGIN[0],
        "longitude": ORIGIN[1],
        "category": "Flood",
        "status": "verified",
        "event_time": "2026-01-01T12:00:00+00:00",
        "zone": "Carig Sur",
    }
    base.update(overrides)
    return base


def _incident_at(north_m: float = 0.0, east_m: float = 0.0, **overrides) -> Incident:
    lat, lon = _offset(north_m, east_m)
    return Incident.model_validate(_valid_incident(latitude=lat, longitude=lon, **overrides))


class TestIncidentValidation:
    def test_valid_incident_parses(self) -> None:
        incident = Incident.model_validate(_valid_incident())
        assert incident.status == IncidentStatus.VERIFIED
        assert incident.category == "Flood"

    def test_id_generated_when_missing(self) -> None:
        data = _valid_incident()
        del data["id"]
        a = Incident.model_validate(data)
        b = Incident.model_validate(data)
        assert a.id and b.id and a.id != b.id

    def test_unknown_category_accepted(self) -> None:
        incident = Incident.model_validate(_valid_incident(category="Meteor Strike"))
        assert incident.category == "Meteor Strike"

    def test_latitude_out_of_range_rejected(self) -> None:
        with pytest.raises(Exception):
            Incident.model_validate(_valid_incident(latitude=91.0))

    def test_longitude_out_of_range_rejected(self) -> None:
        with pytest.raises(Exception):
            Incident.model_validate(_valid_incident(longitude=-180.5))

    def test_non_finite_coordinate_left_for_geomath(self) -> None:
        """NaN passes the model so the engine can raise InvalidCoordinate."""
        incident = Incident.model_validate(_valid_incident(latitude=float("nan")))
        assert math.isnan(incident.latitude)

    def test_invalid_status_rejected(self) -> None:
        with pytest.raises(Exception):
            Incident.model_validate(_valid_incident(status="archived"))

    def test_naive_timestamp_gets_utc(self) -> None:
        incident = Incident.model_validate(
            _valid_incident(event_time=datetime(2026, 1, 1, 12, 0).isoformat())
        )
        assert incident.event_time.tzinfo is not None
        assert incident.event_time == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_timestamps_optional(self) -> None:
        incident = Incident.model_validate(_valid_incident(event_time=None))
        assert incident.event_time is None
        assert incident.resolved_time is None

    def test_incident_is_immutable(self) -> None:
        incident = Incident.model_validate(_valid_incident())
        with pytest.raises(Exception):
            incident.category = "Fire"

    def test_is_resolved(self) -> None:
        assert Incident.model_validate(_valid_incident(status="resolved")).is_resolved
        assert not Incident.model_validate(_valid_incident(status="pending")).is_resolved


class TestFilters:
    def _mixed(self) -> list[Incident]:
        return [
            Incident.model_validate(_valid_incident(id=f"r-{i}", status=s))
            for i, s in enumerate(["pending", "verified", "resolved", "rejected", "verified"])
        ]

    def test_for_display_keeps_verified_and_resolved(self) -> None:
        shown = for_display(self._mixed())
        assert [i.id for i in shown] == ["r-1", "r-2", "r-4"]

    def test_clusterable_drops_rejected_only(self) -> None:
        kept = clusterable(self._mixed())
        assert [i.id for i in kept] == ["r-0", "r-1", "r-2", "r-4"]

    def test_summarize_statuses(self) -> None:
        assert summarize_statuses(self._mixed()) == {
            "total": 5,
            "pending": 1,
            "verified": 2,
            "resolved": 1,
            "rejected": 1,
        }

    def test_summarize_empty(self) -> None:
        assert summarize_statuses([])["total"] == 0
