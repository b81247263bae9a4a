"""Zone registry — named administrative polygons and visibility scoping.

Polygon *data* comes from configuration; this module only stores it,
normalises zone labels against it, and answers containment questions.
An actor scoped to a set of zones sees an incident when either its zone
label or its location matches one of those zones.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Sequence

from incident_radar.core.geo import LatLon, is_inside_zone, validate_coordinate
from incident_radar.domain.incident import Incident

logger = logging.getLogger(__name__)


class UnknownZoneError(KeyError):
    """Raised when a zone name is not registered."""


class ZoneRegistry:
    """Named polygons given as ordered (lat, lon) vertex lists.

    Registration order is preserved and decides which zone wins when
    polygons overlap.
    """

    def __init__(self, zones: dict[str, Sequence[LatLon]] | None = None) -> None:
        self._zones: dict[str, tuple[LatLon, ...]] = {}
        for name, polygon in (zones or {}).items():
            self.register(name, polygon)

    @classmethod
    def from_json_file(cls, path: str | Path) -> ZoneRegistry:
        """Load zones from a JSON object mapping names to [[lat, lon], ...]."""
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"zones file {path} must hold a JSON object")
        registry = cls(data)
        logger.info("Loaded %d zone(s) from %s", len(registry.names), path)
        return registry

    def register(self, name: str, polygon: Sequence[LatLon]) -> None:
        """Add or replace a zone polygon.

        Raises:
            ValueError: If the name is blank or the polygon has < 3 vertices.
            InvalidCoordinate: If a vertex is not finite.
        """
        label = (name or "").strip()
        if not label:
            raise ValueError("zone name must not be blank")
        vertices = tuple((float(lat), float(lon)) for lat, lon in polygon)
        if len(vertices) < 3:
            raise ValueError(f"zone '{label}' needs at least 3 vertices, got {len(vertices)}")
        for lat, lon in vertices:
            validate_coordinate(lat, lon)
        self._zones[label] = vertices
        logger.info("Registered zone: %s (%d vertices)", label, len(vertices))

    @property
    def names(self) -> list[str]:
        return list(self._zones)

    def polygon(self, name: str) -> tuple[LatLon, ...]:
        canonical = self.normalize(name)
        try:
            return self._zones[canonical]
        except KeyError:
            raise UnknownZoneError(name) from None

    def normalize(self, name: str | None) -> str:
        """Map a free-text label onto a registered zone name.

        Matching is case-insensitive on the label's prefix, so
        "carig sur proper" resolves to "Carig Sur".  Unmatched labels are
        returned trimmed.
        """
        text = (name or "").strip()
        folded = text.casefold()
        for registered in self._zones:
            if folded.startswith(registered.casefold()):
                return registered
        return text

    def contains(self, name: str, latitude: float, longitude: float) -> bool:
        return is_inside_zone((latitude, longitude), self.polygon(name))

    def zone_of(self, latitude: float, longitude: float) -> str | None:
        """First registered zone containing the point, or None."""
        for name, polygon in self._zones.items():
            if is_inside_zone((latitude, longitude), polygon):
                return name
        return None

    def visible_to(
        self,
        incidents: Iterable[Incident],
        allowed_zones: Iterable[str],
    ) -> list[Incident]:
        """Incidents whose label or location falls in one of *allowed_zones*."""
        allowed = {self.normalize(z) for z in allowed_zones}
        polygons = [self._zones[z] for z in allowed if z in self._zones]
        visible: list[Incident] = []
        for incident in incidents:
            if self.normalize(incident.zone) in allowed:
                visible.append(incident)
                continue
            point = (incident.latitude, incident.longitude)
            if any(is_inside_zone(point, poly) for poly in polygons):
                visible.append(incident)
        return visible
