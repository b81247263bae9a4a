"""GeoMath — great-circle distance, local planar frames and zone containment.

Distances always use haversine.  The equirectangular projection exists
only to average coordinates in a locally flat frame; it is never used to
measure anything.

All coordinate validation in the engine funnels through this module:
a non-finite latitude or longitude raises InvalidCoordinate here and
propagates to whoever called compute().
"""

from __future__ import annotations

import math
from typing import Callable, Iterable, Sequence

EARTH_RADIUS_M = 6_371_000.0

LatLon = tuple[float, float]
ToPlanar = Callable[[float, float], tuple[float, float]]
ToGeographic = Callable[[float, float], LatLon]


class InvalidCoordinate(ValueError):
    """Raised when a latitude or longitude is not a finite number."""

    def __init__(self, value: object, reason: str = "not a finite number") -> None:
        self.value = value
        super().__init__(f"Invalid latitude or longitude value {value!r}: {reason}")


def _require_finite(*values: object) -> None:
    for v in values:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise InvalidCoordinate(v, "not a number")
        if not math.isfinite(v):
            raise InvalidCoordinate(v)


def validate_coordinate(lat: float, lon: float) -> None:
    """Raise InvalidCoordinate unless both values are finite numbers."""
    _require_finite(lat, lon)


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two WGS-84 points."""
    _require_finite(lat1, lon1, lat2, lon2)
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat, dlon = math.radians(lat2 - lat1), math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlon / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def local_projection(points: Sequence[LatLon]) -> tuple[ToPlanar, ToGeographic]:
    """Build an equirectangular frame centered on the mean of *points*.

    Returns ``(to_planar, to_geographic)``: the first maps (lat, lon) to
    (x, y) meters, the second is its exact algebraic inverse.
    """
    if not points:
        raise ValueError("local_projection requires at least one point")
    for lat, lon in points:
        _require_finite(lat, lon)

    lat0 = sum(p[0] for p in points) / len(points)
    lon0 = sum(p[1] for p in points) / len(points)
    cos0 = math.cos(math.radians(lat0))

    def to_planar(lat: float, lon: float) -> tuple[float, float]:
        _require_finite(lat, lon)
        x = EARTH_RADIUS_M * math.radians(lon - lon0) * cos0
        y = EARTH_RADIUS_M * math.radians(lat - lat0)
        return x, y

    def to_geographic(x: float, y: float) -> LatLon:
        lat = lat0 + math.degrees(y / EARTH_RADIUS_M)
        lon = lon0 + math.degrees(x / (EARTH_RADIUS_M * cos0))
        return lat, lon

    return to_planar, to_geographic


def planar_centroid(points: Sequence[LatLon]) -> LatLon:
    """Average *points* in their local planar frame and map back to lat/lon."""
    to_planar, to_geographic = local_projection(points)
    xs, ys = zip(*(to_planar(lat, lon) for lat, lon in points))
    return to_geographic(sum(xs) / len(xs), sum(ys) / len(ys))


def is_inside_zone(point: LatLon, polygon: Iterable[LatLon]) -> bool:
    """Even-odd ray casting test of *point* against a (lat, lon) polygon.

    Polygons with fewer than three vertices contain nothing.  Points lying
    exactly on an edge may fall either way.
    """
    vertices = list(polygon)
    if len(vertices) < 3:
        return False

    py, px = point
    inside = False
    j = len(vertices) - 1
    for i in range(len(vertices)):
        yi, xi = vertices[i]
        yj, xj = vertices[j]
        if (yi > py) != (yj > py):
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < x_cross:
                inside = not inside
        j = i
    return inside
