"""ProximityClusterer — single-linkage grouping under a distance threshold.

Algorithm:
    1. Union every unordered pair of points whose haversine distance is
       within the radius (disjoint-set with path compression).
    2. Group indices by representative.  Groups are ordered by their
       first member's input index and members keep input order, so the
       output never depends on hash or dict iteration order.
    3. Drop groups smaller than min_size (those points stay unclustered).
    4. Truncate groups larger than max_size to their first max_size
       members and remember the overflow.
    5. Centroid = mean of the kept members in a local planar frame.

Two points in one group need not be within the radius of each other,
only linked through a chain of close pairs.  Cost is O(n²) distance
evaluations, fine for snapshots of a few hundred reports.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from incident_radar.core.geo import (
    LatLon,
    haversine_meters,
    planar_centroid,
    validate_coordinate,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProximityGroup:
    """Indices of one surviving group plus any points cut by the size cap."""

    members: tuple[int, ...]
    overflow: tuple[int, ...]
    centroid: LatLon

    @property
    def overflowed(self) -> bool:
        return bool(self.overflow)

    @property
    def total_size(self) -> int:
        return len(self.members) + len(self.overflow)


class _DisjointSet:
    __slots__ = ("_parent",)

    def __init__(self, size: int) -> None:
        self._parent = list(range(size))

    def find(self, x: int) -> int:
        root = x
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[x] != root:
            self._parent[x], x = root, self._parent[x]
        return root

    def union(self, a: int, b: int) -> None:
        ra, rb = self.find(a), self.find(b)
        if ra != rb:
            self._parent[rb] = ra


class ProximityClusterer:
    """Radius-threshold clustering with a minimum and maximum group size.

    Args:
        radius_meters: Link distance; pairs at exactly this distance link.
        min_size: Smallest group reported as a cluster.
        max_size: Largest cluster; extra members are cut in input order.
    """

    def __init__(
        self,
        radius_meters: float = 235.0,
        min_size: int = 2,
        max_size: int = 8,
    ) -> None:
        if max_size < min_size:
            raise ValueError("max_size must be >= min_size")
        self._radius = radius_meters
        self._min_size = min_size
        self._max_size = max_size

    @property
    def radius_meters(self) -> float:
        return self._radius

    # ── Public API ───────────────────────────────────────────────────────

    def components(self, coords: Sequence[LatLon]) -> list[tuple[int, ...]]:
        """Every connected component, singletons included, untruncated."""
        n = len(coords)
        dsu = _DisjointSet(n)
        for i in range(n):
            lat_i, lon_i = coords[i]
            for j in range(i + 1, n):
                lat_j, lon_j = coords[j]
                if haversine_meters(lat_i, lon_i, lat_j, lon_j) <= self._radius:
                    dsu.union(i, j)

        bins: dict[int, list[int]] = {}
        for i in range(n):
            bins.setdefault(dsu.find(i), []).append(i)
        return sorted((tuple(members) for members in bins.values()), key=lambda g: g[0])

    def cluster(
        self,
        coords: Sequence[LatLon],
        components: Sequence[tuple[int, ...]] | None = None,
    ) -> list[ProximityGroup]:
        """Groups of at least min_size points, each capped at max_size.

        Pass *components* when they were already computed for *coords*.
        """
        if components is None and len(coords) < self._min_size:
            # Validate coordinates even when nothing can cluster
            for lat, lon in coords:
                validate_coordinate(lat, lon)
            return []

        groups: list[ProximityGroup] = []
        if components is None:
            components = self.components(coords)
        for component in components:
            if len(component) < self._min_size:
                continue
            kept = component[: self._max_size]
            overflow = component[self._max_size:]
            if overflow:
                logger.debug(
                    "Proximity group of %d points exceeds cluster capacity %d; "
                    "excluding %d point(s)",
                    len(component),
                    self._max_size,
                    len(overflow),
                )
            centroid = planar_centroid([coords[i] for i in kept])
            groups.append(ProximityGroup(members=kept, overflow=overflow, centroid=centroid))
        return groups
