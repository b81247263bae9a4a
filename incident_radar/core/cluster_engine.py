"""ClusterEngine — one entry point for clustering, scoring and admission.

Design principles:
    1. Pure functions: a snapshot (and an explicit *now*) in, a freshly
       allocated ClusterResult out.  Nothing is cached between calls.
    2. Same code path for every surface: the zone map, the all-zones
       admin map and the report submission gate all call this module.
    3. Malformed coordinates are fatal (InvalidCoordinate propagates);
       unknown categories and missing timestamps are not.

Admission control:
    The candidate is appended to the existing snapshot and clustered
    without truncation.  The deciding cluster is the candidate's own
    proximity group when it forms one, otherwise the nearest existing
    cluster whose centre lies within the radius of the candidate.  The
    candidate is rejected when that cluster, counting the candidate,
    would exceed max_cluster_size.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Sequence

from incident_radar.core.cluster_config import ClusterConfig
from incident_radar.core.clusterer import ProximityClusterer, ProximityGroup
from incident_radar.core.geo import (
    LatLon,
    haversine_meters,
    is_inside_zone,
    planar_centroid,
    validate_coordinate,
)
from incident_radar.core.risk_scorer import RiskScorer
from incident_radar.core.severity import SeverityModel
from incident_radar.domain.cluster import (
    AdmissionDecision,
    CapacityNotice,
    ClusterPoint,
    ClusterResult,
    GeoPoint,
)
from incident_radar.domain.enums import AdmissionOutcome
from incident_radar.domain.incident import Incident
from incident_radar.foundation.clock import ensure_utc, utc_now

logger = logging.getLogger(__name__)

UNKNOWN_ZONE = "Unknown"


class ClusterEngine:
    """Stateless clustering and danger scoring over incident snapshots.

    Safe to share between threads and tasks: it holds only its frozen
    configuration and the helpers built from it.
    """

    def __init__(self, config: ClusterConfig | None = None) -> None:
        self._config = config or ClusterConfig()
        self._severity = SeverityModel(
            table=self._config.severity_table,
            decay_multiplier=self._config.decay_multiplier,
            decay_period_days=self._config.decay_period_days,
        )
        self._scorer = RiskScorer(self._config, self._severity)
        self._clusterer = ProximityClusterer(
            radius_meters=self._config.radius_meters,
            min_size=self._config.min_cluster_size,
            max_size=self._config.max_cluster_size,
        )

    @property
    def config(self) -> ClusterConfig:
        return self._config

    @property
    def severity(self) -> SeverityModel:
        return self._severity

    @property
    def scorer(self) -> RiskScorer:
        return self._scorer

    # ── Public API ───────────────────────────────────────────────────────

    def prepare_points(self, incidents: Iterable[Incident], now: datetime) -> list[ClusterPoint]:
        """Derive the per-report fields for every incident, in input order."""
        return [self._scorer.score_point(incident, now) for incident in incidents]

    def compute(
        self,
        incidents: Sequence[Incident],
        now: datetime | None = None,
        sequence: int | None = None,
    ) -> ClusterResult:
        """Cluster and score a full snapshot.

        Raises:
            InvalidCoordinate: If any incident has a non-finite coordinate.
        """
        now = ensure_utc(now) if now is not None else utc_now()
        points = self.prepare_points(incidents, now)
        groups = self._clusterer.cluster(_coords_of(points))

        clusters = []
        notices = []
        clustered = 0
        for group in groups:
            members = [points[i] for i in group.members]
            cluster = self._scorer.score_cluster(members, group.centroid)
            clusters.append(cluster)
            clustered += len(members)
            if group.overflowed:
                notice = CapacityNotice(
                    center=cluster.center,
                    kept_ids=tuple(m.id for m in members),
                    excluded_ids=tuple(points[i].id for i in group.overflow),
                )
                notices.append(notice)
                logger.warning(
                    "Cluster at (%.6f, %.6f) over capacity: %d kept, %d excluded",
                    cluster.center.latitude,
                    cluster.center.longitude,
                    len(notice.kept_ids),
                    notice.excluded_count,
                )

        logger.debug(
            "Computed %d cluster(s) from %d incident(s) (seq=%s)",
            len(clusters),
            len(points),
            sequence,
        )
        return ClusterResult(
            clusters=tuple(clusters),
            unclustered_count=len(points) - clustered,
            capacity_notices=tuple(notices),
            max_cluster_size=self._config.max_cluster_size,
            computed_at=now,
            sequence=sequence,
        )

    def compute_by_zone(
        self,
        incidents: Sequence[Incident],
        now: datetime | None = None,
    ) -> dict[str, ClusterResult]:
        """Cluster each zone label independently.

        Incidents without a zone are grouped under "Unknown".  Zones appear
        in order of their first incident.  Clusters never span two zones.
        """
        now = ensure_utc(now) if now is not None else utc_now()
        partitions: dict[str, list[Incident]] = {}
        for incident in incidents:
            partitions.setdefault(incident.zone or UNKNOWN_ZONE, []).append(incident)
        return {zone: self.compute(members, now=now) for zone, members in partitions.items()}

    def check_admission(
        self,
        existing: Sequence[Incident],
        candidate: Incident,
        now: datetime | None = None,
    ) -> AdmissionDecision:
        """Decide whether *candidate* may be persisted.

        Must run before the candidate is written upstream.

        Raises:
            InvalidCoordinate: If any coordinate in the simulation is non-finite.
        """
        max_size = self._config.max_cluster_size
        radius = self._config.radius_meters
        simulated = [*existing, candidate]
        coords = [(i.latitude, i.longitude) for i in simulated]
        cand_lat, cand_lon = coords[-1]
        validate_coordinate(cand_lat, cand_lon)

        components = self._clusterer.components(coords)
        candidate_index = len(simulated) - 1
        own = next(c for c in components if candidate_index in c)

        size = 0
        center: LatLon | None = None
        if len(own) >= self._config.min_cluster_size:
            size = len(own)
            center = planar_centroid([coords[i] for i in own[:max_size]])
        else:
            nearby = self._nearest_group_within(
                self._clusterer.cluster(coords, components), (cand_lat, cand_lon), radius,
            )
            if nearby is not None:
                size = nearby.total_size + 1
                center = nearby.centroid

        center_point = (
            GeoPoint(latitude=center[0], longitude=center[1]) if center is not None else None
        )
        if size > max_size:
            logger.info(
                "Rejected candidate %s: cluster would hold %d incidents (max %d)",
                candidate.id,
                size,
                max_size,
            )
            return AdmissionDecision(
                outcome=AdmissionOutcome.REJECT_FULL,
                cluster_size=size,
                max_cluster_size=max_size,
                center=center_point,
                reason=(
                    f"Maximum of {max_size} incidents are allowed within this cluster. "
                    "This report was not saved."
                ),
            )

        return AdmissionDecision(
            outcome=AdmissionOutcome.ACCEPT,
            cluster_size=size,
            max_cluster_size=max_size,
            center=center_point,
            reason="within cluster capacity" if size else "no nearby cluster",
        )

    @staticmethod
    def is_inside_zone(point: LatLon, polygon: Sequence[LatLon]) -> bool:
        """Even-odd containment of a (lat, lon) point in a zone polygon."""
        return is_inside_zone(point, polygon)

    # ── Helpers ──────────────────────────────────────────────────────────

    @staticmethod
    def _nearest_group_within(
        groups: Sequence[ProximityGroup],
        point: LatLon,
        radius: float,
    ) -> ProximityGroup | None:
        best: ProximityGroup | None = None
        best_distance = radius
        for group in groups:
            distance = haversine_meters(point[0], point[1], *group.centroid)
            if distance > radius:
                continue
            if best is None or distance < best_distance:
                best, best_distance = group, distance
        return best


def _coords_of(points: Sequence[ClusterPoint]) -> list[LatLon]:
    return [(p.latitude, p.longitude) for p in points]
