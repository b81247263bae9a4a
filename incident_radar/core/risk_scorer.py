"""RiskScorer — per-report preliminary scores and per-cluster danger scores.

Preliminary score (spatial layout plays no part):
    s_severity  = clamp(base_severity / 10, 0, 1)
    s_recency   = clamp(1 - age_days / horizon, 0, 1)
    preliminary = (w_sev * s_severity + w_rec * s_recency) / (w_sev + w_rec)

Cluster score:
    avg_pre         = mean(preliminary)
    weighted_spread = Σ(w_i * dist(member_i, centroid)) / Σ w_i
    s_count         = clamp(min(Σ w_i, count_cap) / count_saturation, 0, 1)
    s_compact       = clamp(1 - weighted_spread / radius, 0, 1)
    final           = clamp(avg_pre + spatial_factor * (w_count * s_count
                                                       + w_compact * s_compact), 0, 1)

    w_i is the member's point weight (decayed severity), so resolved
    reports count less toward the spread and the count term than live
    ones.  The centroid itself is the unweighted planar mean.

Tiers are fixed: < low → Low, < medium → Medium, otherwise High.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Sequence

from incident_radar.core.cluster_config import ClusterConfig
from incident_radar.core.geo import LatLon, haversine_meters
from incident_radar.core.severity import SeverityModel
from incident_radar.domain.cluster import Cluster, ClusterPoint, GeoPoint
from incident_radar.domain.enums import RiskLabel
from incident_radar.domain.incident import Incident
from incident_radar.foundation.clock import days_between


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    if math.isnan(value):
        return low
    return max(low, min(value, high))


class RiskScorer:
    """Deterministic danger scoring.

    Stateless: every method is a pure function of its arguments and the
    configuration captured at construction.
    """

    def __init__(
        self,
        config: ClusterConfig | None = None,
        severity: SeverityModel | None = None,
    ) -> None:
        self._config = config or ClusterConfig()
        self._severity = severity or SeverityModel(
            table=self._config.severity_table,
            decay_multiplier=self._config.decay_multiplier,
            decay_period_days=self._config.decay_period_days,
        )

    # ── Per report ───────────────────────────────────────────────────────

    @staticmethod
    def age_days(incident: Incident, now: datetime) -> float:
        """Days since the event; 0 when unknown or in the future."""
        if incident.event_time is None:
            return 0.0
        return max(days_between(incident.event_time, now), 0.0)

    def preliminary_score(self, incident: Incident, now: datetime) -> float:
        w = self._config.weights
        base = self._severity.base_severity(incident.category)
        s_severity = _clamp(base / 10)
        s_recency = _clamp(1 - self.age_days(incident, now) / self._config.recency_horizon_days)
        raw = (w.severity * s_severity + w.recency * s_recency) / (w.severity + w.recency)
        return _clamp(raw)

    def score_point(self, incident: Incident, now: datetime) -> ClusterPoint:
        """Derive every per-report field for *incident* at *now*."""
        preliminary = self.preliminary_score(incident, now)
        return ClusterPoint(
            incident=incident,
            base_severity=self._severity.base_severity(incident.category),
            effective_severity=self._severity.effective_severity(incident, now),
            point_weight=self._severity.point_weight(incident, now),
            preliminary_score=preliminary,
            age_days=self.age_days(incident, now),
            risk_label=self.classify(preliminary),
        )

    # ── Per cluster ──────────────────────────────────────────────────────

    def score_cluster(self, members: Sequence[ClusterPoint], centroid: LatLon) -> Cluster:
        cfg = self._config
        w = cfg.weights
        clat, clon = centroid

        avg_preliminary = _clamp(sum(m.preliminary_score for m in members) / len(members))

        weights = [m.point_weight for m in members]
        weight_sum = sum(weights)
        if weight_sum > 0:
            weighted_spread = sum(
                wi * haversine_meters(m.latitude, m.longitude, clat, clon)
                for wi, m in zip(weights, members)
            ) / weight_sum
            s_count = _clamp(min(weight_sum, cfg.count_cap) / cfg.count_saturation)
            s_compact = _clamp(1 - weighted_spread / cfg.radius_meters)
        else:
            weighted_spread = 0.0
            s_count = 0.0
            s_compact = 0.0

        final = _clamp(
            avg_preliminary + cfg.spatial_factor * (w.count * s_count + w.compact * s_compact)
        )

        return Cluster(
            center=GeoPoint(latitude=clat, longitude=clon),
            members=tuple(members),
            average_spread_meters=weighted_spread,
            average_preliminary_score=avg_preliminary,
            weighted_count=weight_sum,
            final_score=final,
            risk_label=self.classify(final),
        )

    # ── Classification ───────────────────────────────────────────────────

    def classify(self, score: float) -> RiskLabel:
        t = self._config.thresholds
        if score < t.low:
            return RiskLabel.LOW
        if score < t.medium:
            return RiskLabel.MEDIUM
        return RiskLabel.HIGH
