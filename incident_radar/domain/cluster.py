"""Clustering output models — immutable, per-invocation observations.

Nothing in this module carries identity across recomputations.  Two
results computed from the same snapshot at the same instant are equal
field-for-field; results from different snapshots share nothing.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from incident_radar.domain.enums import AdmissionOutcome, RiskLabel
from incident_radar.domain.incident import Incident


class GeoPoint(BaseModel):
    """A latitude/longitude pair in WGS-84 degrees."""

    latitude: float
    longitude: float

    model_config = {"frozen": True}


class ClusterPoint(BaseModel):
    """An Incident together with the fields derived from it at time *now*."""

    incident: Incident
    base_severity: float = Field(..., ge=0.0, description="Category severity on a 0-10 scale")
    effective_severity: float = Field(..., ge=0.0, description="Severity after resolution decay")
    point_weight: float = Field(..., ge=0.0, le=1.0, description="Spatial aggregation weight")
    preliminary_score: float = Field(..., ge=0.0, le=1.0, description="Severity + recency score")
    age_days: float = Field(..., ge=0.0, description="Days since the event (0 if unknown)")
    risk_label: RiskLabel = Field(..., description="Tier of the preliminary score")

    model_config = {"frozen": True}

    @property
    def id(self) -> str:
        return self.incident.id

    @property
    def latitude(self) -> float:
        return self.incident.latitude

    @property
    def longitude(self) -> float:
        return self.incident.longitude


class Cluster(BaseModel):
    """A scored proximity cluster of 2..max_cluster_size points."""

    center: GeoPoint
    members: tuple[ClusterPoint, ...] = Field(..., min_length=2)
    average_spread_meters: float = Field(..., ge=0.0, description="Weight-averaged distance to center")
    average_preliminary_score: float = Field(..., ge=0.0, le=1.0)
    weighted_count: float = Field(..., ge=0.0, description="Sum of member point weights")
    final_score: float = Field(..., ge=0.0, le=1.0, description="Aggregate danger score")
    risk_label: RiskLabel

    model_config = {"frozen": True}

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def member_ids(self) -> list[str]:
        return [m.id for m in self.members]


class CapacityNotice(BaseModel):
    """Non-fatal notice that a proximity group overflowed the size cap.

    The kept points form the reported cluster; the excluded ones are still
    part of the snapshot but belong to no cluster.
    """

    center: GeoPoint
    kept_ids: tuple[str, ...]
    excluded_ids: tuple[str, ...]

    model_config = {"frozen": True}

    @property
    def excluded_count(self) -> int:
        return len(self.excluded_ids)

    @property
    def message(self) -> str:
        return (
            f"Maximum of {len(self.kept_ids)} incidents are allowed in a single cluster; "
            f"{self.excluded_count} report(s) were not included."
        )


class ClusterResult(BaseModel):
    """Everything one engine invocation produces."""

    clusters: tuple[Cluster, ...] = ()
    unclustered_count: int = Field(0, ge=0, description="Points that belong to no cluster")
    capacity_notices: tuple[CapacityNotice, ...] = ()
    max_cluster_size: int = Field(8, ge=2)
    computed_at: datetime
    sequence: Optional[int] = Field(
        None, description="Snapshot token this result was computed for, if any",
    )

    model_config = {"frozen": True}

    @property
    def full_cluster(self) -> Cluster | None:
        """A cluster at exactly max_cluster_size, or None.

        When several clusters are full, the one with the lowest centroid
        latitude wins, then the lowest longitude.
        """
        full = [c for c in self.clusters if c.size == self.max_cluster_size]
        if not full:
            return None
        return min(full, key=lambda c: (c.center.latitude, c.center.longitude))

    def summary(self) -> dict:
        return {
            "cluster_count": len(self.clusters),
            "unclustered_count": self.unclustered_count,
            "capacity_notices": len(self.capacity_notices),
            "high_risk_clusters": sum(1 for c in self.clusters if c.risk_label == RiskLabel.HIGH),
            "max_score": max((c.final_score for c in self.clusters), default=0.0),
            "sequence": self.sequence,
        }


class AdmissionDecision(BaseModel):
    """Outcome of the capacity gate for one candidate report."""

    outcome: AdmissionOutcome
    cluster_size: int = Field(
        ..., ge=0,
        description="Members of the deciding cluster including the candidate (0 if none)",
    )
    max_cluster_size: int = Field(..., ge=2)
    center: Optional[GeoPoint] = None
    reason: str = ""

    model_config = {"frozen": True}

    @property
    def accepted(self) -> bool:
        return self.outcome == AdmissionOutcome.ACCEPT
