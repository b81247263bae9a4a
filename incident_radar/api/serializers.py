"""JSON payload builders shared by the REST and WebSocket routes."""

from __future__ import annotations

from typing import Any

from incident_radar.domain.cluster import (
    AdmissionDecision,
    CapacityNotice,
    Cluster,
    ClusterResult,
)


def cluster_payload(cluster: Cluster) -> dict[str, Any]:
    return {
        "center": cluster.center.model_dump(),
        "size": cluster.size,
        "member_ids": cluster.member_ids,
        "final_score": round(cluster.final_score, 4),
        "risk_label": cluster.risk_label.value,
        "average_preliminary_score": round(cluster.average_preliminary_score, 4),
        "average_spread_meters": round(cluster.average_spread_meters, 1),
        "weighted_count": round(cluster.weighted_count, 4),
    }


def notice_payload(notice: CapacityNotice) -> dict[str, Any]:
    return {
        "center": notice.center.model_dump(),
        "kept_ids": list(notice.kept_ids),
        "excluded_ids": list(notice.excluded_ids),
        "excluded_count": notice.excluded_count,
        "message": notice.message,
    }


def result_payload(result: ClusterResult) -> dict[str, Any]:
    full = result.full_cluster
    return {
        "sequence": result.sequence,
        "computed_at": result.computed_at.isoformat(),
        "clusters": [cluster_payload(c) for c in result.clusters],
        "unclustered_count": result.unclustered_count,
        "capacity_notices": [notice_payload(n) for n in result.capacity_notices],
        "full_cluster": cluster_payload(full) if full is not None else None,
        "summary": result.summary(),
    }


def admission_payload(decision: AdmissionDecision) -> dict[str, Any]:
    return {
        "outcome": decision.outcome.value,
        "accepted": decision.accepted,
        "cluster_size": decision.cluster_size,
        "max_cluster_size": decision.max_cluster_size,
        "center": decision.center.model_dump() if decision.center else None,
        "reason": decision.reason,
    }
