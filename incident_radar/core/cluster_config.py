"""Configuration bundle for the clustering engine.

Every tunable the engine reads lives here, with defaults matching the
production dashboard.  Instances are frozen and validate themselves on
construction so a bad bundle fails before any snapshot is processed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

DEFAULT_SEVERITY_TABLE: Mapping[str, float] = MappingProxyType({
    "Flood": 6.60,
    "Car Accident": 5.80,
    "Assault": 5.25,
    "Fire": 3.40,
    "Theft": 3.40,
    "Animal Attack": 3.00,
    "Blocked Lane": 2.20,
    "Kidnapping": 2.00,
    "Robbery": 1.80,
})


@dataclass(frozen=True)
class ScoreWeights:
    """Weights for the danger score.

    severity and recency form the per-report preliminary score (they are
    renormalised by their sum); count and compact are the spatial terms
    added per cluster.
    """

    severity: float = 0.38
    recency: float = 0.18
    count: float = 0.20
    compact: float = 0.24


@dataclass(frozen=True)
class RiskThresholds:
    """Fixed tier boundaries: < low is Low, < medium is Medium, else High."""

    low: float = 0.55
    medium: float = 0.75


@dataclass(frozen=True)
class ClusterConfig:
    """Options recognised by ClusterEngine."""

    radius_meters: float = 235.0
    min_cluster_size: int = 2
    max_cluster_size: int = 8
    severity_table: Mapping[str, float] = field(default_factory=lambda: DEFAULT_SEVERITY_TABLE)
    weights: ScoreWeights = field(default_factory=ScoreWeights)
    thresholds: RiskThresholds = field(default_factory=RiskThresholds)

    # Resolution decay: severity × multiplier per full period elapsed
    decay_multiplier: float = 0.37
    decay_period_days: int = 8

    # Recency fades linearly to zero over this many days
    recency_horizon_days: float = 30.0

    # Weighted count is capped, then divided by the saturation point
    count_cap: float = 8.0
    count_saturation: float = 10.0

    # Share of the spatial terms added on top of the preliminary average
    spatial_factor: float = 0.5

    def __post_init__(self) -> None:
        if not self.radius_meters > 0:
            raise ValueError("radius_meters must be positive")
        if self.min_cluster_size < 2:
            raise ValueError("min_cluster_size must be at least 2")
        if self.max_cluster_size < self.min_cluster_size:
            raise ValueError("max_cluster_size must be >= min_cluster_size")
        t = self.thresholds
        if not 0.0 <= t.low <= t.medium <= 1.0:
            raise ValueError("thresholds must satisfy 0 <= low <= medium <= 1")
        for category, severity in self.severity_table.items():
            if not math.isfinite(severity) or severity < 0:
                raise ValueError(f"severity for {category!r} must be a finite number >= 0")
        if self.weights.severity + self.weights.recency <= 0:
            raise ValueError("severity and recency weights must have a positive sum")
        if not 0.0 < self.decay_multiplier <= 1.0:
            raise ValueError("decay_multiplier must be in (0, 1]")
        if self.decay_period_days < 1:
            raise ValueError("decay_period_days must be at least 1")
        if not self.recency_horizon_days > 0 or not self.count_saturation > 0:
            raise ValueError("recency_horizon_days and count_saturation must be positive")

    @classmethod
    def from_settings(cls, settings) -> ClusterConfig:
        """Build a bundle from the environment-backed Settings object."""
        return cls(
            radius_meters=settings.cluster_radius_meters,
            min_cluster_size=settings.cluster_min_size,
            max_cluster_size=settings.cluster_max_size,
            weights=ScoreWeights(
                severity=settings.score_weight_severity,
                recency=settings.score_weight_recency,
                count=settings.score_weight_count,
                compact=settings.score_weight_compact,
            ),
            thresholds=RiskThresholds(
                low=settings.risk_threshold_low,
                medium=settings.risk_threshold_medium,
            ),
            decay_multiplier=settings.resolved_decay_multiplier,
            decay_period_days=settings.resolved_decay_period_days,
            recency_horizon_days=settings.recency_horizon_days,
        )
