"""SeverityModel — category severity and its decay after resolution.

Severity is on a 0-10 scale.  Unresolved incidents keep their category
severity; resolved ones lose roughly 63% of it for every full decay
period since resolution, and never regain it.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Mapping

from incident_radar.core.cluster_config import DEFAULT_SEVERITY_TABLE
from incident_radar.domain.incident import Incident
from incident_radar.foundation.clock import days_between

UNKNOWN_CATEGORY_SEVERITY = 1.0
MIN_POINT_WEIGHT = 0.05
MAX_POINT_WEIGHT = 1.0


def round1(value: float) -> float:
    """Round half-up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def _normalise_category(category: str) -> str:
    return (category or "").strip().casefold()


class SeverityModel:
    """Lookup and decay of incident severity.

    Stateless apart from its fixed configuration.
    """

    def __init__(
        self,
        table: Mapping[str, float] | None = None,
        decay_multiplier: float = 0.37,
        decay_period_days: int = 8,
    ) -> None:
        source = DEFAULT_SEVERITY_TABLE if table is None else table
        self._table = {_normalise_category(k): float(v) for k, v in source.items()}
        self._decay_multiplier = decay_multiplier
        self._decay_period_days = decay_period_days

    def base_severity(self, category: str) -> float:
        """Severity of *category*; 1.0 for anything not in the table."""
        return self._table.get(_normalise_category(category), UNKNOWN_CATEGORY_SEVERITY)

    def decay_periods(self, incident: Incident, now: datetime) -> int:
        """Whole decay periods elapsed since resolution (0 if not resolved)."""
        if not incident.is_resolved or incident.resolved_time is None:
            return 0
        days = math.floor(max(days_between(incident.resolved_time, now), 0.0))
        return days // self._decay_period_days

    def effective_severity(self, incident: Incident, now: datetime) -> float:
        base = self.base_severity(incident.category)
        periods = self.decay_periods(incident, now)
        if periods == 0:
            return base
        return round1(base * self._decay_multiplier ** periods)

    def point_weight(self, incident: Incident, now: datetime) -> float:
        """Spatial aggregation weight in [0.05, 1.0]."""
        weight = self.effective_severity(incident, now) / 10
        return min(max(weight, MIN_POINT_WEIGHT), MAX_POINT_WEIGHT)
