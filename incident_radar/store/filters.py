"""Snapshot filters applied by callers before invoking the engine."""

from __future__ import annotations

from typing import Iterable

from incident_radar.domain.enums import IncidentStatus
from incident_radar.domain.incident import Incident

DISPLAY_STATUSES = frozenset({IncidentStatus.VERIFIED, IncidentStatus.RESOLVED})


def for_display(incidents: Iterable[Incident]) -> list[Incident]:
    """Keep verified and resolved reports, the set shown on public maps."""
    return [i for i in incidents if i.status in DISPLAY_STATUSES]


def clusterable(incidents: Iterable[Incident]) -> list[Incident]:
    """Everything except rejected reports, for admin summary maps."""
    return [i for i in incidents if i.status != IncidentStatus.REJECTED]


def summarize_statuses(incidents: Iterable[Incident]) -> dict[str, int]:
    counts = {status.value: 0 for status in IncidentStatus}
    total = 0
    for incident in incidents:
        counts[incident.status.value] += 1
        total += 1
    return {"total": total, **counts}
