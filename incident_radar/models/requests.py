"""Pydantic request bodies for the HTTP and WebSocket surfaces."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from incident_radar.domain.incident import Incident


class SnapshotRequest(BaseModel):
    """A full incident snapshot pushed by the storage layer's live feed."""

    incidents: list[Incident] = Field(default_factory=list)
    now: Optional[datetime] = Field(
        default=None, description="Evaluation time; server clock when omitted",
    )


class AdmissionRequest(BaseModel):
    """A report the submission flow wants to persist."""

    candidate: Incident
    now: Optional[datetime] = None
