"""Canonical Incident model — one geotagged, categorized report.

An Incident is read-only input to the clustering engine.  It is validated
at the boundary so the engine never re-checks field shapes.  Coordinates
are not required to be finite here: non-finite values reach
GeoMath, which raises InvalidCoordinate so the caller sees a fatal input
error instead of a silently shrunken snapshot.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from incident_radar.domain.enums import IncidentStatus
from incident_radar.foundation.clock import ensure_utc
from incident_radar.foundation.identifiers import new_incident_id


class Incident(BaseModel):
    """A single incident report as supplied by the storage layer.

    Immutable after creation.
    """

    id: str = Field(
        default_factory=new_incident_id,
        min_length=1,
        description="Opaque identifier, unique within a snapshot",
    )
    latitude: float = Field(..., description="WGS-84 latitude in degrees")
    longitude: float = Field(..., description="WGS-84 longitude in degrees")
    category: str = Field(default="", description="Incident type; unknown values are legal")
    status: IncidentStatus = Field(default=IncidentStatus.VERIFIED)
    event_time: Optional[datetime] = Field(
        default=None,
        description="When the incident occurred (drives recency)",
    )
    resolved_time: Optional[datetime] = Field(
        default=None,
        description="When the incident was resolved (drives severity decay)",
    )
    zone: Optional[str] = Field(
        default=None,
        description="Administrative-region label used for visibility scoping",
    )

    model_config = {"frozen": True}

    # ── Validators ───────────────────────────────────────────────────────

    @field_validator("latitude")
    @classmethod
    def latitude_in_range(cls, v: float) -> float:
        if math.isfinite(v) and not -90.0 <= v <= 90.0:
            raise ValueError(f"latitude out of range [-90, 90]: {v}")
        return v

    @field_validator("longitude")
    @classmethod
    def longitude_in_range(cls, v: float) -> float:
        if math.isfinite(v) and not -180.0 <= v <= 180.0:
            raise ValueError(f"longitude out of range [-180, 180]: {v}")
        return v

    @field_validator("event_time", "resolved_time")
    @classmethod
    def timestamp_must_be_aware(cls, v: datetime | None) -> datetime | None:
        if v is None:
            return v
        return ensure_utc(v)

    @property
    def is_resolved(self) -> bool:
        return self.status == IncidentStatus.RESOLVED
