"""Controlled enumerations for the incident-radar domain.

Every categorical field in the domain MUST reference an enum defined here,
with the exception of incident categories, which are free text by contract.
"""

from __future__ import annotations

from enum import Enum


class IncidentStatus(str, Enum):
    """Moderation state of a report."""

    PENDING = "pending"
    VERIFIED = "verified"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class RiskLabel(str, Enum):
    """Fixed danger tiers for cluster and report scores."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class AdmissionOutcome(str, Enum):
    """Result of the admission-control gate for a candidate report."""

    ACCEPT = "accept"
    REJECT_FULL = "reject_full"
