"""ID generation for incidents submitted without an upstream identifier."""

from __future__ import annotations

from uuid import uuid4


def new_incident_id() -> str:
    """Generate a new random UUID v4 string."""
    return str(uuid4())
