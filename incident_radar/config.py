"""Application configuration loaded from environment variables."""

from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "incident-radar"
    debug: bool = False
    log_level: str = "INFO"

    # Proximity clustering
    cluster_radius_meters: float = 235.0
    cluster_min_size: int = 2
    cluster_max_size: int = 8

    # Danger score weights
    score_weight_severity: float = 0.38
    score_weight_recency: float = 0.18
    score_weight_count: float = 0.20
    score_weight_compact: float = 0.24

    # Risk tiers
    risk_threshold_low: float = 0.55
    risk_threshold_medium: float = 0.75

    # Severity decay after resolution
    resolved_decay_multiplier: float = 0.37
    resolved_decay_period_days: int = 8
    recency_horizon_days: float = 30.0

    # Zone polygons: JSON object of name -> [[lat, lon], ...]
    zones_file: Optional[str] = None

    model_config = {"env_prefix": "RADAR_"}


settings = Settings()
