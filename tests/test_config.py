"""Tests for Settings and the ClusterConfig bundle."""

import pytest

from incident_radar.config import Settings
from incident_radar.core.cluster_config import (
    DEFAULT_SEVERITY_TABLE,
    ClusterConfig,
    RiskThresholds,
    ScoreWeights,
)


class TestClusterConfigDefaults:
    def test_production_defaults(self) -> None:
        config = ClusterConfig()
        assert config.radius_meters == 235.0
        assert config.min_cluster_size == 2
        assert config.max_cluster_size == 8
        assert config.weights == ScoreWeights(severity=0.38, recency=0.18, count=0.20, compact=0.24)
        assert config.thresholds == RiskThresholds(low=0.55, medium=0.75)
        assert config.severity_table["Flood"] == 6.60

    def test_severity_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_SEVERITY_TABLE["Flood"] = 10.0  # type: ignore[index]


class TestClusterConfigValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"radius_meters": 0.0},
            {"radius_meters": -5.0},
            {"min_cluster_size": 1},
            {"min_cluster_size": 4, "max_cluster_size": 3},
            {"thresholds": RiskThresholds(low=0.8, medium=0.6)},
            {"thresholds": RiskThresholds(low=0.5, medium=1.5)},
            {"weights": ScoreWeights(severity=0.0, recency=0.0)},
            {"decay_multiplier": 0.0},
            {"decay_multiplier": 1.5},
            {"decay_period_days": 0},
            {"recency_horizon_days": 0.0},
            {"count_saturation": 0.0},
            {"severity_table": {"Flood": -1.0}},
            {"severity_table": {"Flood": float("nan")}},
            {"severity_table": {"Flood": float("inf")}},
        ],
    )
    def test_invalid_bundle_rejected(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            ClusterConfig(**kwargs)

    def test_min_equal_to_max_allowed(self) -> None:
        assert ClusterConfig(min_cluster_size=3, max_cluster_size=3).max_cluster_size == 3


class TestSettings:
    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RADAR_CLUSTER_RADIUS_METERS", "300")
        monkeypatch.setenv("RADAR_CLUSTER_MAX_SIZE", "5")
        settings = Settings()
        assert settings.cluster_radius_meters == 300.0
        assert settings.cluster_max_size == 5

    def test_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RADAR_RISK_THRESHOLD_LOW", "0.4")
        monkeypatch.setenv("RADAR_SCORE_WEIGHT_COMPACT", "0.3")
        config = ClusterConfig.from_settings(Settings())
        assert config.thresholds.low == 0.4
        assert config.weights.compact == 0.3
        assert config.radius_meters == 235.0

    def test_invalid_settings_fail_at_bundle_construction(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RADAR_CLUSTER_MAX_SIZE", "1")
        with pytest.raises(ValueError):
            ClusterConfig.from_settings(Settings())
