"""Tests for Pydantic config schema validation."""

from __future__ import annotations

import copy

import pytest
from omegaconf import OmegaConf
from pydantic import ValidationError

from dronerisk.core.config_schema import DroneRiskConfigSchema, validate_config

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def default_dict(config_path):
    """Load config/default.yaml as a plain dict."""
    return OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)


# ---------------------------------------------------------------------------
# Valid config passes
# ---------------------------------------------------------------------------


class TestValidConfig:
    def test_default_yaml_passes(self, default_dict):
        schema = validate_config(default_dict)
        assert isinstance(schema, DroneRiskConfigSchema)
        assert schema.dronerisk.system.name == "DRONERISK"
        assert len(schema.dronerisk.targets) == 5

    def test_minimal_config_passes(self):
        schema = validate_config({"dronerisk": {}})
        assert schema.dronerisk.engagement.coverage_radius_m == 30000.0
        assert schema.dronerisk.risk.thresholds.high == 50
        assert schema.dronerisk.targets == []

    def test_extra_keys_allowed(self):
        schema = validate_config({"dronerisk": {"future_feature": {"setting": 42}}})
        assert schema.dronerisk.system.log_level == "INFO"


# ---------------------------------------------------------------------------
# Invalid values rejected
# ---------------------------------------------------------------------------


class TestInvalidConfig:
    def test_missing_root(self):
        with pytest.raises(ValidationError):
            validate_config({})

    def test_bad_log_level(self):
        with pytest.raises(ValidationError):
            validate_config({"dronerisk": {"system": {"log_level": "LOUD"}}})

    def test_negative_radius(self):
        with pytest.raises(ValidationError):
            validate_config({"dronerisk": {"engagement": {"coverage_radius_m": -1}}})

    def test_non_positive_weight(self):
        with pytest.raises(ValidationError):
            validate_config({"dronerisk": {"risk": {"weights": {"uasFlag": 0}}}})

    def test_inverted_thresholds(self):
        with pytest.raises(ValidationError):
            validate_config({"dronerisk": {"risk": {"thresholds": {"high": 10, "medium": 30}}}})

    def test_empty_track(self):
        with pytest.raises(ValidationError):
            validate_config({"dronerisk": {"targets": [{"id": "a", "track": []}]}})

    def test_bad_track_point(self):
        with pytest.raises(ValidationError):
            validate_config({"dronerisk": {"targets": [{"id": "a", "track": [[1.0, 2.0, 3.0]]}]}})

    def test_duplicate_target_ids(self, default_dict):
        d = copy.deepcopy(default_dict)
        d["dronerisk"]["targets"].append(dict(d["dronerisk"]["targets"][0]))
        with pytest.raises(ValidationError, match="duplicate target ids"):
            validate_config(d)

    def test_duplicate_action_keys(self):
        action = {"key": "jam", "success_outcome": "jammed"}
        with pytest.raises(ValidationError):
            validate_config({"dronerisk": {"engagement": {"actions": [action, action]}}})

    def test_station_position_pair(self):
        with pytest.raises(ValidationError):
            validate_config({
                "dronerisk": {"engagement": {"stations": [{"id": "s", "position": [1.0]}]}}
            })

    def test_string_indicator_not_coerced(self):
        target = {"id": "a", "track": [[1.0, 2.0]], "indicators": {"inNoFlyZone": "false"}}
        with pytest.raises(ValidationError):
            validate_config({"dronerisk": {"targets": [target]}})

    def test_boolean_outcome_not_coerced(self):
        target = {"id": "a", "track": [[1.0, 2.0]], "outcomes": {"simDetach": True}}
        with pytest.raises(ValidationError):
            validate_config({"dronerisk": {"targets": [target]}})
