"""Tests for core data types."""

from __future__ import annotations

import pytest

from dronerisk.core.types import (
    RiskAssessment,
    RiskLevel,
    Station,
    Target,
    default_call_sign,
)
from dronerisk.utils.geodetic import as_track


def _target(**kwargs) -> Target:
    defaults = dict(
        target_id="d1",
        call_sign="UAS-D1",
        track=as_track([[52.0, 4.0], [52.2, 4.4]]),
        indicators={"uasFlag": True},
        risk=RiskAssessment(score=10, level=RiskLevel.LOW),
        heading_deg=45.0,
        outcomes={"simDetach": "detached"},
    )
    defaults.update(kwargs)
    return Target(**defaults)


class TestTarget:
    def test_positions(self):
        t = _target()
        assert t.position == (52.2, 4.4)
        assert t.launch_position == (52.0, 4.0)

    def test_outcomes_immutable(self):
        t = _target()
        with pytest.raises(TypeError):
            t.outcomes["simDetach"] = "failed"  # type: ignore[index]

    def test_indicators_immutable(self):
        t = _target()
        with pytest.raises(TypeError):
            t.indicators["uasFlag"] = False  # type: ignore[index]

    def test_outcomes_detached_from_source(self):
        source = {"simDetach": "detached"}
        t = _target(outcomes=source)
        source["simDetach"] = "failed"
        assert t.outcomes["simDetach"] == "detached"

    def test_empty_track_rejected(self):
        with pytest.raises(ValueError, match="empty track"):
            _target(track=as_track([]))

    def test_initial_state(self):
        t = _target()
        assert t.used_actions == set()
        assert t.mitigated is False

    def test_used_actions_read_only(self):
        t = _target()
        assert isinstance(t.used_actions, frozenset)
        with pytest.raises(AttributeError):
            t.used_actions.add("simDetach")  # type: ignore[attr-defined]

    def test_record_action(self):
        t = _target()
        t.record_action("simDetach")
        assert t.used_actions == {"simDetach"}
        assert t.mitigated is True

    def test_record_action_once(self):
        t = _target()
        t.record_action("simDetach")
        with pytest.raises(ValueError, match="already used"):
            t.record_action("simDetach")
        assert t.used_actions == {"simDetach"}

    def test_risk_accessors(self):
        t = _target()
        assert t.risk_score == 10
        assert t.risk_level is RiskLevel.LOW

    def test_to_dict(self):
        d = _target().to_dict()
        assert d["target_id"] == "d1"
        assert d["position"] == [52.2, 4.4]
        assert d["risk"]["level"] == "Low"
        assert d["used_actions"] == []

    def test_identity_equality(self):
        assert _target() != _target()


class TestStation:
    def test_to_dict(self):
        s = Station(station_id="s1", name="Site", position=(1.0, 2.0))
        assert s.to_dict() == {"station_id": "s1", "name": "Site", "position": [1.0, 2.0]}


def test_default_call_sign():
    assert default_call_sign("d7") == "UAS-D7"
