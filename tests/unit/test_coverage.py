"""Unit tests for station coverage (engaged stations / covered targets)."""

from __future__ import annotations

import pytest

from dronerisk.core.types import RiskAssessment, RiskLevel, Station, Target
from dronerisk.engagement.coverage import (
    COVERAGE_RADIUS_M,
    CoverageEngine,
    covered_targets,
    distance_matrix,
    engaged_stations,
)
from dronerisk.utils.geodetic import as_track, destination_point, distance_meters


def _target(target_id: str, *points) -> Target:
    return Target(
        target_id=target_id,
        call_sign=target_id.upper(),
        track=as_track(points),
        indicators={},
        risk=RiskAssessment(score=0, level=RiskLevel.LOW),
        heading_deg=0.0,
        outcomes={},
    )


STATION = Station(station_id="S1", name="Site 1", position=(52.0, 4.0))


class TestEngagedStations:
    def test_default_radius(self):
        assert COVERAGE_RADIUS_M == 30_000.0

    def test_target_inside(self):
        t = _target("a", (52.05, 4.05))
        assert engaged_stations([STATION], [t]) == {"S1"}

    def test_target_far_away(self):
        t = _target("a", (54.0, 8.0))
        assert engaged_stations([STATION], [t]) == set()

    def test_boundary_inclusive(self):
        lat, lon = destination_point(52.0, 4.0, 45.0, 30_000.0)
        t = _target("a", (lat, lon))
        radius = distance_meters(STATION.position, t.position)
        assert engaged_stations([STATION], [t], radius) == {"S1"}

    def test_just_outside_excluded(self):
        lat, lon = destination_point(52.0, 4.0, 45.0, 30_000.0)
        t = _target("a", (lat, lon))
        radius = distance_meters(STATION.position, t.position)
        assert engaged_stations([STATION], [t], radius - 1e-6) == set()

    def test_uses_last_track_point(self):
        # Launched inside, now outside
        t = _target("a", (52.0, 4.0), (54.0, 8.0))
        assert engaged_stations([STATION], [t]) == set()
        # Launched outside, now inside
        t2 = _target("b", (54.0, 8.0), (52.01, 4.01))
        assert engaged_stations([STATION], [t2]) == {"S1"}

    def test_multiple_stations(self):
        s2 = Station(station_id="S2", name="Site 2", position=(53.0, 6.0))
        s3 = Station(station_id="S3", name="Site 3", position=(50.0, 0.0))
        targets = [_target("a", (52.01, 4.0)), _target("b", (53.0, 6.1))]
        assert engaged_stations([STATION, s2, s3], targets) == {"S1", "S2"}

    def test_empty_inputs(self):
        assert engaged_stations([], [_target("a", (52.0, 4.0))]) == set()
        assert engaged_stations([STATION], []) == set()

    def test_zero_radius_coincident(self):
        t = _target("a", STATION.position)
        assert engaged_stations([STATION], [t], 0.0) == {"S1"}


class TestCoveredTargets:
    def test_inverse_relation(self):
        targets = [_target("in", (52.1, 4.1)), _target("out", (40.0, -3.0))]
        assert covered_targets([STATION], targets) == {"in"}

    def test_no_stations(self):
        assert covered_targets([], [_target("a", (52.0, 4.0))]) == set()

    def test_consistent_with_engaged(self):
        s2 = Station(station_id="S2", name="Site 2", position=(48.0, 2.0))
        targets = [_target("a", (52.1, 4.1)), _target("b", (60.0, 10.0))]
        engaged = engaged_stations([STATION, s2], targets)
        covered = covered_targets([STATION, s2], targets)
        assert bool(engaged) == bool(covered)
        assert engaged == {"S1"}
        assert covered == {"a"}


class TestDistanceMatrix:
    def test_shape_and_values(self):
        targets = [_target("a", (52.1, 4.1)), _target("b", (52.0, 4.0))]
        m = distance_matrix([STATION], targets)
        assert m.shape == (1, 2)
        assert m[0, 0] == distance_meters(STATION.position, targets[0].position)
        assert m[0, 1] == 0.0


class TestCoverageEngine:
    def test_engaged_and_covered(self):
        engine = CoverageEngine([STATION], radius_m=1_000.0)
        near = _target("near", (52.005, 4.0))
        far = _target("far", (52.1, 4.0))
        assert engine.engaged([near, far]) == {"S1"}
        assert engine.covered([near, far]) == {"near"}
        assert engine.engaged([far]) == set()

    def test_negative_radius(self):
        with pytest.raises(ValueError):
            CoverageEngine([STATION], radius_m=-1.0)

    def test_station_status(self):
        engine = CoverageEngine([STATION])
        t = _target("a", (52.05, 4.0))
        [status] = engine.station_status([t])
        assert status["station_id"] == "S1"
        assert status["engaged"] is True
        assert status["nearest_target_id"] == "a"
        assert status["nearest_distance_m"] == pytest.approx(
            distance_meters(STATION.position, t.position)
        )

    def test_station_status_without_targets(self):
        engine = CoverageEngine([STATION])
        [status] = engine.station_status([])
        assert status["engaged"] is False
        assert status["nearest_target_id"] is None

    def test_stations_copy(self):
        engine = CoverageEngine([STATION])
        engine.stations.clear()
        assert len(engine.stations) == 1
