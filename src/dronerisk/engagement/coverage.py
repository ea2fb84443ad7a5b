"""Station coverage: which stations can reach which targets.

A station *engages* when at least one target's current position lies within
the coverage radius (inclusive).  The inverse relation gives the targets
*covered* by at least one station.  Both come from one stations x targets
distance matrix built from the scalar haversine, so boundary decisions agree
exactly with :func:`dronerisk.utils.geodetic.distance_meters`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import numpy as np

from dronerisk.core.types import Station, Target
from dronerisk.utils.geodetic import haversine_distance

logger = logging.getLogger(__name__)

COVERAGE_RADIUS_M: float = 30_000.0


def distance_matrix(stations: Sequence[Station], targets: Sequence[Target]) -> np.ndarray:
    """Great-circle distances in meters, shape ``(len(stations), len(targets))``."""
    dist = np.zeros((len(stations), len(targets)), dtype=float)
    for i, station in enumerate(stations):
        s_lat, s_lon = station.position
        for j, target in enumerate(targets):
            t_lat, t_lon = target.position
            dist[i, j] = haversine_distance(s_lat, s_lon, t_lat, t_lon)
    return dist


def engaged_stations(
    stations: Sequence[Station],
    targets: Sequence[Target],
    radius_m: float = COVERAGE_RADIUS_M,
) -> set[str]:
    """IDs of stations with at least one target within *radius_m* (inclusive)."""
    stations = list(stations)
    targets = list(targets)
    if not stations or not targets:
        return set()
    in_range = distance_matrix(stations, targets) <= radius_m
    return {s.station_id for s, hit in zip(stations, in_range.any(axis=1)) if hit}


def covered_targets(
    stations: Sequence[Station],
    targets: Sequence[Target],
    radius_m: float = COVERAGE_RADIUS_M,
) -> set[str]:
    """IDs of targets within *radius_m* (inclusive) of at least one station."""
    stations = list(stations)
    targets = list(targets)
    if not stations or not targets:
        return set()
    in_range = distance_matrix(stations, targets) <= radius_m
    return {t.target_id for t, hit in zip(targets, in_range.any(axis=0)) if hit}


class CoverageEngine:
    """Recomputes engaged stations for a fixed station list.

    Holds no derived state between calls apart from the last engaged set,
    which is only used to log transitions.
    """

    def __init__(
        self,
        stations: Iterable[Station] | None = None,
        radius_m: float = COVERAGE_RADIUS_M,
    ):
        if radius_m < 0:
            raise ValueError(f"radius_m must be >= 0, got {radius_m}")
        self._stations: list[Station] = list(stations) if stations else []
        self._radius_m = radius_m
        self._last_engaged: set[str] = set()

    @property
    def stations(self) -> list[Station]:
        return list(self._stations)

    @property
    def radius_m(self) -> float:
        return self._radius_m

    def engaged(self, targets: Sequence[Target]) -> set[str]:
        result = engaged_stations(self._stations, targets, self._radius_m)
        if result != self._last_engaged:
            logger.debug(
                "Engaged stations changed: +%s -%s",
                sorted(result - self._last_engaged),
                sorted(self._last_engaged - result),
            )
            self._last_engaged = set(result)
        return result

    def covered(self, targets: Sequence[Target]) -> set[str]:
        return covered_targets(self._stations, targets, self._radius_m)

    def station_status(self, targets: Sequence[Target]) -> list[dict]:
        """Per-station engaged flag plus nearest target, for display."""
        engaged = self.engaged(targets)
        statuses = []
        dist = distance_matrix(self._stations, targets) if targets else None
        for i, station in enumerate(self._stations):
            entry = station.to_dict()
            entry["engaged"] = station.station_id in engaged
            if dist is not None:
                j = int(np.argmin(dist[i]))
                entry["nearest_target_id"] = targets[j].target_id
                entry["nearest_distance_m"] = float(dist[i, j])
            else:
                entry["nearest_target_id"] = None
                entry["nearest_distance_m"] = None
            statuses.append(entry)
        return statuses
