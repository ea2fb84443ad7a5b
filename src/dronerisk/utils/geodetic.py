"""Spherical-earth great-circle helpers.

Distance, initial bearing and track heading for the DRONERISK engine.

All public functions use **degrees** for lat/lon angles.
Internal math uses radians.

Coordinates passed as pairs are ``(lat_deg, lon_deg)``; anything indexable
works (tuples, lists, numpy rows).
"""
from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

# Mean Earth radius (m), spherical model
EARTH_RADIUS_M: float = 6_371_000.0


# ── Great-circle distance and bearing ─────────────────────────────

def haversine_distance(
    lat1_deg: float, lon1_deg: float,
    lat2_deg: float, lon2_deg: float,
) -> float:
    """Great-circle distance in meters between two geodetic points.

    Uses the Haversine formula on a sphere of radius ``EARTH_RADIUS_M``.
    Symmetric in its arguments and exactly 0.0 for coincident points.
    """
    lat1 = math.radians(lat1_deg)
    lat2 = math.radians(lat2_deg)
    dlat = lat2 - lat1
    dlon = math.radians(lon2_deg - lon1_deg)

    h = math.sin(dlat / 2.0) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    h = max(0.0, min(1.0, h))  # Clamp for floating-point safety
    c = 2.0 * math.atan2(math.sqrt(h), math.sqrt(1.0 - h))
    return EARTH_RADIUS_M * c


def geodetic_bearing(
    lat1_deg: float, lon1_deg: float,
    lat2_deg: float, lon2_deg: float,
) -> float:
    """Initial bearing (degrees, 0=North, clockwise) from point 1 to point 2.

    Uses the forward azimuth formula on the sphere.  Coincident points
    collapse to ``atan2(0, 0) == 0``.

    Returns:
        Bearing in degrees [0, 360).
    """
    lat1 = math.radians(lat1_deg)
    lat2 = math.radians(lat2_deg)
    dlon = math.radians(lon2_deg - lon1_deg)

    x = math.sin(dlon) * math.cos(lat2)
    y = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
    bearing = math.degrees(math.atan2(x, y)) % 360.0
    # -1e-15 % 360 rounds to 360.0
    return 0.0 if bearing >= 360.0 else bearing


def destination_point(
    lat_deg: float, lon_deg: float,
    bearing_deg: float, distance_m: float,
) -> tuple[float, float]:
    """Point reached travelling *distance_m* along *bearing_deg* from a start.

    Direct geodesic problem on the same sphere as :func:`haversine_distance`.

    Returns:
        (lat_deg, lon_deg), longitude wrapped into [-180, 180).
    """
    lat1 = math.radians(lat_deg)
    lon1 = math.radians(lon_deg)
    brg = math.radians(bearing_deg)
    delta = distance_m / EARTH_RADIUS_M

    sin_lat2 = math.sin(lat1) * math.cos(delta) + math.cos(lat1) * math.sin(delta) * math.cos(brg)
    lat2 = math.asin(max(-1.0, min(1.0, sin_lat2)))
    lon2 = lon1 + math.atan2(
        math.sin(brg) * math.sin(delta) * math.cos(lat1),
        math.cos(delta) - math.sin(lat1) * sin_lat2,
    )
    lon2_deg = (math.degrees(lon2) + 540.0) % 360.0 - 180.0
    return (math.degrees(lat2), lon2_deg)


# ── Pairwise forms ────────────────────────────────────────────────

def distance_meters(a: Sequence[float], b: Sequence[float]) -> float:
    """Haversine distance between two ``(lat, lon)`` pairs."""
    return haversine_distance(float(a[0]), float(a[1]), float(b[0]), float(b[1]))


def bearing_degrees(origin: Sequence[float], target: Sequence[float]) -> float:
    """Initial bearing from *origin* to *target*, both ``(lat, lon)``."""
    return geodetic_bearing(float(origin[0]), float(origin[1]), float(target[0]), float(target[1]))


# ── Tracks ────────────────────────────────────────────────────────

def as_track(points: Sequence[Sequence[float]] | np.ndarray) -> np.ndarray:
    """Normalize a sequence of ``(lat, lon)`` points into a read-only Nx2 array.

    An empty input yields a ``(0, 2)`` array.
    """
    arr = np.array(points, dtype=float)
    if arr.size == 0:
        arr = np.zeros((0, 2), dtype=float)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"track must be a sequence of (lat, lon) pairs, got shape {arr.shape}")
    arr.flags.writeable = False
    return arr


def heading_from_track(track: Sequence[Sequence[float]] | np.ndarray) -> float:
    """Heading of the final track segment in degrees [0, 360).

    Tracks with fewer than two points have heading 0.
    """
    if len(track) < 2:
        return 0.0
    return bearing_degrees(track[-2], track[-1])
