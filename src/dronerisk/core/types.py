"""Core data types for the DRONERISK engine."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import numpy as np


class RiskLevel(enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ActionStatus(enum.Enum):
    """Outcome of a resolve-action request."""

    SUCCESS = "success"
    ERROR = "error"  # action attempted, outcome was not the success tag
    REJECTED = "rejected"  # unknown or already-used action; nothing changed


class TargetState(enum.Enum):
    UNTOUCHED = "untouched"
    PARTIALLY_ACTED = "partially_acted"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class RiskAssessment:
    """Score and level computed together from one indicator set."""

    score: int
    level: RiskLevel
    active_indicators: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "level": self.level.value,
            "active_indicators": list(self.active_indicators),
        }


@dataclass(frozen=True)
class Station:
    """Fixed sensor/interception site."""

    station_id: str
    name: str
    position: tuple[float, float]  # (lat, lon) degrees

    def to_dict(self) -> dict[str, Any]:
        return {
            "station_id": self.station_id,
            "name": self.name,
            "position": list(self.position),
        }


@dataclass(eq=False)
class Target:
    """A simulated drone track with derived risk and mutable mitigation state.

    ``track``, ``indicators``, ``risk``, ``heading_deg`` and ``outcomes``
    are fixed at construction.  ``used_actions`` is a read-only view; the
    action state machine records each use with :meth:`record_action`,
    which also sets ``mitigated``.
    """

    target_id: str
    call_sign: str
    track: np.ndarray  # Nx2 (lat, lon), read-only
    indicators: Mapping[str, bool]
    risk: RiskAssessment
    heading_deg: float
    outcomes: Mapping[str, str]
    mitigated: bool = False
    _used: set[str] = field(default_factory=set, init=False, repr=False)

    def __post_init__(self):
        if len(self.track) == 0:
            raise ValueError(f"Target '{self.target_id}' has an empty track")
        self.indicators = MappingProxyType(dict(self.indicators))
        self.outcomes = MappingProxyType(dict(self.outcomes))

    @property
    def used_actions(self) -> frozenset[str]:
        return frozenset(self._used)

    def record_action(self, action_key: str) -> None:
        """Mark *action_key* as used.  Each action can be used once."""
        if action_key in self._used:
            raise ValueError(f"Action '{action_key}' already used on target '{self.target_id}'")
        self._used.add(action_key)
        self.mitigated = True

    @property
    def position(self) -> tuple[float, float]:
        """Current (last) position as ``(lat, lon)``."""
        lat, lon = self.track[-1]
        return (float(lat), float(lon))

    @property
    def launch_position(self) -> tuple[float, float]:
        lat, lon = self.track[0]
        return (float(lat), float(lon))

    @property
    def risk_score(self) -> int:
        return self.risk.score

    @property
    def risk_level(self) -> RiskLevel:
        return self.risk.level

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_id": self.target_id,
            "call_sign": self.call_sign,
            "track": self.track.tolist(),
            "position": list(self.position),
            "risk": self.risk.to_dict(),
            "heading_deg": self.heading_deg,
            "used_actions": sorted(self.used_actions),
            "mitigated": self.mitigated,
        }


def default_call_sign(target_id: str) -> str:
    return f"UAS-{target_id.upper()}"
