"""Engagement configuration: coverage radius, stations, mitigation actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from dronerisk.core.types import Station
from dronerisk.engagement.actions import DEFAULT_ACTIONS, ActionDefinition
from dronerisk.engagement.coverage import COVERAGE_RADIUS_M

logger = logging.getLogger(__name__)


@dataclass
class EngagementConfig:
    """Engagement configuration."""

    coverage_radius_m: float = COVERAGE_RADIUS_M

    # Empty means "use DEFAULT_ACTIONS"
    action_defs: list[dict] = field(default_factory=list)

    # Raw station definitions (parsed by build_stations)
    station_defs: list[dict] = field(default_factory=list)

    @classmethod
    def from_omegaconf(cls, cfg: Any) -> EngagementConfig:
        """Build from OmegaConf dict or plain dict."""
        if cfg is None:
            return cls()

        from omegaconf import OmegaConf

        if OmegaConf.is_config(cfg):
            cfg = OmegaConf.to_container(cfg, resolve=True)
        if not isinstance(cfg, dict):
            cfg = dict(cfg)

        actions = cfg.get("actions") or []
        stations = cfg.get("stations") or []
        return cls(
            coverage_radius_m=float(cfg.get("coverage_radius_m", COVERAGE_RADIUS_M)),
            action_defs=[dict(a) for a in actions],
            station_defs=[dict(s) for s in stations],
        )

    def build_actions(self) -> list[ActionDefinition]:
        if not self.action_defs:
            return list(DEFAULT_ACTIONS)
        return [ActionDefinition.from_config(d) for d in self.action_defs]

    def build_stations(self) -> list[Station]:
        """Parse station definitions.

        Raises:
            ValueError: On duplicate station ids or a malformed position.
        """
        stations: list[Station] = []
        seen: set[str] = set()
        for i, sd in enumerate(self.station_defs):
            station_id = str(sd.get("id", f"STN-{i}"))
            if station_id in seen:
                raise ValueError(f"Duplicate station id '{station_id}'")
            seen.add(station_id)
            position = sd.get("position")
            if position is None or len(position) < 2:
                raise ValueError(f"Station '{station_id}' needs a [lat, lon] position")
            stations.append(Station(
                station_id=station_id,
                name=str(sd.get("name", station_id)),
                position=(float(position[0]), float(position[1])),
            ))
        return stations
