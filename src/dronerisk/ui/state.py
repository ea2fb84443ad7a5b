"""Dashboard-side session state wrapped around the mitigation engine.

Selection, transient operator feedback and the map-marker cache belong to
the presentation layer.  They live here in one explicit object instead of
module globals.  Every engine mutation goes through
:meth:`DashboardState.act`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from dronerisk.core.types import ActionStatus, RiskLevel
from dronerisk.engagement.actions import ActionResult
from dronerisk.engagement.manager import MitigationEngine
from dronerisk.ui.scheduler import FeedbackScheduler

logger = logging.getLogger(__name__)

LEVEL_COLORS: dict[RiskLevel, str] = {
    RiskLevel.LOW: "#2e7d32",
    RiskLevel.MEDIUM: "#f9a825",
    RiskLevel.HIGH: "#c62828",
}


@dataclass
class UIConfig:
    """Presentation settings from the ``dronerisk.ui`` config section."""

    feedback_dismiss_s: float = 3.0
    heading_bucket_deg: int = 15

    @classmethod
    def from_omegaconf(cls, cfg: Any) -> UIConfig:
        """Build from OmegaConf dict or plain dict."""
        if cfg is None:
            return cls()

        from omegaconf import OmegaConf

        if OmegaConf.is_config(cfg):
            cfg = OmegaConf.to_container(cfg, resolve=True)
        return cls(
            feedback_dismiss_s=float(cfg.get("feedback_dismiss_s", 3.0)),
            heading_bucket_deg=int(cfg.get("heading_bucket_deg", 15)),
        )


@dataclass(frozen=True)
class MarkerStyle:
    """Map-marker descriptor shared by all targets with the same level/heading bucket."""

    level: RiskLevel
    rotation_deg: int
    color: str


@dataclass(frozen=True)
class Feedback:
    status: ActionStatus
    message: str


class MarkerCache:
    """Memoized :class:`MarkerStyle` keyed by ``(risk level, rounded heading)``."""

    def __init__(self, bucket_deg: int = 15):
        if bucket_deg <= 0:
            raise ValueError(f"bucket_deg must be > 0, got {bucket_deg}")
        self._bucket = bucket_deg
        self._cache: dict[tuple[RiskLevel, int], MarkerStyle] = {}

    def round_heading(self, heading_deg: float) -> int:
        return int(round(heading_deg / self._bucket) * self._bucket) % 360

    def get(self, level: RiskLevel, heading_deg: float) -> MarkerStyle:
        key = (level, self.round_heading(heading_deg))
        style = self._cache.get(key)
        if style is None:
            style = MarkerStyle(level=level, rotation_deg=key[1], color=LEVEL_COLORS[level])
            self._cache[key] = style
        return style

    def __len__(self) -> int:
        return len(self._cache)


class DashboardState:
    """Selection, feedback and marker styles for one dashboard session.

    Args:
        engine: The session's mitigation engine.
        scheduler: Schedules feedback auto-dismiss; without one, feedback
            stays until replaced or cleared.
        dismiss_after_s: Feedback lifetime.
        heading_bucket_deg: Marker rotation granularity.
    """

    def __init__(
        self,
        engine: MitigationEngine,
        scheduler: FeedbackScheduler | None = None,
        dismiss_after_s: float = 3.0,
        heading_bucket_deg: int = 15,
    ):
        self._engine = engine
        self._scheduler = scheduler
        self._dismiss_after_s = dismiss_after_s
        self._markers = MarkerCache(heading_bucket_deg)
        self._feedback: dict[str, Feedback] = {}
        self.selected_target_id: str | None = None
        self.selected_station_id: str | None = None

    @classmethod
    def from_config(
        cls,
        engine: MitigationEngine,
        cfg: Any,
        scheduler: FeedbackScheduler | None = None,
    ) -> DashboardState:
        """Build from the config tree; reads the ``ui`` section.

        Accepts either the root (with a ``dronerisk`` key) or the subtree.
        """
        from omegaconf import OmegaConf

        if OmegaConf.is_config(cfg):
            cfg = OmegaConf.to_container(cfg, resolve=True)
        cfg = dict(cfg or {})
        if "dronerisk" in cfg:
            cfg = dict(cfg["dronerisk"] or {})
        ui = UIConfig.from_omegaconf(cfg.get("ui"))
        return cls(
            engine,
            scheduler=scheduler,
            dismiss_after_s=ui.feedback_dismiss_s,
            heading_bucket_deg=ui.heading_bucket_deg,
        )

    @property
    def engine(self) -> MitigationEngine:
        return self._engine

    @property
    def dismiss_after_s(self) -> float:
        return self._dismiss_after_s

    def select_target(self, target_id: str | None) -> None:
        if target_id is not None and self._engine.get_target(target_id) is None:
            raise KeyError(f"Unknown target '{target_id}'")
        self.selected_target_id = target_id

    def select_station(self, station_id: str | None) -> None:
        if station_id is not None and station_id not in {s.station_id for s in self._engine.stations}:
            raise KeyError(f"Unknown station '{station_id}'")
        self.selected_station_id = station_id

    def act(self, target_id: str, action_key: str) -> ActionResult:
        """Resolve an operator action and show its feedback on the target.

        Raises ``RuntimeError`` before touching the engine when feedback
        cannot be scheduled (session torn down, or no running event loop).
        """
        if self._scheduler is not None:
            self._scheduler.ensure_ready()
        result = self._engine.resolve_action(target_id, action_key)
        self.show_feedback(target_id, Feedback(status=result.status, message=result.message))
        return result

    def show_feedback(self, key: str, feedback: Feedback) -> None:
        self._feedback[key] = feedback
        if self._scheduler is not None:
            self._scheduler.schedule(key, self._dismiss_after_s, self.clear_feedback, key)

    def clear_feedback(self, key: str) -> None:
        self._feedback.pop(key, None)

    def feedback_for(self, key: str) -> Feedback | None:
        return self._feedback.get(key)

    def marker_for(self, target_id: str) -> MarkerStyle:
        target = self._engine.get_target(target_id)
        if target is None:
            raise KeyError(f"Unknown target '{target_id}'")
        return self._markers.get(target.risk.level, target.heading_deg)

    @property
    def marker_cache(self) -> MarkerCache:
        return self._markers

    def view(self) -> dict[str, Any]:
        """Engine snapshot plus presentation fields."""
        snap = self._engine.snapshot()
        for t in snap["targets"]:
            style = self.marker_for(t["target_id"])
            t["marker"] = {"rotation_deg": style.rotation_deg, "color": style.color}
            fb = self._feedback.get(t["target_id"])
            t["feedback"] = None if fb is None else {"status": fb.status.value, "message": fb.message}
        snap["selected_target_id"] = self.selected_target_id
        snap["selected_station_id"] = self.selected_station_id
        return snap

    def teardown(self) -> None:
        """End of session: cancel pending feedback callbacks."""
        if self._scheduler is not None:
            self._scheduler.close()
        self._feedback.clear()
        logger.debug("Dashboard session torn down")
