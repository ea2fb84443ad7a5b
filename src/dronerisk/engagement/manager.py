"""Mitigation engine — top-level facade consumed by the dashboard layer.

Ties together: risk scoring + geodetic heading + station coverage +
action state machine + audit log.  Targets and stations are built once
from configuration; only per-target action state and the audit log change
during a session.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from dronerisk.classification.risk import RiskConfig, RiskScorer
from dronerisk.core.bus import TARGET_RESOLVED, EventBus
from dronerisk.core.clock import Clock, SystemClock, create_clock
from dronerisk.core.types import (
    ActionStatus,
    RiskAssessment,
    Station,
    Target,
    TargetState,
    default_call_sign,
)
from dronerisk.engagement.actions import (
    REJECTED_MESSAGE,
    ActionDefinition,
    ActionResult,
    ActionStateMachine,
)
from dronerisk.engagement.config import EngagementConfig
from dronerisk.engagement.coverage import CoverageEngine, covered_targets, engaged_stations
from dronerisk.history.audit import AuditEntry, AuditLog, render, summarize
from dronerisk.history.storage import report_filename
from dronerisk.utils.geodetic import as_track, distance_meters, heading_from_track

logger = logging.getLogger(__name__)


class MitigationEngine:
    """Risk assessment and mitigation engine for one dashboard session.

    Args:
        target_defs: Raw target dicts with ``id``, ``track``, ``indicators``,
            ``outcomes`` and an optional ``call_sign``.
        stations: Coverage stations (may be empty).
        scorer: Risk scorer; defaults to the 13-indicator table.
        actions: Mitigation action definitions.
        coverage_radius_m: Station coverage radius.
        clock: Time source for audit entries and report headers.
        bus: Event bus; one is created if omitted.
    """

    def __init__(
        self,
        target_defs: Iterable[Mapping[str, Any]],
        stations: Iterable[Station] | None = None,
        scorer: RiskScorer | None = None,
        actions: Iterable[ActionDefinition] | None = None,
        coverage_radius_m: float | None = None,
        clock: Clock | None = None,
        bus: EventBus | None = None,
    ):
        self._scorer = scorer or RiskScorer()
        self._clock = clock or SystemClock()
        self._bus = bus or EventBus()
        self._audit_log = AuditLog()

        machine_kwargs: dict[str, Any] = {}
        if actions is not None:
            machine_kwargs["actions"] = actions
        self._machine = ActionStateMachine(
            audit_log=self._audit_log, clock=self._clock, bus=self._bus, **machine_kwargs,
        )

        coverage_kwargs: dict[str, Any] = {}
        if coverage_radius_m is not None:
            coverage_kwargs["radius_m"] = coverage_radius_m
        self._coverage = CoverageEngine(stations, **coverage_kwargs)
        station_ids = [s.station_id for s in self._coverage.stations]
        if len(set(station_ids)) != len(station_ids):
            raise ValueError("Duplicate station ids")

        self._targets: dict[str, Target] = {}
        for td in target_defs:
            target = self._build_target(td)
            if target.target_id in self._targets:
                raise ValueError(f"Duplicate target id '{target.target_id}'")
            self._targets[target.target_id] = target

        # Resolution order, for moving finished targets to the end of lists
        self._resolved_order: list[str] = []
        self._bus.subscribe(TARGET_RESOLVED, self._on_target_resolved)

        logger.info(
            "Engine loaded %d targets, %d stations, %d actions",
            len(self._targets), len(station_ids), self._machine.total_actions,
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_config(cls, cfg: Any, clock: Clock | None = None) -> MitigationEngine:
        """Build from the ``dronerisk`` config tree (OmegaConf or plain dict).

        Accepts either the root (with a ``dronerisk`` key) or the subtree.
        """
        from omegaconf import OmegaConf

        if OmegaConf.is_config(cfg):
            cfg = OmegaConf.to_container(cfg, resolve=True)
        cfg = dict(cfg or {})
        if "dronerisk" in cfg:
            cfg = dict(cfg["dronerisk"] or {})

        risk_cfg = RiskConfig.from_omegaconf(cfg.get("risk"))
        eng_cfg = EngagementConfig.from_omegaconf(cfg.get("engagement"))
        if clock is None:
            clock = create_clock(cfg.get("time"))

        return cls(
            target_defs=cfg.get("targets") or [],
            stations=eng_cfg.build_stations(),
            scorer=RiskScorer.from_config(risk_cfg),
            actions=eng_cfg.build_actions(),
            coverage_radius_m=eng_cfg.coverage_radius_m,
            clock=clock,
        )

    def _build_target(self, td: Mapping[str, Any]) -> Target:
        if "id" not in td:
            raise ValueError(f"Target definition missing 'id': {dict(td)}")
        target_id = str(td["id"])
        track = as_track(td.get("track") or [])
        if len(track) == 0:
            raise ValueError(f"Target '{target_id}' needs at least one track point")
        indicators = dict(td.get("indicators") or {})
        bad = sorted(str(k) for k, v in indicators.items() if not isinstance(v, bool))
        if bad:
            raise ValueError(f"Target '{target_id}' indicators must be true/false: {bad}")
        outcomes = dict(td.get("outcomes") or {})
        bad = sorted(str(k) for k, v in outcomes.items() if not isinstance(v, str))
        if bad:
            raise ValueError(f"Target '{target_id}' outcome tags must be strings: {bad}")
        unknown = set(outcomes) - set(self._machine.actions)
        if unknown:
            logger.warning(
                "Target %s has outcomes for undefined actions: %s", target_id, sorted(unknown)
            )
        return Target(
            target_id=target_id,
            call_sign=str(td.get("call_sign") or default_call_sign(target_id)),
            track=track,
            indicators=indicators,
            risk=self._scorer.assess(indicators),
            heading_deg=heading_from_track(track),
            outcomes=outcomes,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def audit_log(self) -> AuditLog:
        return self._audit_log

    @property
    def state_machine(self) -> ActionStateMachine:
        return self._machine

    @property
    def scorer(self) -> RiskScorer:
        return self._scorer

    @property
    def stations(self) -> list[Station]:
        return self._coverage.stations

    @property
    def coverage_radius_m(self) -> float:
        return self._coverage.radius_m

    @property
    def targets(self) -> list[Target]:
        """Targets in configuration order."""
        return list(self._targets.values())

    def get_target(self, target_id: str) -> Target | None:
        return self._targets.get(target_id)

    def target_state(self, target_id: str) -> TargetState:
        return self._machine.state_of(self._targets[target_id])

    def ordered_targets(self) -> list[Target]:
        """Unresolved targets in config order, then resolved ones in resolution order."""
        resolved = set(self._resolved_order)
        head = [t for t in self._targets.values() if t.target_id not in resolved]
        return head + [self._targets[tid] for tid in self._resolved_order]

    # ------------------------------------------------------------------
    # Engine entry points
    # ------------------------------------------------------------------

    def compute_risk(self, indicators: Mapping[str, bool]) -> RiskAssessment:
        return self._scorer.assess(indicators)

    def compute_heading(self, track: Sequence[Sequence[float]]) -> float:
        return heading_from_track(track)

    def compute_distance(self, a: Sequence[float], b: Sequence[float]) -> float:
        return distance_meters(a, b)

    def engaged_stations(
        self,
        stations: Sequence[Station] | None = None,
        targets: Sequence[Target] | None = None,
        radius_m: float | None = None,
    ) -> set[str]:
        """Engaged station ids; arguments default to the engine's own state."""
        if stations is None and radius_m is None:
            return self._coverage.engaged(self.targets if targets is None else targets)
        return engaged_stations(
            self.stations if stations is None else stations,
            self.targets if targets is None else targets,
            self.coverage_radius_m if radius_m is None else radius_m,
        )

    def covered_targets(
        self,
        stations: Sequence[Station] | None = None,
        targets: Sequence[Target] | None = None,
        radius_m: float | None = None,
    ) -> set[str]:
        return covered_targets(
            self.stations if stations is None else stations,
            self.targets if targets is None else targets,
            self.coverage_radius_m if radius_m is None else radius_m,
        )

    def resolve_action(self, target: Target | str, action_key: str) -> ActionResult:
        """Resolve *action_key* on a target object or target id.

        Unknown target ids are rejected like any other invalid request.
        """
        if isinstance(target, str):
            found = self._targets.get(target)
            if found is None:
                logger.debug("Rejected action '%s' on unknown target %s", action_key, target)
                return ActionResult(
                    status=ActionStatus.REJECTED,
                    message=REJECTED_MESSAGE,
                    target_id=target,
                    action_key=action_key,
                )
            target = found
        return self._machine.resolve_action(target, action_key)

    def export_audit_log(
        self,
        entries: Sequence[AuditEntry] | None = None,
        targets: Sequence[Target] | None = None,
        generated_at: float | None = None,
    ) -> str:
        """Render the mitigation report text."""
        entries = self._audit_log.entries() if entries is None else list(entries)
        targets = self.targets if targets is None else list(targets)
        generated_at = self._clock.now() if generated_at is None else generated_at
        summary = summarize(entries, total_targets=len(targets))
        return render(entries, summary, targets, generated_at)

    def audit_filename(self, generated_at: float | None = None) -> str:
        return report_filename(self._clock.now() if generated_at is None else generated_at)

    def snapshot(self) -> dict[str, Any]:
        """Plain-dict view of the session for a presentation layer."""
        engaged = self.engaged_stations()
        targets = []
        for t in self.ordered_targets():
            d = t.to_dict()
            d["state"] = self._machine.state_of(t).value
            d["available_actions"] = self._machine.available_actions(t)
            targets.append(d)
        stations = []
        for s in self.stations:
            d = s.to_dict()
            d["engaged"] = s.station_id in engaged
            stations.append(d)
        return {
            "timestamp": self._clock.now(),
            "targets": targets,
            "stations": stations,
            "actions": [a.to_dict() for a in self._machine.actions.values()],
            "summary": summarize(
                self._audit_log.entries(), total_targets=len(self._targets)
            ).to_dict(),
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_target_resolved(self, target_id: str) -> None:
        if target_id in self._targets and target_id not in self._resolved_order:
            self._resolved_order.append(target_id)
