"""Scenario harness: replay an operator action script against a fresh engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest
from omegaconf import OmegaConf

from dronerisk.core.clock import SimClock
from dronerisk.engagement.actions import ActionResult
from dronerisk.engagement.manager import MitigationEngine

START_EPOCH = 1_700_000_000.0


@dataclass
class ScenarioResult:
    engine: MitigationEngine
    results: list[ActionResult] = field(default_factory=list)
    report: str = ""


class ScenarioRunner:
    """Build an engine from config on a SimClock and apply ``(dt, target, action)`` steps."""

    def __init__(self, cfg, start_epoch: float = START_EPOCH):
        self._cfg = cfg
        self._start_epoch = start_epoch

    def run(self, steps, report_delay_s: float = 10.0) -> ScenarioResult:
        clock = SimClock(start_epoch=self._start_epoch)
        engine = MitigationEngine.from_config(self._cfg, clock=clock)
        out = ScenarioResult(engine=engine)
        for dt, target_id, action_key in steps:
            clock.step(dt)
            out.results.append(engine.resolve_action(target_id, action_key))
        out.report = engine.export_audit_log(generated_at=self._start_epoch + report_delay_s)
        return out


@pytest.fixture
def scenario_config():
    path = Path(__file__).parent.parent.parent / "config" / "default.yaml"
    return OmegaConf.load(path)


@pytest.fixture
def runner(scenario_config) -> ScenarioRunner:
    return ScenarioRunner(scenario_config)
