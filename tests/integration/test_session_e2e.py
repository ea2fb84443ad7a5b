"""Integration: config -> engine -> dashboard state -> export, in one session."""

from __future__ import annotations

import asyncio

import pytest

from dronerisk.core.clock import SimClock
from dronerisk.core.config import DroneRiskConfig
from dronerisk.core.types import ActionStatus, TargetState
from dronerisk.engagement.manager import MitigationEngine
from dronerisk.history.storage import AuditExporter
from dronerisk.ui.scheduler import FeedbackScheduler
from dronerisk.ui.state import DashboardState


@pytest.fixture
def session_engine(config_path):
    cfg = DroneRiskConfig(config_path).load(validate=True)
    return MitigationEngine.from_config(cfg, clock=SimClock())


class TestSession:
    def test_act_then_export(self, session_engine, tmp_path):
        state = DashboardState(session_engine)
        for key in ("simDetach", "cyberTakeover", "directionalJam", "report"):
            session_engine.clock.step(2.0)
            state.act("d1", key)

        assert session_engine.target_state("d1") is TargetState.RESOLVED
        assert state.feedback_for("d1").status is ActionStatus.SUCCESS

        text = session_engine.export_audit_log()
        path = AuditExporter.save_report(text, tmp_path, session_engine.clock.now())
        assert path.name == session_engine.audit_filename()
        assert path.read_text() == text

        entries_path = AuditExporter.save_entries(
            session_engine.audit_log.entries(), tmp_path / "log.json.gz",
            session_engine.clock.now(), compression=True,
        )
        assert AuditExporter.read_entries(entries_path) == session_engine.audit_log.entries()

    def test_view_reflects_resolution(self, session_engine):
        state = DashboardState(session_engine)
        for key in ("simDetach", "cyberTakeover", "directionalJam", "report"):
            state.act("d4", key)
        view = state.view()
        assert view["targets"][-1]["target_id"] == "d4"
        assert view["targets"][-1]["state"] == "resolved"
        assert view["targets"][-1]["available_actions"] == []
        engaged = {s["station_id"] for s in view["stations"] if s["engaged"]}
        assert engaged == {"stn-hague", "stn-rdam"}

    @pytest.mark.asyncio
    async def test_teardown_mid_feedback(self, session_engine):
        scheduler = FeedbackScheduler()
        state = DashboardState(session_engine, scheduler, dismiss_after_s=0.01)
        state.act("d2", "simDetach")
        state.teardown()
        await asyncio.sleep(0.03)
        assert scheduler.pending_keys() == []
        assert scheduler.closed
        assert state.feedback_for("d2") is None
