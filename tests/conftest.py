"""Shared pytest fixtures for DRONERISK tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import structlog
from omegaconf import OmegaConf

from dronerisk.core.clock import SimClock
from dronerisk.core.types import Station
from dronerisk.engagement.manager import MitigationEngine

START_EPOCH = 1_700_000_000.0  # 2023-11-14T22:13:20.000Z


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture
def config_path(project_root: Path) -> Path:
    return project_root / "config" / "default.yaml"


@pytest.fixture
def default_config(config_path: Path):
    return OmegaConf.load(config_path)


@pytest.fixture
def sim_clock() -> SimClock:
    return SimClock(start_epoch=START_EPOCH)


@pytest.fixture
def sample_stations() -> list[Station]:
    return [
        Station(station_id="S1", name="North Site", position=(52.10, 4.30)),
        Station(station_id="S2", name="South Site", position=(51.80, 4.30)),
    ]


@pytest.fixture
def sample_target_defs() -> list[dict]:
    """Three targets: one resolvable with mixed outcomes, one high risk, one single-point."""
    return [
        {
            "id": "t1",
            "track": [[52.00, 4.20], [52.05, 4.25], [52.10, 4.28]],
            "indicators": {"inNoFlyZone": True, "missingRID": True},
            "outcomes": {
                "simDetach": "detached",
                "cyberTakeover": "failed",
                "directionalJam": "jammed",
                "report": "reported",
            },
        },
        {
            "id": "t2",
            "call_sign": "HAWK-2",
            "track": [[51.70, 4.10], [51.75, 4.20]],
            "indicators": {
                "imeiModem": True,
                "inNoFlyZone": True,
                "uasFlag": True,
                "missingRID": True,
            },
            "outcomes": {
                "simDetach": "failed",
                "cyberTakeover": "takeover",
                "directionalJam": "failed",
                "report": "failed",
            },
        },
        {
            "id": "t3",
            "track": [[53.50, 7.00]],
            "indicators": {},
            "outcomes": {"simDetach": "detached"},
        },
    ]


@pytest.fixture
def engine(sample_target_defs, sample_stations, sim_clock) -> MitigationEngine:
    return MitigationEngine(
        target_defs=sample_target_defs,
        stations=sample_stations,
        clock=sim_clock,
    )


@pytest.fixture(autouse=True)
def _reset_dronerisk_logger():
    """Undo setup_logging() so caplog sees records in later tests."""
    yield
    root = logging.getLogger("dronerisk")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
    root.propagate = True
    structlog.reset_defaults()
