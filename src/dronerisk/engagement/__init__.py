"""Engagement: station coverage and the mitigation action workflow.

Provides inclusive-radius station coverage, the idempotent per-target
action state machine, and the MitigationEngine that ties scoring,
geometry, actions and the audit log together for a dashboard session.
"""

from dronerisk.engagement.actions import (
    CORE_ACTIONS,
    DEFAULT_ACTIONS,
    ActionDefinition,
    ActionResult,
    ActionStateMachine,
)
from dronerisk.engagement.config import EngagementConfig
from dronerisk.engagement.coverage import (
    COVERAGE_RADIUS_M,
    CoverageEngine,
    covered_targets,
    engaged_stations,
)
from dronerisk.engagement.manager import MitigationEngine

__all__ = [
    "ActionDefinition",
    "ActionResult",
    "ActionStateMachine",
    "CORE_ACTIONS",
    "COVERAGE_RADIUS_M",
    "CoverageEngine",
    "DEFAULT_ACTIONS",
    "EngagementConfig",
    "MitigationEngine",
    "covered_targets",
    "engaged_stations",
]
