"""Mitigation action state machine.

Each target carries a fixed outcome table (action key -> outcome tag).
Resolving an action compares the target's outcome with the action's
success tag, consumes the action, marks the target as acted upon and
appends exactly one audit entry.  Repeats, unknown keys and keys missing
from the target's table are rejected with no side effects.

Per-target lifecycle::

    UNTOUCHED --resolve--> PARTIALLY_ACTED --resolve...--> RESOLVED

RESOLVED is reached when every defined action has been used.  The call
that completes the set reports ``resolved=True`` and publishes
``target_resolved`` on the event bus; no other call does.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from dronerisk.core.bus import ACTION_RESOLVED, TARGET_RESOLVED, EventBus
from dronerisk.core.clock import Clock, SystemClock
from dronerisk.core.types import ActionStatus, Target, TargetState
from dronerisk.history.audit import AuditEntry, AuditLog

logger = logging.getLogger(__name__)

REPORT_ACTION = "report"
REJECTED_MESSAGE = "Invalid or already-used action"


@dataclass(frozen=True)
class ActionDefinition:
    """One operator mitigation action.

    ``error_outcome`` labels any outcome other than ``success_outcome``;
    it is informational and never compared against.
    """

    key: str
    label: str
    success_outcome: str
    success_message: str
    error_outcome: str = "failed"
    error_message: str = "Action failed"

    @property
    def is_report(self) -> bool:
        return self.key == REPORT_ACTION

    @classmethod
    def from_config(cls, d: Mapping[str, Any]) -> ActionDefinition:
        d = dict(d)
        key = str(d["key"])
        return cls(
            key=key,
            label=str(d.get("label", key)),
            success_outcome=str(d["success_outcome"]),
            success_message=str(d.get("success_message", f"{key} succeeded")),
            error_outcome=str(d.get("error_outcome", "failed")),
            error_message=str(d.get("error_message", f"{key} failed")),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "key": self.key,
            "label": self.label,
            "success_outcome": self.success_outcome,
            "success_message": self.success_message,
            "error_outcome": self.error_outcome,
            "error_message": self.error_message,
        }


CORE_ACTIONS: tuple[ActionDefinition, ...] = (
    ActionDefinition(
        key="simDetach",
        label="SIM Detach",
        success_outcome="detached",
        success_message="SIM detached from the cellular network",
        error_outcome="failed",
        error_message="carrier rejected the detach request",
    ),
    ActionDefinition(
        key="cyberTakeover",
        label="Cyber Takeover",
        success_outcome="takeover",
        success_message="control link taken over",
        error_outcome="failed",
        error_message="control link is encrypted",
    ),
    ActionDefinition(
        key="directionalJam",
        label="Directional Jam",
        success_outcome="jammed",
        success_message="control and video links jammed",
        error_outcome="failed",
        error_message="drone is flying an autonomous waypoint route",
    ),
)

DEFAULT_ACTIONS: tuple[ActionDefinition, ...] = CORE_ACTIONS + (
    ActionDefinition(
        key=REPORT_ACTION,
        label="Report",
        success_outcome="reported",
        success_message="report filed with the airspace authority",
        error_outcome="failed",
        error_message="reporting channel unavailable",
    ),
)


@dataclass(frozen=True)
class ActionResult:
    """Caller-visible result of :meth:`ActionStateMachine.resolve_action`."""

    status: ActionStatus
    message: str
    target_id: str
    action_key: str
    resolved: bool = False
    entry: AuditEntry | None = None

    @property
    def accepted(self) -> bool:
        return self.status is not ActionStatus.REJECTED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "target_id": self.target_id,
            "action_key": self.action_key,
            "resolved": self.resolved,
        }


class ActionStateMachine:
    """Resolves operator actions against per-target outcome tables.

    Args:
        actions: Action definitions; their count is the size of a full set.
        audit_log: Append-only log receiving one entry per accepted action.
        clock: Time source for entry timestamps.
        bus: Optional event bus for ``action_resolved`` / ``target_resolved``.

    Deterministic: the same sequence of ``(target, action_key)`` calls with
    the same clock readings yields identical state and log.
    """

    def __init__(
        self,
        actions: Iterable[ActionDefinition] = DEFAULT_ACTIONS,
        audit_log: AuditLog | None = None,
        clock: Clock | None = None,
        bus: EventBus | None = None,
    ):
        table: dict[str, ActionDefinition] = {}
        for action in actions:
            if action.key in table:
                raise ValueError(f"Duplicate action key '{action.key}'")
            table[action.key] = action
        if not table:
            raise ValueError("At least one action definition is required")
        self._actions = MappingProxyType(table)
        self._audit_log = audit_log if audit_log is not None else AuditLog()
        self._clock = clock or SystemClock()
        self._bus = bus
        self._lock = threading.Lock()

    @property
    def actions(self) -> Mapping[str, ActionDefinition]:
        return self._actions

    @property
    def audit_log(self) -> AuditLog:
        return self._audit_log

    @property
    def total_actions(self) -> int:
        return len(self._actions)

    def state_of(self, target: Target) -> TargetState:
        used = len(target.used_actions)
        if used == 0:
            return TargetState.UNTOUCHED
        if used >= self.total_actions:
            return TargetState.RESOLVED
        return TargetState.PARTIALLY_ACTED

    def is_resolved(self, target: Target) -> bool:
        return self.state_of(target) is TargetState.RESOLVED

    def available_actions(self, target: Target) -> list[str]:
        """Action keys that would currently be accepted for *target*."""
        return [
            key for key in self._actions
            if key in target.outcomes and key not in target.used_actions
        ]

    def resolve_action(self, target: Target, action_key: str) -> ActionResult:
        """Apply *action_key* to *target*.

        Returns a ``REJECTED`` result, with nothing mutated, when the key is
        unknown, absent from the target's outcome table, or already used.
        """
        with self._lock:
            definition = self._actions.get(action_key)
            if (
                definition is None
                or action_key not in target.outcomes
                or action_key in target.used_actions
            ):
                logger.debug(
                    "Rejected action '%s' on target %s", action_key, target.target_id
                )
                return ActionResult(
                    status=ActionStatus.REJECTED,
                    message=REJECTED_MESSAGE,
                    target_id=target.target_id,
                    action_key=action_key,
                )

            is_success = target.outcomes[action_key] == definition.success_outcome
            if is_success:
                status = ActionStatus.SUCCESS
                message = definition.success_message
            else:
                status = ActionStatus.ERROR
                message = definition.error_message

            # Failed attempts also consume the action and mark the target
            target.record_action(action_key)

            entry = AuditEntry(
                timestamp=self._clock.now(),
                target_id=target.target_id,
                call_sign=target.call_sign,
                action_key=action_key,
                action_label=definition.label,
                success=is_success,
                counts_as_success=is_success and not definition.is_report,
                reported=is_success and definition.is_report,
                message=message,
                position=target.position,
            )
            self._audit_log.record(entry)

            resolved = len(target.used_actions) == self.total_actions

        logger.info(
            "%s on %s: %s (%s)",
            definition.label, target.call_sign, status.value, message,
        )
        result = ActionResult(
            status=status,
            message=message,
            target_id=target.target_id,
            action_key=action_key,
            resolved=resolved,
            entry=entry,
        )
        if resolved:
            logger.info("Target %s resolved: all actions used", target.call_sign)
        if self._bus is not None:
            self._bus.publish(ACTION_RESOLVED, result=result)
            if resolved:
                self._bus.publish(TARGET_RESOLVED, target_id=target.target_id)
        return result
