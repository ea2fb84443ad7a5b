"""Audit log of mitigation actions and the plain-text mitigation report.

The log is append-only and chronological.  :func:`render` turns entries,
a summary and the target list into a line-oriented report whose exact
layout downstream tooling depends on; given the same inputs and
``generated_at`` it is byte-for-byte reproducible.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from dronerisk.core.clock import iso_timestamp
from dronerisk.core.types import Target

REPORT_TITLE = "Drone Mitigation Log"


def format_position(position: Sequence[float]) -> str:
    return f"{float(position[0]):.4f}, {float(position[1]):.4f}"


@dataclass(frozen=True)
class AuditEntry:
    """Immutable record of one resolved action."""

    timestamp: float  # epoch seconds
    target_id: str
    call_sign: str
    action_key: str
    action_label: str
    success: bool
    counts_as_success: bool  # success and not a report
    reported: bool  # success and a report
    message: str
    position: tuple[float, float]  # (lat, lon) at resolution time

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain dict for JSON export."""
        return {
            "timestamp": self.timestamp,
            "time_iso": iso_timestamp(self.timestamp),
            "target_id": self.target_id,
            "call_sign": self.call_sign,
            "action_key": self.action_key,
            "action_label": self.action_label,
            "success": self.success,
            "counts_as_success": self.counts_as_success,
            "reported": self.reported,
            "message": self.message,
            "position": list(self.position),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> AuditEntry:
        lat, lon = d["position"]
        return cls(
            timestamp=float(d["timestamp"]),
            target_id=d["target_id"],
            call_sign=d["call_sign"],
            action_key=d["action_key"],
            action_label=d.get("action_label", d["action_key"]),
            success=bool(d["success"]),
            counts_as_success=bool(d.get("counts_as_success", False)),
            reported=bool(d.get("reported", False)),
            message=d.get("message", ""),
            position=(float(lat), float(lon)),
        )


class AuditLog:
    """Thread-safe append-only sequence of :class:`AuditEntry`.

    Entries are never reordered, deduplicated or removed.
    """

    def __init__(self) -> None:
        self._entries: list[AuditEntry] = []
        self._lock = threading.Lock()

    def record(self, entry: AuditEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def entries(self) -> list[AuditEntry]:
        """Shallow copy of all entries, oldest first."""
        with self._lock:
            return list(self._entries)

    def entries_for(self, target_id: str) -> list[AuditEntry]:
        with self._lock:
            return [e for e in self._entries if e.target_id == target_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass(frozen=True)
class AuditSummary:
    total_targets: int
    engaged: int
    successful: int
    unsuccessful: int
    reported: int

    def to_dict(self) -> dict[str, int]:
        return {
            "total_targets": self.total_targets,
            "engaged": self.engaged,
            "successful": self.successful,
            "unsuccessful": self.unsuccessful,
            "reported": self.reported,
        }


def summarize(entries: Iterable[AuditEntry], total_targets: int) -> AuditSummary:
    """Distinct-target counts over the log.

    A target with any successful (non-report) action counts as successful;
    ``unsuccessful`` is engaged minus successful, so a failure followed by a
    success counts only as successful.
    """
    engaged: set[str] = set()
    successful: set[str] = set()
    reported: set[str] = set()
    for e in entries:
        engaged.add(e.target_id)
        if e.counts_as_success:
            successful.add(e.target_id)
        if e.reported:
            reported.add(e.target_id)
    return AuditSummary(
        total_targets=total_targets,
        engaged=len(engaged),
        successful=len(successful),
        unsuccessful=len(engaged - successful),
        reported=len(reported),
    )


def describe_entry(entry: AuditEntry) -> str:
    """One narrative log line for *entry*."""
    stamp = iso_timestamp(entry.timestamp)
    where = format_position(entry.position)
    if entry.reported:
        return f"[{stamp}] Report filed on {entry.call_sign} via {entry.action_label} at {where}."
    if entry.success:
        return f"[{stamp}] {entry.action_label} acted successfully on {entry.call_sign} at {where}."
    return (
        f"[{stamp}] {entry.action_label} acted unsuccessfully on {entry.call_sign} "
        f"at {where} because {entry.message}."
    )


def render(
    entries: Sequence[AuditEntry],
    summary: AuditSummary,
    targets: Sequence[Target],
    generated_at: float,
) -> str:
    """Render the mitigation report as newline-terminated text."""
    lines = [
        REPORT_TITLE,
        f"Generated: {iso_timestamp(generated_at)}",
        "",
        "Summary",
        f"Total targets: {summary.total_targets}",
        f"Engaged targets: {summary.engaged}",
        f"Successfully mitigated: {summary.successful}",
        f"Unsuccessful: {summary.unsuccessful}",
        f"Reported: {summary.reported}",
        "",
        "Targets",
    ]
    lines.extend(
        f"{t.call_sign}: {t.risk.level.value} risk (score {t.risk.score})" for t in targets
    )
    lines += ["", "Last known positions"]
    lines.extend(f"{t.call_sign}: {format_position(t.position)}" for t in targets)
    lines += ["", "Action log"]
    if entries:
        lines.extend(describe_entry(e) for e in entries)
    else:
        lines.append("(no actions recorded)")
    return "\n".join(lines) + "\n"
