"""Mitigation audit log, report rendering and export for DRONERISK."""

from dronerisk.history.audit import AuditEntry, AuditLog, AuditSummary, render, summarize
from dronerisk.history.storage import AuditExporter, report_filename

__all__ = [
    "AuditEntry",
    "AuditExporter",
    "AuditLog",
    "AuditSummary",
    "render",
    "report_filename",
    "summarize",
]
