"""AuditExporter — one-shot export of the mitigation report and audit entries."""

from __future__ import annotations

import gzip
import json
import logging
from collections.abc import Sequence
from pathlib import Path

from dronerisk.core.clock import filename_timestamp, iso_timestamp
from dronerisk.history.audit import AuditEntry

logger = logging.getLogger(__name__)

# Entries file format version
AUDIT_FORMAT_VERSION = 1

REPORT_PREFIX = "mitigation-log"


def report_filename(generated_at: float) -> str:
    """``mitigation-log-2023-11-14T22-13-20-000Z.txt`` for the given epoch."""
    return f"{REPORT_PREFIX}-{filename_timestamp(generated_at)}.txt"


class AuditExporter:
    """Writes export artifacts to disk.

    Nothing written here is read back by the engine; each dashboard session
    starts from configuration alone.

    Entries file format (JSON)::

        {
            "version": 1,
            "metadata": {"entry_count": N, "generated_at": "<ISO>"},
            "entries": [ ... AuditEntry dicts ... ]
        }

    With ``compression=True`` the entries file is gzip-wrapped.
    """

    @staticmethod
    def save_report(text: str, directory: str | Path, generated_at: float) -> Path:
        """Write the rendered report under *directory*.  Returns the file path."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        filepath = directory / report_filename(generated_at)
        filepath.write_text(text, encoding="utf-8", newline="\n")
        logger.info("Saved mitigation report to %s (%d bytes)", filepath, len(text))
        return filepath

    @staticmethod
    def save_entries(
        entries: Sequence[AuditEntry],
        filepath: str | Path,
        generated_at: float,
        compression: bool = False,
    ) -> Path:
        """Write audit entries as JSON.  Returns the resolved path."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": AUDIT_FORMAT_VERSION,
            "metadata": {
                "entry_count": len(entries),
                "generated_at": iso_timestamp(generated_at),
            },
            "entries": [e.to_dict() for e in entries],
        }
        raw = json.dumps(data, indent=2).encode("utf-8")
        if compression:
            raw = gzip.compress(raw)

        filepath.write_bytes(raw)
        logger.info("Saved %d audit entries to %s (%d bytes)", len(entries), filepath, len(raw))
        return filepath

    @staticmethod
    def read_entries(filepath: str | Path) -> list[AuditEntry]:
        """Parse an entries file written by :meth:`save_entries`.

        For inspecting exports offline; the engine never calls this.
        """
        raw = Path(filepath).read_bytes()
        try:
            raw = gzip.decompress(raw)
        except gzip.BadGzipFile:
            pass

        data = json.loads(raw.decode("utf-8"))
        version = data.get("version", 1)
        if version > AUDIT_FORMAT_VERSION:
            logger.warning(
                "File version %d > supported %d, some data may be lost",
                version,
                AUDIT_FORMAT_VERSION,
            )
        return [AuditEntry.from_dict(d) for d in data.get("entries", [])]
