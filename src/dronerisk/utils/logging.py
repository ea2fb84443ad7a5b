"""Logging for DRONERISK sessions.

Engine modules log through plain ``logging.getLogger(__name__)`` under the
``dronerisk`` logger: target load, accepted and rejected operator actions,
target resolution and coverage changes.  :func:`setup_logging` routes those
records through structlog so the CLI can print them readably, emit one JSON
object per line for log collection, or also append them to a file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog


ROOT_LOGGER = "dronerisk"

# Shared by structlog-native loggers and stdlib records ("foreign" to structlog)
_PRE_CHAIN: list = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def _session_handlers(log_file: str | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(path), encoding="utf-8"))
    return handlers


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    log_json: bool = False,
) -> None:
    """Attach console (and optionally file) handlers to the ``dronerisk`` logger.

    Safe to call repeatedly; earlier handlers are replaced.

    Args:
        level: Threshold for engine records (DEBUG shows rejected actions
            and coverage changes).  Unknown names fall back to INFO.
        log_file: Also append records here; parent directories are created.
        log_json: Render each record as one JSON object instead of console text.
    """
    threshold = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_PRE_CHAIN,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )

    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.setLevel(threshold)
    root.propagate = False
    for handler in _session_handlers(log_file):
        handler.setLevel(threshold)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # The feedback scheduler's event loop logs slow callbacks at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)
