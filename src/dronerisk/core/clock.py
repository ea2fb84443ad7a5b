"""System clock, simulated clock, and timestamp formatting."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Protocol for clocks used to stamp audit entries and reports.

    Both SystemClock (real-time) and SimClock (deterministic) implement this.
    """

    def now(self) -> float:
        """Current time as epoch seconds."""
        ...

    def elapsed(self) -> float:
        """Seconds since clock was created/started."""
        ...


class SystemClock:
    """Monotonic clock anchored to wall-clock epoch time.

    This is the default clock.
    """

    def __init__(self):
        self._start_time = time.monotonic()
        self._epoch_offset = time.time() - self._start_time

    def now(self) -> float:
        """Current time as epoch seconds (monotonic-based)."""
        return time.monotonic() + self._epoch_offset

    def elapsed(self) -> float:
        """Seconds since clock was created."""
        return time.monotonic() - self._start_time


class SimClock:
    """Deterministic clock for reproducible sessions and testing.

    Time only advances when :meth:`step` or :meth:`set_time` are called.
    Two engines driven by equal SimClocks and the same action sequence
    produce byte-identical audit reports.

    Args:
        start_epoch: Initial epoch time (what ``now()`` returns at
            ``elapsed=0``).  Defaults to ``1_700_000_000.0``.
    """

    def __init__(self, start_epoch: float = 1_700_000_000.0):
        self._start_epoch = start_epoch
        self._elapsed = 0.0

    def now(self) -> float:
        """Current simulated epoch time."""
        return self._start_epoch + self._elapsed

    def elapsed(self) -> float:
        """Simulated seconds since clock was created."""
        return self._elapsed

    def step(self, dt: float) -> None:
        """Advance simulated time by *dt* seconds.

        Raises:
            ValueError: If *dt* is negative.
        """
        if dt < 0:
            raise ValueError(f"SimClock.step() requires dt >= 0, got {dt}")
        self._elapsed += dt

    def set_time(self, epoch_time: float) -> None:
        """Set the absolute simulated epoch time.

        Raises:
            ValueError: If *epoch_time* is before *start_epoch*.
        """
        new_elapsed = epoch_time - self._start_epoch
        if new_elapsed < 0:
            raise ValueError(
                f"epoch_time {epoch_time} is before start_epoch {self._start_epoch}"
            )
        self._elapsed = new_elapsed

    @property
    def start_epoch(self) -> float:
        """The epoch time that corresponds to ``elapsed=0``."""
        return self._start_epoch


def create_clock(config: dict | None = None) -> SystemClock | SimClock:
    """Create a clock from the ``dronerisk.time`` config section.

    Returns a :class:`SystemClock` for real-time mode (default) or a
    :class:`SimClock` for simulated mode.
    """
    if config is None:
        return SystemClock()
    mode = config.get("mode", "realtime")
    if mode == "simulated":
        return SimClock(start_epoch=float(config.get("start_epoch", 1_700_000_000.0)))
    return SystemClock()


def iso_timestamp(epoch_s: float) -> str:
    """Format epoch seconds as UTC ISO-8601 with milliseconds and a ``Z`` suffix.

    ``1700000000.25`` -> ``"2023-11-14T22:13:20.250Z"``
    """
    # Round to whole milliseconds first so .9995 carries into the seconds field
    millis = int(round(epoch_s * 1000.0))
    dt = datetime.fromtimestamp(millis // 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{millis % 1000:03d}Z"


def filename_timestamp(epoch_s: float) -> str:
    """ISO timestamp with ``:`` and ``.`` replaced by ``-`` (safe in filenames)."""
    return iso_timestamp(epoch_s).replace(":", "-").replace(".", "-")
