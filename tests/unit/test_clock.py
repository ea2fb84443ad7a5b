"""Tests for clocks and ISO timestamp formatting."""

from __future__ import annotations

import pytest

from dronerisk.core.clock import (
    Clock,
    SimClock,
    SystemClock,
    create_clock,
    filename_timestamp,
    iso_timestamp,
)


class TestSimClock:
    def test_starts_at_epoch(self):
        c = SimClock(start_epoch=100.0)
        assert c.now() == 100.0
        assert c.elapsed() == 0.0

    def test_step(self):
        c = SimClock(start_epoch=100.0)
        c.step(2.5)
        c.step(0.5)
        assert c.now() == 103.0
        assert c.elapsed() == 3.0

    def test_negative_step(self):
        with pytest.raises(ValueError, match="dt >= 0"):
            SimClock().step(-1.0)

    def test_set_time(self):
        c = SimClock(start_epoch=100.0)
        c.set_time(150.0)
        assert c.elapsed() == 50.0

    def test_set_time_before_start(self):
        with pytest.raises(ValueError):
            SimClock(start_epoch=100.0).set_time(99.0)

    def test_protocol(self):
        assert isinstance(SimClock(), Clock)
        assert isinstance(SystemClock(), Clock)


class TestSystemClock:
    def test_monotonic(self):
        c = SystemClock()
        a = c.now()
        b = c.now()
        assert b >= a
        assert c.elapsed() >= 0.0


class TestCreateClock:
    def test_default_realtime(self):
        assert isinstance(create_clock(None), SystemClock)
        assert isinstance(create_clock({"mode": "realtime"}), SystemClock)

    def test_simulated(self):
        c = create_clock({"mode": "simulated", "start_epoch": 42.0})
        assert isinstance(c, SimClock)
        assert c.now() == 42.0


class TestIsoTimestamp:
    def test_whole_seconds(self):
        assert iso_timestamp(1_700_000_000.0) == "2023-11-14T22:13:20.000Z"

    def test_milliseconds(self):
        assert iso_timestamp(1_700_000_000.125) == "2023-11-14T22:13:20.125Z"

    def test_rounding_carries(self):
        assert iso_timestamp(1_700_000_000.9996) == "2023-11-14T22:13:21.000Z"

    def test_epoch_zero(self):
        assert iso_timestamp(0.0) == "1970-01-01T00:00:00.000Z"

    def test_filename_form(self):
        assert filename_timestamp(1_700_000_000.125) == "2023-11-14T22-13-20-125Z"
