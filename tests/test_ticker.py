"""
Unit tests for the fixed-period tick driver.
"""

import threading
import time

import pytest

from arloc_core.engine import Ticker


class TestTicker:
    """Tests for Ticker."""

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            Ticker(0.0, lambda: None)

    def test_ticks_until_stopped(self):
        calls = []
        ticker = Ticker(0.01, lambda: calls.append(time.perf_counter()))

        ticker.start()
        time.sleep(0.2)
        ticker.stop()
        count = len(calls)
        time.sleep(0.05)

        assert count >= 3
        assert len(calls) == count
        assert ticker.tick_count == count
        assert not ticker.is_running

    def test_start_twice_is_noop(self):
        ticker = Ticker(0.05, lambda: None)
        ticker.start()
        thread = ticker._thread
        ticker.start()

        try:
            assert ticker._thread is thread
        finally:
            ticker.stop()

    def test_exception_does_not_stop_ticking(self, caplog):
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")

        ticker = Ticker(0.01, flaky)
        ticker.start()
        time.sleep(0.15)
        ticker.stop()

        assert len(calls) >= 2
        assert "tick failed" in caplog.text

    def test_stop_from_callback(self):
        done = threading.Event()
        holder = {}

        def stop_self():
            holder['ticker'].stop()
            done.set()

        ticker = Ticker(0.01, stop_self)
        holder['ticker'] = ticker
        ticker.start()

        assert done.wait(1.0)
        time.sleep(0.05)
        assert ticker.tick_count == 1
        assert not ticker.is_running
