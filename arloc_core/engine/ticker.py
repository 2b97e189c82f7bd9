"""
Fixed-period tick driver.

Runs a callback on a daemon thread every interval until stopped. Stopping
discards any future ticks; a tick already in progress runs to completion.
"""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Ticker:
    """
    Periodic callback runner.

    Usage:
        ticker = Ticker(0.1, engine.update_location_data)
        ticker.start()
        ...
        ticker.stop()
    """

    def __init__(self, interval_s: float, callback: Callable[[], object], name: str = "arloc-ticker"):
        """
        Initialize ticker.

        Args:
            interval_s: Period between tick starts (s)
            callback: Called once per tick
            name: Thread name
        """
        if interval_s <= 0:
            raise ValueError(f"Tick interval must be positive: {interval_s}")

        self.interval_s = interval_s
        self.callback = callback
        self.name = name
        self.tick_count = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """Start ticking; no-op if already running."""
        if self.is_running:
            return

        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.info(f"{self.name} started (interval={self.interval_s:.3f}s)")

    def stop(self, timeout: float = 2.0):
        """
        Stop ticking and wait for the thread to exit.

        Safe to call from inside the callback (the join is skipped then).
        """
        self._stop_event.set()
        thread = self._thread
        self._thread = None

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning(f"{self.name} did not stop within {timeout:.1f}s")

        logger.info(f"{self.name} stopped after {self.tick_count} tick(s)")

    def _run(self):
        stop_event = self._stop_event
        while not stop_event.is_set():
            try:
                self.callback()
            except Exception:
                logger.exception(f"{self.name}: tick failed")
            self.tick_count += 1

            if stop_event.wait(self.interval_s):
                break
