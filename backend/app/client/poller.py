"""Background refresh loop for the dashboard section."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from .view import DashboardView

LOGGER = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30.0
DEFAULT_RETRY_DELAY = 10.0
SYNC_FAILED = "Sync failed - Retrying..."
STOP_TIMEOUT = 5.0


class DashboardPoller:
    """Call ``update`` every ``interval`` seconds until stopped.

    A failed update schedules a single retry after ``retry_delay``. Retries
    keep that fixed delay until one succeeds or ``max_retries`` consecutive
    retries have failed, after which the loop falls back to ``interval``.
    """

    def __init__(
        self,
        update: Callable[[], None],
        view: DashboardView,
        *,
        interval: float = DEFAULT_INTERVAL,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        max_retries: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
        stop_timeout: float = STOP_TIMEOUT,
    ) -> None:
        self._update = update
        self._view = view
        self.interval = interval
        self.retry_delay = retry_delay
        self.max_retries = max_retries
        self._clock = clock
        self.stop_timeout = stop_timeout
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self.consecutive_failures = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_cycle(self) -> float:
        """Run one update and return the delay before the next one."""

        try:
            self._update()
        except Exception as exc:
            self.consecutive_failures += 1
            LOGGER.warning("Dashboard update failed (%s in a row): %s", self.consecutive_failures, exc)
            self._view.sync_status = SYNC_FAILED
            self._view.record_error(f"Dashboard update failed: {exc}")
            if self.max_retries is not None and self.consecutive_failures > self.max_retries:
                LOGGER.error("Giving up retries after %s failures", self.consecutive_failures)
                self.consecutive_failures = 0
                return self.interval
            return self.retry_delay

        self.consecutive_failures = 0
        self._view.sync_status = f"Last sync: {self._clock():%H:%M:%S}"
        return self.interval

    def _worker(self, stop: threading.Event) -> None:
        delay = self.interval
        while not stop.wait(delay):
            delay = self.run_cycle()

    def start(self) -> None:
        if self.running:
            return
        # One event per worker; a restart never revives a stopped worker.
        self._stop = threading.Event()
        self.consecutive_failures = 0
        self._thread = threading.Thread(
            target=self._worker, args=(self._stop,), name="dashboard-poller", daemon=True
        )
        self._thread.start()
        LOGGER.debug("Dashboard poller started (interval %.0fs)", self.interval)

    def stop(self) -> None:
        if self._stop is not None:
            self._stop.set()
        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=self.stop_timeout)
            if thread.is_alive():
                LOGGER.warning("Dashboard poller still finishing an update after %.0fs", self.stop_timeout)
        self._thread = None
        self._stop = None
