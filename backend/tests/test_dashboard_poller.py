from __future__ import annotations

import logging
import threading
from datetime import datetime

from backend.app.client.poller import SYNC_FAILED, DashboardPoller
from backend.app.client.view import MAX_RECORDED_ERRORS, DashboardView


def _fixed_clock() -> datetime:
    return datetime(2026, 10, 16, 9, 5, 7)


def _failing_update() -> None:
    raise ConnectionError("API unreachable")


def test_successful_cycle_updates_sync_status_and_waits_interval():
    view = DashboardView()
    poller = DashboardPoller(lambda: None, view, clock=_fixed_clock)

    assert poller.run_cycle() == 30.0
    assert view.sync_status == "Last sync: 09:05:07"


def test_failed_cycle_schedules_one_retry_after_ten_seconds(caplog):
    caplog.set_level(logging.WARNING, logger="backend.app.client.poller")
    view = DashboardView()
    poller = DashboardPoller(_failing_update, view)

    delay = poller.run_cycle()

    assert delay == 10.0
    assert view.sync_status == SYNC_FAILED
    assert view.last_error == "Dashboard update failed: API unreachable"
    assert "Dashboard update failed" in caplog.text


def test_retries_are_bounded_by_max_retries():
    view = DashboardView()
    poller = DashboardPoller(_failing_update, view, max_retries=2)

    delays = [poller.run_cycle() for _ in range(4)]

    assert delays == [10.0, 10.0, 30.0, 10.0]


def test_success_after_failure_resets_retry_count():
    outcomes = iter([ConnectionError("down"), None])

    def update() -> None:
        outcome = next(outcomes)
        if outcome is not None:
            raise outcome

    view = DashboardView()
    poller = DashboardPoller(update, view, clock=_fixed_clock)

    assert poller.run_cycle() == 10.0
    assert poller.run_cycle() == 30.0
    assert poller.consecutive_failures == 0
    assert view.sync_status == "Last sync: 09:05:07"


def test_worker_runs_until_stopped():
    ticks = threading.Event()
    calls = []

    def update() -> None:
        calls.append(True)
        if len(calls) >= 2:
            ticks.set()

    poller = DashboardPoller(update, DashboardView(), interval=0.01)
    poller.start()
    poller.start()
    try:
        assert ticks.wait(timeout=5)
        assert poller.running
    finally:
        poller.stop()

    assert not poller.running


def test_stop_is_idempotent_and_safe_before_start():
    poller = DashboardPoller(lambda: None, DashboardView())

    poller.stop()
    poller.stop()

    assert not poller.running


def test_restart_during_slow_update_leaves_a_single_worker():
    entered = threading.Event()
    release = threading.Event()
    callers = set()

    def update() -> None:
        callers.add(threading.current_thread().ident)
        if len(callers) == 1:
            entered.set()
            release.wait(timeout=5)

    poller = DashboardPoller(update, DashboardView(), interval=0.01, stop_timeout=0.05)
    poller.start()
    assert entered.wait(timeout=5)
    stale_worker = poller._thread

    poller.stop()
    assert stale_worker.is_alive()
    poller.start()
    try:
        release.set()
        stale_worker.join(timeout=5)

        assert not stale_worker.is_alive()
        assert poller.running
        assert poller._thread is not stale_worker
    finally:
        poller.stop()

    assert not poller.running
    assert len(callers) <= 2


def test_repeated_failures_keep_only_recent_errors():
    view = DashboardView()
    poller = DashboardPoller(_failing_update, view)

    for _ in range(MAX_RECORDED_ERRORS + 25):
        poller.run_cycle()

    assert len(view.errors) == MAX_RECORDED_ERRORS
    assert view.last_error == "Dashboard update failed: API unreachable"
