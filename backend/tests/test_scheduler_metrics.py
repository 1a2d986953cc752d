from __future__ import annotations

import threading
from datetime import timedelta

from backend.app.main import _start_maintenance_scheduler
from backend.app.services.maintenance import MaintenanceReport, MaintenanceScheduler
from backend.app.services.scheduler_monitor import JOB_MAINTENANCE, SchedulerMonitor


def test_maintenance_scheduler_respects_enable_flag(context_factory):
    context = context_factory(maintenance_scheduler=False)

    scheduler = _start_maintenance_scheduler(context)

    assert scheduler is None
    snapshot = context.scheduler_monitor.snapshot()
    assert snapshot[JOB_MAINTENANCE]["enabled"] is False
    assert snapshot[JOB_MAINTENANCE]["last_tick"] is None


def test_maintenance_scheduler_starts_and_stops(context_factory, monkeypatch):
    called = threading.Event()

    def _run_once(self):
        called.set()
        return MaintenanceReport(routine="daily")

    monkeypatch.setattr(MaintenanceScheduler, "run_once", _run_once)
    context = context_factory(maintenance_scheduler=True, maintenance_interval_hours=1)

    scheduler = _start_maintenance_scheduler(context)
    try:
        assert scheduler is not None
        assert scheduler.running
        assert called.wait(timeout=5)
        assert context.scheduler_monitor.snapshot()[JOB_MAINTENANCE]["enabled"] is True
    finally:
        scheduler.stop()

    assert not scheduler.running
    assert context.scheduler_monitor.snapshot()[JOB_MAINTENANCE]["last_tick"] is not None


def test_scheduler_run_once_records_step_errors(monkeypatch):
    monitor = SchedulerMonitor()

    def _daily(session):
        return MaintenanceReport(routine="daily", errors=["update_table_statistics: locked"])

    monkeypatch.setattr(
        "backend.app.services.maintenance.MaintenanceService.daily_maintenance",
        staticmethod(_daily),
    )

    class _Session:
        def commit(self):
            pass

        def rollback(self):
            pass

        def close(self):
            pass

    scheduler = MaintenanceScheduler(_Session, monitor, interval=timedelta(hours=24))

    report = scheduler.run_once()

    assert report is not None and not report.succeeded
    errors = monitor.snapshot()[JOB_MAINTENANCE]["recent_errors"]
    assert any("locked" in entry for entry in errors)
