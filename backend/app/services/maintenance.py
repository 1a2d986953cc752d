"""Database maintenance routines and their optional background scheduler.

The routines are normally executed from cron through
``python -m backend.app.scripts.maintenance``; they never run on the request
path. Partition management only applies to PostgreSQL deployments where
``student_attendance`` was created as a range partitioned table.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Optional

from sqlalchemy import delete, func, insert, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .. import models
from ..database import session_scope
from .dashboard import months_ago
from .scheduler_monitor import JOB_MAINTENANCE, SchedulerMonitor

LOGGER = logging.getLogger(__name__)

ATTENDANCE_PARTITION_PATTERN = re.compile(r"^student_attendance_(\d{4})_(\d{2})$")
DEFAULT_PARTITION_MONTHS_AHEAD = 6
DEFAULT_PARTITION_RETENTION_YEARS = 2
DEFAULT_ATTENDANCE_RETENTION_DAYS = 365
DEFAULT_INACTIVE_USER_MONTHS = 6
RECENT_ACTIVITY_WINDOW = timedelta(hours=24)
CONNECTION_WARNING_THRESHOLD = 80
CONNECTION_CRITICAL_THRESHOLD = 100

STATISTICS_TABLES = (
    "districts",
    "blocks",
    "schools",
    "students",
    "teachers",
    "users",
    "student_attendance",
    "examinations",
    "exam_results",
    "fee_payments",
)
REINDEX_TABLES = ("students", "teachers", "schools", "student_attendance")

# Child tables first so foreign keys never block the reset.
RESET_ORDER = (
    models.StudentAttendance,
    models.StudentAttendanceArchive,
    models.ExamResult,
    models.FeePayment,
    models.Examination,
    models.Student,
    models.Teacher,
    models.School,
    models.Block,
    models.District,
    models.User,
)


@dataclass
class HealthCheck:
    check_name: str
    status: str
    details: str
    recommendation: str


@dataclass
class MaintenanceReport:
    """Outcome of a maintenance routine, one entry per executed step."""

    routine: str
    steps: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.errors


def _dialect(db: Session) -> str:
    return db.get_bind().dialect.name


def _first_of_month(day: date) -> date:
    return day.replace(day=1)


def _add_months(day: date, months: int) -> date:
    return months_ago(day, -months)


class MaintenanceService:
    """Housekeeping operations executed out-of-band on a schedule."""

    @staticmethod
    def attendance_is_partitioned(db: Session) -> bool:
        if _dialect(db) != "postgresql":
            return False
        row = db.execute(
            text(
                "SELECT 1 FROM pg_partitioned_table pt "
                "JOIN pg_class c ON c.oid = pt.partrelid "
                "WHERE c.relname = 'student_attendance'"
            )
        ).first()
        return row is not None

    @staticmethod
    def partition_name(month_start: date) -> str:
        return f"student_attendance_{month_start.year}_{month_start.month:02d}"

    @staticmethod
    def _existing_attendance_partitions(db: Session) -> list[str]:
        return list(
            db.execute(
                text("SELECT relname FROM pg_class WHERE relname LIKE 'student_attendance_%'")
            ).scalars()
        )

    @staticmethod
    def create_attendance_partitions(
        db: Session,
        *,
        months_ahead: int = DEFAULT_PARTITION_MONTHS_AHEAD,
        today: Optional[date] = None,
    ) -> list[str]:
        """Create monthly attendance partitions for the coming months; return the new names."""

        if not MaintenanceService.attendance_is_partitioned(db):
            LOGGER.info("student_attendance is not partitioned; skipping partition creation")
            return []

        existing = set(MaintenanceService._existing_attendance_partitions(db))
        current = _first_of_month(today or date.today())
        created: list[str] = []
        for offset in range(months_ahead):
            start = _add_months(current, offset)
            end = _add_months(current, offset + 1)
            name = MaintenanceService.partition_name(start)
            if name in existing:
                continue
            db.execute(
                text(
                    f'CREATE TABLE "{name}" PARTITION OF student_attendance '
                    f"FOR VALUES FROM ('{start.isoformat()}') TO ('{end.isoformat()}')"
                )
            )
            LOGGER.info("Created partition %s", name)
            created.append(name)
        return created

    @staticmethod
    def expired_partitions(names: list[str], cutoff: date) -> list[str]:
        """Return the partition names whose month starts before ``cutoff``."""

        expired = []
        for name in names:
            match = ATTENDANCE_PARTITION_PATTERN.match(name)
            if match is None:
                LOGGER.debug("Ignoring table %s while looking for expired partitions", name)
                continue
            year, month = int(match.group(1)), int(match.group(2))
            if not 1 <= month <= 12:
                LOGGER.warning("Could not process partition %s", name)
                continue
            if date(year, month, 1) < cutoff:
                expired.append(name)
        return sorted(expired)

    @staticmethod
    def cleanup_old_attendance_partitions(
        db: Session,
        *,
        retention_years: int = DEFAULT_PARTITION_RETENTION_YEARS,
        today: Optional[date] = None,
    ) -> list[str]:
        if not MaintenanceService.attendance_is_partitioned(db):
            LOGGER.info("student_attendance is not partitioned; skipping partition cleanup")
            return []

        cutoff = months_ago(today or date.today(), retention_years * 12)
        expired = MaintenanceService.expired_partitions(
            MaintenanceService._existing_attendance_partitions(db), cutoff
        )
        for name in expired:
            db.execute(text(f'DROP TABLE IF EXISTS "{name}" CASCADE'))
            LOGGER.info("Dropped old partition %s", name)
        return expired

    @staticmethod
    def archive_old_attendance(
        db: Session,
        *,
        retention_days: int = DEFAULT_ATTENDANCE_RETENTION_DAYS,
        today: Optional[date] = None,
    ) -> int:
        """Move attendance rows older than the retention window into the archive table."""

        cutoff = (today or date.today()) - timedelta(days=retention_days)
        live = models.StudentAttendance
        columns = ("attendance_id", "student_id", "attendance_date", "status", "created_at")
        old_rows = select(*(getattr(live, name) for name in columns)).where(
            live.attendance_date < cutoff
        )
        db.execute(insert(models.StudentAttendanceArchive).from_select(columns, old_rows))
        result = db.execute(
            delete(live)
            .where(live.attendance_date < cutoff)
            .execution_options(synchronize_session=False)
        )
        archived = result.rowcount or 0
        LOGGER.info("Archived %s attendance records older than %s", archived, cutoff)
        return archived

    @staticmethod
    def cleanup_inactive_users(
        db: Session,
        *,
        inactive_months: int = DEFAULT_INACTIVE_USER_MONTHS,
        today: Optional[date] = None,
    ) -> int:
        cutoff = datetime.combine(months_ago(today or date.today(), inactive_months), datetime.min.time())
        result = db.execute(
            update(models.User)
            .where(models.User.last_login < cutoff, models.User.is_active.is_(True))
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        updated = result.rowcount or 0
        LOGGER.info("Marked %s users as inactive", updated)
        return updated

    @staticmethod
    def remove_duplicate_students(db: Session) -> int:
        """Keep only the newest student row per admission number and school."""

        student = models.Student
        rank = (
            func.row_number()
            .over(
                partition_by=(student.admission_no, student.school_id),
                order_by=(student.created_at.desc(), student.student_id.desc()),
            )
            .label("rank")
        )
        ranked = select(student.student_id, rank).subquery()
        duplicate_ids = list(
            db.execute(select(ranked.c.student_id).where(ranked.c.rank > 1)).scalars()
        )
        if not duplicate_ids:
            LOGGER.info("Removed 0 duplicate student records")
            return 0

        db.execute(
            delete(student)
            .where(student.student_id.in_(duplicate_ids))
            .execution_options(synchronize_session=False)
        )
        LOGGER.info("Removed %s duplicate student records", len(duplicate_ids))
        return len(duplicate_ids)

    @staticmethod
    def update_table_statistics(db: Session) -> list[str]:
        if _dialect(db) != "postgresql":
            db.execute(text("ANALYZE"))
            LOGGER.info("Statistics updated for all tables")
            return ["*"]
        for table in STATISTICS_TABLES:
            db.execute(text(f"ANALYZE {table}"))
        LOGGER.info("Statistics updated for %s tables", len(STATISTICS_TABLES))
        return list(STATISTICS_TABLES)

    @staticmethod
    def rebuild_indexes(db: Session) -> list[str]:
        if _dialect(db) != "postgresql":
            LOGGER.info("Index rebuild is only supported on PostgreSQL; skipping")
            return []
        rebuilt = []
        for table in REINDEX_TABLES:
            try:
                with db.begin_nested():
                    db.execute(text(f"REINDEX TABLE {table}"))
            except SQLAlchemyError as exc:
                LOGGER.warning("Failed to reindex %s: %s", table, exc)
                continue
            LOGGER.info("Reindexed %s", table)
            rebuilt.append(table)
        return rebuilt

    @staticmethod
    def _connection_check(db: Session) -> Optional[HealthCheck]:
        if _dialect(db) != "postgresql":
            return None
        active = db.execute(
            text("SELECT count(*) FROM pg_stat_activity WHERE state = 'active'")
        ).scalar_one()
        if active < CONNECTION_WARNING_THRESHOLD:
            status = "GOOD"
        elif active < CONNECTION_CRITICAL_THRESHOLD:
            status = "WARNING"
        else:
            status = "CRITICAL"
        return HealthCheck(
            check_name="Database Connections",
            status=status,
            details=f"Active connections: {active}",
            recommendation=(
                "Monitor connection usage"
                if active >= CONNECTION_WARNING_THRESHOLD
                else "Connection usage normal"
            ),
        )

    @staticmethod
    def system_health_check(db: Session, *, now: Optional[datetime] = None) -> list[HealthCheck]:
        checks: list[HealthCheck] = []
        connection_check = MaintenanceService._connection_check(db)
        if connection_check is not None:
            checks.append(connection_check)

        orphaned = (
            db.query(models.Student)
            .outerjoin(models.School, models.School.school_id == models.Student.school_id)
            .filter(models.School.school_id.is_(None))
            .count()
        )
        checks.append(
            HealthCheck(
                check_name="Data Integrity",
                status="GOOD" if orphaned == 0 else "WARNING",
                details=f"Orphaned student records: {orphaned}",
                recommendation=(
                    "Clean up orphaned records" if orphaned else "Data integrity maintained"
                ),
            )
        )

        since = (now or datetime.now(timezone.utc)) - RECENT_ACTIVITY_WINDOW
        if since.tzinfo is not None and _dialect(db) != "postgresql":
            since = since.replace(tzinfo=None)
        recent = sum(
            db.query(model).filter(model.updated_at > since).count()
            for model in (models.Student, models.School, models.Teacher)
        )
        checks.append(
            HealthCheck(
                check_name="Recent Activity",
                status="GOOD" if recent > 0 else "WARNING",
                details=f"Records updated in last 24h: {recent}",
                recommendation=(
                    "System actively used" if recent > 0 else "Check data ingestion process"
                ),
            )
        )
        return checks

    @staticmethod
    def get_system_stats(db: Session) -> dict[str, str]:
        def active(model: Any) -> int:
            return db.query(model).filter(model.status == models.ACTIVE_STATUS).count()

        stats = {
            "Total Students": str(active(models.Student)),
            "Total Schools": str(active(models.School)),
            "Total Teachers": str(active(models.Teacher)),
            "Attendance Records": str(db.query(models.StudentAttendance).count()),
            "Archived Attendance Records": str(db.query(models.StudentAttendanceArchive).count()),
        }
        if _dialect(db) == "postgresql":
            stats["Database Size"] = db.execute(
                text("SELECT pg_size_pretty(pg_database_size(current_database()))")
            ).scalar_one()
            stats["Active Partitions"] = str(
                len(MaintenanceService._existing_attendance_partitions(db))
            )
        return stats

    @staticmethod
    def _run_step(
        db: Session,
        report: MaintenanceReport,
        name: str,
        step: Callable[[Session], Any],
    ) -> None:
        try:
            report.steps[name] = step(db)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            LOGGER.exception("Maintenance step %s failed", name)
            report.errors.append(f"{name}: {exc}")

    @staticmethod
    def _run_routine(
        db: Session, routine: str, steps: list[tuple[str, Callable[[Session], Any]]]
    ) -> MaintenanceReport:
        LOGGER.info("Starting %s maintenance", routine)
        report = MaintenanceReport(routine=routine)
        for name, step in steps:
            MaintenanceService._run_step(db, report, name, step)
        LOGGER.info(
            "%s maintenance completed with %s error(s)", routine.capitalize(), len(report.errors)
        )
        return report

    @staticmethod
    def daily_maintenance(db: Session) -> MaintenanceReport:
        return MaintenanceService._run_routine(
            db,
            "daily",
            [
                ("update_table_statistics", MaintenanceService.update_table_statistics),
                ("create_attendance_partitions", MaintenanceService.create_attendance_partitions),
            ],
        )

    @staticmethod
    def weekly_maintenance(db: Session) -> MaintenanceReport:
        return MaintenanceService._run_routine(
            db,
            "weekly",
            [
                ("rebuild_indexes", MaintenanceService.rebuild_indexes),
                ("archive_old_attendance", MaintenanceService.archive_old_attendance),
                ("cleanup_inactive_users", MaintenanceService.cleanup_inactive_users),
                ("remove_duplicate_students", MaintenanceService.remove_duplicate_students),
            ],
        )

    @staticmethod
    def monthly_maintenance(db: Session) -> MaintenanceReport:
        report = MaintenanceService._run_routine(
            db,
            "monthly",
            [
                (
                    "cleanup_old_attendance_partitions",
                    MaintenanceService.cleanup_old_attendance_partitions,
                ),
                ("update_table_statistics", MaintenanceService.update_table_statistics),
                ("system_health_check", MaintenanceService.system_health_check),
            ],
        )
        for check in report.steps.get("system_health_check", []):
            LOGGER.info("CHECK: %s - STATUS: %s - %s", check.check_name, check.status, check.details)
        return report

    @staticmethod
    def reset_demo_data(db: Session) -> None:
        LOGGER.warning("Resetting all portal data")
        for model in RESET_ORDER:
            db.execute(delete(model).execution_options(synchronize_session=False))
        db.commit()
        LOGGER.warning("All tables emptied")


class MaintenanceScheduler:
    """Background thread running the daily maintenance routine on a fixed interval."""

    def __init__(
        self,
        session_factory: sessionmaker,
        monitor: SchedulerMonitor,
        *,
        interval: timedelta,
    ) -> None:
        self._session_factory = session_factory
        self._monitor = monitor
        self._interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> Optional[MaintenanceReport]:
        try:
            with session_scope(self._session_factory) as session:
                report = MaintenanceService.daily_maintenance(session)
        except Exception as exc:  # pragma: no cover
            LOGGER.exception("Scheduled maintenance failed: %s", exc)
            self._monitor.record_error(JOB_MAINTENANCE, str(exc))
            return None
        for error in report.errors:
            self._monitor.record_error(JOB_MAINTENANCE, error)
        return report

    def _worker(self) -> None:
        while not self._stop.is_set():
            self.run_once()
            self._monitor.record_tick(JOB_MAINTENANCE)
            self._stop.wait(max(self._interval.total_seconds(), 60.0))

    def start(self) -> None:
        if self.running:
            return
        self._monitor.set_job_enabled(JOB_MAINTENANCE, True)
        self._stop.clear()
        self._thread = threading.Thread(target=self._worker, daemon=True)
        self._thread.start()
        LOGGER.info("Database maintenance scheduled every %s", self._interval)

    def stop(self) -> None:
        self._stop.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5)
        self._thread = None
