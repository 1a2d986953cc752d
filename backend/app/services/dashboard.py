"""Aggregated statistics used by the dashboard views."""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from sqlalchemy import and_, case, distinct, func
from sqlalchemy.orm import Session

from .. import models

RECENT_ENROLLMENT_DAYS = 30
ATTENDANCE_RATE_DAYS = 30
ENROLLMENT_TREND_MONTHS = 6
LARGE_SCHOOL_THRESHOLD = 500


def months_ago(reference: date, months: int) -> date:
    """Return ``reference`` shifted back by ``months``, clamping the day to the target month."""

    month_index = reference.year * 12 + (reference.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(reference.day, monthrange(year, month)[1])
    return date(year, month, day)


def _start_of(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _month_bucket(db: Session, column: Any) -> Any:
    """Return a ``YYYY-MM`` expression for ``column`` on the bound dialect."""

    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return func.to_char(func.date_trunc("month", column), "YYYY-MM")
    if dialect == "sqlite":
        return func.strftime("%Y-%m", column)
    return func.date_format(column, "%Y-%m")


def _as_int(value: Any) -> int:
    return int(value or 0)


def _as_float(value: Any) -> float:
    return round(float(value or 0), 2)


class DashboardService:
    """Provides the system-wide statistics and KPIs consumed by the dashboard."""

    @staticmethod
    def totals(db: Session) -> dict[str, int]:
        return {
            "schools": db.query(models.School)
            .filter(models.School.status == models.ACTIVE_STATUS)
            .count(),
            "students": db.query(models.Student)
            .filter(models.Student.status == models.ACTIVE_STATUS)
            .count(),
            "teachers": db.query(models.Teacher)
            .filter(models.Teacher.status == models.ACTIVE_STATUS)
            .count(),
            "districts": db.query(models.District).count(),
        }

    @staticmethod
    def attendance_for_day(db: Session, day: date) -> dict[str, int]:
        status = models.StudentAttendance.status
        total, present, absent = (
            db.query(
                func.count(models.StudentAttendance.attendance_id),
                func.sum(case((status == models.AttendanceStatus.PRESENT, 1), else_=0)),
                func.sum(case((status == models.AttendanceStatus.ABSENT, 1), else_=0)),
            )
            .filter(models.StudentAttendance.attendance_date == day)
            .one()
        )
        return {
            "total_marked": _as_int(total),
            "present": _as_int(present),
            "absent": _as_int(absent),
        }

    @staticmethod
    def recent_enrollments(db: Session, today: date) -> int:
        cutoff = _start_of(today - timedelta(days=RECENT_ENROLLMENT_DAYS))
        return db.query(models.Student).filter(models.Student.created_at >= cutoff).count()

    @staticmethod
    def district_breakdown(db: Session) -> list[dict[str, Any]]:
        schools = func.count(distinct(models.School.school_id)).label("schools")
        students = func.count(distinct(models.Student.student_id)).label("students")
        rows = (
            db.query(models.District.name, schools, students)
            .outerjoin(models.Block, models.Block.district_id == models.District.district_id)
            .outerjoin(
                models.School,
                and_(
                    models.School.block_id == models.Block.block_id,
                    models.School.status == models.ACTIVE_STATUS,
                ),
            )
            .outerjoin(
                models.Student,
                and_(
                    models.Student.school_id == models.School.school_id,
                    models.Student.status == models.ACTIVE_STATUS,
                ),
            )
            .group_by(models.District.district_id, models.District.name)
            .order_by(students.desc(), models.District.name)
            .all()
        )
        return [
            {"district_name": name, "schools": _as_int(school_count), "students": _as_int(student_count)}
            for name, school_count, student_count in rows
        ]

    @staticmethod
    def stats(db: Session) -> dict[str, Any]:
        today = date.today()
        return {
            "totals": DashboardService.totals(db),
            "today_attendance": DashboardService.attendance_for_day(db, today),
            "recent_enrollments": DashboardService.recent_enrollments(db, today),
            "district_breakdown": DashboardService.district_breakdown(db),
            "last_updated": datetime.now(timezone.utc),
        }

    @staticmethod
    def enrollment_trend(db: Session, today: date) -> list[dict[str, Any]]:
        cutoff = _start_of(months_ago(today, ENROLLMENT_TREND_MONTHS))
        month = _month_bucket(db, models.Student.created_at).label("month")
        rows = (
            db.query(month, func.count(models.Student.student_id))
            .filter(models.Student.created_at >= cutoff)
            .group_by(month)
            .order_by(month)
            .all()
        )
        return [{"month": bucket, "enrollments": _as_int(count)} for bucket, count in rows]

    @staticmethod
    def attendance_rate(db: Session, today: date) -> float:
        """Percentage of ``Present`` marks over the last 30 days, 0 when nothing was marked."""

        cutoff = today - timedelta(days=ATTENDANCE_RATE_DAYS)
        status = models.StudentAttendance.status
        total, present = (
            db.query(
                func.count(models.StudentAttendance.attendance_id),
                func.sum(case((status == models.AttendanceStatus.PRESENT, 1), else_=0)),
            )
            .filter(models.StudentAttendance.attendance_date >= cutoff)
            .one()
        )
        if not total:
            return 0.0
        return round(_as_int(present) * 100.0 / total, 2)

    @staticmethod
    def school_metrics(db: Session) -> dict[str, Any]:
        avg_students, avg_teachers, large_schools = (
            db.query(
                func.avg(models.School.total_students),
                func.avg(models.School.total_teachers),
                func.sum(
                    case((models.School.total_students > LARGE_SCHOOL_THRESHOLD, 1), else_=0)
                ),
            )
            .filter(models.School.status == models.ACTIVE_STATUS)
            .one()
        )
        return {
            "avg_students_per_school": _as_float(avg_students),
            "avg_teachers_per_school": _as_float(avg_teachers),
            "large_schools": _as_int(large_schools),
        }

    @staticmethod
    def kpis(db: Session) -> dict[str, Any]:
        today = date.today()
        return {
            "enrollment_trend": DashboardService.enrollment_trend(db, today),
            "attendance_rate": DashboardService.attendance_rate(db, today),
            "school_metrics": DashboardService.school_metrics(db),
            "generated_at": datetime.now(timezone.utc),
        }
