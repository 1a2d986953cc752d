"""Business logic for students."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from sqlalchemy.orm import Query, Session

from .. import models
from .listing import ListQuery, PaginatedResult, apply_search, paginate

DEFAULT_STUDENT_LIMIT = 50
RECENT_ATTENDANCE_LIMIT = 10


@dataclass(frozen=True)
class StudentFilters:
    """Optional filters accepted by the student listing."""

    school_id: Optional[int] = None
    class_number: Optional[int] = None
    section: Optional[str] = None
    status: str = models.ACTIVE_STATUS
    search: Optional[str] = None


def age_on(date_of_birth: Optional[date], today: date) -> Optional[int]:
    """Return completed years between ``date_of_birth`` and ``today``."""

    if date_of_birth is None:
        return None
    had_birthday = (today.month, today.day) >= (date_of_birth.month, date_of_birth.day)
    return today.year - date_of_birth.year - (0 if had_birthday else 1)


def _student_payload(student: models.Student, school_name: str, district_name: str) -> dict[str, Any]:
    return {
        "student_id": student.student_id,
        "school_id": student.school_id,
        "admission_no": student.admission_no,
        "roll_no": student.roll_no,
        "first_name": student.first_name,
        "last_name": student.last_name,
        "gender": student.gender,
        "date_of_birth": student.date_of_birth,
        "class_number": student.class_number,
        "section": student.section,
        "category": student.category,
        "guardian_name": student.guardian_name,
        "guardian_phone": student.guardian_phone,
        "status": student.status,
        "created_at": student.created_at,
        "updated_at": student.updated_at,
        "school_name": school_name,
        "district_name": district_name,
    }


class StudentService:
    """Read operations for the student register."""

    @staticmethod
    def _base_query(db: Session) -> Query:
        return (
            db.query(
                models.Student,
                models.School.name.label("school_name"),
                models.District.name.label("district_name"),
            )
            .join(models.School, models.School.school_id == models.Student.school_id)
            .join(models.Block, models.Block.block_id == models.School.block_id)
            .join(models.District, models.District.district_id == models.Block.district_id)
        )

    @staticmethod
    def build_list_query(db: Session, filters: StudentFilters) -> Query:
        """Return the filtered (unordered, unpaginated) student query."""

        query = StudentService._base_query(db).filter(models.Student.status == filters.status)

        if filters.school_id is not None:
            query = query.filter(models.Student.school_id == filters.school_id)
        if filters.class_number is not None:
            query = query.filter(models.Student.class_number == filters.class_number)
        if filters.section:
            query = query.filter(models.Student.section == filters.section)

        full_name = models.Student.first_name + " " + models.Student.last_name
        return apply_search(query, filters.search, full_name, models.Student.admission_no)

    @staticmethod
    def list_students(
        db: Session,
        filters: StudentFilters,
        list_query: ListQuery,
    ) -> PaginatedResult[dict[str, Any]]:
        query = StudentService.build_list_query(db, filters)
        result = paginate(
            query,
            list_query,
            order_by=(
                models.Student.last_name,
                models.Student.first_name,
                models.Student.student_id,
            ),
        )
        result.items = [
            _student_payload(student, school_name, district_name)
            for student, school_name, district_name in result.items
        ]
        return result

    @staticmethod
    def get_student(
        db: Session, student_id: int, *, today: Optional[date] = None
    ) -> Optional[dict[str, Any]]:
        row = (
            StudentService._base_query(db)
            .filter(models.Student.student_id == student_id)
            .first()
        )
        if row is None:
            return None

        student, school_name, district_name = row
        payload = _student_payload(student, school_name, district_name)
        payload["age"] = age_on(student.date_of_birth, today or date.today())
        payload["recent_attendance"] = StudentService.recent_attendance(db, student_id)
        return payload

    @staticmethod
    def recent_attendance(
        db: Session, student_id: int, *, limit: int = RECENT_ATTENDANCE_LIMIT
    ) -> list[models.StudentAttendance]:
        return (
            db.query(models.StudentAttendance)
            .filter(models.StudentAttendance.student_id == student_id)
            .order_by(models.StudentAttendance.attendance_date.desc())
            .limit(limit)
            .all()
        )
