"""Business logic for schools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Query, Session

from .. import models
from .listing import ListQuery, PaginatedResult, apply_search, paginate

DEFAULT_SCHOOL_LIMIT = 20


@dataclass(frozen=True)
class SchoolFilters:
    """Optional filters accepted by the school listing."""

    district_id: Optional[int] = None
    block_id: Optional[int] = None
    status: str = models.ACTIVE_STATUS
    search: Optional[str] = None


def _school_payload(school: models.School, district_name: str, block_name: str) -> dict[str, Any]:
    return {
        "school_id": school.school_id,
        "block_id": school.block_id,
        "school_code": school.school_code,
        "name": school.name,
        "address": school.address,
        "phone": school.phone,
        "email": school.email,
        "total_students": school.total_students or 0,
        "total_teachers": school.total_teachers or 0,
        "status": school.status,
        "established_year": school.established_year,
        "facilities": school.facilities,
        "created_at": school.created_at,
        "updated_at": school.updated_at,
        "district_name": district_name,
        "block_name": block_name,
    }


class SchoolService:
    """Read operations for the school directory."""

    @staticmethod
    def _base_query(db: Session, *extra_columns: Any) -> Query:
        return (
            db.query(
                models.School,
                models.District.name.label("district_name"),
                models.Block.name.label("block_name"),
                *extra_columns,
            )
            .join(models.Block, models.Block.block_id == models.School.block_id)
            .join(models.District, models.District.district_id == models.Block.district_id)
        )

    @staticmethod
    def build_list_query(db: Session, filters: SchoolFilters) -> Query:
        """Return the filtered (unordered, unpaginated) school query."""

        query = SchoolService._base_query(db).filter(models.School.status == filters.status)

        if filters.district_id is not None:
            query = query.filter(models.District.district_id == filters.district_id)
        if filters.block_id is not None:
            query = query.filter(models.Block.block_id == filters.block_id)

        return apply_search(
            query,
            filters.search,
            models.School.name,
            models.School.school_code,
        )

    @staticmethod
    def list_schools(
        db: Session,
        filters: SchoolFilters,
        list_query: ListQuery,
    ) -> PaginatedResult[dict[str, Any]]:
        query = SchoolService.build_list_query(db, filters)
        result = paginate(
            query,
            list_query,
            order_by=(models.School.name, models.School.school_id),
        )
        result.items = [
            _school_payload(school, district_name, block_name)
            for school, district_name, block_name in result.items
        ]
        return result

    @staticmethod
    def get_school(db: Session, school_id: int) -> Optional[dict[str, Any]]:
        active_students = (
            select(func.count(models.Student.student_id))
            .where(
                models.Student.school_id == models.School.school_id,
                models.Student.status == models.ACTIVE_STATUS,
            )
            .correlate(models.School)
            .scalar_subquery()
            .label("active_students")
        )
        active_teachers = (
            select(func.count(models.Teacher.teacher_id))
            .where(
                models.Teacher.school_id == models.School.school_id,
                models.Teacher.status == models.ACTIVE_STATUS,
            )
            .correlate(models.School)
            .scalar_subquery()
            .label("active_teachers")
        )
        row = (
            SchoolService._base_query(db, active_students, active_teachers)
            .filter(models.School.school_id == school_id)
            .first()
        )
        if row is None:
            return None

        school, district_name, block_name, students, teachers = row
        payload = _school_payload(school, district_name, block_name)
        payload["active_students"] = int(students or 0)
        payload["active_teachers"] = int(teachers or 0)
        return payload
