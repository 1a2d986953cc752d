"""Pydantic schemas for the student resources."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.attendance import AttendanceStatus
from .common import DataResponse, PaginatedResponse


class StudentSummary(BaseModel):
    """Student row returned by the list endpoint."""

    student_id: int
    admission_no: str
    roll_no: Optional[int] = None
    first_name: str
    last_name: str
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    class_number: int
    section: Optional[str] = None
    category: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    status: str
    school_name: str
    district_name: str

    model_config = ConfigDict(from_attributes=True)


class AttendanceRecord(BaseModel):
    attendance_date: date
    status: AttendanceStatus

    model_config = ConfigDict(from_attributes=True)


class StudentDetail(StudentSummary):
    """Full student record including derived age and recent attendance."""

    school_id: int
    age: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    recent_attendance: list[AttendanceRecord] = Field(default_factory=list)


class StudentListResponse(PaginatedResponse[StudentSummary]):
    """Paginated student listing."""

    pass


class StudentDetailResponse(DataResponse[StudentDetail]):
    pass
