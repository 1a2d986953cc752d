"""Expose SQLAlchemy models for convenient imports."""

from .attendance import (
    AttendanceStatus,
    StudentAttendance,
    StudentAttendanceArchive,
)
from .district import Block, District
from .examination import Examination, ExamResult
from .fee_payment import FeePayment
from .school import ACTIVE_STATUS, INACTIVE_STATUS, School
from .student import Student
from .teacher import Teacher
from .user import User

__all__ = [
    "ACTIVE_STATUS",
    "INACTIVE_STATUS",
    "AttendanceStatus",
    "Block",
    "District",
    "Examination",
    "ExamResult",
    "FeePayment",
    "School",
    "Student",
    "StudentAttendance",
    "StudentAttendanceArchive",
    "Teacher",
    "User",
]
