"""SQLAlchemy models for daily student attendance."""

from __future__ import annotations

import enum

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base


class AttendanceStatus(str, enum.Enum):
    """Attendance marks recorded for a student on a given day."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    LEAVE = "Leave"


ATTENDANCE_STATUS_ENUM = Enum(
    AttendanceStatus,
    name="attendance_status_enum",
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    native_enum=False,
    length=10,
)


class StudentAttendance(Base):
    """One attendance mark per student and day.

    On PostgreSQL the table may be range partitioned by month; the partitions
    are created and retired by the maintenance routines.
    """

    __tablename__ = "student_attendance"

    attendance_id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(
        Integer,
        ForeignKey("students.student_id", ondelete="CASCADE"),
        nullable=False,
    )
    attendance_date = Column(Date, nullable=False)
    status = Column(ATTENDANCE_STATUS_ENUM, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    student = relationship("Student", back_populates="attendance")


class StudentAttendanceArchive(Base):
    """Attendance rows moved out of the live table by the archiving routine."""

    __tablename__ = "student_attendance_archive"

    attendance_id = Column(Integer, primary_key=True, autoincrement=False)
    student_id = Column(Integer, nullable=False)
    attendance_date = Column(Date, nullable=False)
    status = Column(ATTENDANCE_STATUS_ENUM, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


Index("student_attendance_student_date_idx", StudentAttendance.student_id, StudentAttendance.attendance_date)
Index("student_attendance_date_idx", StudentAttendance.attendance_date)
