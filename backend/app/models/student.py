"""SQLAlchemy model definitions for students."""

from __future__ import annotations

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base
from .school import ACTIVE_STATUS


class Student(Base):
    """Represents a student enrolled in a school."""

    __tablename__ = "students"

    student_id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(
        Integer,
        ForeignKey("schools.school_id", onupdate="CASCADE"),
        nullable=False,
    )
    admission_no = Column(String(30), nullable=False)
    roll_no = Column(Integer, nullable=True)
    first_name = Column(String(60), nullable=False)
    last_name = Column(String(60), nullable=False)
    gender = Column(String(10), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    class_number = Column(Integer, nullable=False)
    section = Column(String(5), nullable=True)
    category = Column(String(20), nullable=True)
    guardian_name = Column(String(120), nullable=True)
    guardian_phone = Column(String(20), nullable=True)
    status = Column(String(20), nullable=False, default=ACTIVE_STATUS, server_default=ACTIVE_STATUS)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    school = relationship("School", back_populates="students")
    attendance = relationship("StudentAttendance", back_populates="student")
    exam_results = relationship("ExamResult", back_populates="student")
    fee_payments = relationship("FeePayment", back_populates="student")


# Not unique: duplicates are cleaned up by the weekly maintenance routine.
Index("students_admission_school_idx", Student.admission_no, Student.school_id)
Index("students_school_class_idx", Student.school_id, Student.class_number, Student.section)
Index("students_name_idx", Student.last_name, Student.first_name)
