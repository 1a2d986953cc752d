"""SQLAlchemy models for examinations and their results."""

from __future__ import annotations

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base


class Examination(Base):
    """An examination held for a class."""

    __tablename__ = "examinations"

    exam_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    class_number = Column(Integer, nullable=True)
    exam_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    results = relationship("ExamResult", back_populates="examination")


class ExamResult(Base):
    __tablename__ = "exam_results"

    result_id = Column(Integer, primary_key=True, autoincrement=True)
    exam_id = Column(
        Integer,
        ForeignKey("examinations.exam_id", ondelete="CASCADE"),
        nullable=False,
    )
    student_id = Column(
        Integer,
        ForeignKey("students.student_id", ondelete="CASCADE"),
        nullable=False,
    )
    subject = Column(String(60), nullable=False)
    marks_obtained = Column(Numeric(5, 2), nullable=False)
    max_marks = Column(Numeric(5, 2), nullable=False, default=100)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    examination = relationship("Examination", back_populates="results")
    student = relationship("Student", back_populates="exam_results")


Index("exam_results_exam_student_idx", ExamResult.exam_id, ExamResult.student_id)
