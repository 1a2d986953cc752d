"""SQLAlchemy model definitions for teaching staff."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import relationship

from ..database import Base
from .school import ACTIVE_STATUS


class Teacher(Base):
    """Represents a teacher appointed to a school."""

    __tablename__ = "teachers"

    teacher_id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(
        Integer,
        ForeignKey("schools.school_id", onupdate="CASCADE"),
        nullable=False,
    )
    employee_code = Column(String(30), nullable=False, unique=True)
    first_name = Column(String(60), nullable=False)
    last_name = Column(String(60), nullable=False)
    subject = Column(String(60), nullable=True)
    phone = Column(String(20), nullable=True)
    status = Column(String(20), nullable=False, default=ACTIVE_STATUS, server_default=ACTIVE_STATUS)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    school = relationship("School", back_populates="teachers")


Index("teachers_school_status_idx", Teacher.school_id, Teacher.status)
