"""SQLAlchemy model definitions for schools."""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base

ACTIVE_STATUS = "Active"
INACTIVE_STATUS = "Inactive"


class School(Base):
    """Represents a school registered in a block."""

    __tablename__ = "schools"
    __table_args__ = (
        CheckConstraint("total_students >= 0", name="ck_schools_total_students_non_negative"),
        CheckConstraint("total_teachers >= 0", name="ck_schools_total_teachers_non_negative"),
    )

    school_id = Column(Integer, primary_key=True, autoincrement=True)
    block_id = Column(
        Integer,
        ForeignKey("blocks.block_id", onupdate="CASCADE"),
        nullable=False,
    )
    school_code = Column(String(20), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    address = Column(Text, nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(120), nullable=True)
    total_students = Column(Integer, nullable=False, default=0, server_default="0")
    total_teachers = Column(Integer, nullable=False, default=0, server_default="0")
    status = Column(String(20), nullable=False, default=ACTIVE_STATUS, server_default=ACTIVE_STATUS)
    established_year = Column(Integer, nullable=True)
    facilities = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    block = relationship("Block", back_populates="schools")
    students = relationship("Student", back_populates="school")
    teachers = relationship("Teacher", back_populates="school")


Index("schools_block_status_idx", School.block_id, School.status)
Index("schools_name_idx", School.name)
