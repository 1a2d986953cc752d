"""SQLAlchemy model definitions for student fee payments."""

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


class FeePayment(Base):
    """A fee payment received from a student's guardian."""

    __tablename__ = "fee_payments"

    payment_id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(
        Integer,
        ForeignKey("students.student_id", ondelete="CASCADE"),
        nullable=False,
    )
    amount = Column(Numeric(10, 2), nullable=False)
    paid_on = Column(Date, nullable=False)
    method = Column(String(30), nullable=True)
    receipt_no = Column(String(40), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    student = relationship("Student", back_populates="fee_payments")


Index("fee_payments_student_date_idx", FeePayment.student_id, FeePayment.paid_on)
