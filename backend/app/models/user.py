"""SQLAlchemy model definitions for portal users."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func, true

from ..database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(60), nullable=False, unique=True)
    email = Column(String(120), nullable=True)
    role = Column(String(30), nullable=False, default="viewer", server_default="viewer")
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
