"""SQLAlchemy models for the administrative hierarchy (districts and blocks)."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import relationship

from ..database import Base


class District(Base):
    """Represents a revenue district grouping several blocks."""

    __tablename__ = "districts"

    district_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    code = Column(String(20), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    blocks = relationship("Block", back_populates="district")


class Block(Base):
    """Represents an education block inside a district."""

    __tablename__ = "blocks"

    block_id = Column(Integer, primary_key=True, autoincrement=True)
    district_id = Column(
        Integer,
        ForeignKey("districts.district_id", onupdate="CASCADE"),
        nullable=False,
    )
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    district = relationship("District", back_populates="blocks")
    schools = relationship("School", back_populates="block")


Index("blocks_district_idx", Block.district_id)
