"""Pydantic schemas for the school resources."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from .common import DataResponse, PaginatedResponse


class SchoolSummary(BaseModel):
    """School row returned by the list endpoint."""

    school_id: int
    school_code: str
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    total_students: int = 0
    total_teachers: int = 0
    status: str
    established_year: Optional[int] = None
    facilities: Optional[Any] = None
    district_name: str
    block_name: str

    model_config = ConfigDict(from_attributes=True)


class SchoolDetail(SchoolSummary):
    """Full school record with live counters."""

    block_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    active_students: int = 0
    active_teachers: int = 0


class SchoolListResponse(PaginatedResponse[SchoolSummary]):
    """Paginated school listing."""

    pass


class SchoolDetailResponse(DataResponse[SchoolDetail]):
    pass
