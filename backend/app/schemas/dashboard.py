"""Schemas for the dashboard statistics and KPI payloads."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from .common import DataResponse


class DashboardTotals(BaseModel):
    schools: int = Field(..., ge=0)
    students: int = Field(..., ge=0)
    teachers: int = Field(..., ge=0)
    districts: int = Field(..., ge=0)


class AttendanceBreakdown(BaseModel):
    total_marked: int = Field(default=0, ge=0)
    present: int = Field(default=0, ge=0)
    absent: int = Field(default=0, ge=0)


class DistrictSummary(BaseModel):
    district_name: str
    schools: int = Field(..., ge=0)
    students: int = Field(..., ge=0)


class DashboardStats(BaseModel):
    """System-wide totals shown in the dashboard KPI cards."""

    totals: DashboardTotals
    today_attendance: AttendanceBreakdown
    recent_enrollments: int = Field(..., ge=0)
    district_breakdown: List[DistrictSummary] = Field(default_factory=list)
    last_updated: datetime


class EnrollmentPoint(BaseModel):
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    enrollments: int = Field(..., ge=0)


class SchoolMetrics(BaseModel):
    avg_students_per_school: float = 0.0
    avg_teachers_per_school: float = 0.0
    large_schools: int = Field(default=0, ge=0)


class DashboardKpis(BaseModel):
    """Trend data used by the dashboard charts."""

    enrollment_trend: List[EnrollmentPoint] = Field(default_factory=list)
    attendance_rate: float = Field(..., ge=0, le=100)
    school_metrics: SchoolMetrics
    generated_at: datetime


class DashboardStatsResponse(DataResponse[DashboardStats]):
    pass


class DashboardKpisResponse(DataResponse[DashboardKpis]):
    pass
