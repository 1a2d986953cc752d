"""Expose Pydantic schemas for convenient imports."""

from .common import DataResponse, ErrorResponse, PaginatedResponse, Pagination
from .dashboard import (
    AttendanceBreakdown,
    DashboardKpis,
    DashboardKpisResponse,
    DashboardStats,
    DashboardStatsResponse,
    DashboardTotals,
    DistrictSummary,
    EnrollmentPoint,
    SchoolMetrics,
)
from .health import HealthResponse, SchedulerJobHealth
from .school import SchoolDetail, SchoolDetailResponse, SchoolListResponse, SchoolSummary
from .student import (
    AttendanceRecord,
    StudentDetail,
    StudentDetailResponse,
    StudentListResponse,
    StudentSummary,
)

__all__ = [
    "AttendanceBreakdown",
    "AttendanceRecord",
    "DashboardKpis",
    "DashboardKpisResponse",
    "DashboardStats",
    "DashboardStatsResponse",
    "DashboardTotals",
    "DataResponse",
    "DistrictSummary",
    "EnrollmentPoint",
    "ErrorResponse",
    "HealthResponse",
    "PaginatedResponse",
    "Pagination",
    "SchedulerJobHealth",
    "SchoolDetail",
    "SchoolDetailResponse",
    "SchoolListResponse",
    "SchoolMetrics",
    "SchoolSummary",
    "StudentDetail",
    "StudentDetailResponse",
    "StudentListResponse",
    "StudentSummary",
]
