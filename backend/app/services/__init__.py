"""Service layer encapsulating business logic for API routers."""

from .dashboard import DashboardService
from .listing import ListQuery, PaginatedResult
from .maintenance import MaintenanceReport, MaintenanceScheduler, MaintenanceService
from .scheduler_monitor import SchedulerMonitor
from .schools import DEFAULT_SCHOOL_LIMIT, SchoolFilters, SchoolService
from .students import DEFAULT_STUDENT_LIMIT, StudentFilters, StudentService

__all__ = [
    "DEFAULT_SCHOOL_LIMIT",
    "DEFAULT_STUDENT_LIMIT",
    "DashboardService",
    "ListQuery",
    "MaintenanceReport",
    "MaintenanceScheduler",
    "MaintenanceService",
    "PaginatedResult",
    "SchedulerMonitor",
    "SchoolFilters",
    "SchoolService",
    "StudentFilters",
    "StudentService",
]
