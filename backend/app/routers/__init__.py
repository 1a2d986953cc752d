"""Routers package."""

from .dashboard import router as dashboard_router
from .schools import router as schools_router
from .students import router as students_router

__all__ = [
    "dashboard_router",
    "schools_router",
    "students_router",
]
