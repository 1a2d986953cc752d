"""Router exposing aggregated dashboard statistics."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import DashboardService

LOGGER = logging.getLogger(__name__)

router = APIRouter()


@router.get("/stats", response_model=schemas.DashboardStatsResponse)
def get_dashboard_stats(db: Session = Depends(get_db)) -> schemas.DashboardStatsResponse:
    """Return totals, today's attendance, recent enrollments and the district breakdown."""
    try:
        payload = DashboardService.stats(db)
    except SQLAlchemyError as exc:
        LOGGER.exception("Dashboard stats error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch dashboard statistics",
        ) from exc
    return schemas.DashboardStatsResponse(data=payload)


@router.get("/kpis", response_model=schemas.DashboardKpisResponse)
def get_dashboard_kpis(db: Session = Depends(get_db)) -> schemas.DashboardKpisResponse:
    try:
        payload = DashboardService.kpis(db)
    except SQLAlchemyError as exc:
        LOGGER.exception("KPIs error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch KPIs",
        ) from exc
    return schemas.DashboardKpisResponse(data=payload)
