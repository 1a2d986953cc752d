"""Router exposing the school directory."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..services import DEFAULT_SCHOOL_LIMIT, ListQuery, SchoolFilters, SchoolService

LOGGER = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=schemas.SchoolListResponse)
def list_schools(
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    limit: Optional[str] = Query(None, description="Schools per page (at most 200)"),
    district_id: Optional[int] = Query(None, ge=1, description="Filter by district"),
    block_id: Optional[int] = Query(None, ge=1, description="Filter by block"),
    status_filter: Optional[str] = Query(
        None, alias="status", description="Filter by school status (defaults to Active)"
    ),
    search: Optional[str] = Query(None, description="Case-insensitive search by name or school code"),
    db: Session = Depends(get_db),
) -> schemas.SchoolListResponse:
    """Return schools with pagination and optional filters."""
    list_query = ListQuery.from_params(page, limit, default_limit=DEFAULT_SCHOOL_LIMIT)
    filters = SchoolFilters(
        district_id=district_id,
        block_id=block_id,
        status=status_filter or models.ACTIVE_STATUS,
        search=search.strip() if search else None,
    )

    try:
        result = SchoolService.list_schools(db, filters, list_query)
    except SQLAlchemyError as exc:
        LOGGER.exception("Schools API error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch schools",
        ) from exc
    return schemas.SchoolListResponse(data=result.items, pagination=result.envelope())


@router.get("/{school_id}", response_model=schemas.SchoolDetailResponse)
def get_school(school_id: int, db: Session = Depends(get_db)) -> schemas.SchoolDetailResponse:
    """Retrieve a single school with its active student and teacher counts."""
    try:
        school = SchoolService.get_school(db, school_id)
    except SQLAlchemyError as exc:
        LOGGER.exception("School detail error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch school details",
        ) from exc
    if school is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="School not found")
    return schemas.SchoolDetailResponse(data=school)
