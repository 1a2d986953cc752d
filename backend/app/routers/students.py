"""Router exposing the student register."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..services import DEFAULT_STUDENT_LIMIT, ListQuery, StudentFilters, StudentService

LOGGER = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=schemas.StudentListResponse)
def list_students(
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    limit: Optional[str] = Query(None, description="Students per page (at most 200)"),
    school_id: Optional[int] = Query(None, ge=1, description="Filter by school"),
    class_number: Optional[int] = Query(None, ge=1, description="Filter by class"),
    section: Optional[str] = Query(None, description="Filter by section"),
    status_filter: Optional[str] = Query(
        None, alias="status", description="Filter by student status (defaults to Active)"
    ),
    search: Optional[str] = Query(
        None, description="Case-insensitive search by full name or admission number"
    ),
    db: Session = Depends(get_db),
) -> schemas.StudentListResponse:
    """Return students with pagination and optional filters."""
    list_query = ListQuery.from_params(page, limit, default_limit=DEFAULT_STUDENT_LIMIT)
    filters = StudentFilters(
        school_id=school_id,
        class_number=class_number,
        section=section.strip() if section else None,
        status=status_filter or models.ACTIVE_STATUS,
        search=search.strip() if search else None,
    )

    try:
        result = StudentService.list_students(db, filters, list_query)
    except SQLAlchemyError as exc:
        LOGGER.exception("Students API error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch students",
        ) from exc
    return schemas.StudentListResponse(data=result.items, pagination=result.envelope())


@router.get("/{student_id}", response_model=schemas.StudentDetailResponse)
def get_student(student_id: int, db: Session = Depends(get_db)) -> schemas.StudentDetailResponse:
    """Retrieve a student with age and the last ten attendance marks."""
    try:
        student = StudentService.get_student(db, student_id)
    except SQLAlchemyError as exc:
        LOGGER.exception("Student detail error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch student details",
        ) from exc
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return schemas.StudentDetailResponse(data=student)
