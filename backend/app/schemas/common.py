"""Shared schema definitions."""

from __future__ import annotations

from typing import Any, Generic, Optional, Sequence, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Pagination(BaseModel):
    """Pagination envelope returned alongside list results."""

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    pages: int = Field(..., ge=0)


class PaginatedResponse(BaseModel, Generic[T]):
    """Standard shape for paginated listings."""

    success: bool = True
    data: Sequence[T]
    pagination: Pagination


class DataResponse(BaseModel, Generic[T]):
    """Standard shape for single payload responses."""

    success: bool = True
    data: T


class ErrorResponse(BaseModel):
    """Body returned for every handled error."""

    success: bool = False
    error: str
    message: Optional[str] = None
    details: Optional[Any] = None
