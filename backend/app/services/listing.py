"""Helpers shared by the paginated, filtered list endpoints.

Every list endpoint builds one filtered query and derives both statements
from it: the count runs without ordering, the data query adds the ordering,
offset and limit. Both therefore share the exact same predicates.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, Optional, Sequence, TypeVar

from sqlalchemy import func, or_
from sqlalchemy.orm import Query

T = TypeVar("T")

DEFAULT_PAGE = 1
MAX_LIMIT = 200
# Keeps OFFSET within a signed 64-bit integer for every allowed limit.
MAX_PAGE = (2**63 - 1) // MAX_LIMIT


def parse_positive_int(raw: Any, default: int) -> int:
    """Parse a query string integer, falling back to ``default`` when malformed."""

    if raw is None:
        return default
    if isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class ListQuery:
    """Page selection for a list request, already clamped to sane bounds."""

    page: int = DEFAULT_PAGE
    limit: int = 20

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be at least 1")
        if not 1 <= self.limit <= MAX_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_LIMIT}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_params(cls, raw_page: Any, raw_limit: Any, *, default_limit: int) -> "ListQuery":
        page = parse_positive_int(raw_page, DEFAULT_PAGE)
        limit = parse_positive_int(raw_limit, default_limit)
        return cls(page=min(max(page, 1), MAX_PAGE), limit=min(max(limit, 1), MAX_LIMIT))


@dataclass
class PaginatedResult(Generic[T]):
    """One page of rows plus the total number of matching rows."""

    items: list[T]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    def envelope(self) -> dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "pages": self.pages,
        }


def search_pattern(search: str) -> str:
    return f"%{search.lower()}%"


def apply_search(query: Query, search: Optional[str], *columns: Any) -> Query:
    """Restrict ``query`` to rows where any of ``columns`` contains ``search`` (case-insensitive)."""

    if not search:
        return query
    pattern = search_pattern(search)
    return query.filter(or_(*(func.lower(column).like(pattern) for column in columns)))


def paginate(query: Query, list_query: ListQuery, *, order_by: Sequence[Any]) -> PaginatedResult:
    """Run the count and the data statement for ``query``.

    The two statements are not wrapped in a transaction, so concurrent
    writes may make ``total`` and ``items`` disagree slightly.
    """

    total = query.order_by(None).count()
    items = (
        query.order_by(*order_by)
        .offset(list_query.offset)
        .limit(list_query.limit)
        .all()
    )
    return PaginatedResult(
        items=list(items),
        page=list_query.page,
        limit=list_query.limit,
        total=total,
    )
