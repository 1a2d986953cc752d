from __future__ import annotations

import pytest

from backend.app.services.listing import (
    MAX_LIMIT,
    MAX_PAGE,
    ListQuery,
    PaginatedResult,
    parse_positive_int,
    search_pattern,
)


@pytest.mark.parametrize(
    ("raw_page", "raw_limit", "expected"),
    [
        (None, None, (1, 20)),
        ("3", "10", (3, 10)),
        ("abc", "xyz", (1, 20)),
        ("0", "0", (1, 1)),
        ("-4", "-1", (1, 1)),
        ("2", "1000", (2, MAX_LIMIT)),
        (" 5 ", "200", (5, 200)),
        (str(10**19), "20", (MAX_PAGE, 20)),
    ],
)
def test_list_query_from_params_clamps_and_defaults(raw_page, raw_limit, expected):
    query = ListQuery.from_params(raw_page, raw_limit, default_limit=20)

    assert (query.page, query.limit) == expected


def test_list_query_offset():
    assert ListQuery(page=1, limit=20).offset == 0
    assert ListQuery(page=3, limit=50).offset == 100


def test_largest_page_offset_fits_a_64_bit_integer():
    query = ListQuery.from_params(str(10**30), str(MAX_LIMIT), default_limit=20)

    assert query.page == MAX_PAGE
    assert query.offset <= 2**63 - 1


def test_list_query_rejects_out_of_range_values():
    with pytest.raises(ValueError):
        ListQuery(page=0, limit=20)
    with pytest.raises(ValueError):
        ListQuery(page=1, limit=MAX_LIMIT + 1)


def test_parse_positive_int_ignores_booleans_and_garbage():
    assert parse_positive_int(True, 7) == 7
    assert parse_positive_int("1.5", 7) == 7
    assert parse_positive_int(12, 7) == 12


@pytest.mark.parametrize(
    ("total", "limit", "pages"),
    [(0, 20, 0), (1, 20, 1), (20, 20, 1), (21, 20, 2), (45, 20, 3)],
)
def test_paginated_result_pages(total: int, limit: int, pages: int):
    result = PaginatedResult(items=[], page=1, limit=limit, total=total)

    assert result.pages == pages
    assert result.envelope() == {"page": 1, "limit": limit, "total": total, "pages": pages}


def test_search_pattern_is_lower_cased_substring():
    assert search_pattern("Bhubaneswar") == "%bhubaneswar%"
