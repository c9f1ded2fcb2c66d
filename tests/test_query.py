"""QuerySpec compilation to SQL and in-process evaluation"""
from datetime import datetime, timedelta, timezone

import pytest

from lib.models import INFLUENCER_COLUMNS
from lib.query import (
    QuerySpec,
    apply_to_rows,
    compile_count,
    compile_select,
    escape_like,
    matches,
)

COLUMNS = ", ".join(INFLUENCER_COLUMNS)


def test_compile_select_full_listing_query():
    spec = (
        QuerySpec("influencers")
        .where_eq("status", "active")
        .where_any_ilike(["name", "email"], "priya")
        .page(2, 10)
        .order("created_at", descending=True)
    )

    sql, args = compile_select(spec)

    assert sql == (
        f"SELECT {COLUMNS} FROM influencers"
        " WHERE status = $1 AND (name ILIKE $2 OR email ILIKE $2)"
        " ORDER BY created_at DESC NULLS LAST"
        " OFFSET $3 LIMIT $4"
    )
    assert args == ["active", "%priya%", 10, 10]


def test_compile_select_first_page_has_no_offset():
    sql, args = compile_select(QuerySpec("influencers").page(1, 50))

    assert sql == f"SELECT {COLUMNS} FROM influencers LIMIT $1"
    assert args == [50]


def test_compile_count_ignores_pagination_and_order():
    spec = (
        QuerySpec("influencers")
        .where_any_ilike(["name", "email"], "foo")
        .page(3, 25)
        .order("created_at", descending=True)
        .with_count()
    )

    sql, args = compile_count(spec)

    assert sql == (
        "SELECT COUNT(*) FROM influencers WHERE (name ILIKE $1 OR email ILIKE $1)"
    )
    assert args == ["%foo%"]


def test_search_term_wildcards_are_escaped():
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"

    _, args = compile_select(QuerySpec("influencers").where_any_ilike(["name"], "a_b"))
    assert args == ["%a\\_b%"]


def test_unknown_column_is_rejected():
    spec = QuerySpec("influencers").where_eq("password; DROP TABLE x", 1)

    with pytest.raises(ValueError):
        compile_select(spec)


def test_unknown_order_column_is_rejected():
    with pytest.raises(ValueError):
        compile_select(QuerySpec("influencers").order("nope"))


def test_unknown_table_is_rejected():
    with pytest.raises(ValueError):
        compile_select(QuerySpec("users"))


def test_range_is_inclusive():
    spec = QuerySpec("influencers").range(10, 19)

    assert spec.offset == 10
    assert spec.limit == 10


def test_matches_eq_and_ilike():
    spec = (
        QuerySpec("influencers")
        .where_eq("status", "active")
        .where_any_ilike(["name", "email"], "PRI")
    )

    assert matches(spec, {"status": "active", "name": "Priya", "email": "p@x.in"})
    assert matches(spec, {"status": "active", "name": "Asha", "email": "priyanka@x.in"})
    assert not matches(spec, {"status": "inactive", "name": "Priya", "email": "p@x.in"})
    assert not matches(spec, {"status": "active", "name": "Asha", "email": "asha@x.in"})
    # NULL columns never match a search
    assert not matches(spec, {"status": "active", "name": None, "email": None})


def test_apply_to_rows_orders_pages_and_counts():
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    rows = [
        {"name": f"n{i}", "status": "active", "created_at": start + timedelta(days=i)}
        for i in range(7)
    ]
    rows.append({"name": "undated", "status": "active", "created_at": None})

    spec = QuerySpec("influencers").order("created_at", descending=True).with_count()

    page, count = apply_to_rows(spec.page(1, 3), rows)
    assert count == 8
    assert [r["name"] for r in page] == ["n6", "n5", "n4"]

    page, _ = apply_to_rows(spec.page(3, 3), rows)
    assert [r["name"] for r in page] == ["n0", "undated"]


def test_apply_to_rows_without_count():
    page, count = apply_to_rows(QuerySpec("influencers"), [{"name": "a"}])

    assert page == [{"name": "a"}]
    assert count is None
