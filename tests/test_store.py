"""Storage clients: in-memory semantics and Postgres statement wiring"""
from contextlib import asynccontextmanager

import pytest

from lib.models import INFLUENCER_COLUMNS
from lib.query import QuerySpec
from lib.store import (
    MemoryInfluencerStore,
    PostgresInfluencerStore,
    StorageError,
    build_store,
)


async def test_memory_insert_applies_column_defaults():
    store = MemoryInfluencerStore()

    row = await store.insert({"name": "Asha", "email": "asha@example.com", "affiliate_code": "ASHA"})

    assert row["commission_rate"] == 30.0
    assert row["status"] == "active"
    assert row["is_india"] is False
    assert row["total_clicks"] == 0
    assert row["id"] is not None
    assert row["created_at"] is not None


async def test_memory_insert_rejects_duplicate_keys():
    store = MemoryInfluencerStore()
    await store.insert({"name": "A", "email": "a@example.com", "affiliate_code": "A1"})

    with pytest.raises(StorageError) as exc_info:
        await store.insert({"name": "B", "email": "a@example.com", "affiliate_code": "B1"})

    assert exc_info.value.is_duplicate
    assert exc_info.value.code == "23505"
    assert "influencers_email_key" in str(exc_info.value)
    assert len(store.rows) == 1


async def test_memory_created_at_strictly_increases():
    store = MemoryInfluencerStore()
    rows = [
        await store.insert({"name": f"n{i}", "email": f"{i}@x.in", "affiliate_code": f"C{i}"})
        for i in range(20)
    ]

    stamps = [row["created_at"] for row in rows]
    assert all(a < b for a, b in zip(stamps, stamps[1:]))


async def test_memory_select_returns_copies():
    store = MemoryInfluencerStore()
    await store.insert({"name": "A", "email": "a@x.in", "affiliate_code": "A"})

    rows, _ = await store.select(QuerySpec("influencers"))
    rows[0]["name"] = "mutated"

    assert store.rows[0]["name"] == "A"


def test_memory_rejects_unknown_columns():
    with pytest.raises(ValueError):
        MemoryInfluencerStore(rows=[{"name": "A", "favourite_colour": "blue"}])


def test_storage_error_duplicate_detection():
    assert StorageError('duplicate key value violates unique constraint "x"').is_duplicate
    assert not StorageError("connection refused").is_duplicate


def test_build_store_backends():
    assert isinstance(build_store("memory"), MemoryInfluencerStore)
    assert isinstance(build_store("postgres"), PostgresInfluencerStore)
    with pytest.raises(ValueError):
        build_store("sqlite")


# ============================================================================
# Postgres store against a fake pool
# ============================================================================

class FakeConnection:
    def __init__(self, rows=None, count=0, row=None, exc=None):
        self.rows = rows or []
        self.count = count
        self.row = row
        self.exc = exc
        self.calls = []

    async def fetch(self, sql, *args):
        self.calls.append(("fetch", sql, args))
        if self.exc:
            raise self.exc
        return self.rows

    async def fetchval(self, sql, *args):
        self.calls.append(("fetchval", sql, args))
        return self.count

    async def fetchrow(self, sql, *args):
        self.calls.append(("fetchrow", sql, args))
        if self.exc:
            raise self.exc
        return self.row


class FakeDatabase:
    def __init__(self, conn):
        self.conn = conn

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


async def test_postgres_select_runs_page_and_count_queries():
    conn = FakeConnection(rows=[{"name": "Asha"}], count=41)
    store = PostgresInfluencerStore(FakeDatabase(conn))
    spec = (
        QuerySpec("influencers")
        .where_eq("status", "active")
        .page(2, 20)
        .order("created_at", descending=True)
        .with_count()
    )

    rows, count = await store.select(spec)

    assert rows == [{"name": "Asha"}]
    assert count == 41
    kinds = [call[0] for call in conn.calls]
    assert kinds == ["fetch", "fetchval"]
    assert conn.calls[0][2] == ("active", 20, 20)
    assert conn.calls[1][1].startswith("SELECT COUNT(*) FROM influencers WHERE status = $1")


async def test_postgres_select_skips_count_when_not_requested():
    conn = FakeConnection(rows=[])
    store = PostgresInfluencerStore(FakeDatabase(conn))

    rows, count = await store.select(QuerySpec("influencers").page(1, 10))

    assert rows == []
    assert count is None
    assert [call[0] for call in conn.calls] == ["fetch"]


async def test_postgres_insert_returns_row():
    inserted = {"id": "abc", "name": "Asha"}
    conn = FakeConnection(row=inserted)
    store = PostgresInfluencerStore(FakeDatabase(conn))

    row = await store.insert({"name": "Asha", "email": "a@x.in", "affiliate_code": "A"})

    assert row == inserted
    _, sql, args = conn.calls[0]
    assert sql == (
        "INSERT INTO influencers (name, email, affiliate_code) VALUES ($1, $2, $3) "
        f"RETURNING {', '.join(INFLUENCER_COLUMNS)}"
    )
    assert args == ("Asha", "a@x.in", "A")


async def test_postgres_connection_failure_becomes_storage_error():
    conn = FakeConnection(exc=ConnectionRefusedError("connection refused"))
    store = PostgresInfluencerStore(FakeDatabase(conn))

    with pytest.raises(StorageError) as exc_info:
        await store.select(QuerySpec("influencers"))

    assert not exc_info.value.is_duplicate


async def test_postgres_insert_rejects_unknown_columns():
    store = PostgresInfluencerStore(FakeDatabase(FakeConnection()))

    with pytest.raises(ValueError):
        await store.insert({"name": "A", "role": "admin"})
