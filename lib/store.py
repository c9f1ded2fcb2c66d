"""
Influencer storage clients.

Routes talk to an InfluencerStore; the store receives a QuerySpec for reads
and a dict of column values for inserts. Postgres is the production backend,
the in-memory store backs local development and the test suite.
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Protocol

import asyncpg

from lib.db import Database, db
from lib.logging import get_logger
from lib.models import DEFAULT_COMMISSION_RATE, INFLUENCER_COLUMNS, InfluencerStatus
from lib.prometheus_metrics import track_database_query
from lib.query import QuerySpec, apply_to_rows, compile_count, compile_select
from lib.settings import settings

logger = get_logger(__name__)

TABLE = "influencers"
UNIQUE_COLUMNS = ("email", "affiliate_code")


class StorageError(Exception):
    """Failure reported by the storage backend"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code

    @property
    def is_duplicate(self) -> bool:
        return "duplicate" in self.message.lower()


class InfluencerStore(Protocol):
    async def select(self, spec: QuerySpec) -> tuple[list[dict[str, Any]], Optional[int]]:
        """Rows for the spec's page, plus the exact count when requested"""
        ...

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return it as stored"""
        ...


def _check_insert_columns(values: dict[str, Any]) -> list[str]:
    columns = list(values)
    unknown = [c for c in columns if c not in INFLUENCER_COLUMNS]
    if unknown:
        raise ValueError(f"Unknown influencer columns: {', '.join(unknown)}")
    return columns


class PostgresInfluencerStore:
    """asyncpg-backed store on the shared connection pool"""

    def __init__(self, database: Database):
        self.database = database

    async def select(self, spec: QuerySpec) -> tuple[list[dict[str, Any]], Optional[int]]:
        sql, args = compile_select(spec)
        try:
            async with self.database.acquire() as conn:
                with track_database_query("select", spec.table):
                    rows = await conn.fetch(sql, *args)

                count = None
                if spec.count_exact:
                    count_sql, count_args = compile_count(spec)
                    with track_database_query("count", spec.table):
                        count = await conn.fetchval(count_sql, *count_args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise StorageError(str(e), getattr(e, "sqlstate", None)) from e

        return [dict(row) for row in rows], count

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        columns = _check_insert_columns(values)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        sql = (
            f"INSERT INTO {TABLE} ({', '.join(columns)}) "
            f"VALUES ({placeholders}) "
            f"RETURNING {', '.join(INFLUENCER_COLUMNS)}"
        )
        try:
            async with self.database.acquire() as conn:
                with track_database_query("insert", TABLE):
                    row = await conn.fetchrow(sql, *values.values())
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise StorageError(str(e), getattr(e, "sqlstate", None)) from e

        if row is None:
            raise StorageError("Insert returned no row")
        return dict(row)


class MemoryInfluencerStore:
    """Process-local store with the same column defaults and unique keys as the table"""

    def __init__(self, rows: Optional[list[dict[str, Any]]] = None):
        self.rows: list[dict[str, Any]] = []
        self._last_created: Optional[datetime] = None
        for row in rows or []:
            self.add(dict(row))

    def _defaults(self) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        # created_at must be strictly increasing so DESC ordering is stable
        if self._last_created is not None and now <= self._last_created:
            now = self._last_created + timedelta(microseconds=1)
        self._last_created = now
        return {
            "id": uuid.uuid4(),
            "phone": None,
            "bio": None,
            "commission_rate": DEFAULT_COMMISSION_RATE,
            "total_earnings": 0.0,
            "remaining_balance": 0.0,
            "total_clicks": 0,
            "total_signups": 0,
            "total_purchases": 0,
            "conversion_rate": 0.0,
            "status": InfluencerStatus.ACTIVE.value,
            "is_india": False,
            "created_at": now,
            "updated_at": now,
        }

    def add(self, values: dict[str, Any]) -> dict[str, Any]:
        """Synchronous insert, also used for seeding"""
        _check_insert_columns(values)
        for column in UNIQUE_COLUMNS:
            value = values.get(column)
            if value is not None and any(r.get(column) == value for r in self.rows):
                raise StorageError(
                    f'duplicate key value violates unique constraint "{TABLE}_{column}_key"',
                    "23505",
                )
        row = self._defaults()
        row.update(values)
        self.rows.append(row)
        return row

    async def select(self, spec: QuerySpec) -> tuple[list[dict[str, Any]], Optional[int]]:
        spec.columns()  # unknown table raises ValueError
        page, count = apply_to_rows(spec, self.rows)
        return [dict(row) for row in page], count

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        row = self.add(dict(values))
        return dict(row)


def build_store(backend: str) -> InfluencerStore:
    if backend == "postgres":
        return PostgresInfluencerStore(db)
    if backend == "memory":
        logger.warning("Using in-memory influencer store, data is not persisted")
        return MemoryInfluencerStore()
    raise ValueError(f"Unknown store backend: {backend}")


influencer_store: InfluencerStore = build_store(settings.store_backend)


def get_influencer_store() -> InfluencerStore:
    """FastAPI dependency, overridden in tests"""
    return influencer_store
