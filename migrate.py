#!/usr/bin/env python3
"""
Apply pending sql/migrations/NNN_name.sql files to the configured database.

Applied versions are recorded with a checksum in schema_migrations; a file
whose checksum changed is reported and only re-applied with --force.

Usage:
    python migrate.py [--force]
"""
import asyncio
import hashlib
import sys
from pathlib import Path
from typing import Dict, List, NamedTuple

import asyncpg

from lib.logging import get_logger, setup_logging
from lib.settings import settings

logger = get_logger("migrate")

MIGRATIONS_DIR = Path(__file__).resolve().parent / "sql" / "migrations"
EXPECTED_TABLES = {"schema_migrations", "influencers"}

CREATE_LEDGER = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        version INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        checksum TEXT NOT NULL,
        applied_at TIMESTAMPTZ DEFAULT NOW(),
        execution_time_ms INTEGER
    )
"""

RECORD_MIGRATION = """
    INSERT INTO schema_migrations (version, name, checksum, execution_time_ms)
    VALUES ($1, $2, $3, $4)
    ON CONFLICT (version)
    DO UPDATE SET checksum = $3, applied_at = NOW(), execution_time_ms = $4
"""


class Migration(NamedTuple):
    version: int
    path: Path
    checksum: str


class MigrationRunner:
    def __init__(self, migrations_dir: Path = MIGRATIONS_DIR):
        self.migrations_dir = migrations_dir
        self.conn = None

    def get_migration_files(self) -> List[Migration]:
        """Migration files ordered by their numeric prefix"""
        migrations = []
        for path in self.migrations_dir.glob("*.sql"):
            prefix = path.name.split("_", 1)[0]
            if not prefix.isdigit():
                logger.warning(f"Skipping {path.name}: no numeric version prefix")
                continue
            checksum = hashlib.sha256(path.read_bytes()).hexdigest()
            migrations.append(Migration(int(prefix), path, checksum))
        return sorted(migrations, key=lambda m: m.version)

    def plan(self, applied: Dict[int, str], force: bool = False) -> List[Migration]:
        """New versions, plus changed ones when forced"""
        pending = []
        for migration in self.get_migration_files():
            recorded = applied.get(migration.version)
            if recorded is None:
                pending.append(migration)
            elif recorded != migration.checksum:
                if force:
                    logger.info(f"{migration.path.stem} changed, re-applying")
                    pending.append(migration)
                else:
                    logger.warning(f"{migration.path.stem} changed since it was applied (use --force)")
        return pending

    async def applied_versions(self) -> Dict[int, str]:
        rows = await self.conn.fetch("SELECT version, checksum FROM schema_migrations")
        return {row["version"]: row["checksum"] for row in rows}

    async def apply(self, migration: Migration):
        name = migration.path.stem
        started = asyncio.get_running_loop().time()

        async with self.conn.transaction():
            await self.conn.execute(migration.path.read_text(encoding="utf-8"))
            elapsed_ms = int((asyncio.get_running_loop().time() - started) * 1000)
            await self.conn.execute(
                RECORD_MIGRATION, migration.version, name, migration.checksum, elapsed_ms
            )

        logger.info(f"Applied {name} in {elapsed_ms}ms")

    async def missing_tables(self) -> set:
        rows = await self.conn.fetch("""
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = 'public' AND table_type = 'BASE TABLE'
        """)
        return EXPECTED_TABLES - {row["table_name"] for row in rows}

    async def run(self, force: bool = False) -> int:
        """Apply pending migrations; returns how many were applied"""
        self.conn = await asyncpg.connect(str(settings.database_url))
        try:
            await self.conn.execute(CREATE_LEDGER)
            pending = self.plan(await self.applied_versions(), force=force)
            for migration in pending:
                await self.apply(migration)

            missing = await self.missing_tables()
            if missing:
                logger.warning(f"Missing expected tables: {', '.join(sorted(missing))}")
        finally:
            await self.conn.close()

        logger.info(f"{len(pending)} migration(s) applied")
        return len(pending)


async def main():
    setup_logging(settings.log_level)
    await MigrationRunner().run(force="--force" in sys.argv)


if __name__ == "__main__":
    asyncio.run(main())
