"""
Database module - PostgreSQL connection pooling
"""
import asyncpg
from contextlib import asynccontextmanager
from lib.settings import settings


class Database:
    """Database connection pool manager"""

    def __init__(self):
        self.pool = None

    async def connect(self):
        """Create connection pool"""
        if self.pool is not None:
            return
        self.pool = await asyncpg.create_pool(
            str(settings.database_url),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout
        )

    async def disconnect(self):
        """Close connection pool"""
        if self.pool:
            await self.pool.close()
            self.pool = None

    @asynccontextmanager
    async def acquire(self):
        """Acquire connection from pool"""
        if self.pool is None:
            raise RuntimeError("Database pool is not initialized. Call connect() on startup.")
        async with self.pool.acquire() as conn:
            yield conn

    async def health_check(self) -> bool:
        """Test database connectivity"""
        if self.pool is None:
            return False
        try:
            async with self.pool.acquire() as conn:
                result = await conn.fetchval("SELECT 1")
                return result == 1
        except (asyncpg.PostgresError, OSError):
            return False


db = Database()
