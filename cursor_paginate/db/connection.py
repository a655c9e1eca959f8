"""Database connection pool for the PostgreSQL document store."""

import logging
from typing import Optional
import asyncpg
from asyncpg import Pool

from ..config import get_settings


logger = logging.getLogger(__name__)


class DatabaseManager:
    """Owns the asyncpg pool shared by request handlers."""
    
    def __init__(self, database_url: Optional[str] = None):
        self.pool: Optional[Pool] = None
        self._database_url = database_url
    
    async def initialize(self) -> None:
        """Create the connection pool if it does not exist yet."""
        if self.pool is not None:
            return
        settings = get_settings()
        self.pool = await asyncpg.create_pool(
            self._database_url or settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout
        )
        logger.info("Database connection pool created")
    
    async def close(self) -> None:
        """Close the database connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None


# Global database manager instance
db_manager = DatabaseManager()


async def get_db_pool() -> Pool:
    """Get the database connection pool, creating it on first use."""
    if not db_manager.pool:
        await db_manager.initialize()
    return db_manager.pool
