"""
Database connection and pool management
"""

import logging
from pathlib import Path

import asyncpg
from fastapi import Request

from config.settings import (
    DATABASE_URL,
    DB_POOL_MIN_SIZE,
    DB_POOL_MAX_SIZE,
    DB_COMMAND_TIMEOUT,
)

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


async def init_database(apply_schema: bool = False) -> asyncpg.Pool:
    """Create the connection pool and verify connectivity"""
    db_pool = await asyncpg.create_pool(
        DATABASE_URL,
        min_size=DB_POOL_MIN_SIZE,
        max_size=DB_POOL_MAX_SIZE,
        command_timeout=DB_COMMAND_TIMEOUT,
        statement_cache_size=0  # pgbouncer compatibility
    )

    # Test connection
    async with db_pool.acquire() as conn:
        await conn.fetchval("SELECT 1")
        if apply_schema:
            await conn.execute(SCHEMA_PATH.read_text())
            logger.info(f"Schema applied from {SCHEMA_PATH.name}")

    logger.info("Database initialized successfully")
    return db_pool


async def close_database(db_pool: asyncpg.Pool):
    """Close database connection pool"""
    if db_pool:
        await db_pool.close()
    logger.info("Database connections closed")


def get_db_pool(request: Request) -> asyncpg.Pool:
    """FastAPI dependency returning the pool owned by the running application"""
    return request.app.state.db_pool
