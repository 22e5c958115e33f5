"""
asyncpg pool shared by the PostgreSQL lecture and task stores.

The pool is created once at startup (only when DATABASE_URL is set) and every
helper below borrows a connection from it for a single statement.
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import asyncpg

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "").strip()
DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", "1"))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", "10"))

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

_pool: Optional[asyncpg.Pool] = None


async def init_db_pool(dsn: Optional[str] = None, command_timeout: float = 60.0) -> asyncpg.Pool:
    global _pool

    if _pool is not None:
        return _pool

    logger.info(f"Opening database pool (min={DB_POOL_MIN_SIZE}, max={DB_POOL_MAX_SIZE})")
    _pool = await asyncpg.create_pool(
        dsn or DATABASE_URL,
        min_size=DB_POOL_MIN_SIZE,
        max_size=DB_POOL_MAX_SIZE,
        command_timeout=command_timeout,
    )
    return _pool


async def close_db_pool() -> None:
    global _pool

    if _pool is None:
        return
    await _pool.close()
    _pool = None
    logger.info("Database pool closed")


def get_pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("Database pool not initialized; call init_db_pool() first")
    return _pool


@asynccontextmanager
async def get_connection():
    async with get_pool().acquire() as connection:
        yield connection


@asynccontextmanager
async def transaction():
    """Connection with an open transaction; rolled back if the block raises."""
    async with get_connection() as connection:
        async with connection.transaction():
            yield connection


async def fetch(query: str, *args) -> list:
    async with get_connection() as conn:
        return await conn.fetch(query, *args)


async def fetchrow(query: str, *args):
    async with get_connection() as conn:
        return await conn.fetchrow(query, *args)


async def fetchval(query: str, *args):
    async with get_connection() as conn:
        return await conn.fetchval(query, *args)


async def init_schema(path: Path = SCHEMA_PATH) -> None:
    """Apply schema.sql. Every statement in it is idempotent."""
    logger.info(f"Applying database schema from {path}")
    async with get_connection() as conn:
        await conn.execute(path.read_text(encoding="utf-8"))


async def health_check() -> dict:
    try:
        await fetchval("SELECT 1")
    except (asyncpg.PostgresError, OSError, RuntimeError) as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}

    return {
        "status": "healthy",
        "pool_size": _pool.get_size() if _pool else 0,
        "pool_free": _pool.get_idle_size() if _pool else 0,
    }
