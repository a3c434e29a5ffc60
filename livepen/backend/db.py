"""
Database connection pool.

Only used when STORAGE_BACKEND=postgres. All database access goes through
the PostgresStorage adapter; never acquire from the pool elsewhere.
"""

from __future__ import annotations

import asyncpg

from livepen.backend.config import settings

pool: asyncpg.Pool | None = None


async def init_pool() -> asyncpg.Pool:
    """
    Initialize the connection pool.
    Called once at application startup.
    """
    global pool
    pool = await asyncpg.create_pool(
        dsn=settings.DATABASE_URL,
        min_size=1,
        max_size=5,
        command_timeout=60,
    )
    return pool


async def close_pool() -> None:
    """
    Close the connection pool.
    Called at application shutdown.
    """
    global pool
    if pool is not None:
        await pool.close()
        pool = None
