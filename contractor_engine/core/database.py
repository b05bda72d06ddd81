"""
Async PostgreSQL connection pool module.

This module provides an async PostgreSQL connection pool using asyncpg. It is
the single data access entry point for the provider catalog reads, the service
pattern aggregate store and the learning insight log.

Key Components:
- Global connection pool singleton (_pool)
- init_db(): Initialize the connection pool at application startup
- get_db_pool(): Get the pool instance (initializes if needed)
- close_db(): Gracefully close the pool at application shutdown
- execute_query() / execute_query_one(): Convenience helpers for the read side

Usage:
    # At application startup (in FastAPI lifespan)
    await init_db()

    # In services or endpoints
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch("SELECT * FROM service_patterns")

    # Or use the convenience helper
    rows = await execute_query("SELECT * FROM learning_insights WHERE event_type = $1", "wedding")

    # At application shutdown
    await close_db()

Environment Variables:
    DATABASE_URL: PostgreSQL connection string (Required)
"""

import asyncpg
from asyncpg import Pool
from typing import Optional, List, Any

from contractor_engine.core.config import get_settings


# =============================================================================
# Global Pool Singleton
# =============================================================================

# None until init_db() is called; shared across all async tasks
_pool: Optional[Pool] = None


# =============================================================================
# Pool Lifecycle Functions
# =============================================================================

async def init_db() -> Pool:
    """
    Initialize the database connection pool.

    Should be called once at application startup, typically in the FastAPI
    lifespan context manager. Pool sizing and the command timeout come from
    Settings. If the pool already exists it is returned unchanged.

    Returns:
        Pool: The asyncpg connection pool instance.

    Raises:
        asyncpg.PostgresError: If connection to the database fails.
        OSError: If the database host is unreachable.
    """
    global _pool

    if _pool is None:
        settings = get_settings()

        _pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )

    return _pool


async def get_db_pool() -> Pool:
    """
    Get the database connection pool, initializing if needed.

    Returns:
        Pool: The asyncpg connection pool instance.

    Raises:
        asyncpg.PostgresError: If connection to the database fails during lazy init.
    """
    global _pool

    if _pool is None:
        await init_db()

    assert _pool is not None, "Pool should be initialized after init_db()"

    return _pool


async def close_db() -> None:
    """
    Close the database connection pool gracefully.

    Idempotent. After closing, the pool is reset to None so a later
    get_db_pool() creates a fresh one.
    """
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None


# =============================================================================
# Query Execution Helpers
# =============================================================================

async def execute_query(query: str, *args: Any) -> List[asyncpg.Record]:
    """
    Execute a single query and return all rows.

    Args:
        query: SQL query string with optional $1, $2, etc. parameter placeholders.
        *args: Query parameters corresponding to placeholders in the query.

    Returns:
        List[asyncpg.Record]: Rows returned by the query.

    Raises:
        asyncpg.PostgresError: If the query execution fails.
    """
    pool = await get_db_pool()

    async with pool.acquire() as conn:
        return await conn.fetch(query, *args)


async def execute_query_one(query: str, *args: Any) -> Optional[asyncpg.Record]:
    """
    Execute a query and return a single row or None.

    Args:
        query: SQL query string with optional $1, $2, etc. parameter placeholders.
        *args: Query parameters corresponding to placeholders in the query.

    Returns:
        Optional[asyncpg.Record]: The first matching row, or None.

    Raises:
        asyncpg.PostgresError: If the query execution fails.
    """
    pool = await get_db_pool()

    async with pool.acquire() as conn:
        return await conn.fetchrow(query, *args)
