# ============================================================================
# DATABASE CONNECTION POOL
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Core - Async PostgreSQL connection management
# PURPOSE: One psycopg3 pool per process for the logo store
# CREATED: 14 OCT 2026
# ============================================================================
"""
Database Connection Pool

The PostgreSQL logo store shares one AsyncConnectionPool per process.
main.py opens it in the lifespan and closes it on shutdown.

Connection string, first match wins:
1. DATABASE_URL
2. POSTGRES_HOST / POSTGRES_PORT / POSTGRES_DB / POSTGRES_USER /
   POSTGRES_PASSWORD / POSTGRES_SSLMODE

Pool size: LOGO_DB_POOL_MIN (default 1), LOGO_DB_POOL_MAX (default 5).

Usage:
    from repositories.database import init_pool, close_pool

    pool = await init_pool()
    store = PostgresLogoRepository(pool)
    ...
    await close_pool()
"""

import os
import logging
from typing import Optional

from psycopg import sql as psycopg_sql
from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)

_pool: Optional[AsyncConnectionPool] = None


def get_connection_string() -> str:
    """Resolve the PostgreSQL conninfo from the environment."""
    if url := os.environ.get("DATABASE_URL"):
        return url

    host = os.environ.get("POSTGRES_HOST", "localhost")
    port = os.environ.get("POSTGRES_PORT", "5432")
    name = os.environ.get("POSTGRES_DB", "logos")
    user = os.environ.get("POSTGRES_USER", "postgres")
    password = os.environ.get("POSTGRES_PASSWORD", "")
    sslmode = os.environ.get("POSTGRES_SSLMODE", "prefer")

    return f"postgresql://{user}:{password}@{host}:{port}/{name}?sslmode={sslmode}"


def mask_connection_string(conninfo: str) -> str:
    """Drop credentials before logging."""
    if "://" in conninfo and "@" in conninfo:
        scheme, _, rest = conninfo.partition("://")
        return f"{scheme}://***@{rest.rsplit('@', 1)[-1]}"
    if "password=" in conninfo:
        return conninfo.split("password=")[0] + "password=***"
    return conninfo


def _pool_sizes() -> tuple:
    min_size = int(os.environ.get("LOGO_DB_POOL_MIN", "1"))
    max_size = int(os.environ.get("LOGO_DB_POOL_MAX", "5"))
    return min_size, max(min_size, max_size)


async def init_pool(connection_string: Optional[str] = None) -> AsyncConnectionPool:
    """
    Open the process-wide pool.

    Calling it again returns the pool already open.
    """
    global _pool

    if _pool is not None:
        return _pool

    conninfo = connection_string or get_connection_string()
    min_size, max_size = _pool_sizes()
    logger.info(f"Opening logo store pool: {mask_connection_string(conninfo)}")

    pool = AsyncConnectionPool(
        conninfo=conninfo,
        min_size=min_size,
        max_size=max_size,
        open=False,
    )
    await pool.open()
    _pool = pool

    logger.info(f"Logo store pool open (min={min_size}, max={max_size})")
    return _pool


async def get_pool() -> AsyncConnectionPool:
    """The open pool, opening it on first use."""
    if _pool is None:
        return await init_pool()
    return _pool


async def close_pool() -> None:
    """Close the pool if open."""
    global _pool

    if _pool is None:
        return
    pool, _pool = _pool, None
    await pool.close()
    logger.info("Logo store pool closed")


# ============================================================================
# SCHEMA CONSTANTS
# ============================================================================

SCHEMA = os.environ.get("LOGO_DB_SCHEMA", "logoapp")

# Use with sql.SQL().format()
TABLE_LOGOS = psycopg_sql.Identifier(SCHEMA, "logos")
