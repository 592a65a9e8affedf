# ============================================================================
# REPOSITORIES MODULE
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Core - Logo persistence layer
# PURPOSE: LogoStore contract plus PostgreSQL and in-memory implementations
# CREATED: 14 OCT 2026
# ============================================================================
"""
Repositories Module

Provides logo persistence behind the LogoStore contract.
Uses psycopg3 async with connection pooling for PostgreSQL.

Usage:
    from repositories import PostgresLogoRepository, get_pool

    pool = await get_pool()
    store = PostgresLogoRepository(pool)
    originals = await store.fetch_originals(owner_id)
"""

from .base import LogoStore
from .database import get_pool, init_pool, close_pool
from .logo_repo import PostgresLogoRepository
from .memory_repo import InMemoryLogoStore, generate_logo_id

__all__ = [
    "LogoStore",
    "get_pool",
    "init_pool",
    "close_pool",
    "PostgresLogoRepository",
    "InMemoryLogoStore",
    "generate_logo_id",
]
