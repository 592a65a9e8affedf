# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Infrastructure - Remote catalog API and durable storage
# PURPOSE: Outbound HTTP and small durable key-value storage
# CREATED: 14 OCT 2026
# ============================================================================
"""
Infrastructure module for Logo History Sync.

Provides:
- CatalogClient: catalog status, add-to-catalog, SVG conversion (httpx)
- KeyValueStorage: durable string storage behind the catalog flag cache

Usage:
    from infrastructure import CatalogClient, JsonFileStorage

    client = CatalogClient(base_url="http://localhost:3000")
    status = await client.check_in_catalog("logo_123")

    storage = JsonFileStorage(".cache/catalog_flags.json")
"""

from infrastructure.catalog_client import CatalogClient
from infrastructure.flag_storage import (
    KeyValueStorage,
    MemoryStorage,
    JsonFileStorage,
)

__all__ = [
    "CatalogClient",
    "KeyValueStorage",
    "MemoryStorage",
    "JsonFileStorage",
]
