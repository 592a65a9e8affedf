# ============================================================================
# SERVICES MODULE
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Core - Business logic layer
# PURPOSE: Caches, page fetching, mutations, catalog sync, export
# CREATED: 14 OCT 2026
# ============================================================================
"""
Services Module

Business logic for the logo history view. Services coordinate between the
logo store, the catalog client and session-scoped caches.

Usage:
    from services import SessionRegistry

    registry = SessionRegistry(store, catalog_client, flag_cache)
    session = registry.get("owner@example.com")
    page = await session.show(page=2)
"""

from .image_cache import CacheEntry, ImageObjectCache
from .catalog_flags import CatalogFlagCache
from .visibility_loader import (
    IntersectionEntry,
    LazyImageLoader,
    Rect,
    ViewportWatcher,
    VisibilityWatcher,
    fetch_image_through_cache,
)
from .history_fetcher import HistoryFetcher, apply_filters, group_matches
from .selection import SelectionSet, select_all_filtered, select_page
from .mutation_reconciler import BulkDeleteResult, MutationReconciler
from .catalog_sync import CatalogSyncService
from .export import ExportArchive, ExportService, safe_filename
from .session import HistorySession, SessionRegistry

__all__ = [
    "CacheEntry",
    "ImageObjectCache",
    "CatalogFlagCache",
    "IntersectionEntry",
    "LazyImageLoader",
    "Rect",
    "ViewportWatcher",
    "VisibilityWatcher",
    "fetch_image_through_cache",
    "HistoryFetcher",
    "apply_filters",
    "group_matches",
    "SelectionSet",
    "select_all_filtered",
    "select_page",
    "BulkDeleteResult",
    "MutationReconciler",
    "CatalogSyncService",
    "ExportArchive",
    "ExportService",
    "safe_filename",
    "HistorySession",
    "SessionRegistry",
]
