# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 14 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the history layer.
"""

from core.config.defaults import (
    CacheDefaults,
    PaginationDefaults,
    VisibilityDefaults,
    CatalogDefaults,
    ExportDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "CacheDefaults",
    "PaginationDefaults",
    "VisibilityDefaults",
    "CatalogDefaults",
    "ExportDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
