# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for caching, paging, catalog sync, export
# CREATED: 14 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides sensible defaults for the history cache and sync layer.
These can be overridden via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class CacheDefaults:
    """
    Defaults for the session image cache.

    Eviction is insertion-triggered only; there is no background sweep.
    """
    max_entries: int = 20
    ttl_seconds: float = 5 * 60  # 5 minutes

    @classmethod
    def from_env(cls) -> "CacheDefaults":
        """Create from environment variables."""
        return cls(
            max_entries=int(os.getenv("IMAGE_CACHE_MAX_ENTRIES", 20)),
            ttl_seconds=float(os.getenv("IMAGE_CACHE_TTL_SECONDS", 300)),
        )


@dataclass(frozen=True)
class PaginationDefaults:
    """
    Defaults for history paging.
    """
    default_page_size: int = 3
    allowed_page_sizes: Tuple[int, ...] = (3, 6, 9, 12)

    # Number of page buttons shown around the current page
    page_window: int = 5

    def normalize_page_size(self, page_size: Optional[int]) -> int:
        """Fall back to the default when the size is missing or not positive."""
        if not page_size or page_size < 1:
            return self.default_page_size
        return page_size

    @classmethod
    def from_env(cls) -> "PaginationDefaults":
        """Create from environment variables."""
        return cls(
            default_page_size=int(os.getenv("HISTORY_PAGE_SIZE", 3)),
        )


@dataclass(frozen=True)
class VisibilityDefaults:
    """
    Defaults for the per-card visibility trigger.
    """
    threshold: float = 0.1  # fraction of the card that must be visible
    root_margin_px: int = 100  # start loading this far before the viewport


@dataclass(frozen=True)
class CatalogDefaults:
    """
    Defaults for catalog status sync.

    The flag cache lives under one fixed key in durable storage.
    """
    storage_key: str = "logo_catalog_cache"
    flag_storage_path: str = ".cache/catalog_flags.json"
    catalog_api_url: str = "http://localhost:3000"
    request_timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls) -> "CatalogDefaults":
        """Create from environment variables."""
        return cls(
            storage_key=os.getenv("CATALOG_FLAG_STORAGE_KEY", "logo_catalog_cache"),
            flag_storage_path=os.getenv("CATALOG_FLAG_STORAGE_PATH", ".cache/catalog_flags.json"),
            catalog_api_url=os.getenv("CATALOG_API_URL", "http://localhost:3000"),
            request_timeout_seconds=float(os.getenv("CATALOG_TIMEOUT_SECONDS", 30.0)),
        )


@dataclass(frozen=True)
class ExportDefaults:
    """
    Defaults for bulk download archives.
    """
    # Options sent to the SVG conversion endpoint
    svg_options: Dict[str, Any] = field(default_factory=lambda: {
        "type": "simple",
        "width": 1000,
        "height": 1000,
        "threshold": 128,
        "color": "#000000",
    })

    # JPEG export flattens onto this background
    jpeg_quality: int = 90
    jpeg_background: str = "#FFFFFF"

    archive_prefix: str = "selected-logos"
    fallback_filename: str = "logo"

    def archive_name(self, export_format: str, timestamp_ms: int) -> str:
        """Build the download name, e.g. selected-logos-png-1760000000000.zip."""
        return f"{self.archive_prefix}-{export_format}-{timestamp_ms}.zip"


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    cache: CacheDefaults = field(default_factory=CacheDefaults)
    pagination: PaginationDefaults = field(default_factory=PaginationDefaults)
    visibility: VisibilityDefaults = field(default_factory=VisibilityDefaults)
    catalog: CatalogDefaults = field(default_factory=CatalogDefaults)
    export: ExportDefaults = field(default_factory=ExportDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            cache=CacheDefaults.from_env(),
            pagination=PaginationDefaults.from_env(),
            catalog=CatalogDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

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
