# ============================================================================
# VERSION - LOGO HISTORY SYNC
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# ============================================================================
"""
Version information for Logo History Sync.

This is the single source of truth for the application version.
Updated manually for each release.
"""
# Version format: major.minor.patch.build
__version__ = "0.3.1.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-14"

EPOCH = 2
CODENAME = "Logo History Sync"
