# ============================================================================
# MODELS MODULE
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# LAST_REVIEWED: 14 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

All Pydantic models for the logo history layer.
"""

from core.models.logo import LogoParameters, LogoMetadata, LogoPayload, LogoGroup
from core.models.catalog import CatalogFlag, CatalogStatus, CatalogAddResult, CatalogUiState
from core.models.history import (
    PageQuery,
    PaginationState,
    HistoryPage,
    HistoryViewState,
    OwnerUsage,
)

__all__ = [
    # Logos
    "LogoParameters",
    "LogoMetadata",
    "LogoPayload",
    "LogoGroup",
    # Catalog
    "CatalogFlag",
    "CatalogStatus",
    "CatalogAddResult",
    "CatalogUiState",
    # History
    "PageQuery",
    "PaginationState",
    "HistoryPage",
    "HistoryViewState",
    "OwnerUsage",
]
