# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Core module initialization
# PURPOSE: Export core contracts, errors and models
# LAST_REVIEWED: 14 OCT 2026
# ============================================================================

from core.contracts import LoaderState, ExportFormat, CatalogOutcome, MAX_REVISIONS, UNTITLED
from core.errors import (
    HistoryError,
    RepositoryError,
    LogoNotFoundError,
    HistoryFetchError,
    CatalogError,
)
from core.models import (
    LogoMetadata,
    LogoPayload,
    LogoGroup,
    CatalogFlag,
    PageQuery,
    PaginationState,
    HistoryPage,
)

__all__ = [
    # Enums / constants
    "LoaderState",
    "ExportFormat",
    "CatalogOutcome",
    "MAX_REVISIONS",
    "UNTITLED",
    # Errors
    "HistoryError",
    "RepositoryError",
    "LogoNotFoundError",
    "HistoryFetchError",
    "CatalogError",
    # Models
    "LogoMetadata",
    "LogoPayload",
    "LogoGroup",
    "CatalogFlag",
    "PageQuery",
    "PaginationState",
    "HistoryPage",
]
