# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Foundation - Exceptions raised across layers
# PURPOSE: One place for the errors services raise and routes translate
# CREATED: 14 OCT 2026
# ============================================================================
"""
Error taxonomy.

Only the primary page fetch surfaces errors to the user. Every other layer
fails closed: per-card loads go to ERROR, batch items are skipped, catalog
check failures leave cached flags untouched.
"""

from typing import Any, Optional


class HistoryError(Exception):
    """Base exception for the logo history layer."""


class RepositoryError(HistoryError):
    """Raised when a store operation fails."""

    def __init__(self, message: str, operation: str = None, entity_id: str = None):
        self.operation = operation
        self.entity_id = entity_id
        super().__init__(message)


class LogoNotFoundError(RepositoryError):
    """Raised when a logo is missing or belongs to another owner."""

    def __init__(self, logo_id: str, operation: str = None):
        super().__init__(
            "Logo not found or access denied",
            operation=operation,
            entity_id=logo_id,
        )


class RevisionLimitError(RepositoryError):
    """Raised by stores when an original already has its maximum revisions."""


class HistoryFetchError(HistoryError):
    """Primary page fetch failure, raised only while the request is current."""

    def __init__(self, message: str, request_seq: Optional[int] = None):
        self.request_seq = request_seq
        super().__init__(message)


class CatalogError(HistoryError):
    """Catalog API failure other than an already-exists conflict."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class SvgConversionError(HistoryError):
    """Raster to SVG conversion failed or returned no SVG document."""


class InvalidLogoNameError(HistoryError):
    """Raised when a rename is empty or collides with another logo's name."""

    def __init__(self, message: str, value: Any = None):
        self.value = value
        super().__init__(message)


__all__ = [
    "HistoryError",
    "RepositoryError",
    "LogoNotFoundError",
    "RevisionLimitError",
    "HistoryFetchError",
    "CatalogError",
    "SvgConversionError",
    "InvalidLogoNameError",
]
