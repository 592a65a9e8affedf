# ============================================================================
# CATALOG MODELS
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Domain model - Catalog membership flags
# PURPOSE: Durable flag records and per-card catalog UI state
# CREATED: 14 OCT 2026
# ============================================================================
"""
Catalog Models

CatalogFlag is what the durable flag cache stores per logo id. The stored
JSON uses camelCase keys ({"isInCatalog": true, "catalogCode": "AB12"}), so
the model accepts and emits both spellings.
"""

from typing import Optional

from pydantic import BaseModel, Field

from core.contracts import CatalogOutcome


class CatalogFlag(BaseModel):
    """Catalog membership of one logo."""

    logo_id: Optional[str] = Field(default=None, alias="logoId")
    is_in_catalog: bool = Field(default=False, alias="isInCatalog")
    catalog_code: Optional[str] = Field(default=None, alias="catalogCode")

    model_config = {"populate_by_name": True}

    def to_storage(self) -> dict:
        """Shape written under the storage key (id is the map key)."""
        return {"isInCatalog": self.is_in_catalog, "catalogCode": self.catalog_code}


class CatalogStatus(BaseModel):
    """Result of a catalog membership check."""

    is_in_catalog: bool
    catalog_code: Optional[str] = None


class CatalogAddResult(BaseModel):
    """Result of an add-to-catalog call."""

    outcome: CatalogOutcome
    catalog_code: Optional[str] = None
    error: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        """Added now or already present."""
        return self.outcome in (CatalogOutcome.ADDED, CatalogOutcome.CONFLICT)


class CatalogUiState(BaseModel):
    """What a card shows for catalog membership."""

    is_in_catalog: bool = False
    catalog_code: Optional[str] = None
    loading: bool = False
