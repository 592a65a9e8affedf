# ============================================================================
# API SCHEMAS
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Core - Request/Response schemas
# PURPOSE: Pydantic models for API validation
# CREATED: 14 OCT 2026
# ============================================================================
"""
API Schemas

Request and response models for the history API.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from core.contracts import CatalogOutcome, LoaderState
from core.models.catalog import CatalogUiState
from core.models.history import HistoryPage, PageQuery, PaginationState
from core.models.logo import LogoGroup


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================

class RenameRequest(BaseModel):
    """Request to rename a logo."""
    name: str = Field(..., max_length=200, description="New display name")

    model_config = {
        "json_schema_extra": {
            "examples": [{"name": "Acme Coffee v2"}]
        }
    }


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================

class LogoCard(BaseModel):
    """One card of the history grid (the group's displayed logo)."""
    id: str
    group_id: str
    name: str
    created_date: str
    company_name: Optional[str] = None
    industry: Optional[str] = None
    is_revision: bool = False
    revision_number: Optional[int] = None
    revision_count: int = 0
    can_create_revision: bool = True
    selected: bool = False
    catalog: CatalogUiState = Field(default_factory=CatalogUiState)

    @classmethod
    def from_group(
        cls,
        group: LogoGroup,
        selected: bool = False,
        catalog: Optional[CatalogUiState] = None,
    ) -> "LogoCard":
        shown = group.displayed
        return cls(
            id=shown.id,
            group_id=group.id,
            name=shown.name,
            created_date=shown.created_date(),
            company_name=shown.company_name,
            industry=shown.industry,
            is_revision=shown.is_revision,
            revision_number=shown.revision_number,
            revision_count=len(group.revisions),
            can_create_revision=group.can_create_revision,
            selected=selected,
            catalog=catalog or CatalogUiState(),
        )


class HistoryResponse(BaseModel):
    """A committed page of history."""
    items: List[LogoCard] = Field(default_factory=list)
    pagination: PaginationState = Field(default_factory=PaginationState)
    page_window: List[int] = Field(default_factory=list)
    query: PageQuery = Field(default_factory=PageQuery)
    request_seq: int = 0
    selected_count: int = 0
    can_create_original: Optional[bool] = None

    @classmethod
    def from_page(
        cls,
        page: Optional[HistoryPage],
        selected_ids: List[str],
        catalog: Optional[Dict[str, CatalogUiState]] = None,
        window: int = 5,
        can_create_original: Optional[bool] = None,
    ) -> "HistoryResponse":
        if page is None:
            return cls(selected_count=len(selected_ids), can_create_original=can_create_original)
        selected = set(selected_ids)
        catalog = catalog or {}
        return cls(
            items=[
                LogoCard.from_group(
                    group,
                    selected=group.displayed.id in selected,
                    catalog=catalog.get(group.displayed.id),
                )
                for group in page.items
            ],
            pagination=page.pagination,
            page_window=page.pagination.page_window(window),
            query=page.query,
            request_seq=page.request_seq,
            selected_count=len(selected_ids),
            can_create_original=can_create_original,
        )


class SelectionResponse(BaseModel):
    """Current selection."""
    selected: List[str] = Field(default_factory=list)
    count: int = 0


class BulkDeleteResponse(BaseModel):
    """Outcome of a bulk delete."""
    deleted: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)
    history: HistoryResponse


class RenameResponse(BaseModel):
    """Logo after a rename."""
    id: str
    name: str


class CatalogAddResponse(BaseModel):
    """Outcome of an add-to-catalog request."""
    logo_id: str
    outcome: CatalogOutcome
    catalog_code: Optional[str] = None
    error: Optional[str] = None
    catalog: CatalogUiState


class ImageResponse(BaseModel):
    """A card's image."""
    logo_id: str
    state: LoaderState
    image_data_uri: Optional[str] = None
