# ============================================================================
# HISTORY PAGE MODELS
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Domain model - Pagination and committed page state
# PURPOSE: Page queries, pagination math, the visible history state
# CREATED: 14 OCT 2026
# ============================================================================
"""
History Page Models

PaginationState is recomputed on every fetch from the filtered total:

    total_pages = max(1, ceil(total / limit))
    page        = clamp(requested, 1, total_pages)
    has_more    = page < total_pages

HistoryViewState is the single piece of visible state a fetcher commits
into. Only the newest request of a fetcher may write to it.
"""

import math
from typing import List, Optional

from pydantic import BaseModel, Field

from core.contracts import ALL_INDUSTRIES
from core.models.logo import LogoGroup


class PageQuery(BaseModel):
    """Filters and position for one history fetch."""

    page: int = Field(default=1)
    page_size: int = Field(default=3, ge=1)
    search_term: str = Field(default="")
    industry: str = Field(default=ALL_INDUSTRIES)

    @property
    def normalized_search(self) -> str:
        return self.search_term.strip().lower()

    @property
    def has_filters(self) -> bool:
        return bool(self.normalized_search) or self.industry != ALL_INDUSTRIES

    def same_filters(self, other: "PageQuery") -> bool:
        return (
            self.search_term == other.search_term
            and self.industry == other.industry
            and self.page_size == other.page_size
        )


class PaginationState(BaseModel):
    """Pagination of the current filtered result."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=3, ge=1)
    total: int = Field(default=0, ge=0)
    total_pages: int = Field(default=1, ge=1)
    has_more: bool = Field(default=False)

    @classmethod
    def compute(cls, requested_page: int, limit: int, total: int) -> "PaginationState":
        """Clamp the requested page into the pages the total allows."""
        total_pages = max(1, math.ceil(total / limit))
        page = min(max(1, requested_page), total_pages)
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_more=page < total_pages,
        )

    @property
    def start_index(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def end_index(self) -> int:
        return self.page * self.limit

    def page_window(self, size: int = 5) -> List[int]:
        """
        Page numbers for the pager: up to `size` pages starting two before
        the current one. Empty when there is only one page.
        """
        if self.total_pages <= 1:
            return []
        start = max(1, self.page - 2)
        return [n for n in range(start, start + min(size, self.total_pages))
                if n <= self.total_pages]


class HistoryPage(BaseModel):
    """One committed page of history."""

    items: List[LogoGroup] = Field(default_factory=list)
    pagination: PaginationState = Field(default_factory=PaginationState)
    query: PageQuery = Field(default_factory=PageQuery)
    request_seq: int = Field(default=0, ge=0)

    def displayed_ids(self) -> List[str]:
        return [group.displayed.id for group in self.items]


class HistoryViewState(BaseModel):
    """Visible history state owned by a session."""

    page: Optional[HistoryPage] = None
    loading: bool = False
    error: Optional[str] = None
    committed_seq: int = 0


class OwnerUsage(BaseModel):
    """Original-logo quota of an owner."""

    logos_created: int = Field(default=0, ge=0)
    logos_limit: int = Field(default=0, ge=0)

    @property
    def can_create_original(self) -> bool:
        return self.logos_created < self.logos_limit
