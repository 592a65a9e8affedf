# ============================================================================
# PAGINATED METADATA FETCHER
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Service - One page of history per call, newest request wins
# PURPOSE: Scan, filter, clamp and slice logo metadata; suppress stale pages
# CREATED: 14 OCT 2026
# ============================================================================
"""
Paginated Metadata Fetcher

fetch_page(query):
    1. seq = next generation token (latest outstanding)
    2. originals = store.fetch_originals(owner)
    3. stable sort by created_at descending
    4. search / industry filter, matching the original OR any revision
    5. total, total_pages, clamp page
    6. slice [(page-1)*size, page*size)
    7. attach revisions to the sliced originals
    8. commit only if seq is still the latest; otherwise drop silently
    9. errors surface only while seq is still the latest

Filtering needs every original's revisions, so step 4 loads them for the
whole set when a filter is active. Without filters only the sliced
originals have their revisions loaded.

scan_filtered(query) is the explicit full scan behind "select all
filtered": it always loads every revision and never slices. It is
deliberately separate from fetch_page so page changes stay cheap.
"""

import asyncio
from typing import List, Optional, Tuple

from core.contracts import ALL_INDUSTRIES
from core.errors import HistoryFetchError
from core.logging import get_logger, log_checkpoint, log_context
from core.models.history import HistoryPage, HistoryViewState, PageQuery, PaginationState
from core.models.logo import LogoGroup, LogoMetadata
from repositories.base import LogoStore

logger = get_logger(__name__)


# ============================================================================
# FILTERS
# ============================================================================

def group_matches(group: LogoGroup, query: PageQuery) -> bool:
    """Search and industry filter with either-match over revisions."""
    members = group.members()

    search = query.normalized_search
    if search and not any(member.matches_text(search) for member in members):
        return False

    if query.industry and query.industry != ALL_INDUSTRIES:
        if not any(member.industry == query.industry for member in members):
            return False

    return True


def apply_filters(groups: List[LogoGroup], query: PageQuery) -> List[LogoGroup]:
    """Groups passing the query's filters, order preserved."""
    if not query.has_filters:
        return list(groups)
    return [group for group in groups if group_matches(group, query)]


def sort_newest_first(originals: List[LogoMetadata]) -> List[LogoMetadata]:
    # sorted() is stable, so equal timestamps keep retrieval order
    return sorted(originals, key=lambda logo: logo.created_at, reverse=True)


# ============================================================================
# FETCHER
# ============================================================================

class HistoryFetcher:
    """
    Fetches pages of history for one owner into one HistoryViewState.

    Usage:
        fetcher = HistoryFetcher(store, "owner@example.com")
        page = await fetcher.fetch_page(PageQuery(page=2, page_size=3))
        if page is None:
            ...  # superseded by a newer request
    """

    def __init__(
        self,
        store: LogoStore,
        owner_id: str,
        state: Optional[HistoryViewState] = None,
    ):
        self.store = store
        self.owner_id = owner_id
        self.state = state if state is not None else HistoryViewState()
        self._latest_seq = 0

    # ------------------------------------------------------------------
    # GENERATION TOKEN
    # ------------------------------------------------------------------

    @property
    def latest_seq(self) -> int:
        return self._latest_seq

    def next_seq(self) -> int:
        self._latest_seq += 1
        return self._latest_seq

    def is_current(self, seq: int) -> bool:
        return seq == self._latest_seq

    # ------------------------------------------------------------------
    # SCANS
    # ------------------------------------------------------------------

    async def _attach_revisions(self, originals: List[LogoMetadata]) -> List[LogoGroup]:
        revision_lists = await asyncio.gather(*[
            self.store.fetch_revisions(original.id, self.owner_id)
            for original in originals
        ])
        return [
            LogoGroup(
                original=original,
                revisions=sorted(revisions, key=lambda r: r.revision_number or 0),
            )
            for original, revisions in zip(originals, revision_lists)
        ]

    async def _collect(
        self, query: PageQuery, all_revisions: bool,
    ) -> Tuple[List[LogoGroup], bool]:
        """
        Steps 2-4. Returns the filtered groups and whether their revisions
        are already attached.
        """
        originals = sort_newest_first(await self.store.fetch_originals(self.owner_id))

        if all_revisions or query.has_filters:
            groups = await self._attach_revisions(originals)
            return apply_filters(groups, query), True

        return [LogoGroup(original=original) for original in originals], False

    async def scan_filtered(self, query: PageQuery) -> List[LogoGroup]:
        """
        Every group matching the query's filters, revisions attached.

        Full scan of the owner's metadata, one revision lookup per
        original, no pagination.
        """
        with log_context(owner_id=self.owner_id, operation="scan_filtered"):
            groups, _ = await self._collect(query, all_revisions=True)
            logger.info(
                f"Full scan matched {len(groups)} groups "
                f"(search={query.search_term!r}, industry={query.industry})"
            )
            return groups

    # ------------------------------------------------------------------
    # PAGE FETCH
    # ------------------------------------------------------------------

    async def fetch_page(self, query: PageQuery) -> Optional[HistoryPage]:
        """
        Fetch one page and commit it to state.

        Returns:
            The committed page, or None when a newer request superseded
            this one.

        Raises:
            HistoryFetchError: The fetch failed and is still the latest.
        """
        seq = self.next_seq()
        self.state.loading = True

        with log_context(owner_id=self.owner_id, request_seq=seq, operation="fetch_page"):
            logger.debug(
                f"Fetching page {query.page} (size={query.page_size}, "
                f"search={query.search_term!r}, industry={query.industry})"
            )
            try:
                groups, has_revisions = await self._collect(query, all_revisions=False)
                pagination = PaginationState.compute(query.page, query.page_size, len(groups))
                sliced = groups[pagination.start_index:pagination.end_index]
                if not has_revisions:
                    sliced = await self._attach_revisions([g.original for g in sliced])
            except Exception as e:
                if not self.is_current(seq):
                    logger.debug(f"Discarding error from stale request {seq}: {e}")
                    return None
                self.state.loading = False
                self.state.error = str(e)
                logger.error(f"History fetch failed: {e}")
                raise HistoryFetchError(str(e), request_seq=seq) from e

            if not self.is_current(seq):
                log_checkpoint("stale_page_discarded", {
                    "request_seq": seq, "latest_seq": self._latest_seq,
                }, logger=logger)
                return None

            page = HistoryPage(
                items=sliced,
                pagination=pagination,
                query=query.model_copy(update={"page": pagination.page}),
                request_seq=seq,
            )
            self.state.page = page
            self.state.error = None
            self.state.loading = False
            self.state.committed_seq = seq

            log_checkpoint("page_committed", {
                "page": pagination.page,
                "total": pagination.total,
                "total_pages": pagination.total_pages,
                "items": len(sliced),
            }, logger=logger)
            return page
