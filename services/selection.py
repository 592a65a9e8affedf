# ============================================================================
# SELECTION SET
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Service - Bulk selection independent of pagination
# PURPOSE: Track selected displayed-logo ids across page navigation
# CREATED: 14 OCT 2026
# ============================================================================
"""
Selection Set

Holds displayed-logo ids. It survives page navigation; the session clears
it when the search term changes and after a bulk delete.

Two ways to fill it:
- select_page(page): union the page's displayed ids (cheap)
- select_all_filtered(fetcher, query): full filter re-scan, then replace
"""

from typing import Dict, Iterable, Iterator, List

from core.logging import get_logger
from core.models.history import HistoryPage, PageQuery
from services.history_fetcher import HistoryFetcher

logger = get_logger(__name__)


class SelectionSet:
    """Insertion-ordered set of selected logo ids."""

    def __init__(self, ids: Iterable[str] = ()):
        self._ids: Dict[str, None] = dict.fromkeys(ids)

    def __contains__(self, logo_id: str) -> bool:
        return logo_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def ids(self) -> List[str]:
        return list(self._ids)

    def add(self, logo_id: str) -> None:
        self._ids[logo_id] = None

    def discard(self, logo_id: str) -> bool:
        """Remove if present. Returns True when something was removed."""
        if logo_id not in self._ids:
            return False
        del self._ids[logo_id]
        return True

    def toggle(self, logo_id: str) -> bool:
        """Flip membership. Returns True when now selected."""
        if logo_id in self._ids:
            del self._ids[logo_id]
            return False
        self._ids[logo_id] = None
        return True

    def union(self, logo_ids: Iterable[str]) -> None:
        for logo_id in logo_ids:
            self._ids[logo_id] = None

    def replace(self, logo_ids: Iterable[str]) -> None:
        self._ids = dict.fromkeys(logo_ids)

    def clear(self) -> None:
        self._ids.clear()


def select_page(selection: SelectionSet, page: HistoryPage) -> List[str]:
    """Add every displayed logo of the page to the selection."""
    ids = page.displayed_ids()
    selection.union(ids)
    return ids


async def select_all_filtered(
    selection: SelectionSet,
    fetcher: HistoryFetcher,
    query: PageQuery,
) -> List[str]:
    """
    Replace the selection with every displayed logo matching the filters.

    Runs a full scan through the fetcher; use select_page for the
    current page only.
    """
    groups = await fetcher.scan_filtered(query)
    ids = [group.displayed.id for group in groups]
    selection.replace(ids)
    logger.info(f"Selected all {len(ids)} filtered logos")
    return ids
