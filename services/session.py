# ============================================================================
# HISTORY SESSION
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Service - Session-scoped context owning caches and state
# PURPOSE: One owner's history view: query, page, selection, loaders, catalog
# CREATED: 14 OCT 2026
# ============================================================================
"""
History Session

A HistorySession is what one browser session holds for one owner:

    HistorySession
    ├── state          HistoryViewState (committed page, loading, error)
    ├── query          current PageQuery
    ├── image_cache    ImageObjectCache (built on first access)
    ├── selection      SelectionSet
    ├── fetcher        HistoryFetcher
    ├── reconciler     MutationReconciler
    ├── catalog        CatalogSyncService
    ├── exporter       ExportService
    └── loaders        one LazyImageLoader per card on the committed page

Query changes follow the history view's rules: changing the filters or
the page size starts again at page 1, and changing the search term clears
the selection.

SessionRegistry hands out one session per owner id and builds it lazily.
"""

from typing import Callable, Dict, List, Optional

from core.config import Defaults, get_defaults
from core.logging import get_logger
from core.models.catalog import CatalogUiState
from core.models.history import HistoryPage, HistoryViewState, PageQuery
from infrastructure.catalog_client import CatalogClient
from repositories.base import LogoStore
from services.catalog_flags import CatalogFlagCache
from services.catalog_sync import CatalogSyncService
from services.export import ExportArchive, ExportService
from services.history_fetcher import HistoryFetcher
from services.image_cache import ImageObjectCache
from services.mutation_reconciler import BulkDeleteResult, MutationReconciler
from services.selection import SelectionSet, select_all_filtered, select_page
from services.visibility_loader import LazyImageLoader, VisibilityWatcher

logger = get_logger(__name__)


class HistorySession:
    """Session-scoped history context for one owner."""

    def __init__(
        self,
        owner_id: str,
        store: LogoStore,
        catalog_client: CatalogClient,
        flag_cache: CatalogFlagCache,
        defaults: Optional[Defaults] = None,
        image_cache_factory: Optional[Callable[[], ImageObjectCache]] = None,
    ):
        self.owner_id = owner_id
        self.store = store
        self.defaults = defaults or get_defaults()
        self._image_cache_factory = image_cache_factory
        self._image_cache: Optional[ImageObjectCache] = None

        self.state = HistoryViewState()
        self.query = PageQuery(page_size=self.defaults.pagination.default_page_size)
        self.selection = SelectionSet()
        self.fetcher = HistoryFetcher(store, owner_id, self.state)
        self.catalog = CatalogSyncService(catalog_client, flag_cache, store, owner_id)
        self.exporter = ExportService(store, catalog_client, self.defaults.export)
        self.loaders: Dict[str, LazyImageLoader] = {}
        self._reconciler: Optional[MutationReconciler] = None

    # ------------------------------------------------------------------
    # LAZILY BUILT PARTS
    # ------------------------------------------------------------------

    @property
    def image_cache(self) -> ImageObjectCache:
        if self._image_cache is None:
            if self._image_cache_factory is not None:
                self._image_cache = self._image_cache_factory()
            else:
                self._image_cache = ImageObjectCache(
                    max_entries=self.defaults.cache.max_entries,
                    ttl_seconds=self.defaults.cache.ttl_seconds,
                )
        return self._image_cache

    @property
    def reconciler(self) -> MutationReconciler:
        if self._reconciler is None:
            self._reconciler = MutationReconciler(
                self.store, self.fetcher, self.selection, self.image_cache,
            )
        return self._reconciler

    # ------------------------------------------------------------------
    # QUERY
    # ------------------------------------------------------------------

    def update_query(
        self,
        page: Optional[int] = None,
        search_term: Optional[str] = None,
        industry: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> PageQuery:
        """Apply a query change and return the resulting query."""
        current = self.query
        next_query = current.model_copy(update={
            key: value for key, value in {
                "search_term": search_term,
                "industry": industry,
                "page_size": (
                    self.defaults.pagination.normalize_page_size(page_size)
                    if page_size is not None else None
                ),
            }.items() if value is not None
        })

        if next_query.search_term != current.search_term:
            self.selection.clear()

        if not next_query.same_filters(current):
            next_query = next_query.model_copy(update={"page": 1})
        elif page is not None:
            next_query = next_query.model_copy(update={"page": page})

        self.query = next_query
        return next_query

    async def show(
        self,
        page: Optional[int] = None,
        search_term: Optional[str] = None,
        industry: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> Optional[HistoryPage]:
        """Update the query and fetch its page."""
        query = self.update_query(page, search_term, industry, page_size)
        result = await self.fetcher.fetch_page(query)
        if result is not None:
            self._commit(result)
        return result

    def _commit(self, page: HistoryPage) -> None:
        """Adopt the clamped query and remount loaders for the new cards."""
        self.query = page.query
        displayed = set(page.displayed_ids())
        for logo_id in list(self.loaders):
            if logo_id not in displayed:
                self.loaders.pop(logo_id).unmount()

    # ------------------------------------------------------------------
    # IMAGES
    # ------------------------------------------------------------------

    def loader_for(
        self, logo_id: str, watcher: Optional[VisibilityWatcher] = None,
    ) -> LazyImageLoader:
        """The card loader for a logo, mounting a new one if needed."""
        loader = self.loaders.get(logo_id)
        if loader is None:
            loader = LazyImageLoader(
                logo_id, self.owner_id, self.store, self.image_cache, watcher,
            )
            loader.mount()
            self.loaders[logo_id] = loader
        return loader

    async def load_image(self, logo_id: str) -> Optional[str]:
        """Image for a card; None once its loader has failed."""
        return await self.loader_for(logo_id).load()

    # ------------------------------------------------------------------
    # SELECTION
    # ------------------------------------------------------------------

    def select_current_page(self) -> List[str]:
        if self.state.page is None:
            return []
        return select_page(self.selection, self.state.page)

    async def select_all_filtered(self) -> List[str]:
        return await select_all_filtered(self.selection, self.fetcher, self.query)

    def clear_selection(self) -> None:
        self.selection.clear()

    # ------------------------------------------------------------------
    # MUTATIONS
    # ------------------------------------------------------------------

    async def delete_logo(self, logo_id: str) -> Optional[HistoryPage]:
        self.loaders.pop(logo_id, None)
        page = await self.reconciler.delete_logo(logo_id, self.query)
        if page is not None:
            self._commit(page)
        return page

    async def bulk_delete(self) -> BulkDeleteResult:
        result = await self.reconciler.bulk_delete(self.query)
        if result.page is not None:
            self._commit(result.page)
        return result

    async def rename_logo(self, logo_id: str, new_name: str):
        return await self.reconciler.rename_logo(logo_id, new_name)

    # ------------------------------------------------------------------
    # CATALOG
    # ------------------------------------------------------------------

    async def sync_catalog(self) -> Dict[str, CatalogUiState]:
        """Paint cached flags for the page, then confirm them remotely."""
        if self.state.page is None:
            return {}
        ids = self.state.page.displayed_ids()
        self.catalog.paint(ids)
        return await self.catalog.refresh(ids)

    async def add_to_catalog(self, logo_id: str):
        return await self.catalog.add_to_catalog(logo_id)

    # ------------------------------------------------------------------
    # EXPORT
    # ------------------------------------------------------------------

    async def export_selection(self, export_format: str) -> ExportArchive:
        return await self.exporter.build_archive(
            self.selection.ids(), export_format, self.owner_id,
        )


class SessionRegistry:
    """One HistorySession per owner id, created on first use."""

    def __init__(
        self,
        store: LogoStore,
        catalog_client: CatalogClient,
        flag_cache: CatalogFlagCache,
        defaults: Optional[Defaults] = None,
    ):
        self.store = store
        self.catalog_client = catalog_client
        self.flag_cache = flag_cache
        self.defaults = defaults
        self._sessions: Dict[str, HistorySession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, owner_id: str) -> bool:
        return owner_id in self._sessions

    def get(self, owner_id: str) -> HistorySession:
        session = self._sessions.get(owner_id)
        if session is None:
            session = HistorySession(
                owner_id,
                self.store,
                self.catalog_client,
                self.flag_cache,
                defaults=self.defaults,
            )
            self._sessions[owner_id] = session
            logger.info(f"Opened history session for {owner_id}")
        return session

    def end(self, owner_id: str) -> bool:
        """Drop an owner's session and everything it cached."""
        return self._sessions.pop(owner_id, None) is not None
