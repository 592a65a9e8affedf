# ============================================================================
# MUTATION RECONCILER
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Service - Delete, bulk delete, rename
# PURPOSE: Apply store mutations, then bring selection, caches and page back in line
# CREATED: 14 OCT 2026
# ============================================================================
"""
Mutation Reconciler

After every mutation the committed page is treated as invalid:

    delete_logo   -> store.delete_logo -> drop from selection and cache
                  -> re-fetch the current query (the page clamp moves
                     back a page when the last item of the last page went)
    bulk_delete   -> sequential deletes, failures logged and skipped
                  -> clear selection -> re-fetch
    rename_logo   -> validate -> store.rename_logo -> patch committed page

Single-delete errors propagate to the caller. Bulk delete never raises for
an individual item.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from core.errors import InvalidLogoNameError, LogoNotFoundError
from core.logging import get_logger, log_checkpoint, log_context
from core.models.history import HistoryPage, PageQuery
from core.models.logo import LogoGroup, LogoMetadata
from repositories.base import LogoStore
from services.history_fetcher import HistoryFetcher
from services.image_cache import ImageObjectCache
from services.selection import SelectionSet

logger = get_logger(__name__)


class BulkDeleteResult(BaseModel):
    """Outcome of one bulk delete batch."""
    deleted: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)
    page: Optional[HistoryPage] = None

    @property
    def attempted(self) -> int:
        return len(self.deleted) + len(self.failed)


class MutationReconciler:
    """Mutations for one owner's history session."""

    def __init__(
        self,
        store: LogoStore,
        fetcher: HistoryFetcher,
        selection: SelectionSet,
        image_cache: ImageObjectCache,
    ):
        self.store = store
        self.fetcher = fetcher
        self.selection = selection
        self.image_cache = image_cache

    @property
    def owner_id(self) -> str:
        return self.fetcher.owner_id

    def _forget(self, logo_id: str) -> None:
        """Drop a deleted logo, and any revisions shown with it, locally."""
        self.selection.discard(logo_id)
        self.image_cache.invalidate(logo_id)

        page = self.fetcher.state.page
        if page is None:
            return
        for group in page.items:
            if group.original.id == logo_id:
                for revision in group.revisions:
                    self.selection.discard(revision.id)
                    self.image_cache.invalidate(revision.id)

    # ------------------------------------------------------------------
    # DELETE
    # ------------------------------------------------------------------

    async def delete_logo(self, logo_id: str, query: PageQuery) -> Optional[HistoryPage]:
        """
        Delete one logo and re-fetch the query's page.

        Raises:
            RepositoryError: The store refused or failed the delete.
            HistoryFetchError: The re-fetch failed.
        """
        with log_context(owner_id=self.owner_id, logo_id=logo_id, operation="delete_logo"):
            await self.store.delete_logo(logo_id, self.owner_id)
            self._forget(logo_id)
            logger.info(f"Deleted logo {logo_id}")
        return await self.fetcher.fetch_page(query)

    async def bulk_delete(self, query: PageQuery) -> BulkDeleteResult:
        """
        Delete every selected logo, one at a time.

        A failing delete is logged and skipped; the rest of the batch
        continues. The selection is cleared afterwards regardless.
        """
        result = BulkDeleteResult()
        ids = self.selection.ids()

        with log_context(owner_id=self.owner_id, operation="bulk_delete"):
            for logo_id in ids:
                try:
                    await self.store.delete_logo(logo_id, self.owner_id)
                except Exception as e:
                    logger.warning(f"Bulk delete skipped {logo_id}: {e}")
                    result.failed.append(logo_id)
                    continue
                self._forget(logo_id)
                result.deleted.append(logo_id)

            self.selection.clear()
            log_checkpoint("bulk_delete_completed", {
                "deleted": len(result.deleted),
                "failed": len(result.failed),
            }, logger=logger)

        result.page = await self.fetcher.fetch_page(query)
        return result

    # ------------------------------------------------------------------
    # RENAME
    # ------------------------------------------------------------------

    async def rename_logo(self, logo_id: str, new_name: str) -> LogoMetadata:
        """
        Rename a logo in place.

        The name is trimmed. It may not be empty or equal (ignoring case)
        to the name of another logo of the same owner. An unchanged name
        is returned as-is without touching the store.

        Raises:
            InvalidLogoNameError: Empty or duplicate name.
            LogoNotFoundError: No such logo for this owner.
        """
        name = (new_name or "").strip()
        if not name:
            raise InvalidLogoNameError("Logo name cannot be empty", value=new_name)

        with log_context(owner_id=self.owner_id, logo_id=logo_id, operation="rename_logo"):
            groups = await self.fetcher.scan_filtered(PageQuery())
            members = [member for group in groups for member in group.members()]

            current = next((m for m in members if m.id == logo_id), None)
            if current is None:
                raise LogoNotFoundError(logo_id, operation="rename_logo")

            if current.name == name:
                return current

            lowered = name.lower()
            if any(m.id != logo_id and m.name.lower() == lowered for m in members):
                raise InvalidLogoNameError(
                    f"A logo named '{name}' already exists", value=name,
                )

            await self.store.rename_logo(logo_id, name, self.owner_id)
            self.image_cache.invalidate(logo_id)
            renamed = current.model_copy(update={"name": name})
            self._patch_page(renamed)
            logger.info(f"Renamed logo {logo_id} to {name!r}")
            return renamed

    def _patch_page(self, renamed: LogoMetadata) -> None:
        page = self.fetcher.state.page
        if page is None:
            return

        items = []
        for group in page.items:
            if group.contains(renamed.id):
                group = LogoGroup(
                    original=renamed if group.original.id == renamed.id else group.original,
                    revisions=[
                        renamed if r.id == renamed.id else r for r in group.revisions
                    ],
                )
            items.append(group)
        page.items = items
