# ============================================================================
# CATALOG SYNC SERVICE
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Service - Catalog badges painted from cache, confirmed remotely
# PURPOSE: Keep per-card catalog state and the durable flag cache in step
# CREATED: 14 OCT 2026
# ============================================================================
"""
Catalog Sync Service

paint(ids)    -> UI state straight from the durable flag cache
refresh(ids)  -> check_in_catalog per id
                 success: UI state and cache take the backend's answer
                 failure: nothing written; a cached True stays True
add(id)       -> loading=True
                 200 / 409: cache + UI take {in_catalog, code}
                 other:     loading=False, in_catalog unchanged
"""

from typing import Dict, Iterable, Optional

from core.contracts import CatalogOutcome
from core.errors import LogoNotFoundError
from core.logging import get_logger, log_context
from core.models.catalog import CatalogAddResult, CatalogFlag, CatalogUiState
from infrastructure.catalog_client import CatalogClient
from repositories.base import LogoStore
from services.catalog_flags import CatalogFlagCache

logger = get_logger(__name__)


class CatalogSyncService:
    """Catalog state for the cards of one owner's session."""

    def __init__(
        self,
        client: CatalogClient,
        flags: CatalogFlagCache,
        store: LogoStore,
        owner_id: str,
    ):
        self.client = client
        self.flags = flags
        self.store = store
        self.owner_id = owner_id
        self._ui: Dict[str, CatalogUiState] = {}

    def ui_state(self, logo_id: str) -> CatalogUiState:
        return self._ui.setdefault(logo_id, CatalogUiState())

    def snapshot(self, logo_ids: Iterable[str]) -> Dict[str, CatalogUiState]:
        return {logo_id: self.ui_state(logo_id).model_copy() for logo_id in logo_ids}

    # ------------------------------------------------------------------
    # PAINT + REFRESH
    # ------------------------------------------------------------------

    def paint(self, logo_ids: Iterable[str]) -> Dict[str, CatalogUiState]:
        """Apply cached flags to UI state without touching the network."""
        logo_ids = list(logo_ids)
        cached = self.flags.read_all()
        for logo_id in logo_ids:
            flag = cached.get(logo_id)
            if flag is not None:
                state = self.ui_state(logo_id)
                state.is_in_catalog = flag.is_in_catalog
                state.catalog_code = flag.catalog_code
        return self.snapshot(logo_ids)

    async def refresh(self, logo_ids: Iterable[str]) -> Dict[str, CatalogUiState]:
        """Confirm each id against the backend; failed checks change nothing."""
        logo_ids = list(logo_ids)
        confirmed: Dict[str, CatalogFlag] = {}

        with log_context(owner_id=self.owner_id, operation="catalog_refresh"):
            for logo_id in logo_ids:
                try:
                    status = await self.client.check_in_catalog(logo_id)
                except Exception as e:
                    logger.warning(f"Catalog check failed for {logo_id}, keeping cached flag: {e}")
                    continue

                state = self.ui_state(logo_id)
                state.is_in_catalog = status.is_in_catalog
                state.catalog_code = status.catalog_code
                confirmed[logo_id] = CatalogFlag(
                    logo_id=logo_id,
                    is_in_catalog=status.is_in_catalog,
                    catalog_code=status.catalog_code,
                )

        self.flags.write_merge(confirmed)
        return self.snapshot(logo_ids)

    # ------------------------------------------------------------------
    # ADD
    # ------------------------------------------------------------------

    async def add_to_catalog(self, logo_id: str) -> CatalogAddResult:
        """
        Add the logo to the catalog.

        Raises:
            LogoNotFoundError: No stored logo for this owner.
        """
        state = self.ui_state(logo_id)
        state.loading = True

        with log_context(owner_id=self.owner_id, logo_id=logo_id, operation="add_to_catalog"):
            try:
                logo = await self.store.fetch_full_logo(logo_id, self.owner_id)
                if logo is None:
                    raise LogoNotFoundError(logo_id, operation="add_to_catalog")

                try:
                    result = await self.client.add_to_catalog(
                        logo_id,
                        logo.image_data_uri,
                        logo.parameters,
                        logo.company_name,
                    )
                except Exception as e:
                    logger.error(f"Add to catalog failed for {logo_id}: {e}")
                    result = CatalogAddResult(outcome=CatalogOutcome.FAILED, error=str(e))

                if result.confirmed:
                    self._confirm(logo_id, result.catalog_code)
                    logger.info(
                        f"Logo {logo_id} in catalog ({result.outcome.value}, "
                        f"code={result.catalog_code})"
                    )
                return result
            finally:
                state.loading = False

    def _confirm(self, logo_id: str, catalog_code: Optional[str]) -> None:
        state = self.ui_state(logo_id)
        state.is_in_catalog = True
        state.catalog_code = catalog_code
        self.flags.mark_in_catalog(logo_id, catalog_code)
