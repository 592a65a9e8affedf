# ============================================================================
# HISTORY SESSION TESTS
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Tests - Session context wiring and query rules
# PURPOSE: Verify query reset rules, loader lifecycle and the registry
# CREATED: 14 OCT 2026
# ============================================================================
"""
History Session Tests

Run with:
    pytest tests/test_session.py -v
"""

import asyncio
from unittest.mock import AsyncMock

from core.config import Defaults
from core.contracts import LoaderState
from core.models.catalog import CatalogStatus
from core.models.logo import LogoParameters, LogoPayload
from infrastructure.flag_storage import MemoryStorage
from repositories.memory_repo import InMemoryLogoStore
from services.catalog_flags import CatalogFlagCache
from services.image_cache import ImageObjectCache
from services.session import HistorySession, SessionRegistry


# ============================================================================
# HELPERS
# ============================================================================

OWNER = "owner@example.com"
BASE_MS = 1_700_000_000_000
IMAGE = "data:image/png;base64,iVBORw0KGgo="


def _make_store(count=7):
    store = InMemoryLogoStore()
    for i in range(1, count + 1):
        store.add(LogoPayload(
            id=f"logo_{i}",
            owner_id=OWNER,
            name=f"Logo {i}",
            created_at=BASE_MS - i * 1000,
            parameters=LogoParameters(company_name="Acme" if i % 2 else "Globex"),
            image_data_uri=IMAGE,
        ))
    return store


def _make_session(store=None, client=None):
    if client is None:
        client = AsyncMock()
        client.check_in_catalog = AsyncMock(
            return_value=CatalogStatus(is_in_catalog=False)
        )
    flags = CatalogFlagCache(MemoryStorage(), storage_key="logo_catalog_cache")
    return HistorySession(
        OWNER,
        store if store is not None else _make_store(),
        client,
        flags,
        defaults=Defaults(),
    )


# ============================================================================
# QUERY RULES
# ============================================================================

class TestQueryRules:

    def test_default_page_size(self):
        assert _make_session().query.page_size == 3

    def test_page_change_keeps_filters(self):
        session = _make_session()
        session.update_query(search_term="acme")
        query = session.update_query(page=2)
        assert query.page == 2
        assert query.search_term == "acme"

    def test_filter_change_resets_page(self):
        session = _make_session()
        session.update_query(page=3)
        query = session.update_query(page=3, industry="Tech")
        assert query.page == 1

    def test_page_size_change_resets_page(self):
        session = _make_session()
        session.update_query(page=2)
        query = session.update_query(page=2, page_size=6)
        assert query.page == 1
        assert query.page_size == 6

    def test_invalid_page_size_falls_back(self):
        session = _make_session()
        assert session.update_query(page_size=0).page_size == 3

    def test_search_change_clears_selection(self):
        session = _make_session()
        session.selection.union(["logo_1"])
        session.update_query(industry="Tech")
        assert len(session.selection) == 1
        session.update_query(search_term="acme")
        assert len(session.selection) == 0

    def test_show_adopts_clamped_page(self):
        session = _make_session()
        page = asyncio.run(session.show(page=99))
        assert page.pagination.page == 3
        assert session.query.page == 3


# ============================================================================
# IMAGES
# ============================================================================

class TestImages:

    def test_image_cache_built_lazily_once(self):
        session = _make_session()
        assert session._image_cache is None
        cache = session.image_cache
        assert isinstance(cache, ImageObjectCache)
        assert session.image_cache is cache
        assert cache.max_entries == 20

    def test_load_image_goes_through_cache(self):
        session = _make_session()
        image = asyncio.run(session.load_image("logo_1"))
        assert image == IMAGE
        assert session.image_cache.get("logo_1") == IMAGE
        assert session.loaders["logo_1"].state == LoaderState.LOADED

    def test_failed_loader_not_retried(self):
        session = _make_session()

        async def run():
            return await session.load_image("missing"), await session.load_image("missing")

        first, second = asyncio.run(run())
        assert first is None and second is None
        assert session.loaders["missing"].state == LoaderState.ERROR

    def test_new_page_drops_loaders_of_hidden_cards(self):
        session = _make_session()

        async def run():
            await session.show(page=1)
            await session.load_image("logo_1")
            await session.load_image("logo_4")
            await session.show(page=2)

        asyncio.run(run())

        assert "logo_1" not in session.loaders
        assert "logo_4" in session.loaders


# ============================================================================
# ORCHESTRATION
# ============================================================================

class TestOrchestration:

    def test_delete_on_last_page_moves_back(self):
        session = _make_session()

        async def run():
            await session.show(page=3)
            return await session.delete_logo("logo_7")

        page = asyncio.run(run())

        assert page.pagination.page == 2
        assert session.query.page == 2

    def test_select_all_then_bulk_delete(self):
        session = _make_session()

        async def run():
            await session.show(search_term="globex")
            ids = await session.select_all_filtered()
            result = await session.bulk_delete()
            return ids, result

        ids, result = asyncio.run(run())

        assert ids == ["logo_2", "logo_4", "logo_6"]
        assert result.deleted == ids
        assert result.page.pagination.total == 0
        assert len(session.selection) == 0

    def test_sync_catalog_paints_then_refreshes(self):
        client = AsyncMock()
        client.check_in_catalog = AsyncMock(
            return_value=CatalogStatus(is_in_catalog=True, catalog_code="ZZ")
        )
        session = _make_session(client=client)

        async def run():
            await session.show()
            return await session.sync_catalog()

        states = asyncio.run(run())

        assert set(states) == {"logo_1", "logo_2", "logo_3"}
        assert all(s.is_in_catalog for s in states.values())
        assert client.check_in_catalog.await_count == 3

    def test_sync_catalog_without_page(self):
        assert asyncio.run(_make_session().sync_catalog()) == {}


# ============================================================================
# REGISTRY
# ============================================================================

class TestSessionRegistry:

    def test_one_session_per_owner(self):
        registry = SessionRegistry(
            _make_store(), AsyncMock(),
            CatalogFlagCache(MemoryStorage()), defaults=Defaults(),
        )
        first = registry.get("a@example.com")
        assert registry.get("a@example.com") is first
        assert registry.get("b@example.com") is not first
        assert len(registry) == 2

    def test_end_drops_session(self):
        registry = SessionRegistry(
            _make_store(), AsyncMock(),
            CatalogFlagCache(MemoryStorage()), defaults=Defaults(),
        )
        registry.get("a@example.com")
        assert registry.end("a@example.com") is True
        assert "a@example.com" not in registry
        assert registry.end("a@example.com") is False
