# ============================================================================
# IN-MEMORY LOGO STORE TESTS
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Tests - LogoStore contract on the dict-backed store
# PURPOSE: Verify ordering, owner scoping, revision numbering and cascade
# CREATED: 14 OCT 2026
# ============================================================================
"""
In-Memory Logo Store Tests

Run with:
    pytest tests/test_memory_repo.py -v
"""

import asyncio
import pytest

from core.contracts import MAX_REVISIONS
from core.errors import LogoNotFoundError, RevisionLimitError
from core.models.logo import LogoParameters, LogoPayload
from repositories.memory_repo import InMemoryLogoStore


OWNER = "owner@example.com"
IMAGE = "data:image/png;base64,AA=="


class FakeClock:
    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        self.now += 1.0
        return self.now


def _make_store():
    return InMemoryLogoStore(clock=FakeClock())


def _create(store, owner=OWNER, original_id=None, name=None):
    return asyncio.run(store.create_logo(
        owner, IMAGE, LogoParameters(company_name="Acme"),
        original_logo_id=original_id, name=name,
    ))


class TestReads:

    def test_originals_newest_first_without_image(self):
        store = _make_store()
        first = _create(store, name="First")
        second = _create(store, name="Second")

        originals = asyncio.run(store.fetch_originals(OWNER))

        assert [logo.id for logo in originals] == [second.id, first.id]
        assert not any(isinstance(logo, LogoPayload) for logo in originals)

    def test_owner_scoping(self):
        store = _make_store()
        logo = _create(store, owner="other@example.com")

        assert asyncio.run(store.fetch_originals(OWNER)) == []
        assert asyncio.run(store.fetch_full_logo(logo.id, OWNER)) is None
        with pytest.raises(LogoNotFoundError):
            asyncio.run(store.delete_logo(logo.id, OWNER))

    def test_full_logo_carries_image(self):
        store = _make_store()
        logo = _create(store)
        assert asyncio.run(store.fetch_full_logo(logo.id, OWNER)).image_data_uri == IMAGE


class TestRevisions:

    def test_numbers_assigned_in_order(self):
        store = _make_store()
        original = _create(store)
        first = _create(store, original_id=original.id)
        second = _create(store, original_id=original.id)

        revisions = asyncio.run(store.fetch_revisions(original.id, OWNER))

        assert [r.revision_number for r in revisions] == [1, 2]
        assert [r.id for r in revisions] == [first.id, second.id]
        assert all(r.original_logo_id == original.id for r in revisions)

    def test_revision_cap(self):
        store = _make_store()
        original = _create(store)
        for _ in range(MAX_REVISIONS):
            _create(store, original_id=original.id)

        with pytest.raises(RevisionLimitError):
            _create(store, original_id=original.id)

    def test_number_not_reused_after_delete(self):
        store = _make_store()
        original = _create(store)
        first = _create(store, original_id=original.id)
        _create(store, original_id=original.id)
        asyncio.run(store.delete_logo(first.id, OWNER))

        third = _create(store, original_id=original.id)

        revisions = asyncio.run(store.fetch_revisions(original.id, OWNER))
        assert third.revision_number == 3
        assert [r.revision_number for r in revisions] == [2, 3]

    def test_revision_of_unknown_original(self):
        with pytest.raises(LogoNotFoundError):
            _create(_make_store(), original_id="nope")

    def test_revisions_not_listed_as_originals(self):
        store = _make_store()
        original = _create(store)
        _create(store, original_id=original.id)

        assert [logo.id for logo in asyncio.run(store.fetch_originals(OWNER))] == [original.id]


class TestWrites:

    def test_delete_original_cascades(self):
        store = _make_store()
        original = _create(store)
        _create(store, original_id=original.id)
        keep = _create(store)

        asyncio.run(store.delete_logo(original.id, OWNER))

        assert len(store) == 1
        assert asyncio.run(store.fetch_full_logo(keep.id, OWNER)) is not None

    def test_delete_revision_keeps_original(self):
        store = _make_store()
        original = _create(store)
        revision = _create(store, original_id=original.id)

        asyncio.run(store.delete_logo(revision.id, OWNER))

        assert len(store) == 1
        assert asyncio.run(store.fetch_revisions(original.id, OWNER)) == []

    def test_rename_and_blank_name(self):
        store = _make_store()
        logo = _create(store, name="Old")

        asyncio.run(store.rename_logo(logo.id, "  New  ", OWNER))
        assert asyncio.run(store.fetch_full_logo(logo.id, OWNER)).name == "New"

        assert _create(store, name="   ").name == "Untitled"
