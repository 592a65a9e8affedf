# ============================================================================
# CATALOG FLAG CACHE TESTS
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Tests - Durable flag cache
# PURPOSE: Verify merge-on-write, storage layout and failure degradation
# CREATED: 14 OCT 2026
# ============================================================================
"""
Catalog Flag Cache Tests

Run with:
    pytest tests/test_catalog_flags.py -v
"""

import json

from core.models.catalog import CatalogFlag
from infrastructure.flag_storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from services.catalog_flags import CatalogFlagCache


# ============================================================================
# HELPERS
# ============================================================================

KEY = "logo_catalog_cache"


def _flag(logo_id, in_catalog=True, code=None):
    return CatalogFlag(logo_id=logo_id, is_in_catalog=in_catalog, catalog_code=code)


class BrokenStorage(KeyValueStorage):
    """Storage whose every call fails."""

    def get_item(self, key):
        raise OSError("disk gone")

    def set_item(self, key, value):
        raise OSError("disk gone")

    def remove_item(self, key):
        raise OSError("disk gone")


# ============================================================================
# MERGE
# ============================================================================

class TestWriteMerge:

    def test_merge_keeps_existing_keys(self):
        cache = CatalogFlagCache(MemoryStorage(), storage_key=KEY)
        cache.write_merge({"A": _flag("A", code="AA01")})
        cache.write_merge({"B": _flag("B", code="BB02")})

        flags = cache.read_all()
        assert set(flags) == {"A", "B"}
        assert flags["A"].is_in_catalog is True
        assert flags["A"].catalog_code == "AA01"
        assert flags["B"].catalog_code == "BB02"

    def test_merge_overwrites_same_key(self):
        cache = CatalogFlagCache(MemoryStorage(), storage_key=KEY)
        cache.write_merge({"A": _flag("A", in_catalog=False)})
        cache.mark_in_catalog("A", "ZZ99")

        flag = cache.get("A")
        assert flag.is_in_catalog is True
        assert flag.catalog_code == "ZZ99"

    def test_stored_layout(self):
        storage = MemoryStorage()
        cache = CatalogFlagCache(storage, storage_key=KEY)
        cache.mark_in_catalog("logo_1", "AB12")

        stored = json.loads(storage.get_item(KEY))
        assert stored == {"logo_1": {"isInCatalog": True, "catalogCode": "AB12"}}

    def test_empty_partial_is_noop(self):
        storage = MemoryStorage()
        CatalogFlagCache(storage, storage_key=KEY).write_merge({})
        assert storage.get_item(KEY) is None


# ============================================================================
# FAILURE DEGRADATION
# ============================================================================

class TestDegradation:

    def test_read_failure_is_empty(self):
        cache = CatalogFlagCache(BrokenStorage(), storage_key=KEY)
        assert cache.read_all() == {}
        assert cache.get("A") is None

    def test_write_failure_is_swallowed(self):
        cache = CatalogFlagCache(BrokenStorage(), storage_key=KEY)
        cache.write_merge({"A": _flag("A")})  # does not raise

    def test_corrupt_json_is_empty(self):
        cache = CatalogFlagCache(MemoryStorage({KEY: "{not json"}), storage_key=KEY)
        assert cache.read_all() == {}

    def test_non_object_json_is_empty(self):
        cache = CatalogFlagCache(MemoryStorage({KEY: "[1, 2]"}), storage_key=KEY)
        assert cache.read_all() == {}


# ============================================================================
# DURABILITY
# ============================================================================

class TestJsonFileStorage:

    def test_survives_new_instance(self, tmp_path):
        path = tmp_path / "flags" / "catalog.json"
        CatalogFlagCache(JsonFileStorage(path), storage_key=KEY).mark_in_catalog("A", "AA01")

        reopened = CatalogFlagCache(JsonFileStorage(path), storage_key=KEY)
        assert reopened.get("A").catalog_code == "AA01"

    def test_missing_file_reads_empty(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "absent.json")
        assert storage.get_item(KEY) is None

    def test_remove_item(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "s.json")
        storage.set_item("k", "v")
        storage.remove_item("k")
        assert storage.get_item("k") is None
