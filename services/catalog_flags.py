# ============================================================================
# CATALOG FLAG CACHE
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Service - Durable catalog membership cache
# PURPOSE: Paint catalog badges instantly, before the network confirms
# CREATED: 14 OCT 2026
# ============================================================================
"""
Catalog Flag Cache

All flags live under one storage key as a JSON object:

    {"logo_1": {"isInCatalog": true, "catalogCode": "AB12"}, ...}

write_merge() reads the stored object, overwrites only the keys it is
given and writes the whole object back. Storage errors never propagate:
reads degrade to an empty map and writes become no-ops.

Callers must only write positive confirmations after a failed status
check; see CatalogSyncService.
"""

import json
from typing import Dict, Optional

from core.config import get_defaults
from core.logging import get_logger
from core.models.catalog import CatalogFlag
from infrastructure.flag_storage import KeyValueStorage

logger = get_logger(__name__)


class CatalogFlagCache:
    """Durable logo id -> CatalogFlag map."""

    def __init__(self, storage: KeyValueStorage, storage_key: Optional[str] = None):
        self.storage = storage
        self.storage_key = storage_key or get_defaults().catalog.storage_key

    def read_all(self) -> Dict[str, CatalogFlag]:
        """Every stored flag; empty on any storage or decode error."""
        try:
            raw = self.storage.get_item(self.storage_key)
            if not raw:
                return {}
            data = json.loads(raw)
            if not isinstance(data, dict):
                logger.warning(f"Ignoring non-object catalog cache under {self.storage_key}")
                return {}
            return {
                logo_id: CatalogFlag.model_validate({**value, "logoId": logo_id})
                for logo_id, value in data.items()
                if isinstance(value, dict)
            }
        except Exception as e:
            logger.warning(f"Catalog flag cache unreadable, treating as empty: {e}")
            return {}

    def get(self, logo_id: str) -> Optional[CatalogFlag]:
        return self.read_all().get(logo_id)

    def write_merge(self, partial: Dict[str, CatalogFlag]) -> None:
        """Shallow-merge partial into the stored map, key-wise."""
        if not partial:
            return
        try:
            current = {
                logo_id: flag.to_storage() for logo_id, flag in self.read_all().items()
            }
            for logo_id, flag in partial.items():
                current[logo_id] = flag.to_storage()
            self.storage.set_item(self.storage_key, json.dumps(current))
        except Exception as e:
            logger.warning(f"Catalog flag cache write skipped: {e}")

    def mark_in_catalog(self, logo_id: str, catalog_code: Optional[str]) -> None:
        """Record a positive confirmation."""
        self.write_merge({
            logo_id: CatalogFlag(
                logo_id=logo_id, is_in_catalog=True, catalog_code=catalog_code,
            )
        })
