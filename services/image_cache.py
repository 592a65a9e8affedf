# ============================================================================
# IMAGE OBJECT CACHE
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Service - Session-scoped bounded TTL cache
# PURPOSE: Keep recently loaded logo images so revisiting a page is instant
# CREATED: 14 OCT 2026
# ============================================================================
"""
Image Object Cache

Bounded map of logo id -> image payload with a per-entry TTL.

Rules:
- get() treats an entry as absent once now > expires_at, but leaves it in
  the map; expired entries are only replaced or evicted later.
- put() on a full cache evicts the entry with the smallest inserted_at
  (first in iteration order on ties), then inserts.
- Re-putting a key already present overwrites it without evicting.
- Eviction happens only inside put(). There is no background sweep.

A cache is best-effort: callers treat every miss as a normal path to
the store.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Iterator, Optional, Tuple, TypeVar

from core.config import get_defaults
from core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """One cached value with its timing."""
    data: T
    inserted_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class ImageObjectCache(Generic[T]):
    """
    Bounded, TTL-based, least-recently-inserted cache.

    Usage:
        cache = ImageObjectCache(max_entries=20, ttl_seconds=300)
        cache.put("logo_1", "data:image/png;base64,...")
        cache.get("logo_1")
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        defaults = get_defaults().cache
        self.max_entries = max_entries if max_entries is not None else defaults.max_entries
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else defaults.ttl_seconds
        if self.max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}

    def __len__(self) -> int:
        """Physical size, expired entries included."""
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def items(self) -> Iterator[Tuple[str, CacheEntry[T]]]:
        return iter(list(self._entries.items()))

    def get(self, key: str) -> Optional[T]:
        """Cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            return None
        return entry.data

    def put(self, key: str, data: T) -> None:
        """Insert or overwrite, evicting the oldest insertion when full."""
        if key not in self._entries and len(self._entries) >= self.max_entries:
            self._evict_oldest()

        now = self._clock()
        # Overwrite moves the key to the end of iteration order
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(
            data=data,
            inserted_at=now,
            expires_at=now + self.ttl_seconds,
        )

    def invalidate(self, key: str) -> bool:
        """Drop one key. Returns True if it was present."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def _evict_oldest(self) -> None:
        oldest_key = None
        oldest_at = None
        for key, entry in self._entries.items():
            if oldest_at is None or entry.inserted_at < oldest_at:
                oldest_key = key
                oldest_at = entry.inserted_at
        if oldest_key is not None:
            del self._entries[oldest_key]
            logger.debug(f"Evicted {oldest_key} from image cache")
