# ============================================================================
# DURABLE KEY-VALUE STORAGE
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Infrastructure - Small durable string store
# PURPOSE: Back the catalog flag cache so flags survive restarts
# CREATED: 14 OCT 2026
# ============================================================================
"""
Durable Key-Value Storage

A tiny get/set string store, the server-side counterpart of per-browser
storage. Values are JSON text written by the caller.

- JsonFileStorage: one JSON document on disk mapping key -> value,
  written atomically via a temp file + replace
- MemoryStorage: dict-backed, for tests and ephemeral sessions

Both raise on I/O problems; the flag cache above them decides what to
swallow.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union


class KeyValueStorage(ABC):
    """Minimal durable string storage."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Stored value, or None if the key was never written."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Overwrite the value under key."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete key if present."""


class MemoryStorage(KeyValueStorage):
    """Dict-backed storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """
    Storage persisted as a single JSON object on disk.

    Usage:
        storage = JsonFileStorage(".cache/catalog_flags.json")
        storage.set_item("logo_catalog_cache", '{"logo_1": {...}}')
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
