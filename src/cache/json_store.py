# src/cache/json_store.py - v2
"""JSON file-based cache store (CACHE_BACKEND=json).

Stores each entry as an individual JSON file under CACHE_ROOT, so cached
results survive process restarts. Same TTL contract as the memory store.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from nutriscope.cache.base_cache_store import BaseCacheStore
from nutriscope.cache.models import CacheEntry
from nutriscope.core.models import OperationResult

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON files."""

    def __init__(self, cache_root: Path | str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    async def get(self, key: str) -> OperationResult | None:
        """Retrieve the unexpired value for *key*."""
        path = self._entry_path(key)
        entry = self._read(path)
        if entry is None:
            return None
        if self._expired(entry):
            path.unlink(missing_ok=True)
            logger.debug("Cache entry expired: %s", key)
            return None
        return entry.value

    async def put(self, key: str, value: OperationResult) -> None:
        """Store a cache entry."""
        path = self._entry_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        entry = self._new_entry(key, value)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(entry.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(path)

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        self._entry_path(key).unlink(missing_ok=True)

    async def clear(self) -> None:
        for path in self._root.glob("*.json"):
            path.unlink(missing_ok=True)

    async def purge_expired(self) -> int:
        removed = 0
        for path in self._root.glob("*.json"):
            entry = self._read(path)
            if entry is None or self._expired(entry):
                path.unlink(missing_ok=True)
                removed += 1
        return removed

    def size(self) -> int:
        return sum(1 for _ in self._root.glob("*.json"))

    def _read(self, path: Path) -> CacheEntry | None:
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return CacheEntry.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Failed to read cache entry %s: %s", path.name, e)
            return None

    def _entry_path(self, key: str) -> Path:
        """Return file path for a cache key."""
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"
