# src/cache/cache_factory.py - v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from nutriscope.cache.base_cache_store import DEFAULT_TTL_S, BaseCacheStore
from nutriscope.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the memory backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "memory" if settings is None else settings.cache_backend
    ttl_s = DEFAULT_TTL_S if settings is None else settings.cache_ttl_ms / 1000.0

    if backend == "memory":
        from nutriscope.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore(ttl_s=ttl_s)

    if backend == "json":
        from nutriscope.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=settings.cache_root, ttl_s=ttl_s)

    raise ValueError(f"Unsupported cache backend: {backend!r}")
