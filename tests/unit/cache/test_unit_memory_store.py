# tests/unit/cache/test_unit_memory_store.py - v1
"""Tests for cache/memory_store.py and the BaseCacheStore contract."""

from __future__ import annotations

import pytest

from nutriscope.cache.base_cache_store import BaseCacheStore
from nutriscope.cache.memory_store import MemoryCacheStore
from nutriscope.core.models import AnalysisResult, TagsResult


class TestBaseCacheStore:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BaseCacheStore()  # type: ignore[abstract]

    def test_has_required_methods(self):
        for method in ["get", "put", "delete", "clear", "purge_expired", "size"]:
            assert hasattr(BaseCacheStore, method)


class TestMemoryCacheStore:
    @pytest.mark.asyncio
    async def test_put_then_get(self, fake_clock):
        store = MemoryCacheStore(ttl_s=10, clock=fake_clock)
        await store.put("k", TagsResult(tags=["Iron"]))
        assert await store.get("k") == TagsResult(tags=["Iron"])
        assert store.size() == 1

    @pytest.mark.asyncio
    async def test_miss(self, fake_clock):
        store = MemoryCacheStore(ttl_s=10, clock=fake_clock)
        assert await store.get("missing") is None

    @pytest.mark.asyncio
    async def test_entry_valid_until_ttl(self, fake_clock):
        store = MemoryCacheStore(ttl_s=10, clock=fake_clock)
        await store.put("k", TagsResult(tags=["Iron"]))
        fake_clock.advance(10)
        assert await store.get("k") is not None

    @pytest.mark.asyncio
    async def test_expired_entry_absent_and_removed(self, fake_clock):
        store = MemoryCacheStore(ttl_s=10, clock=fake_clock)
        await store.put("k", TagsResult(tags=["Iron"]))
        fake_clock.advance(10.5)
        assert await store.get("k") is None
        assert store.size() == 0

    @pytest.mark.asyncio
    async def test_ttl_change_applies_to_existing_entries(self, fake_clock):
        store = MemoryCacheStore(ttl_s=10, clock=fake_clock)
        await store.put("k", TagsResult(tags=["Iron"]))
        fake_clock.advance(2)
        store.ttl_s = 1
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_overwrite(self, fake_clock):
        store = MemoryCacheStore(ttl_s=10, clock=fake_clock)
        await store.put("k", TagsResult(tags=["a"]))
        await store.put("k", TagsResult(tags=["b"]))
        assert (await store.get("k")).tags == ["b"]
        assert store.size() == 1

    @pytest.mark.asyncio
    async def test_values_are_isolated_copies(self, fake_clock):
        store = MemoryCacheStore(ttl_s=10, clock=fake_clock)
        original = AnalysisResult(title="T", key_points=["a"])
        await store.put("k", original)
        original.key_points.append("mutated before read")

        first = await store.get("k")
        first.key_points.append("mutated after read")
        second = await store.get("k")
        assert second.key_points == ["a"]

    @pytest.mark.asyncio
    async def test_purge_expired(self, fake_clock):
        store = MemoryCacheStore(ttl_s=10, clock=fake_clock)
        await store.put("old1", TagsResult())
        await store.put("old2", TagsResult())
        fake_clock.advance(11)
        await store.put("fresh", TagsResult())
        assert await store.purge_expired() == 2
        assert store.size() == 1
        assert await store.get("fresh") is not None

    @pytest.mark.asyncio
    async def test_delete_and_clear(self, fake_clock):
        store = MemoryCacheStore(ttl_s=10, clock=fake_clock)
        await store.put("a", TagsResult())
        await store.put("b", TagsResult())
        await store.delete("a")
        await store.delete("never-existed")
        assert store.size() == 1
        await store.clear()
        assert store.size() == 0
