# tests/integration/cache/test_int_json_cache.py - v1
"""Integration test: JSON cache backend shared by successive orchestrators."""

from __future__ import annotations

import pytest
from fakes import FakeLLMClient

from nutriscope.api.facade import AnalysisOrchestrator
from nutriscope.cache.cache_factory import create_cache_store
from nutriscope.config.settings import Settings
from nutriscope.core.models import AnalysisResult, FactsResult


@pytest.fixture
def json_settings(tmp_path) -> Settings:
    return Settings.model_construct(cache_backend="json", cache_root=tmp_path / "cache")


class TestJsonCacheAcrossRestarts:
    @pytest.mark.asyncio
    async def test_second_instance_reuses_results(self, json_settings, fast_config):
        first_client = FakeLLMClient()
        first = AnalysisOrchestrator(
            settings=json_settings, config=fast_config, backend=first_client,
            cache_store=create_cache_store(json_settings),
        )
        analysis = await first.analyze("Chia seeds contain omega-3.", "paper")
        facts = await first.extract_facts("Chia seeds contain omega-3.")

        second_client = FakeLLMClient()
        second = AnalysisOrchestrator(
            settings=json_settings, config=fast_config, backend=second_client,
            cache_store=create_cache_store(json_settings),
        )
        again = await second.analyze("Chia seeds contain omega-3.", "paper")
        facts_again = await second.extract_facts("Chia seeds contain omega-3.")

        assert second_client.calls == 0
        assert isinstance(again, AnalysisResult) and again == analysis
        assert isinstance(facts_again, FactsResult) and facts_again == facts
        assert second.get_metrics().cache_hits == 2

    @pytest.mark.asyncio
    async def test_clear_cache_removes_files(self, json_settings, fast_config, tmp_path):
        orch = AnalysisOrchestrator(
            settings=json_settings, config=fast_config, backend=FakeLLMClient(),
        )
        await orch.generate_tags("Chia")
        assert list((tmp_path / "cache").glob("*.json"))
        await orch.clear_cache()
        assert not list((tmp_path / "cache").glob("*.json"))
