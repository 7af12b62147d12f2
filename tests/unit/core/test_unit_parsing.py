# tests/unit/core/test_unit_parsing.py - v1
"""Tests for core/parsing.py: JSON span extraction and fallbacks."""

from __future__ import annotations

import json

import pytest

from nutriscope.core.models import AnalysisResult, FactsResult, Operation, TagsResult
from nutriscope.core.parsing import (
    extract_json_object,
    parse_operation_response,
    parse_tags,
)


class TestExtractJsonObject:
    def test_plain_object(self):
        assert extract_json_object('{"a": 1}') == '{"a": 1}'

    def test_markdown_fence_and_prose(self):
        text = 'Here you go:\n```json\n{"a": {"b": 2}}\n```\nHope it helps {really}.'
        assert json.loads(extract_json_object(text)) == {"a": {"b": 2}}

    def test_braces_inside_strings(self):
        text = '{"note": "use {x} and \\"}\\"", "n": 1} trailing'
        assert json.loads(extract_json_object(text)) == {"note": 'use {x} and "}"', "n": 1}

    def test_no_object(self):
        assert extract_json_object("no json here") is None

    def test_unbalanced(self):
        assert extract_json_object('{"a": [1, 2') is None

    def test_unclosed_brace_skipped_for_later_object(self):
        text = 'Here is the result {see below\n{"title": "T", "summary": "S"}'
        assert json.loads(extract_json_object(text)) == {"title": "T", "summary": "S"}


class TestAnalysisParsing:
    def test_valid_response(self):
        raw = 'Sure!\n{"title": "Eggs", "summary": "Protein rich", "keyPoints": ["6g protein"]}'
        result = parse_operation_response(Operation.ANALYZE, raw)
        assert isinstance(result, AnalysisResult)
        assert result.title == "Eggs"
        assert result.key_points == ["6g protein"]

    def test_object_after_stray_brace(self):
        raw = 'Here is the result {see below\n{"title": "T", "summary": "S"}'
        result = parse_operation_response(Operation.ANALYZE, raw)
        assert (result.title, result.summary) == ("T", "S")

    def test_prose_falls_back(self):
        raw = "I am unable to produce JSON for this content."
        result = parse_operation_response(Operation.ANALYZE, raw)
        assert result.title == "Analysis result"
        assert result.summary == raw + "..."
        assert result.key_points == []
        assert result.category == "general"

    def test_fallback_summary_truncated(self):
        raw = "x" * 500
        result = parse_operation_response(Operation.ANALYZE, raw)
        assert result.summary == "x" * 200 + "..."

    def test_invalid_json_falls_back(self, caplog):
        raw = '{"title": "Eggs", "summary": }'
        with caplog.at_level("WARNING"):
            result = parse_operation_response(Operation.ANALYZE, raw)
        assert result.title == "Analysis result"
        assert "parse failed" in caplog.text

    def test_schema_mismatch_falls_back(self):
        result = parse_operation_response(Operation.ANALYZE, '{"keyPoints": "not a list"}')
        assert result.title == "Analysis result"


class TestFactsParsing:
    def test_valid_response(self):
        raw = '{"nutrients": ["Iron"], "warnings": ["Avoid excess"], "targetGroup": ["Teens"]}'
        result = parse_operation_response(Operation.EXTRACT_FACTS, raw)
        assert isinstance(result, FactsResult)
        assert result.target_group == ["Teens"]

    def test_fallback_is_empty(self):
        result = parse_operation_response(Operation.EXTRACT_FACTS, "nothing useful")
        assert result == FactsResult()


class TestTagsParsing:
    def test_split_and_trim(self):
        assert parse_tags(" Protein , Eggs,,  Breakfast \n").tags == ["Protein", "Eggs", "Breakfast"]

    def test_capped_at_eight(self):
        raw = ", ".join(f"tag{i}" for i in range(10))
        assert len(parse_tags(raw).tags) == 8

    def test_empty(self):
        assert parse_tags("   ").tags == []

    def test_dispatch(self):
        result = parse_operation_response(Operation.GENERATE_TAGS, "A, B")
        assert isinstance(result, TagsResult)
        assert result.tags == ["A", "B"]

    def test_unknown_operation(self):
        with pytest.raises(ValueError):
            parse_operation_response("bogus", "A, B")  # type: ignore[arg-type]
