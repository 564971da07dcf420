"""
Tests for the metadata merger.
"""

from __future__ import annotations

from rpc_schema_to_code.pipeline.analyzer.metadata_merger import MetadataMerger
from rpc_schema_to_code.pipeline.analyzer.type_nodes import thaw


class TestMetadataMerger:
    def test_later_sources_win(self):
        assert MetadataMerger.merge({"a": 1, "b": 1}, {"b": 2}, {"c": 3}) == {"a": 1, "b": 2, "c": 3}

    def test_keys_keep_first_position(self):
        merged = MetadataMerger.merge({"a": 1, "b": 1}, {"c": 3, "a": 2})
        assert list(merged) == ["a", "b", "c"]

    def test_merge_is_shallow(self):
        merged = MetadataMerger.merge({"rest": {"method": "POST", "url": "/x"}}, {"rest": {"method": "GET"}})
        assert merged == {"rest": {"method": "GET"}}

    def test_empty_sources(self):
        assert MetadataMerger.merge(None, {}, None) == {}

    def test_sites(self):
        merger = MetadataMerger({"fields": {"serialize": True}, "services": {"version": 1}})
        assert thaw(merger.field({"nullable": False}, {"serialize": False})) == {"serialize": False, "nullable": False}
        assert thaw(merger.method(None, {"auth": True})) == {"auth": True}
        assert thaw(merger.model(None)) == {}
        assert thaw(merger.service({"name": "x"})) == {"version": 1, "name": "x"}

    def test_values_are_not_interpreted(self):
        merger = MetadataMerger()
        value = {"weird": [1, {"nested": None}], "n": 0.1}
        assert thaw(merger.model(value)) == value

    def test_inputs_are_not_mutated(self):
        defaults = {"methods": {"auth": True}}
        merger = MetadataMerger(defaults)
        merger.method({"timeout": 1}, {"auth": False})
        assert defaults == {"methods": {"auth": True}}
