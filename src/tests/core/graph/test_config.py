"""Tests for declarative graph configuration and validation."""

import json

import pytest

from relaygraph.core.errors import ConfigurationError
from relaygraph.core.graph.config import EdgeKind, GraphConfig
from relaygraph.core.graph.state import MergeStrategy
from relaygraph.core.graph.validator import ensure_valid, validate_graph


def make_config(**overrides) -> dict:
    data = {
        "name": "review",
        "state_keys": [{"name": "draft"}],
        "nodes": [
            {"id": "write", "type": "LLM_NODE"},
            {"id": "check", "type": "CONDITION_NODE"},
        ],
        "edges": [
            {"from": "START", "to": "write"},
            {"from": "write", "to": "check"},
            {"from": "check", "type": "CONDITIONAL", "routes": {"ok": "END", "retry": "write"}},
        ],
    }
    data.update(overrides)
    return data


class TestGraphConfigParsing:
    """Test parsing of stored configuration documents."""

    def test_state_config_block(self):
        config = GraphConfig.from_json(json.dumps({
            "name": "research",
            "stateConfig": {
                "keys": [
                    {"key": "question", "strategy": "REPLACE"},
                    {"key": "notes", "strategy": "append"},
                ],
                "initialValues": {"question": "why?"},
            },
            "nodes": [{"id": "a", "type": "LLM_NODE", "config": {"input_key": "question"}}],
            "edges": [{"from": "START", "to": "a"}, {"from": "a", "to": "END"}],
        }))
        assert [key.name for key in config.state_keys] == ["question", "notes"]
        assert config.state_keys[1].merge_strategy == MergeStrategy.APPEND
        assert config.initial_values == {"question": "why?"}
        assert config.nodes[0].params == {"input_key": "question"}

    def test_edge_kind_is_case_insensitive(self):
        config = GraphConfig.from_dict(make_config(edges=[
            {"from": "check", "type": "conditional", "routes": {"ok": "END"}},
        ]))
        assert config.edges[0].kind == EdgeKind.CONDITIONAL
        assert config.edges[0].is_conditional

    def test_malformed_json(self):
        with pytest.raises(ConfigurationError):
            GraphConfig.from_json("{not json")

    def test_non_object_json(self):
        with pytest.raises(ConfigurationError):
            GraphConfig.from_json("[1, 2]")

    def test_schema_mismatch(self):
        with pytest.raises(ConfigurationError):
            GraphConfig.from_dict({"name": "x", "nodes": "not a list"})


class TestValidator:
    """Test structural validation."""

    def test_valid_config(self):
        config = GraphConfig.from_dict(make_config())
        assert validate_graph(config) == []
        assert config.validate_structure() == []
        assert ensure_valid(config) is config

    def test_missing_name_reported_first(self):
        config = GraphConfig.from_dict(make_config(name="", nodes=[], edges=[]))
        errors = validate_graph(config)
        assert len(errors) == 1
        assert "name" in errors[0]

    def test_missing_state_keys(self):
        errors = validate_graph(GraphConfig.from_dict(make_config(state_keys=[])))
        assert "state key" in errors[0]

    def test_missing_nodes(self):
        errors = validate_graph(GraphConfig.from_dict(make_config(nodes=[])))
        assert "node" in errors[0]

    def test_duplicate_node_ids(self):
        config = GraphConfig.from_dict(make_config(nodes=[
            {"id": "write", "type": "LLM_NODE"},
            {"id": "write", "type": "LLM_NODE"},
        ]))
        errors = validate_graph(config)
        assert "Duplicate" in errors[0]
        assert "write" in errors[0]

    def test_missing_edges(self):
        errors = validate_graph(GraphConfig.from_dict(make_config(edges=[])))
        assert "edge" in errors[0]

    def test_dangling_endpoints(self):
        config = GraphConfig.from_dict(make_config(edges=[
            {"from": "START", "to": "write"},
            {"from": "write", "to": "ghost"},
        ]))
        errors = validate_graph(config)
        assert "ghost" in errors[0]

    def test_conditional_edge_without_routes(self):
        config = GraphConfig.from_dict(make_config(edges=[
            {"from": "START", "to": "write"},
            {"from": "write", "type": "CONDITIONAL", "routes": {}},
        ]))
        assert "no routes" in validate_graph(config)[0]

    def test_conditional_route_to_unknown_target(self):
        config = GraphConfig.from_dict(make_config(edges=[
            {"from": "START", "to": "write"},
            {"from": "write", "type": "CONDITIONAL", "routes": {"x": "nowhere"}},
        ]))
        assert "nowhere" in validate_graph(config)[0]

    def test_ensure_valid_raises(self):
        with pytest.raises(ConfigurationError):
            ensure_valid(GraphConfig.from_dict(make_config(nodes=[])))
