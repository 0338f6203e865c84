"""Tests for building graphs from declarative configuration."""

import json

import pytest

from relaygraph.core.config import EngineSettings
from relaygraph.core.errors import ConfigurationError
from relaygraph.core.graph.builder import GraphBuilder, build_graph
from relaygraph.core.graph.config import GraphConfig
from tests.fakes import FakePort

REVIEW_LOOP = {
    "name": "review_loop",
    "stateConfig": {
        "keys": [
            {"key": "question"},
            {"key": "answer"},
            {"key": "score"},
            {"key": "verdict"},
        ],
        "initialValues": {"question": "Rate yourself"},
    },
    "nodes": [
        {"id": "ask", "type": "LLM_NODE", "config": {"input_key": "question", "output_key": "answer"}},
        {"id": "score", "type": "TRANSFORM_NODE",
         "config": {"transform_type": "PARSE_NUMBER", "input_keys": ["answer"], "output_key": "score"}},
        {"id": "check", "type": "TRANSFORM_NODE",
         "config": {"transform_type": "THRESHOLD_CHECK", "input_keys": ["score"],
                    "output_key": "verdict", "threshold": 80}},
        {"id": "gate", "type": "CONDITION_NODE",
         "config": {"condition_field": "verdict",
                    "routes": {"PASS": "done", "NEED_IMPROVEMENT": "retry"}}},
    ],
    "edges": [
        {"from": "START", "to": "ask"},
        {"from": "ask", "to": "score"},
        {"from": "score", "to": "check"},
        {"from": "check", "to": "gate"},
        {"from": "gate", "type": "CONDITIONAL", "routes": {"done": "END", "retry": "ask"}},
    ],
}


@pytest.fixture
def config() -> GraphConfig:
    return GraphConfig.from_json(json.dumps(REVIEW_LOOP))


class TestGraphBuilder:
    """Test compiling configurations into graphs."""

    def test_build_wires_nodes(self, config: GraphConfig):
        graph = build_graph(config, FakePort())
        assert list(graph.nodes) == ["ask", "score", "check", "gate"]
        assert graph.entry_point == "ask"
        assert graph.transitions["gate"].is_conditional
        assert graph.validate() == []

    @pytest.mark.asyncio
    async def test_built_graph_loops_until_pass(self, config: GraphConfig):
        port = FakePort(replies=["40", "90"])
        graph = build_graph(config, port)

        state = await graph.run()

        assert len(port.calls) == 2
        assert port.inputs == ["Rate yourself", "Rate yourself"]
        assert state.get("score") == 90
        assert state.get("verdict") == "PASS"
        assert state.visits("ask") == 2

    def test_settings_applied(self, config: GraphConfig):
        settings = EngineSettings(max_node_visits=4, strict_initial_values=True)
        graph = GraphBuilder(settings=settings).build(config, FakePort())
        assert graph.max_node_visits == 4
        assert graph.strict_initial_values
        assert graph.initial_values == {"question": "Rate yourself"}

    def test_invalid_structure_fails_before_building(self):
        data = dict(REVIEW_LOOP, nodes=[])
        with pytest.raises(ConfigurationError):
            build_graph(GraphConfig.from_dict(data), FakePort())

    def test_unknown_node_type(self):
        data = json.loads(json.dumps(REVIEW_LOOP))
        data["nodes"][1]["type"] = "MYSTERY_NODE"
        with pytest.raises(ConfigurationError):
            build_graph(GraphConfig.from_dict(data), FakePort())

    def test_llm_node_without_port(self, config: GraphConfig):
        with pytest.raises(ConfigurationError):
            build_graph(config)

    def test_node_without_outgoing_edge(self):
        data = json.loads(json.dumps(REVIEW_LOOP))
        data["edges"] = data["edges"][:3]
        with pytest.raises(ConfigurationError) as exc_info:
            build_graph(GraphConfig.from_dict(data), FakePort())
        assert "gate" in str(exc_info.value)

    def test_missing_entry_point(self):
        data = json.loads(json.dumps(REVIEW_LOOP))
        data["edges"] = data["edges"][1:]
        with pytest.raises(ConfigurationError):
            build_graph(GraphConfig.from_dict(data), FakePort())
