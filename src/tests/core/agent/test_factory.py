"""Tests for building agents from configuration documents."""

import json

import pytest

from mirascope.core import BaseTool

from relaygraph.core.agent.base import InvocationSettings
from relaygraph.core.agent.factory import AgentFactory, AgentFactoryConfig
from relaygraph.core.agent.registry import AgentRegistry
from relaygraph.core.errors import ConfigurationError
from relaygraph.core.patterns.config import WorkflowPattern
from relaygraph.core.tools.registry import ToolRegistry
from tests.fakes import FakePort


class SearchTool(BaseTool):
    """Search the web."""
    query: str

    def call(self) -> str:
        return f"results for {self.query}"


@pytest.fixture
def factory(researcher) -> AgentFactory:
    tools = ToolRegistry()
    tools.register("search", SearchTool)
    agents = AgentRegistry()
    agents.register(researcher)
    return AgentFactory(FakePort(), tool_registry=tools, agent_registry=agents)


class TestParseConfig:
    """Test configuration parsing."""

    @pytest.mark.parametrize("source", [None, ""])
    def test_empty_input_gives_defaults(self, source):
        config = AgentFactory.parse_config(source)
        assert config == AgentFactoryConfig()

    def test_camel_case_keys(self):
        config = AgentFactory.parse_config(json.dumps({
            "supervisorInstruction": "Coordinate.",
            "maxIterations": 8,
            "temperature": 0.3,
            "workers": [{"ref": "researcher"}, {"name": "writer", "tools": ["search"]}],
        }))
        assert config.supervisor_instruction == "Coordinate."
        assert config.settings == InvocationSettings(temperature=0.3, max_iterations=8)
        assert config.workers[0].is_reference
        assert not config.workers[1].is_reference

    def test_malformed_json(self):
        with pytest.raises(ConfigurationError):
            AgentFactory.parse_config("{oops")

    def test_worker_without_identity(self):
        with pytest.raises(ConfigurationError):
            AgentFactory.parse_config({"workers": [{"instruction": "who am I?"}]})


class TestBuildSingle:
    """Test single agents."""

    def test_build_single(self, factory: AgentFactory):
        agent = factory.build_single(
            "scout",
            {"instruction": "Find sources.", "tools": ["searchTools", "missing"], "temperature": 0.5},
            description="Finds sources",
        )
        assert agent.name == "scout"
        assert agent.description == "Finds sources"
        assert agent.instruction == "Find sources."
        assert agent.tools == [SearchTool]
        assert agent.settings.temperature == 0.5
        assert agent.port is factory.port


class TestBuildSequential:
    """Test sequential workflows."""

    @pytest.mark.asyncio
    async def test_build_sequential(self, factory: AgentFactory):
        workflow = factory.build_sequential("pipeline", {
            "agents": [
                {"name": "outline", "instruction": "Outline it."},
                {"name": "draft", "instruction": "Draft it."},
            ],
        })
        assert workflow.pattern == WorkflowPattern.SEQUENTIAL
        assert workflow.config.workflow_name == "pipeline"

        result = await workflow.execute("bees")

        assert result.success
        assert factory.port.inputs == ["bees", "reply to: bees"]
        assert [call["instruction"] for call in factory.port.calls] == ["Outline it.", "Draft it."]

    def test_requires_agents(self, factory: AgentFactory):
        with pytest.raises(ConfigurationError):
            factory.build_sequential("empty", {})


class TestBuildSupervisor:
    """Test supervisor teams."""

    def test_reference_and_inline_workers(self, factory: AgentFactory, researcher):
        team = factory.build_supervisor("lead", {
            "supervisorInstruction": "Coordinate the team.",
            "tools": ["search"],
            "workers": [
                {"ref": "Researcher"},
                {"name": "writer", "instruction": "Write clearly.", "tools": ["search"]},
            ],
            "maxIterations": 6,
        })

        assert team.name == "lead"
        assert team.workers["researcher"] is researcher
        assert team.workers["writer"].tools == [SearchTool]
        assert team.workers["writer"].instruction == "Write clearly."
        assert team.supervisor.instruction == "Coordinate the team."
        assert team.supervisor.settings.max_iterations == 6
        assert team.tools[0] is SearchTool
        assert len(team.tools) == 3

    def test_unknown_reference(self, factory: AgentFactory):
        with pytest.raises(ConfigurationError) as exc_info:
            factory.build_supervisor("lead", {"workers": [{"ref": "ghost"}]})
        assert "ghost" in str(exc_info.value)

    def test_requires_workers(self, factory: AgentFactory):
        with pytest.raises(ConfigurationError):
            factory.build_supervisor("lead", "")

    def test_default_registries(self):
        factory = AgentFactory(FakePort())
        team = factory.build_supervisor("lead", {"workers": [{"name": "solo"}]})
        assert team.worker_names == ["solo"]
