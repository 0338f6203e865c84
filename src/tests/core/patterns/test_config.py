"""Tests for pattern configuration and results."""

import pytest

from relaygraph.core.errors import ConfigurationError
from relaygraph.core.patterns.config import AgentConfig, AgentWorkflowConfig, WorkflowPattern
from relaygraph.core.patterns.result import AgentStepResult, StepStatus, WorkflowResult
from tests.fakes import FakeAgent


class TestWorkflowPattern:
    """Test pattern lookup."""

    @pytest.mark.parametrize("code", ["sequential", "SEQUENTIAL", " Sequential "])
    def test_from_code(self, code: str):
        assert WorkflowPattern.from_code(code) == WorkflowPattern.SEQUENTIAL

    def test_unknown_code(self):
        with pytest.raises(ConfigurationError):
            WorkflowPattern.from_code("round_robin")

    def test_descriptions(self):
        assert all(pattern.description for pattern in WorkflowPattern)


class TestAgentConfig:
    """Test agent entries."""

    def test_description_defaults_to_agent(self):
        config = AgentConfig.of("a", FakeAgent("a", description="Answers billing questions"))
        assert config.description == "Answers billing questions"

    def test_explicit_description(self):
        config = AgentConfig.of("a", FakeAgent("a", description="x"), "Override")
        assert config.description == "Override"

    def test_agent_required(self):
        with pytest.raises(ConfigurationError):
            AgentConfig(name="a", agent=None)


class TestWorkflowConfigValidation:
    """Test fail-fast validation."""

    def test_pattern_parsed_from_string(self):
        config = AgentWorkflowConfig(pattern="parallel", agents=[AgentConfig.of("a", FakeAgent("a"))])
        assert config.pattern == WorkflowPattern.PARALLEL
        config.ensure_valid()

    def test_missing_pattern(self):
        with pytest.raises(ConfigurationError):
            AgentWorkflowConfig(agents=[AgentConfig.of("a", FakeAgent("a"))]).ensure_valid()

    def test_no_agents(self):
        with pytest.raises(ConfigurationError):
            AgentWorkflowConfig(pattern=WorkflowPattern.SEQUENTIAL).ensure_valid()

    def test_all_agents_disabled(self):
        config = AgentWorkflowConfig(
            pattern=WorkflowPattern.SEQUENTIAL,
            agents=[AgentConfig.of("a", FakeAgent("a"), enabled=False)],
        )
        with pytest.raises(ConfigurationError):
            config.ensure_valid()

    def test_routing_requires_routing_agent(self):
        config = AgentWorkflowConfig(
            pattern=WorkflowPattern.ROUTING,
            agents=[AgentConfig.of("a", FakeAgent("a"))],
        )
        with pytest.raises(ConfigurationError):
            config.ensure_valid()

    def test_duplicate_names(self):
        config = AgentWorkflowConfig(
            pattern=WorkflowPattern.PARALLEL,
            agents=[AgentConfig.of("a", FakeAgent("a")), AgentConfig.of("A", FakeAgent("A"))],
        )
        with pytest.raises(ConfigurationError):
            config.ensure_valid()


class TestWorkflowResult:
    """Test result bookkeeping."""

    def test_constructors(self):
        assert WorkflowResult.completed("done").success
        failed = WorkflowResult.failure("boom", pattern="loop")
        assert not failed.success
        assert failed.error_message == "boom"
        assert failed.pattern == "loop"

    def test_steps_and_timings(self):
        result = WorkflowResult()
        result.add_agent_result("a", AgentStepResult(agent_name="a", success=True, execution_time_ms=5))
        result.add_agent_result("b", AgentStepResult(
            agent_name="b", success=False, status=StepStatus.FAILED, execution_time_ms=7
        ))
        result.add_agent_result("c", AgentStepResult.skipped("c", "Agent is disabled"))
        first = result.add_step("a", "execute")
        second = result.add_step("b", "execute")

        assert (first.step_number, second.step_number) == (1, 2)
        assert result.agent_timings == {"a": 5, "b": 7, "c": 0}
        assert result.failed_agents == ["b"]

    def test_fail(self):
        result = WorkflowResult.completed("x")
        result.fail("late failure")
        assert not result.success
        assert result.error_message == "late failure"
