"""Tests for ConfigurableAgentWorkflow."""

import pytest

from relaygraph.core.errors import ConfigurationError
from relaygraph.core.patterns.config import AgentConfig, AgentWorkflowConfig, WorkflowPattern
from relaygraph.core.patterns.workflow import ConfigurableAgentWorkflow, default_executors
from tests.fakes import FakeAgent


class TestConfigurableAgentWorkflow:
    """Test pattern dispatch and the global timeout."""

    def test_invalid_config_fails_on_construction(self):
        with pytest.raises(ConfigurationError):
            ConfigurableAgentWorkflow(AgentWorkflowConfig(
                pattern=WorkflowPattern.ROUTING,
                agents=[AgentConfig.of("a", FakeAgent("a"))],
            ))

    def test_every_pattern_has_an_executor(self):
        assert set(default_executors()) == {pattern.code for pattern in WorkflowPattern}

    @pytest.mark.parametrize("pattern", [WorkflowPattern.SEQUENTIAL, WorkflowPattern.PARALLEL])
    @pytest.mark.asyncio
    async def test_dispatches_by_pattern(self, pattern: WorkflowPattern):
        agent = FakeAgent("solo", reply="answer")
        workflow = ConfigurableAgentWorkflow(AgentWorkflowConfig(
            pattern=pattern,
            agents=[AgentConfig.of("solo", agent)],
        ))
        result = await workflow.execute("question")

        assert workflow.pattern == pattern
        assert result.pattern == pattern.code
        assert result.success
        assert agent.calls == ["question"]

    @pytest.mark.asyncio
    async def test_global_timeout(self):
        workflow = ConfigurableAgentWorkflow(AgentWorkflowConfig(
            pattern=WorkflowPattern.SEQUENTIAL,
            agents=[AgentConfig.of("slow", FakeAgent("slow", delay=2.0), timeout=10)],
            global_timeout=0.1,
        ))
        result = await workflow.execute("x")

        assert not result.success
        assert "timed out" in result.error_message

    @pytest.mark.asyncio
    async def test_verbose_logging_does_not_change_results(self):
        workflow = ConfigurableAgentWorkflow(AgentWorkflowConfig(
            pattern="sequential",
            agents=[AgentConfig.of("a", FakeAgent("a", reply="done"))],
            verbose_logging=True,
            workflow_name="verbose",
        ))
        result = await workflow.execute("x")
        assert result.final_result == "done"
