"""
Configurable agent workflow.

Validates an AgentWorkflowConfig once, then dispatches each execution to the
executor for its pattern under the configured global timeout.

Example:
    ```python
    workflow = ConfigurableAgentWorkflow(AgentWorkflowConfig(
        pattern=WorkflowPattern.PARALLEL,
        agents=[AgentConfig.of("optimist", optimist), AgentConfig.of("skeptic", skeptic)],
    ))
    result = await workflow.execute("Should we adopt four-day weeks?")
    ```
"""

import asyncio
from typing import Dict, Optional

from relaygraph.core.logging import LogComponent, get_logger
from relaygraph.core.patterns.base import PatternExecutor
from relaygraph.core.patterns.config import AgentWorkflowConfig, WorkflowPattern
from relaygraph.core.patterns.loop import LoopPatternExecutor
from relaygraph.core.patterns.parallel import ParallelPatternExecutor
from relaygraph.core.patterns.result import WorkflowResult
from relaygraph.core.patterns.routing import RoutingPatternExecutor
from relaygraph.core.patterns.sequential import SequentialPatternExecutor

logger = get_logger(LogComponent.PATTERNS)

def default_executors() -> Dict[str, PatternExecutor]:
    executors = [
        SequentialPatternExecutor(),
        ParallelPatternExecutor(),
        RoutingPatternExecutor(),
        LoopPatternExecutor(),
    ]
    return {executor.pattern.code: executor for executor in executors}

class ConfigurableAgentWorkflow:
    """A validated, executable multi-agent workflow.

    Raises:
        ConfigurationError: On construction, if the config cannot execute
    """

    def __init__(self, config: AgentWorkflowConfig, executors: Optional[Dict[str, PatternExecutor]] = None):
        config.ensure_valid()
        self.config = config
        self.executors = executors or default_executors()
        logger.info(
            f"Workflow '{config.workflow_name or config.pattern.code}' ready "
            f"({config.pattern.description}, {len(config.enabled_agents)} agents)"
        )

    @property
    def pattern(self) -> WorkflowPattern:
        return self.config.pattern

    async def execute(self, input: str) -> WorkflowResult:
        """Run the workflow. Never raises; failures are reported in the result."""
        preview = input if len(input) <= 100 else input[:100] + "..."
        logger.info(f"Executing {self.pattern.code} workflow with input: {preview}")

        executor = self.executors.get(self.pattern.code)
        if executor is None:
            return WorkflowResult.failure(f"Unsupported workflow pattern: {self.pattern.code}",
                                          pattern=self.pattern.code)

        try:
            result = await asyncio.wait_for(
                executor.execute(input, self.config), timeout=self.config.global_timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"Workflow timed out after {self.config.global_timeout}s")
            return WorkflowResult.failure(
                f"Workflow timed out after {self.config.global_timeout}s", pattern=self.pattern.code
            )

        if result.success:
            logger.info(f"Workflow succeeded in {result.total_execution_time_ms}ms")
        else:
            logger.warning(f"Workflow failed: {result.error_message}")
        return result
