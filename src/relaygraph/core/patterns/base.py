"""Base pattern executor.

Every pattern executor shares one contract:

    result = await executor.execute(input, config)

`execute` never raises. Configuration problems and agent failures are captured
in the returned WorkflowResult. Each agent invocation runs under the agent's
own timeout; a timeout counts as a failed invocation, not an aborted workflow.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import ClassVar, Dict, List, Optional

from relaygraph.core.errors import WorkflowError
from relaygraph.core.logging import LogComponent, get_logger, log_verbose
from relaygraph.core.patterns.config import AgentConfig, AgentWorkflowConfig, WorkflowPattern
from relaygraph.core.patterns.result import AgentStepResult, StepStatus, WorkflowResult

logger = get_logger(LogComponent.PATTERNS)

def elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 3)

def format_outputs(steps: List[AgentStepResult]) -> str:
    """Concatenate step outputs as `【name】` blocks; failures become markers."""
    blocks = []
    for step in steps:
        if step.success:
            blocks.append(f"【{step.agent_name}】\n{step.output}")
        else:
            blocks.append(f"【{step.agent_name}】\n[failed: {step.error_message}]")
    return "\n\n".join(blocks)

def describe_agents(agents: List[AgentConfig]) -> str:
    return "\n".join(
        f"- {agent.name}: {agent.description or 'No description'}" for agent in agents
    )

class PatternExecutor(ABC):
    """Abstract base for pattern executors."""

    pattern: ClassVar[WorkflowPattern]

    async def execute(self, input: str, config: AgentWorkflowConfig) -> WorkflowResult:
        """Run the pattern and capture every failure in the result."""
        start = time.perf_counter()
        result = WorkflowResult(pattern=self.pattern.value)
        logger.info(f"[{self.pattern.value}] Starting with {len(config.enabled_agents)} enabled agents")

        try:
            config.ensure_valid()
            await self._run(input, config, result)
        except WorkflowError as e:
            logger.error(f"[{self.pattern.value}] {e}")
            result.fail(str(e))
        except Exception as e:
            logger.error(f"[{self.pattern.value}] Unexpected error: {e}")
            result.fail(f"Workflow error: {e}")

        result.total_execution_time_ms = elapsed_ms(start)
        logger.info(
            f"[{self.pattern.value}] Finished in {result.total_execution_time_ms}ms "
            f"(success={result.success})"
        )
        return result

    @abstractmethod
    async def _run(self, input: str, config: AgentWorkflowConfig, result: WorkflowResult) -> None:
        """Pattern-specific execution, filling in `result`."""

    async def _invoke_agent(
        self,
        agent_config: AgentConfig,
        input: str,
        config: AgentWorkflowConfig,
        result: WorkflowResult,
        key: Optional[str] = None
    ) -> AgentStepResult:
        """Invoke one agent under its timeout and record the step.

        Args:
            agent_config: Agent to invoke
            input: Input text
            config: Workflow configuration (for verbose logging)
            result: Result receiving the step
            key: Result key; defaults to the agent name

        Returns:
            The recorded AgentStepResult
        """
        name = agent_config.name
        if config.verbose_logging:
            log_verbose(logger, f"[{self.pattern.value}] Input to '{name}': {input}")

        start = time.perf_counter()
        try:
            output = await asyncio.wait_for(agent_config.agent.invoke(input), timeout=agent_config.timeout)
        except asyncio.TimeoutError:
            step = AgentStepResult(
                agent_name=name,
                input=input,
                execution_time_ms=elapsed_ms(start),
                success=False,
                status=StepStatus.FAILED,
                error_message=f"Timed out after {agent_config.timeout}s",
            )
        except Exception as e:
            step = AgentStepResult(
                agent_name=name,
                input=input,
                execution_time_ms=elapsed_ms(start),
                success=False,
                status=StepStatus.FAILED,
                error_message=str(e) or type(e).__name__,
            )
        else:
            step = AgentStepResult(
                agent_name=name,
                input=input,
                output=output,
                execution_time_ms=elapsed_ms(start),
                success=True,
            )

        result.add_agent_result(key or name, step)
        if step.success:
            logger.info(f"[{self.pattern.value}] Agent '{name}' finished in {step.execution_time_ms}ms")
            result.add_step(name, "execute", f"Succeeded in {step.execution_time_ms}ms")
            if config.verbose_logging:
                log_verbose(logger, f"[{self.pattern.value}] Output of '{name}': {step.output}")
        else:
            logger.error(f"[{self.pattern.value}] Agent '{name}' failed: {step.error_message}")
            result.add_step(name, "execute", f"Failed: {step.error_message}")
        return step

    async def _invoke_all(
        self,
        agents: List[AgentConfig],
        input: str,
        config: AgentWorkflowConfig,
        result: WorkflowResult
    ) -> List[AgentStepResult]:
        """Invoke agents concurrently with the same input; results keep agent order."""
        return list(await asyncio.gather(*[
            self._invoke_agent(agent, input, config, result) for agent in agents
        ]))

    @staticmethod
    def _by_name(agents: List[AgentConfig]) -> Dict[str, AgentConfig]:
        return {agent.name.lower(): agent for agent in agents}
