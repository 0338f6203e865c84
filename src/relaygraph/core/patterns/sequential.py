"""Sequential pattern: agents run one after another in declared order.

With `chain_output` each agent receives the previous agent's output; without
it every agent receives the original input. The first failure stops the chain
and the remaining agents are recorded as not attempted.
"""

from typing import Optional

from relaygraph.core.patterns.base import PatternExecutor, logger
from relaygraph.core.patterns.config import AgentWorkflowConfig, WorkflowPattern
from relaygraph.core.patterns.result import AgentStepResult, WorkflowResult

class SequentialPatternExecutor(PatternExecutor):
    pattern = WorkflowPattern.SEQUENTIAL

    async def _run(self, input: str, config: AgentWorkflowConfig, result: WorkflowResult) -> None:
        current_input = input
        last_output: Optional[str] = None
        failed_agent: Optional[str] = None

        for step_number, agent_config in enumerate(config.agents, start=1):
            name = agent_config.name
            if not agent_config.enabled:
                logger.info(f"[sequential] Skipping disabled agent '{name}'")
                result.add_agent_result(name, AgentStepResult.skipped(name, "Agent is disabled"))
                continue
            if failed_agent is not None:
                result.add_agent_result(
                    name, AgentStepResult.skipped(name, f"Not attempted: '{failed_agent}' failed")
                )
                result.add_step(name, "skip", f"Previous agent '{failed_agent}' failed")
                continue

            logger.info(f"[sequential] Step {step_number}: running agent '{name}'")
            step = await self._invoke_agent(agent_config, current_input, config, result)
            if not step.success:
                failed_agent = name
                result.fail(f"Agent '{name}' failed: {step.error_message}")
                continue

            last_output = step.output
            if config.chain_output:
                current_input = step.output

        result.final_result = last_output
