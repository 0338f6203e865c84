"""Parallel pattern: every enabled agent runs concurrently on the same input.

Outputs are merged by concatenation, or by a merge agent when both
`merge_agent` and `parallel_merge_prompt` are configured. A failing agent
contributes a failure marker; the others are unaffected. The execution
succeeds when at least one agent succeeded.
"""

from typing import List

from relaygraph.core.patterns.base import PatternExecutor, format_outputs, logger
from relaygraph.core.patterns.config import AgentConfig, AgentWorkflowConfig, WorkflowPattern
from relaygraph.core.patterns.result import AgentStepResult, WorkflowResult

MERGE_CONTEXT = "Here are the results from each agent:"
MERGE_AGENT_NAME = "merge"

class ParallelPatternExecutor(PatternExecutor):
    pattern = WorkflowPattern.PARALLEL

    async def _run(self, input: str, config: AgentWorkflowConfig, result: WorkflowResult) -> None:
        agents = config.enabled_agents
        logger.info(f"[parallel] Running {len(agents)} agents: {[agent.name for agent in agents]}")

        steps = await self._invoke_all(agents, input, config, result)

        failed = [step for step in steps if not step.success]
        if failed:
            result.error_message = "; ".join(
                f"{step.agent_name}: {step.error_message}" for step in failed
            )
        result.success = len(failed) < len(steps)
        if not result.success:
            result.error_message = f"All agents failed: {result.error_message}"

        result.final_result = await self._merge(steps, config, result)

    async def _merge(
        self,
        steps: List[AgentStepResult],
        config: AgentWorkflowConfig,
        result: WorkflowResult
    ) -> str:
        combined = format_outputs(steps)
        if config.merge_agent is None or not config.parallel_merge_prompt:
            return combined
        if not any(step.success for step in steps):
            return combined

        merge_config = AgentConfig(
            name=getattr(config.merge_agent, "name", None) or MERGE_AGENT_NAME,
            agent=config.merge_agent,
            timeout=config.global_timeout,
        )
        prompt = f"{config.parallel_merge_prompt}\n\n{MERGE_CONTEXT}\n\n{combined}"
        merge_step = await self._invoke_agent(
            merge_config, prompt, config, result, key=f"{merge_config.name}#merge"
        )
        if merge_step.success:
            return merge_step.output

        logger.warning(f"[parallel] Merge failed ({merge_step.error_message}), falling back to concatenation")
        return combined
