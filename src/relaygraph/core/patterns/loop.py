"""Loop pattern: one agent refines its answer until a check reports done.

Each round the loop agent receives the task (and, after the first round, its
previous result). A termination agent then reviews the result; a reply
starting with DONE ends the loop. `max_loop_iterations` bounds the rounds.
Step results are keyed `name#round`.
"""

from typing import Optional

from relaygraph.core.patterns.base import PatternExecutor, logger
from relaygraph.core.patterns.config import AgentConfig, AgentWorkflowConfig, WorkflowPattern
from relaygraph.core.patterns.result import WorkflowResult

DONE_MARKER = "DONE"

DEFAULT_TERMINATION_PROMPT = (
    "Review whether the current result fully completes the task. "
    f"Reply {DONE_MARKER} if it does. Otherwise reply CONTINUE and say what is missing."
)

class LoopPatternExecutor(PatternExecutor):
    pattern = WorkflowPattern.LOOP

    @staticmethod
    def _participant(agent, fallback: AgentConfig) -> AgentConfig:
        if agent is None:
            return fallback
        return AgentConfig(
            name=getattr(agent, "name", None) or fallback.name,
            agent=agent,
            timeout=fallback.timeout,
        )

    @staticmethod
    def _round_input(task: str, previous: Optional[str]) -> str:
        if previous is None:
            return task
        return f"{task}\n\nPrevious result:\n{previous}"

    async def _run(self, input: str, config: AgentWorkflowConfig, result: WorkflowResult) -> None:
        worker = self._participant(config.loop_agent, config.enabled_agents[0])
        checker = self._participant(config.loop_termination_agent, worker)
        termination_prompt = config.loop_termination_prompt or DEFAULT_TERMINATION_PROMPT

        current: Optional[str] = None
        for round_number in range(1, config.max_loop_iterations + 1):
            logger.info(f"[loop] Round {round_number}/{config.max_loop_iterations} with '{worker.name}'")
            step = await self._invoke_agent(
                worker, self._round_input(input, current), config, result,
                key=f"{worker.name}#{round_number}"
            )
            if not step.success:
                result.fail(f"Agent '{worker.name}' failed in round {round_number}: {step.error_message}")
                break
            current = step.output

            check = await self._invoke_agent(
                checker,
                f"{termination_prompt}\n\nTask:\n{input}\n\nCurrent result:\n{current}",
                config, result,
                key=f"{checker.name}#check{round_number}"
            )
            if not check.success:
                logger.warning(f"[loop] Termination check failed ({check.error_message}), stopping")
                break
            if (check.output or "").strip().upper().startswith(DONE_MARKER):
                logger.info(f"[loop] Done after {round_number} rounds")
                result.add_step(checker.name, "done", f"Finished after {round_number} rounds")
                break
        else:
            logger.info(f"[loop] Reached max iterations ({config.max_loop_iterations})")
            result.add_step(worker.name, "stop", "Reached max loop iterations")

        result.final_result = current
