"""Routing pattern: a routing agent decides which agent handles the input.

Flow:
    1. Build a routing instruction listing every enabled agent with its description
    2. Ask the routing agent for a decision
    3. Match the decision to agent names (exact, then containment, ignoring case)
    4. Run the matched agent(s) with the original input

A decision that matches no agent fails the execution.
"""

import re
from typing import List, Optional

from relaygraph.core.patterns.base import PatternExecutor, describe_agents, format_outputs, logger
from relaygraph.core.patterns.config import AgentConfig, AgentWorkflowConfig, WorkflowPattern
from relaygraph.core.patterns.result import WorkflowResult

ROUTER_NAME = "router"

DEFAULT_ROUTING_PROMPT = (
    "You are a router that decides which expert should handle the user's question.\n\n"
    "Available experts:\n{agents}\n\n"
    "User question: {input}\n\n"
    "Pick the most suitable expert. Reply only with the expert's name, nothing else."
)

MULTI_ROUTING_SUFFIX = (
    "\n\nIf several experts are needed, reply with all of their names separated by commas."
)

_DECISION_SEPARATORS = re.compile(r"[,;\n]+")

def match_agent(token: str, agents: List[AgentConfig]) -> Optional[AgentConfig]:
    """Match one decision token to an agent: exact name first, then containment."""
    cleaned = token.strip().strip("'\"`.*").strip().lower()
    if not cleaned:
        return None
    for agent in agents:
        if agent.name.lower() == cleaned:
            return agent
    for agent in sorted(agents, key=lambda a: len(a.name), reverse=True):
        if agent.name.lower() in cleaned:
            return agent
    return None

class RoutingPatternExecutor(PatternExecutor):
    pattern = WorkflowPattern.ROUTING

    def build_routing_prompt(self, input: str, config: AgentWorkflowConfig) -> str:
        agents = describe_agents(config.enabled_agents)
        if config.routing_system_prompt:
            prompt = (
                f"{config.routing_system_prompt}\n\n"
                f"Available experts:\n{agents}\n\n"
                f"User question: {input}"
            )
        else:
            prompt = DEFAULT_ROUTING_PROMPT.format(agents=agents, input=input)
        if config.multi_routing:
            prompt += MULTI_ROUTING_SUFFIX
        return prompt

    def select_agents(self, decision: str, config: AgentWorkflowConfig) -> List[AgentConfig]:
        agents = config.enabled_agents
        if not config.multi_routing:
            agent = match_agent(decision, agents)
            return [agent] if agent else []

        selected: List[AgentConfig] = []
        for token in _DECISION_SEPARATORS.split(decision):
            if not token.strip():
                continue
            agent = match_agent(token, agents)
            if agent is None:
                logger.warning(f"[routing] Ignoring unmatched routing token: {token.strip()!r}")
            elif agent not in selected:
                selected.append(agent)
        return selected

    async def _run(self, input: str, config: AgentWorkflowConfig, result: WorkflowResult) -> None:
        router = AgentConfig(
            name=getattr(config.routing_agent, "name", None) or ROUTER_NAME,
            agent=config.routing_agent,
        )
        routing_step = await self._invoke_agent(
            router, self.build_routing_prompt(input, config), config, result,
            key=f"{router.name}#routing"
        )
        if not routing_step.success:
            result.fail(f"Routing decision failed: {routing_step.error_message}")
            return

        decision = (routing_step.output or "").strip()
        selected = self.select_agents(decision, config)
        if not selected:
            result.fail(
                f"Routing decision '{decision}' matches no agent "
                f"(available: {[agent.name for agent in config.enabled_agents]})"
            )
            return

        logger.info(f"[routing] Decision {decision!r} -> {[agent.name for agent in selected]}")
        result.add_step(router.name, "route", f"Selected {[agent.name for agent in selected]}")

        if len(selected) == 1:
            step = await self._invoke_agent(selected[0], input, config, result)
            if step.success:
                result.final_result = step.output
            else:
                result.fail(f"Agent '{step.agent_name}' failed: {step.error_message}")
            return

        steps = await self._invoke_all(selected, input, config, result)
        result.final_result = format_outputs(steps)
        failed = [step for step in steps if not step.success]
        if len(failed) == len(steps):
            result.fail("All routed agents failed: " + "; ".join(
                f"{step.agent_name}: {step.error_message}" for step in failed
            ))
        elif failed:
            result.error_message = "; ".join(f"{step.agent_name}: {step.error_message}" for step in failed)
