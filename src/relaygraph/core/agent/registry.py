"""Registry of named agents, used to resolve worker references."""

from typing import Dict, List

from relaygraph.core.agent.base import AgentPort
from relaygraph.core.errors import ConfigurationError
from relaygraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.AGENT)


class AgentRegistry:
    """Name-to-agent lookup.

    Names are matched case-insensitively. Looking up a missing name is a
    configuration error, so bad references fail when a team is built.
    """

    def __init__(self) -> None:
        self._agents: Dict[str, AgentPort] = {}

    def register(self, agent: AgentPort) -> None:
        """Register an agent under its own name, replacing any previous entry."""
        if not getattr(agent, "name", None):
            raise ConfigurationError("Cannot register an agent without a name")
        key = agent.name.lower()
        if key in self._agents:
            logger.warning(f"Replacing registered agent '{agent.name}'")
        self._agents[key] = agent
        logger.info(f"Registered agent '{agent.name}'")

    def get(self, name: str) -> AgentPort:
        """Look up an agent by name.

        Raises:
            ConfigurationError: If no agent has that name
        """
        agent = self._agents.get((name or "").lower())
        if agent is None:
            raise ConfigurationError(
                f"Agent '{name}' is not registered (known agents: {self.names})",
                source=name
            )
        return agent

    @property
    def names(self) -> List[str]:
        return [agent.name for agent in self._agents.values()]

    def __contains__(self, name: str) -> bool:
        return (name or "").lower() in self._agents

    def __len__(self) -> int:
        return len(self._agents)
