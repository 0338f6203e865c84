"""Configuration models for multi-agent composition patterns.

Patterns are independent of the graph model: agents are opaque AgentPort
handles, not graph nodes.

Example:
    ```python
    config = AgentWorkflowConfig(
        pattern="sequential",
        agents=[AgentConfig.of("drafter", drafter), AgentConfig.of("editor", editor)],
        chain_output=True,
    )
    ```
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from relaygraph.core.errors import ConfigurationError

class WorkflowPattern(str, Enum):
    """Supported collaboration topologies."""
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"
    ROUTING = "routing"
    LOOP = "loop"

    @property
    def code(self) -> str:
        return self.value

    @property
    def description(self) -> str:
        return _PATTERN_DESCRIPTIONS[self]

    @classmethod
    def from_code(cls, code: str) -> "WorkflowPattern":
        """Look up a pattern by code, ignoring case.

        Raises:
            ConfigurationError: If the code is unknown
        """
        for pattern in cls:
            if pattern.value == (code or "").strip().lower():
                return pattern
        raise ConfigurationError(f"Unknown workflow pattern: {code}", source=code)

_PATTERN_DESCRIPTIONS = {
    WorkflowPattern.SEQUENTIAL: "Agents run one after another",
    WorkflowPattern.PARALLEL: "Agents run concurrently and their outputs are merged",
    WorkflowPattern.ROUTING: "A routing agent picks which agent handles the input",
    WorkflowPattern.LOOP: "One agent runs repeatedly until a check reports done",
}

class AgentConfig(BaseModel):
    """An agent taking part in a pattern.

    Attributes:
        name: Name used in results and routing decisions
        agent: AgentPort handle
        description: Shown to routing agents; defaults to the agent's own description
        enabled: Disabled agents are skipped
        timeout: Seconds allowed per invocation
    """
    name: str = Field(..., min_length=1)
    agent: Any = Field(..., description="AgentPort used for invocations")
    description: str = ""
    enabled: bool = True
    timeout: float = Field(default=60.0, gt=0)

    class Config:
        arbitrary_types_allowed = True

    @model_validator(mode="after")
    def default_description(self) -> "AgentConfig":
        if self.agent is None:
            raise ConfigurationError(f"Agent '{self.name}' has no invocation handle", source=self.name)
        if not self.description:
            self.description = getattr(self.agent, "description", "") or ""
        return self

    @classmethod
    def of(cls, name: str, agent: Any, description: str = "", **kwargs) -> "AgentConfig":
        return cls(name=name, agent=agent, description=description, **kwargs)

class AgentWorkflowConfig(BaseModel):
    """Configuration for ConfigurableAgentWorkflow.

    Attributes:
        pattern: Collaboration topology
        agents: Participating agents, in order
        chain_output: Sequential only; feed each output to the next agent
        parallel_merge_prompt: Parallel only; prompt for the merge agent
        merge_agent: Parallel only; agent that merges the outputs
        routing_agent: Routing only; agent that picks the target agent(s)
        routing_system_prompt: Routing only; replaces the default routing instruction
        multi_routing: Routing only; allow several targets per decision
        max_loop_iterations: Loop only; round limit
        loop_termination_prompt: Loop only; instruction for the termination check
        loop_agent: Loop only; agent run each round (default: first enabled agent)
        loop_termination_agent: Loop only; agent answering the check (default: loop agent)
        workflow_name: Display name
        workflow_description: Display description
        global_timeout: Seconds allowed for the whole execution
        verbose_logging: Log every agent input and output
    """
    pattern: Optional[WorkflowPattern] = None
    agents: List[AgentConfig] = Field(default_factory=list)

    chain_output: bool = True

    parallel_merge_prompt: Optional[str] = None
    merge_agent: Any = None

    routing_agent: Any = None
    routing_system_prompt: Optional[str] = None
    multi_routing: bool = False

    max_loop_iterations: int = Field(default=10, ge=1)
    loop_termination_prompt: Optional[str] = None
    loop_agent: Any = None
    loop_termination_agent: Any = None

    workflow_name: Optional[str] = None
    workflow_description: Optional[str] = None
    global_timeout: float = Field(default=300.0, gt=0)
    verbose_logging: bool = False

    class Config:
        arbitrary_types_allowed = True

    @field_validator("pattern", mode="before")
    @classmethod
    def _parse_pattern(cls, value: Any) -> Any:
        if isinstance(value, str):
            return WorkflowPattern.from_code(value)
        return value

    @property
    def enabled_agents(self) -> List[AgentConfig]:
        return [agent for agent in self.agents if agent.enabled]

    def ensure_valid(self) -> None:
        """Fail fast on configurations that cannot execute.

        Raises:
            ConfigurationError: If the pattern is missing, no agent is configured,
                or a routing workflow has no routing agent
        """
        if self.pattern is None:
            raise ConfigurationError("A workflow pattern must be set")
        if not self.agents:
            raise ConfigurationError("At least one agent must be configured")
        if not self.enabled_agents:
            raise ConfigurationError("All configured agents are disabled")
        if self.pattern == WorkflowPattern.ROUTING and self.routing_agent is None:
            raise ConfigurationError("The routing pattern requires a routing agent")
        names = [agent.name.lower() for agent in self.agents]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate agent names: {duplicates}", source=duplicates[0])
