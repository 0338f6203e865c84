"""
Agent factory.

Builds agents, sequential workflows and supervisor teams from stored agent
configuration documents such as:

    {
        "supervisorInstruction": "Coordinate the team.",
        "workers": [
            {"ref": "researcher"},
            {"name": "writer", "instruction": "Write clearly.", "tools": ["search"]}
        ],
        "maxIterations": 8,
        "temperature": 0.3
    }

Tool names are resolved through the ToolRegistry (unknown names are dropped);
worker references through the AgentRegistry (unknown refs fail the build).
"""

import json
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError, model_validator

from relaygraph.core.agent.base import AgentPort, BaseAgent, InvocationSettings
from relaygraph.core.agent.registry import AgentRegistry
from relaygraph.core.agent.supervisor import SupervisorAgentTeam
from relaygraph.core.errors import ConfigurationError
from relaygraph.core.logging import LogComponent, get_logger
from relaygraph.core.patterns.config import AgentConfig, AgentWorkflowConfig, WorkflowPattern
from relaygraph.core.patterns.workflow import ConfigurableAgentWorkflow
from relaygraph.core.tools.registry import ToolRegistry

logger = get_logger(LogComponent.AGENT)

class AgentDefinition(BaseModel):
    """Inline agent of a sequential workflow."""
    name: str = Field(..., min_length=1)
    description: str = ""
    instruction: Optional[str] = None
    tools: List[str] = Field(default_factory=list)

class WorkerDefinition(BaseModel):
    """Supervisor worker: a reference to a registered agent, or an inline agent."""
    ref: Optional[str] = None
    name: Optional[str] = None
    description: str = ""
    instruction: Optional[str] = None
    tools: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def require_identity(self) -> "WorkerDefinition":
        if not self.ref and not self.name:
            raise ValueError("A worker needs either 'ref' or 'name'")
        return self

    @property
    def is_reference(self) -> bool:
        return bool(self.ref)

class AgentFactoryConfig(BaseModel):
    """Stored agent configuration document."""
    instruction: Optional[str] = None
    tools: List[str] = Field(default_factory=list)
    agents: List[AgentDefinition] = Field(default_factory=list)
    supervisor_instruction: Optional[str] = Field(default=None, alias="supervisorInstruction")
    workers: List[WorkerDefinition] = Field(default_factory=list)
    max_iterations: Optional[int] = Field(default=None, alias="maxIterations")
    temperature: Optional[float] = None

    class Config:
        populate_by_name = True

    @property
    def settings(self) -> InvocationSettings:
        return InvocationSettings(temperature=self.temperature, max_iterations=self.max_iterations)

ConfigSource = Union[AgentFactoryConfig, Dict[str, Any], str, None]

class AgentFactory:
    """Builds agents from configuration documents.

    Attributes:
        port: InvocationPort shared by every built agent
        tool_registry: Resolves tool names
        agent_registry: Resolves worker references
    """

    def __init__(
        self,
        port: Any,
        tool_registry: Optional[ToolRegistry] = None,
        agent_registry: Optional[AgentRegistry] = None
    ):
        self.port = port
        self.tool_registry = tool_registry or ToolRegistry()
        self.agent_registry = agent_registry or AgentRegistry()

    @staticmethod
    def parse_config(source: ConfigSource) -> AgentFactoryConfig:
        """Parse a configuration document. Empty input yields an empty config.

        Raises:
            ConfigurationError: If the document is malformed
        """
        if isinstance(source, AgentFactoryConfig):
            return source
        if source is None or source == "":
            return AgentFactoryConfig()
        try:
            data = json.loads(source) if isinstance(source, str) else source
            return AgentFactoryConfig.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigurationError(f"Invalid agent configuration: {e}") from e

    def _agent(
        self,
        name: str,
        description: str,
        instruction: Optional[str],
        tools: List[str],
        settings: InvocationSettings
    ) -> BaseAgent:
        return BaseAgent(
            name=name,
            description=description,
            instruction=instruction,
            tools=self.tool_registry.resolve(tools),
            settings=settings,
            port=self.port,
        )

    def build_single(self, name: str, source: ConfigSource, description: str = "") -> BaseAgent:
        """Build one agent from the document's instruction and tools."""
        config = self.parse_config(source)
        agent = self._agent(name, description, config.instruction, config.tools, config.settings)
        logger.info(f"Built agent '{name}' with {len(agent.tools)} tools")
        return agent

    def build_sequential(self, name: str, source: ConfigSource) -> ConfigurableAgentWorkflow:
        """Build a sequential workflow from the document's agents.

        Raises:
            ConfigurationError: If no agents are defined
        """
        config = self.parse_config(source)
        agent_configs = [
            AgentConfig.of(
                definition.name,
                self._agent(
                    definition.name,
                    definition.description,
                    definition.instruction,
                    definition.tools,
                    config.settings,
                ),
                definition.description,
            )
            for definition in config.agents
        ]
        workflow = ConfigurableAgentWorkflow(AgentWorkflowConfig(
            workflow_name=name,
            pattern=WorkflowPattern.SEQUENTIAL,
            agents=agent_configs,
        ))
        logger.info(f"Built sequential workflow '{name}' with {len(agent_configs)} agents")
        return workflow

    def _resolve_worker(self, definition: WorkerDefinition, config: AgentFactoryConfig) -> AgentPort:
        if definition.is_reference:
            return self.agent_registry.get(definition.ref)
        return self._agent(
            definition.name,
            definition.description,
            definition.instruction,
            definition.tools,
            config.settings,
        )

    def build_supervisor(self, name: str, source: ConfigSource, description: str = "") -> SupervisorAgentTeam:
        """Build a supervisor team. Unknown worker refs fail the build.

        Raises:
            ConfigurationError: If a ref is not registered or no workers are defined
        """
        config = self.parse_config(source)
        workers = [self._resolve_worker(definition, config) for definition in config.workers]
        return SupervisorAgentTeam.build(
            self.port,
            workers,
            name=name,
            instruction=config.supervisor_instruction,
            extra_tools=self.tool_registry.resolve(config.tools),
            settings=config.settings,
            description=description,
        )
