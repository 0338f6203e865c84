"""
Supervisor agent team.

The supervisor is an ordinary agent whose tools are its workers, each exposed
through `as_tool`. Its own reasoning loop decides which workers to call, in
what order and how often; the team only assembles the tool list and the
instruction.

Example:
    ```python
    team = SupervisorAgentTeam.build(port, workers=[researcher, writer])
    report = await team.execute("Write a short brief on solid-state batteries")
    ```
"""

from typing import Any, AsyncIterator, Dict, List, Optional

from mirascope.core import BaseTool
from pydantic import BaseModel, Field

from relaygraph.core.agent.base import AgentPort, BaseAgent, InvocationSettings
from relaygraph.core.agent.tool import as_tool
from relaygraph.core.errors import ConfigurationError, NodeExecutionError
from relaygraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.SUPERVISOR)

def default_supervisor_instruction(worker_descriptions: Dict[str, str]) -> str:
    """Coordinator instruction listing every worker and the delegation protocol."""
    workers = "\n".join(f"- {name}: {description}" for name, description in worker_descriptions.items())
    return (
        "You are a task coordinator (supervisor).\n\n"
        "Your job is to analyze the user's request and decide how to complete it. "
        "You can call the following experts to help you:\n\n"
        f"{workers}\n\n"
        "How to work:\n"
        "1. Analyze the request and understand the goal\n"
        "2. Decide which experts are needed\n"
        "3. Call experts as needed; you may call the same expert more than once\n"
        "4. Combine the experts' results into a final answer"
    )

class SupervisorAgentTeam(BaseModel):
    """A supervisor agent with its workers exposed as tools.

    Attributes:
        supervisor: Agent that receives the user input
        workers: Worker agents by name, in registration order
        worker_descriptions: Descriptions shown to the supervisor
    """
    supervisor: BaseAgent
    workers: Dict[str, Any] = Field(default_factory=dict)
    worker_descriptions: Dict[str, str] = Field(default_factory=dict)

    class Config:
        arbitrary_types_allowed = True

    @classmethod
    def build(
        cls,
        port: Any,
        workers: List[AgentPort],
        name: str = "supervisor",
        instruction: Optional[str] = None,
        extra_tools: Optional[List[type[BaseTool]]] = None,
        settings: Optional[InvocationSettings] = None,
        description: str = ""
    ) -> "SupervisorAgentTeam":
        """Assemble a supervisor team.

        Args:
            port: InvocationPort for the supervisor
            workers: Worker agents
            name: Supervisor name
            instruction: Custom instruction; generated from the workers when omitted
            extra_tools: Non-agent tools for the supervisor
            settings: Supervisor invocation overrides
            description: Supervisor description

        Raises:
            ConfigurationError: If the port is missing, there are no workers,
                or two workers share a name
        """
        if port is None:
            raise ConfigurationError("A supervisor team requires an invocation port", source=name)
        if not workers:
            raise ConfigurationError("A supervisor team requires at least one worker", source=name)

        worker_map: Dict[str, Any] = {}
        descriptions: Dict[str, str] = {}
        tools: List[type[BaseTool]] = list(extra_tools or [])
        for worker in workers:
            if worker.name in worker_map:
                raise ConfigurationError(f"Duplicate worker name: {worker.name}", source=worker.name)
            worker_map[worker.name] = worker
            descriptions[worker.name] = worker.description or f"Call {worker.name} to handle the task"
            tools.append(as_tool(worker))
            logger.info(f"Registered worker: {worker.name} -> {descriptions[worker.name]}")

        supervisor = BaseAgent(
            name=name,
            description=description,
            instruction=instruction or default_supervisor_instruction(descriptions),
            tools=tools,
            settings=settings,
            port=port,
        )
        logger.info(f"Supervisor '{name}' built with workers {list(worker_map)}")
        return cls(supervisor=supervisor, workers=worker_map, worker_descriptions=descriptions)

    @property
    def name(self) -> str:
        return self.supervisor.name

    @property
    def description(self) -> str:
        return self.supervisor.description

    @property
    def tools(self) -> List[type[BaseTool]]:
        return list(self.supervisor.tools)

    @property
    def worker_names(self) -> List[str]:
        return list(self.workers)

    @property
    def worker_count(self) -> int:
        return len(self.workers)

    async def execute(self, input: str) -> str:
        """Hand the input to the supervisor.

        Raises:
            NodeExecutionError: If the supervisor invocation fails
        """
        preview = input if len(input) <= 100 else input[:100] + "..."
        logger.info(f"Supervisor '{self.name}' executing: {preview} (workers: {self.worker_names})")
        try:
            result = await self.supervisor.invoke(input)
        except Exception as e:
            logger.error(f"Supervisor '{self.name}' failed: {e}")
            raise NodeExecutionError(self.name, e) from e
        logger.info(f"Supervisor '{self.name}' finished")
        return result

    async def invoke(self, input: str) -> str:
        return await self.execute(input)

    async def invoke_stream(self, input: str) -> AsyncIterator[str]:
        async for chunk in self.supervisor.invoke_stream(input):
            yield chunk
