"""
Agent invocation interfaces.

The engine never reasons about tool calls itself. It consumes two narrow
interfaces:

    InvocationPort: the single-agent reasoning loop. Given an instruction, a
        list of tool classes and an input, it returns text or streams chunks.
    AgentPort: a named agent. Patterns and supervisors only ever see this.

BaseAgent binds an identity, an instruction and tools to an InvocationPort and
is the usual AgentPort implementation.

Example:
    ```python
    port = MirascopePort()
    researcher = BaseAgent(
        name="researcher",
        description="Finds facts about a topic",
        instruction="You are a careful researcher.",
        port=port,
    )
    answer = await researcher.invoke("What is a quality gate?")
    ```
"""

from typing import Any, AsyncIterator, List, Optional, Protocol, runtime_checkable

from mirascope.core import BaseTool
from pydantic import BaseModel, Field

from relaygraph.core.logging import LogComponent, get_logger, log_verbose

logger = get_logger(LogComponent.AGENT)


class InvocationSettings(BaseModel):
    """Per-invocation options forwarded to the port.

    Attributes:
        temperature: Sampling temperature override
        max_tokens: Completion limit override
        max_iterations: Tool-call round limit override
    """
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    max_iterations: Optional[int] = None


@runtime_checkable
class InvocationPort(Protocol):
    """Protocol for the single-agent reasoning loop."""

    async def invoke(
        self,
        instruction: Optional[str],
        tools: List[type[BaseTool]],
        input: str,
        settings: Optional[InvocationSettings] = None
    ) -> str:
        ...

    def invoke_stream(
        self,
        instruction: Optional[str],
        tools: List[type[BaseTool]],
        input: str,
        settings: Optional[InvocationSettings] = None
    ) -> AsyncIterator[str]:
        ...


@runtime_checkable
class AgentPort(Protocol):
    """Protocol for a named, invocable agent."""
    name: str
    description: str

    async def invoke(self, input: str) -> str:
        ...

    def invoke_stream(self, input: str) -> AsyncIterator[str]:
        ...


class BaseAgent(BaseModel):
    """An agent identity bound to an invocation port.

    Attributes:
        name: Agent name, also used as its tool name
        description: What the agent does, shown to routers and supervisors
        instruction: System instruction sent with every invocation
        tools: Tool classes available to the agent
        settings: Optional invocation overrides
        port: Reasoning loop that executes the invocation
    """
    name: str = Field(..., min_length=1)
    description: str = ""
    instruction: Optional[str] = None
    tools: List[type[BaseTool]] = Field(
        default_factory=list,
        description="List of tool classes available to the agent"
    )
    settings: Optional[InvocationSettings] = None
    port: Any = Field(..., description="InvocationPort used for calls")

    class Config:
        arbitrary_types_allowed = True

    async def invoke(self, input: str) -> str:
        """Run the agent on an input and return its text answer."""
        log_verbose(logger, f"Agent '{self.name}' invoked with: {input}")
        result = await self.port.invoke(self.instruction, self.tools, input, self.settings)
        logger.agent(f"[{self.name}] {result}")
        return result

    async def invoke_stream(self, input: str) -> AsyncIterator[str]:
        """Stream the agent's answer chunk by chunk."""
        log_verbose(logger, f"Agent '{self.name}' streaming for: {input}")
        async for chunk in self.port.invoke_stream(self.instruction, self.tools, input, self.settings):
            yield chunk
