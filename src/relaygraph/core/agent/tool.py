"""Agent-as-tool adapter.

`as_tool(agent)` turns any AgentPort into a Mirascope tool class so that another
agent's reasoning loop can decide at run time whether, when and how often to
call it. The tool's name and description come from the agent itself.

Example:
    ```python
    ResearcherTool = as_tool(researcher)
    ResearcherTool._name()         # "researcher"
    await ResearcherTool(input="Summarize X").call()
    ```
"""

import re
from typing import Any, ClassVar

from mirascope.core import BaseTool
from pydantic import Field

from relaygraph.core.agent.base import AgentPort
from relaygraph.core.errors import ConfigurationError
from relaygraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.TOOLS)

_INVALID_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_-]+")


def tool_name_for(agent_name: str) -> str:
    """Normalize an agent name into a function-calling tool name."""
    name = _INVALID_NAME_CHARS.sub("_", agent_name.strip()).strip("_")
    return name or "agent"


def as_tool(agent: AgentPort) -> type[BaseTool]:
    """Expose an agent as a Mirascope tool class.

    Args:
        agent: Agent to wrap

    Returns:
        A BaseTool subclass with a single `input` field whose `call()` invokes the agent

    Raises:
        ConfigurationError: If the agent is missing or has no name
    """
    if agent is None or not getattr(agent, "name", None):
        raise ConfigurationError("as_tool requires an agent with a name")

    name = tool_name_for(agent.name)
    description = agent.description or f"Call {agent.name} to handle the task"

    async def call(self) -> str:
        logger.tool(f"[Delegating to agent '{agent.name}' with input {self.input!r}]")
        return await agent.invoke(self.input)

    namespace = {
        "__doc__": description,
        "__module__": __name__,
        "__annotations__": {"input": str, "agent": ClassVar[Any]},
        "agent": agent,
        "input": Field(..., description=f"The task or question to hand to {agent.name}"),
        "call": call,
        "_name": classmethod(lambda cls: name),
        "_description": classmethod(lambda cls: description),
    }
    class_name = "".join(part.capitalize() for part in re.split(r"[_-]+", name)) + "AgentTool"
    tool_cls = type(BaseTool)(class_name, (BaseTool,), namespace)

    logger.info(f"Exposed agent '{agent.name}' as tool '{name}'")
    return tool_cls
