"""Tool registry.

Maps tool names to Mirascope tool classes. Names are normalized so that
"weather", "weatherTools" and "WeatherTool" all refer to the same entry.
Resolving an unknown name drops it with a warning, so a workflow keeps running
when a tool is temporarily unavailable.

Example:
    ```python
    registry = ToolRegistry()
    registry.register("calculator", CalculatorTool)
    tools = registry.resolve(["calculatorTools", "missing"])  # [CalculatorTool]
    ```
"""

from typing import Dict, Iterable, List, Optional

from mirascope.core import BaseTool

from relaygraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.TOOLS)


def normalize_tool_name(name: str) -> str:
    """Lowercase a tool name and strip "tools"/"tool" from it."""
    return name.strip().lower().replace("tools", "").replace("tool", "")


class ToolRegistry:
    """Registry of available tool classes."""

    def __init__(self) -> None:
        self._tools: Dict[str, type[BaseTool]] = {}
        self._names: List[str] = []

    def register(self, name: str, tool: Optional[type[BaseTool]]) -> None:
        """Register a tool class under a name. None is ignored."""
        if tool is None:
            logger.warning(f"Tool '{name}' is not available and was not registered")
            return
        key = normalize_tool_name(name)
        if key not in self._tools:
            self._names.append(name)
        self._tools[key] = tool
        logger.debug(f"Registered tool '{name}' as '{key}'")

    def get(self, name: str) -> Optional[type[BaseTool]]:
        return self._tools.get(normalize_tool_name(name))

    def resolve(self, names: Optional[Iterable[str]]) -> List[type[BaseTool]]:
        """Resolve tool names to tool classes.

        Args:
            names: Requested tool names

        Returns:
            Tool classes in request order, without duplicates or unknown names
        """
        resolved: List[type[BaseTool]] = []
        for name in names or []:
            tool = self.get(name)
            if tool is None:
                logger.warning(f"Unknown tool '{name}' dropped (registered: {self._names})")
                continue
            if tool not in resolved:
                resolved.append(tool)
        return resolved

    def all_tools(self) -> List[type[BaseTool]]:
        return list(self._tools.values())

    @property
    def registered_names(self) -> List[str]:
        return list(self._names)

    def is_registered(self, name: str) -> bool:
        return normalize_tool_name(name) in self._tools

    def __len__(self) -> int:
        return len(self._tools)
