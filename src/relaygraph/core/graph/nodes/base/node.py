"""Base node class for the graph system.

A Node is an individual unit of work (an LLM call, a routing decision, a data
transform) executed within a larger workflow. Nodes never mutate the workflow
state directly: `process` receives a read-only snapshot and returns a mapping of
updates, which the graph merges using each key's merge strategy.

Typical Usage:
    - Subclass Node and override `process`
    - Optionally decorate the class with `node_type` so config-driven graphs can build it
    - Wire nodes together with Graph.add_edge / Graph.add_conditional_edges
"""

import inspect
import json
from functools import wraps
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, model_validator

from relaygraph.core.errors import ConfigurationError
from relaygraph.core.graph.config import NodeConfig
from relaygraph.core.graph.state import CURRENT_NODE
from relaygraph.core.logging import Colors, LogComponent, get_logger

logger = get_logger(LogComponent.NODES)

Updates = Optional[Dict[str, Any]]

def state_handler(func: Callable):
    """Decorator that stamps a node's updates with `current_node`.

    Example:
        @state_handler
        async def process(self, state):
            return {"summary": "..."}
            # -> {"summary": "...", "current_node": self.id}
    """
    @wraps(func)
    async def wrapper(self, state: Mapping[str, Any]) -> Dict[str, Any]:
        logger.debug(f"Node {self.id} started")
        updates = dict(await func(self, state) or {})
        updates.setdefault(CURRENT_NODE, self.id)
        logger.debug(f"Node {self.id} produced keys: {sorted(updates)}")
        return updates
    return wrapper

class Node(BaseModel):
    """
    Abstract base node for graph operations.

    Attributes:
        id: Unique node identifier
        name: Display name (defaults to the id)
        description: Human-readable purpose
        params: Type-specific parameters
        metadata: Optional node metadata
    """
    id: str = Field(..., description="Unique identifier for this node")
    name: str = ""
    description: str = ""
    params: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    type_code: ClassVar[str] = "NODE"
    type_description: ClassVar[str] = ""
    required_params: ClassVar[List[str]] = []

    class Config:
        arbitrary_types_allowed = True

    @model_validator(mode='after')
    def validate_node(self) -> 'Node':
        """Validate node configuration."""
        if not self.id:
            raise ValueError("Node must have an ID")
        missing = [
            key for key in self.required_params
            if self.params.get(key) in (None, "", [], {})
        ]
        if missing:
            raise ConfigurationError(
                f"{self.type_code} node '{self.id}' is missing required params: {missing}",
                source=self.id
            )
        return self

    @classmethod
    def from_config(cls, config: NodeConfig, port: Any = None) -> "Node":
        """Build a node from its declaration. Nodes that call a model use `port`."""
        return cls(
            id=config.id,
            name=config.name,
            description=config.description,
            params=dict(config.params),
        )

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def param(self, key: str, default: Any = None) -> Any:
        """Get a parameter value."""
        value = self.params.get(key)
        return default if value is None else value

    async def process(self, state: Mapping[str, Any]) -> Updates:
        """Process node logic. Must be implemented by subclasses.

        Args:
            state: Read-only snapshot of the workflow state

        Returns:
            Mapping of state updates, or None for no updates
        """
        raise NotImplementedError("Subclasses must implement process()")

    def _log_node_result(self, result: Any) -> None:
        """Log a node's primary output at INFO level."""
        if hasattr(result, 'model_dump_json'):
            formatted = result.model_dump_json(indent=2)
        elif isinstance(result, (dict, list)):
            formatted = json.dumps(result, indent=2, default=str)
        else:
            formatted = str(result)

        logger.info(
            f"\n{Colors.BOLD}Node {self.id} Output:{Colors.RESET}\n"
            f"{Colors.INFO}{formatted}{Colors.RESET}\n"
            f"{Colors.DIM}{'─' * 50}{Colors.RESET}"
        )

class FunctionNode(Node):
    """Node backed by a plain function of the state snapshot.

    The function may be sync or async and returns a mapping of updates.

    Example:
        ```python
        def bump(state):
            return {"iteration_count": state.get("iteration_count", 0) + 1}

        node = FunctionNode(id="bump", func=bump)
        ```
    """
    func: Callable[[Mapping[str, Any]], Any]

    type_code: ClassVar[str] = "FUNCTION_NODE"

    @state_handler
    async def process(self, state: Mapping[str, Any]) -> Updates:
        result = self.func(state)
        if inspect.isawaitable(result):
            result = await result
        return result
