"""Node type registry.

Config-driven graphs name their nodes by type code ("LLM_NODE", ...). Node
classes register themselves with the `node_type` decorator:

    @node_type("CONDITION_NODE", "Routes on a state field")
    class ConditionNode(Node):
        ...
"""

from typing import Any, Callable, Dict, Type

from relaygraph.core.errors import ConfigurationError
from relaygraph.core.graph.config import NodeConfig
from relaygraph.core.graph.nodes.base.node import Node
from relaygraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.NODES)

class NodeTypeRegistry:
    """Maps type codes to node classes."""

    def __init__(self) -> None:
        self._types: Dict[str, Type[Node]] = {}

    def register(self, code: str, node_cls: Type[Node]) -> None:
        code = code.upper()
        if code in self._types and self._types[code] is not node_cls:
            logger.warning(f"Node type '{code}' re-registered by {node_cls.__name__}")
        self._types[code] = node_cls

    def create(self, config: NodeConfig, port: Any = None) -> Node:
        """Instantiate the node declared by `config`.

        Raises:
            ConfigurationError: If the type is unknown or its params are invalid
        """
        node_cls = self._types.get((config.type or "").upper())
        if node_cls is None:
            raise ConfigurationError(
                f"Unknown node type '{config.type}' for node '{config.id}' "
                f"(registered types: {sorted(self._types)})",
                source=config.id
            )
        node = node_cls.from_config(config, port)
        logger.debug(f"Created {node_cls.type_code} node '{config.id}'")
        return node

    def registered_types(self) -> Dict[str, str]:
        return {code: cls.type_description for code, cls in self._types.items()}

    def __contains__(self, code: str) -> bool:
        return (code or "").upper() in self._types

default_registry = NodeTypeRegistry()

def node_type(code: str, description: str) -> Callable[[Type[Node]], Type[Node]]:
    """Class decorator registering a node class under a type code."""
    def decorator(node_cls: Type[Node]) -> Type[Node]:
        node_cls.type_code = code.upper()
        node_cls.type_description = description
        default_registry.register(code, node_cls)
        return node_cls
    return decorator

def get_registered_node_types() -> Dict[str, str]:
    """Return `{type code: description}` for every registered node type."""
    return default_registry.registered_types()
