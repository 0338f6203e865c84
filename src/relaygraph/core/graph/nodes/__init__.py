"""Node package initialization.

Exposes node types and helpers for building workflows. Importing this package
registers the built-in node types (LLM_NODE, CONDITION_NODE, TRANSFORM_NODE).
"""

from relaygraph.core.graph.nodes.base.node import (
    FunctionNode,
    Node,
    state_handler
)
from relaygraph.core.graph.nodes.registry import (
    NodeTypeRegistry,
    default_registry,
    get_registered_node_types,
    node_type
)
from relaygraph.core.graph.nodes.llm import LlmNode
from relaygraph.core.graph.nodes.condition import ConditionNode
from relaygraph.core.graph.nodes.transform import TransformNode, TransformType

__all__ = [
    # Base node types
    "Node",
    "FunctionNode",

    # Built-in node types
    "LlmNode",
    "ConditionNode",
    "TransformNode",
    "TransformType",

    # Registry, decorators and helpers
    "NodeTypeRegistry",
    "default_registry",
    "get_registered_node_types",
    "node_type",
    "state_handler",
]
