"""Base node types."""

from relaygraph.core.graph.nodes.base.node import FunctionNode, Node, state_handler

__all__ = ["Node", "FunctionNode", "state_handler"]
