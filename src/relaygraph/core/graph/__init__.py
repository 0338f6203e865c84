"""Graph package initialization.

Exposes core graph components and helpers for building workflows.
"""

from relaygraph.core.graph.base import Graph, ProgressEvent, ProgressEventType, Transition
from relaygraph.core.graph.builder import GraphBuilder, build_graph
from relaygraph.core.graph.cache import GraphCache
from relaygraph.core.graph.config import END, START, EdgeConfig, EdgeKind, GraphConfig, NodeConfig
from relaygraph.core.graph.executor import GraphWorkflowExecutor
from relaygraph.core.graph.nodes import (
    ConditionNode,
    FunctionNode,
    LlmNode,
    Node,
    TransformNode,
    TransformType,
    get_registered_node_types,
    node_type,
    state_handler
)
from relaygraph.core.graph.research import DeepResearchWorkflow, ResearchProgress, ResearchResult
from relaygraph.core.graph.router import quality_gate, state_router
from relaygraph.core.graph.state import MergeStrategy, NodeStatus, StateKey, WorkflowState
from relaygraph.core.graph.validator import ensure_valid, validate_graph

__all__ = [
    # Core classes
    "Graph",
    "Transition",
    "ProgressEvent",
    "ProgressEventType",
    "WorkflowState",
    "StateKey",
    "MergeStrategy",
    "NodeStatus",

    # Declarative configuration
    "GraphConfig",
    "NodeConfig",
    "EdgeConfig",
    "EdgeKind",
    "START",
    "END",
    "validate_graph",
    "ensure_valid",
    "GraphBuilder",
    "build_graph",

    # Nodes
    "Node",
    "FunctionNode",
    "LlmNode",
    "ConditionNode",
    "TransformNode",
    "TransformType",
    "get_registered_node_types",
    "node_type",
    "state_handler",

    # Routing
    "state_router",
    "quality_gate",

    # Orchestration
    "GraphCache",
    "GraphWorkflowExecutor",
    "DeepResearchWorkflow",
    "ResearchResult",
    "ResearchProgress",
]
