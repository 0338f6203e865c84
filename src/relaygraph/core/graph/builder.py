"""Builds runnable graphs from declarative GraphConfig objects.

Steps:
    1. Validate the config structurally (fail fast, before any node is built)
    2. Create each node through the node-type registry
    3. Wire simple edges and conditional edges; conditional edges route on
       the `next_node` state value written by condition nodes
"""

from typing import Any, Optional

from relaygraph.core.config import EngineSettings
from relaygraph.core.errors import ConfigurationError
from relaygraph.core.graph.base import Graph
from relaygraph.core.graph.config import START, GraphConfig
from relaygraph.core.graph.nodes.registry import NodeTypeRegistry, default_registry
from relaygraph.core.graph.router import state_router
from relaygraph.core.graph.state import NEXT_NODE
from relaygraph.core.graph.validator import ensure_valid
from relaygraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.GRAPH)

class GraphBuilder:
    """Compiles GraphConfig declarations into Graph instances."""

    def __init__(
        self,
        registry: Optional[NodeTypeRegistry] = None,
        settings: Optional[EngineSettings] = None
    ):
        self.registry = registry or default_registry
        self.settings = settings or EngineSettings()

    def build(self, config: GraphConfig, port: Any = None) -> Graph:
        """Build a runnable graph.

        Args:
            config: Graph declaration
            port: InvocationPort handed to nodes that call a model

        Returns:
            A Graph ready to run

        Raises:
            ConfigurationError: If the declaration is invalid or a node cannot be built
        """
        ensure_valid(config)
        logger.info(f"Building graph '{config.name}' ({len(config.nodes)} nodes, {len(config.edges)} edges)")

        graph = Graph(
            name=config.name,
            state_keys=list(config.state_keys),
            initial_values=dict(config.initial_values),
            max_node_visits=self.settings.max_node_visits,
            strict_initial_values=self.settings.strict_initial_values,
            logging_config=self.settings.logging,
        )

        for node_config in config.nodes:
            graph.add_node(self.registry.create(node_config, port))

        for edge in config.edges:
            if edge.is_conditional:
                graph.add_conditional_edges(edge.from_node, state_router(NEXT_NODE), edge.routes)
            elif edge.from_node == START:
                graph.set_entry_point(edge.to)
            else:
                graph.add_edge(edge.from_node, edge.to)

        errors = graph.validate()
        if errors:
            raise ConfigurationError(f"Graph '{config.name}' cannot run: {'; '.join(errors)}")

        logger.info(f"Graph '{config.name}' built")
        return graph

def build_graph(config: GraphConfig, port: Any = None, settings: Optional[EngineSettings] = None) -> Graph:
    """Build a graph with the default node registry."""
    return GraphBuilder(settings=settings).build(config, port)
