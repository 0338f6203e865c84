"""
Graph workflow orchestration service.

GraphWorkflowExecutor is the boundary between callers and the graph engine:
1. It runs graphs and reports `{"success": ..., "data" | "error": ...}` dicts
   instead of raising
2. It owns the compiled graph and deep-research caches, keyed by caller-supplied
   identity such as f"{connection_id}_{graph_id}"
3. It builds graphs from stored JSON declarations

Example:
    ```python
    executor = GraphWorkflowExecutor()
    result = await executor.execute_from_json(config_json, port, {"question": "..."},
                                              cache_key="42_review")
    executor.clear_cache_for_connection(42)
    ```
"""

from typing import Any, AsyncIterator, Dict, Mapping, Optional

from relaygraph.core.config import EngineSettings
from relaygraph.core.errors import ConfigurationError, WorkflowError
from relaygraph.core.graph.base import Graph, ProgressEvent
from relaygraph.core.graph.builder import GraphBuilder
from relaygraph.core.graph.cache import GraphCache
from relaygraph.core.graph.config import GraphConfig
from relaygraph.core.graph.nodes.registry import get_registered_node_types
from relaygraph.core.graph.research import DeepResearchWorkflow, ResearchProgress, ResearchResult
from relaygraph.core.graph.validator import validate_graph
from relaygraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.WORKFLOW)

InitialValues = Optional[Mapping[str, Any]]

class GraphWorkflowExecutor:
    """Runs, builds and caches graph workflows."""

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()
        self.builder = GraphBuilder(settings=self.settings)
        self.graph_cache: GraphCache[Graph] = GraphCache()
        self.research_cache: GraphCache[DeepResearchWorkflow] = GraphCache()

    async def execute(self, graph: Graph, initial_values: InitialValues = None) -> Dict[str, Any]:
        """Run a graph to completion.

        Returns:
            {"success": True, "data": final state values} or
            {"success": False, "error": message, "state": last-known-good values}
        """
        logger.info(f"Executing graph '{graph.name}'")
        try:
            state = await graph.run(initial_values)
        except WorkflowError as e:
            logger.error(f"Graph '{graph.name}' failed: {e}")
            return {"success": False, "error": str(e), "state": dict(e.state or {})}
        except Exception as e:
            logger.exception(f"Graph '{graph.name}' failed unexpectedly: {e}")
            return {"success": False, "error": str(e), "state": {}}

        if not state.data:
            logger.warning(f"Graph '{graph.name}' finished with an empty state")
            return {"success": False, "error": "Workflow returned an empty result"}

        logger.info(f"Graph '{graph.name}' succeeded, final keys: {sorted(state.data)}")
        return {"success": True, "data": dict(state.snapshot())}

    async def execute_stream(
        self,
        graph: Graph,
        initial_values: InitialValues = None
    ) -> AsyncIterator[ProgressEvent]:
        """Stream one ProgressEvent per node; a failure ends with an ERROR event."""
        logger.info(f"Streaming graph '{graph.name}'")
        events = graph.stream(initial_values)
        try:
            async for event in events:
                yield event
        finally:
            await events.aclose()

    async def get_or_build(self, cache_key: str, config: GraphConfig, port: Any = None) -> Graph:
        """Return the cached graph for `cache_key`, building it from `config` on first use.

        Raises:
            ConfigurationError: If the config cannot be built
        """
        return await self.graph_cache.get_or_create(
            cache_key, lambda: self.builder.build(config, port)
        )

    async def execute_with_cache(
        self,
        cache_key: str,
        graph: Graph,
        initial_values: InitialValues = None
    ) -> Dict[str, Any]:
        """Cache `graph` under `cache_key` and run it."""
        self.graph_cache.put(cache_key, graph)
        return await self.execute(graph, initial_values)

    async def execute_from_cache(self, cache_key: str, initial_values: InitialValues = None) -> Dict[str, Any]:
        """Run a previously cached graph; an unknown key fails the result."""
        graph = self.graph_cache.get(cache_key)
        if graph is None:
            logger.warning(f"No cached workflow for key: {cache_key}")
            return {"success": False, "error": f"No cached workflow for key: {cache_key}"}
        return await self.execute(graph, initial_values)

    async def execute_from_json(
        self,
        config_json: str,
        port: Any,
        initial_values: InitialValues = None,
        cache_key: Optional[str] = None
    ) -> Dict[str, Any]:
        """Parse, build (or reuse) and run a graph declared as JSON.

        Configuration problems fail the result instead of raising.
        """
        try:
            config = GraphConfig.from_json(config_json)
            if cache_key:
                graph = await self.get_or_build(cache_key, config, port)
            else:
                graph = self.builder.build(config, port)
        except ConfigurationError as e:
            logger.error(f"Invalid workflow configuration: {e}")
            return {"success": False, "error": str(e)}
        return await self.execute(graph, initial_values)

    def validate_config_json(self, config_json: str) -> Dict[str, Any]:
        """Check a JSON declaration without building it."""
        try:
            config = GraphConfig.from_json(config_json)
        except ConfigurationError as e:
            return {"valid": False, "error": str(e)}

        errors = validate_graph(config)
        if errors:
            return {"valid": False, "error": errors[0]}
        return {
            "valid": True,
            "name": config.name,
            "nodeCount": len(config.nodes),
            "edgeCount": len(config.edges),
        }

    @staticmethod
    def get_registered_node_types() -> Dict[str, str]:
        return get_registered_node_types()

    async def _research_workflow(self, port: Any, cache_key: str) -> DeepResearchWorkflow:
        return await self.research_cache.get_or_create(
            cache_key,
            lambda: DeepResearchWorkflow(
                port,
                max_iterations=self.settings.research_max_iterations,
                quality_threshold=self.settings.research_quality_threshold,
            ),
        )

    async def deep_research(self, port: Any, cache_key: str, question: str) -> ResearchResult:
        """Run the cached deep research workflow for `cache_key`."""
        logger.info(f"Deep research ({cache_key}): {question}")
        workflow = await self._research_workflow(port, cache_key)
        return await workflow.research(question)

    async def deep_research_stream(
        self,
        port: Any,
        cache_key: str,
        question: str
    ) -> AsyncIterator[ResearchProgress]:
        """Stream the cached deep research workflow for `cache_key`."""
        logger.info(f"Streamed deep research ({cache_key}): {question}")
        workflow = await self._research_workflow(port, cache_key)
        progress = workflow.research_stream(question)
        try:
            async for entry in progress:
                yield entry
        finally:
            await progress.aclose()

    def clear_cache_for_connection(self, connection_id: Any) -> int:
        """Drop every cached graph and research workflow built for a connection."""
        prefix = f"{connection_id}_"
        removed = self.graph_cache.invalidate_prefix(prefix) + self.research_cache.invalidate_prefix(prefix)
        logger.info(f"Cleared {removed} cached workflows for connection {connection_id}")
        return removed

    def clear_all_cache(self) -> None:
        self.graph_cache.clear()
        self.research_cache.clear()
        logger.info("Cleared all cached workflows")
