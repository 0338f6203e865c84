"""Graph Base Classes

This module defines the runnable graph for orchestrating agent workflows.
The graph provides a lightweight way to:
1. Register nodes in an arena keyed by node id
2. Connect them with simple or conditional transitions, including back-edges
3. Merge each node's updates into the run's WorkflowState
4. Run to completion or stream one progress event per node

Example:
    ```python
    graph = Graph(name="review", state_keys=[StateKey(name="draft")])
    graph.chain([outline, write])
    graph.add_conditional_edges(
        "write", state_router("verdict"), {"retry": "outline", "ok": END}
    )

    state = await graph.run({"draft": ""})

    async for event in graph.stream({"draft": ""}):
        print(event.node_name, event.state)
    ```
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, PrivateAttr

from relaygraph.core.errors import (
    ConfigurationError,
    NodeExecutionError,
    RoutingError,
    RunFailure,
    WorkflowError,
)
from relaygraph.core.graph.config import END, START
from relaygraph.core.graph.nodes.base.node import Node
from relaygraph.core.graph.state import NodeStatus, StateKey, WorkflowState
from relaygraph.core.logging import LogComponent, RelayLoggingConfig, get_logger, log_state

class Transition(BaseModel):
    """Outgoing transition of a node.

    A simple transition has a fixed `target`. A conditional one computes a
    label with `router` and looks it up in `routes`.
    """
    target: Optional[str] = None
    router: Optional[Callable[[Mapping[str, Any]], Any]] = None
    routes: Dict[str, str] = Field(default_factory=dict)

    class Config:
        arbitrary_types_allowed = True

    @property
    def is_conditional(self) -> bool:
        return self.router is not None

    @property
    def targets(self) -> List[str]:
        return list(self.routes.values()) if self.is_conditional else [self.target]

class ProgressEventType(str, Enum):
    NODE = "node"
    ERROR = "error"

class ProgressEvent(BaseModel):
    """One step of a streamed run.

    Attributes:
        event_type: NODE after a node completes, ERROR when the run fails
        node_name: Node that completed or failed
        state: Snapshot of the state after the node
        error: Error message for ERROR events
    """
    event_type: ProgressEventType = ProgressEventType.NODE
    node_name: Optional[str] = None
    state: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.now)

    @property
    def is_error(self) -> bool:
        return self.event_type == ProgressEventType.ERROR

class Graph(BaseModel):
    """A directed, possibly cyclic graph of nodes.

    Attributes:
        name: Graph name used in logs
        nodes: Node arena keyed by id
        transitions: Outgoing transition per node id
        entry_point: Node reached from START
        state_keys: Declared state keys for runs of this graph
        initial_values: Values merged into every new run's state
        max_node_visits: Per-run cap on executions of any single node
        strict_initial_values: Reject unknown initial-value keys
        logging_config: Controls logging verbosity
    """
    name: str = "graph"
    nodes: Dict[str, Node] = Field(default_factory=dict)
    transitions: Dict[str, Transition] = Field(default_factory=dict)
    entry_point: Optional[str] = None
    state_keys: List[StateKey] = Field(default_factory=list)
    initial_values: Dict[str, Any] = Field(default_factory=dict)
    max_node_visits: int = Field(default=25, ge=1)
    strict_initial_values: bool = False
    logging_config: RelayLoggingConfig = Field(default_factory=RelayLoggingConfig)
    _logger: logging.Logger = PrivateAttr()

    class Config:
        arbitrary_types_allowed = True

    def __init__(self, **data):
        super().__init__(**data)
        self._logger = get_logger(LogComponent.GRAPH)

    def add_node(self, node: Node) -> None:
        """Register a node with the graph.

        Raises:
            ConfigurationError: If the id is empty, reserved or already used
        """
        if not node.id:
            raise ConfigurationError("Node must have an id set")
        if node.id in (START, END):
            raise ConfigurationError(f"Node id '{node.id}' is reserved", source=node.id)
        if node.id in self.nodes:
            raise ConfigurationError(f"Duplicate node id: {node.id}", source=node.id)

        self.nodes[node.id] = node
        self._logger.info(f"Added node: {node.id} of type {type(node).__name__}")

    def _check_source(self, from_node_id: str) -> None:
        if from_node_id not in self.nodes:
            raise ConfigurationError(f"Source node not found: {from_node_id}", source=from_node_id)
        if from_node_id in self.transitions:
            raise ConfigurationError(
                f"Node {from_node_id} already has an outgoing edge", source=from_node_id
            )

    def _check_target(self, from_node_id: str, to_node_id: str) -> None:
        if to_node_id != END and to_node_id not in self.nodes:
            raise ConfigurationError(
                f"Edge from {from_node_id} targets unknown node: {to_node_id}", source=from_node_id
            )

    def add_edge(self, from_node_id: str, to_node_id: str) -> None:
        """Add a simple edge. An edge from START sets the entry point.

        Raises:
            ConfigurationError: If an endpoint is unknown or the source already has an edge
        """
        if from_node_id == START:
            self.set_entry_point(to_node_id)
            return
        self._check_source(from_node_id)
        self._check_target(from_node_id, to_node_id)

        self.transitions[from_node_id] = Transition(target=to_node_id)
        self._logger.info(f"Added edge: {from_node_id} --> {to_node_id}")

    def add_conditional_edges(
        self,
        from_node_id: str,
        router: Callable[[Mapping[str, Any]], Any],
        routes: Dict[str, str]
    ) -> None:
        """Add a conditional edge.

        Args:
            from_node_id: Source node id
            router: Function of the state snapshot returning a route label
            routes: Route label to target node id or END

        Raises:
            ConfigurationError: If routes are empty or reference unknown nodes
        """
        self._check_source(from_node_id)
        if not routes:
            raise ConfigurationError(
                f"Conditional edge from {from_node_id} has no routes", source=from_node_id
            )
        for target in routes.values():
            self._check_target(from_node_id, target)

        self.transitions[from_node_id] = Transition(router=router, routes=dict(routes))
        self._logger.info(f"Added conditional edge: {from_node_id} --[{', '.join(routes)}]--> {sorted(set(routes.values()))}")

    def set_entry_point(self, node_id: str) -> None:
        """Set the node reached from START.

        Raises:
            ConfigurationError: If node_id is not found
        """
        if node_id not in self.nodes:
            raise ConfigurationError(f"Entry node not found: {node_id}", source=node_id)
        self.entry_point = node_id
        self._logger.info(f"Set entry point to node: {node_id}")

    def chain(self, nodes: List[Node], end: bool = False) -> None:
        """Register nodes and connect them in order.

        Args:
            nodes: Nodes to chain together
            end: Also connect the last node to END
        """
        for node in nodes:
            self.add_node(node)
        for i in range(len(nodes) - 1):
            self.add_edge(nodes[i].id, nodes[i + 1].id)
        if end and nodes:
            self.add_edge(nodes[-1].id, END)

        if nodes and self.entry_point is None:
            self.set_entry_point(nodes[0].id)

    def validate(self) -> List[str]:
        """Validate the graph structure.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors: List[str] = []

        if not self.nodes:
            errors.append("Graph has no nodes")
            return errors

        if self.entry_point is None:
            errors.append("Graph has no entry point")
        elif self.entry_point not in self.nodes:
            errors.append(f"Entry point references unknown node: {self.entry_point}")

        for node_id in self.nodes:
            transition = self.transitions.get(node_id)
            if transition is None:
                errors.append(f"Node {node_id} has no outgoing edge")
                continue
            for target in transition.targets:
                if target != END and target not in self.nodes:
                    errors.append(f"Node {node_id} references unknown node: {target}")

        return errors

    def create_state(self, initial_values: Optional[Mapping[str, Any]] = None) -> WorkflowState:
        """Create a fresh state for one run of this graph."""
        values = dict(self.initial_values)
        values.update(initial_values or {})
        return WorkflowState.create(self.state_keys, values, strict=self.strict_initial_values)

    async def run(
        self,
        initial_values: Optional[Mapping[str, Any]] = None,
        state: Optional[WorkflowState] = None
    ) -> WorkflowState:
        """Run the graph until END.

        Args:
            initial_values: Starting values for a new state
            state: Existing state to run on instead

        Returns:
            Final WorkflowState

        Raises:
            ConfigurationError: If the graph is invalid
            NodeExecutionError: If a node raises
            RoutingError: If a route label has no target
            RunFailure: If a node exceeds max_node_visits
        """
        if state is None:
            state = self.create_state(initial_values)
        async for _ in self._steps(state):
            pass
        return state

    async def stream(
        self,
        initial_values: Optional[Mapping[str, Any]] = None,
        state: Optional[WorkflowState] = None
    ) -> AsyncIterator[ProgressEvent]:
        """Run the graph, yielding a ProgressEvent after every node.

        The run advances only as events are consumed; closing the iterator
        stops it before the next node. Failures end the stream with an ERROR event.
        """
        steps = None
        try:
            if state is None:
                state = self.create_state(initial_values)
            steps = self._steps(state)
            async for node_id in steps:
                yield ProgressEvent(node_name=node_id, state=dict(state.snapshot()))
        except WorkflowError as e:
            self._logger.error(f"Graph '{self.name}' failed: {e}")
            yield ProgressEvent(
                event_type=ProgressEventType.ERROR,
                node_name=getattr(e, "node_id", None),
                state=dict(e.state or {}),
                error=str(e),
            )
        finally:
            if steps is not None:
                await steps.aclose()

    async def _steps(self, state: WorkflowState) -> AsyncIterator[str]:
        """Execute nodes one at a time, yielding each completed node id."""
        errors = self.validate()
        if errors:
            raise ConfigurationError(f"Graph '{self.name}' is invalid: {'; '.join(errors)}")

        current = self.entry_point
        self._logger.info(f"Starting graph '{self.name}' at node: {current}")

        while current != END:
            node = self.nodes[current]
            visits = state.record_visit(current)
            if visits > self.max_node_visits:
                raise RunFailure(
                    f"Node '{current}' exceeded {self.max_node_visits} visits in graph '{self.name}'",
                    state=state.snapshot()
                )

            last_good = state.snapshot()
            state.mark_status(current, NodeStatus.RUNNING)
            try:
                updates = await node.process(last_good)
                if updates is not None and not isinstance(updates, Mapping):
                    raise TypeError(
                        f"Node '{current}' returned {type(updates).__name__}, expected a mapping of updates"
                    )
                state.update(updates)
            except Exception as e:
                state.mark_status(current, NodeStatus.ERROR)
                state.add_error(current, str(e))
                self._logger.error(f"Error in node {current}: {e}")
                raise NodeExecutionError(current, e, state=last_good) from e

            state.mark_status(current, NodeStatus.COMPLETED)
            if self.logging_config.show_node_transitions:
                log_state(self._logger, dict(state.snapshot()), prefix=f"[{current}] ")

            yield current
            current = self._next_node(current, state)

        self._logger.info(f"Graph '{self.name}' reached END")

    def _next_node(self, node_id: str, state: WorkflowState) -> str:
        transition = self.transitions[node_id]
        if not transition.is_conditional:
            self._logger.info(f"Transitioning {node_id} --> {transition.target}")
            return transition.target

        snapshot = state.snapshot()
        try:
            label = transition.router(snapshot)
        except Exception as e:
            self._logger.error(f"Router for node {node_id} raised: {e}")
            raise NodeExecutionError(node_id, e, state=snapshot) from e

        target = transition.routes.get(str(label))
        if target is None:
            raise RoutingError(node_id, label, transition.routes, state=snapshot)

        self._logger.info(f"Transitioning {node_id} --[{label}]--> {target}")
        return target
