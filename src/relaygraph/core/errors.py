"""Error taxonomy for workflow orchestration.

Four failure kinds are distinguished:
1. ConfigurationError: a graph or pattern declaration is structurally invalid
2. RoutingError: a conditional edge resolved a label with no matching route
3. NodeExecutionError: a single node or agent invocation failed or timed out
4. RunFailure: a run did not reach END for any other reason

ConfigurationError and RoutingError point at a bug in the declared workflow and
are never retried.
"""

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class WorkflowError(Exception):
    """Base class for every error raised by the engine.

    Attributes:
        state: Last-known-good state snapshot, when the error aborted a run
    """

    def __init__(self, message: str, state: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.state = state


class ConfigurationError(WorkflowError):
    """A graph, pattern or agent declaration is invalid.

    Attributes:
        source: Offending node, edge or agent identifier, when known
    """

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class RoutingError(WorkflowError):
    """A conditional edge produced a label that is not in its routes."""

    def __init__(
        self,
        node_id: str,
        label: Any,
        routes: Dict[str, str],
        state: Optional[Mapping[str, Any]] = None
    ):
        super().__init__(
            f"Node '{node_id}' routed to label '{label}' which has no route "
            f"(known labels: {sorted(routes)})",
            state=state
        )
        self.node_id = node_id
        self.label = label
        self.routes = dict(routes)


class NodeExecutionError(WorkflowError):
    """A node or agent invocation failed."""

    def __init__(
        self,
        node_id: str,
        cause: BaseException,
        state: Optional[Mapping[str, Any]] = None
    ):
        super().__init__(f"Node '{node_id}' failed: {cause}", state=state)
        self.node_id = node_id
        self.cause = cause


class RunFailure(WorkflowError):
    """A run ended without reaching END."""

    def __init__(self, message: str, state: Optional[Mapping[str, Any]] = None):
        super().__init__(message, state=state if state is not None else MappingProxyType({}))


__all__ = [
    "WorkflowError",
    "ConfigurationError",
    "RoutingError",
    "NodeExecutionError",
    "RunFailure",
]
