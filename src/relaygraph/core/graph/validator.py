"""Structural validation of graph configurations.

Checks run in a fixed order and stop at the first failing category, which is
reported as one aggregated message:

1. Missing name
2. Missing state keys
3. Missing nodes
4. Duplicate node ids
5. Missing edges
6. Dangling edge endpoints
7. Conditional edges with empty routes or unknown route targets
"""

from collections import Counter
from typing import Callable, List, Optional

from relaygraph.core.errors import ConfigurationError
from relaygraph.core.graph.config import END, START, GraphConfig


def _check_name(config: GraphConfig) -> Optional[str]:
    if not config.name or not config.name.strip():
        return "Graph name must not be empty"
    return None


def _check_state_keys(config: GraphConfig) -> Optional[str]:
    if not config.state_keys:
        return "Graph must declare at least one state key"
    unnamed = [index for index, key in enumerate(config.state_keys) if not key.name]
    if unnamed:
        return f"State keys at positions {unnamed} have no name"
    return None


def _check_nodes(config: GraphConfig) -> Optional[str]:
    if not config.nodes:
        return "Graph must declare at least one node"
    unnamed = [index for index, node in enumerate(config.nodes) if not node.id]
    if unnamed:
        return f"Nodes at positions {unnamed} have no id"
    return None


def _check_duplicate_ids(config: GraphConfig) -> Optional[str]:
    counts = Counter(config.node_ids)
    duplicates = sorted(node_id for node_id, count in counts.items() if count > 1)
    if duplicates:
        return f"Duplicate node ids: {duplicates}"
    return None


def _check_edges(config: GraphConfig) -> Optional[str]:
    if not config.edges:
        return "Graph must declare at least one edge"
    return None


def _check_endpoints(config: GraphConfig) -> Optional[str]:
    node_ids = set(config.node_ids)
    dangling: List[str] = []
    for edge in config.edges:
        if edge.from_node != START and edge.from_node not in node_ids:
            dangling.append(f"edge {edge.label}: unknown source '{edge.from_node}'")
        if not edge.is_conditional and edge.to != END and edge.to not in node_ids:
            dangling.append(f"edge {edge.label}: unknown target '{edge.to}'")
    if dangling:
        return "Dangling edge endpoints: " + "; ".join(dangling)
    return None


def _check_routes(config: GraphConfig) -> Optional[str]:
    valid_targets = set(config.node_ids) | {END}
    problems: List[str] = []
    for edge in config.edges:
        if not edge.is_conditional:
            continue
        if not edge.routes:
            problems.append(f"conditional edge from '{edge.from_node}' has no routes")
            continue
        for label, target in edge.routes.items():
            if target not in valid_targets:
                problems.append(
                    f"conditional edge from '{edge.from_node}' routes '{label}' "
                    f"to unknown target '{target}'"
                )
    if problems:
        return "Invalid conditional routes: " + "; ".join(problems)
    return None


CHECKS: List[Callable[[GraphConfig], Optional[str]]] = [
    _check_name,
    _check_state_keys,
    _check_nodes,
    _check_duplicate_ids,
    _check_edges,
    _check_endpoints,
    _check_routes,
]


def validate_graph(config: GraphConfig) -> List[str]:
    """Validate a graph configuration without side effects.

    Args:
        config: Configuration to check

    Returns:
        An empty list if valid, else the single message of the first failing category
    """
    for check in CHECKS:
        message = check(config)
        if message:
            return [message]
    return []


def ensure_valid(config: GraphConfig) -> GraphConfig:
    """Validate a configuration and raise on the first failing category.

    Raises:
        ConfigurationError: If the configuration is structurally invalid
    """
    errors = validate_graph(config)
    if errors:
        raise ConfigurationError(errors[0], source=config.name or None)
    return config
