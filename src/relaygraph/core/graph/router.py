"""Routers for conditional edges.

A router is a plain, side-effect-free function of the read-only state snapshot
that returns a route label. The graph looks the label up in the edge's routes.

Example:
    ```python
    graph.add_conditional_edges(
        "quality_check",
        quality_gate("quality_score", "iteration_count", threshold=80, max_iterations=3),
        {"end": END, "iterate": "information_gathering"},
    )
    ```
"""

from typing import Any, Callable, Mapping

from relaygraph.core.graph.config import END
from relaygraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.GRAPH)

Router = Callable[[Mapping[str, Any]], str]

def _number(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).strip())
    except ValueError:
        return 0

def state_router(key: str, default: str = END) -> Router:
    """Route on the string value of a state key, or `default` when it is unset."""
    def route(state: Mapping[str, Any]) -> str:
        value = state.get(key)
        if value is None or value == "":
            return default
        return str(value)
    route.__name__ = f"state_router[{key}]"
    return route

def quality_gate(
    score_key: str,
    iteration_key: str,
    threshold: float,
    max_iterations: int,
    end_label: str = "end",
    continue_label: str = "iterate"
) -> Router:
    """Build a router that ends a loop once the score passes or iterations run out.

    Routes to `end_label` when `score >= threshold` or `iterations >= max_iterations`,
    otherwise to `continue_label`. The counter is advanced by the loop's nodes.
    """
    def route(state: Mapping[str, Any]) -> str:
        score = _number(state.get(score_key))
        iterations = _number(state.get(iteration_key))
        if score >= threshold:
            logger.info(f"Quality gate passed: {score_key}={score} >= {threshold}")
            return end_label
        if iterations >= max_iterations:
            logger.info(f"Quality gate stopped at max iterations ({iterations}/{max_iterations}), {score_key}={score}")
            return end_label
        logger.info(f"Quality gate iterating: {score_key}={score} < {threshold}, iteration {iterations}/{max_iterations}")
        return continue_label
    route.__name__ = f"quality_gate[{score_key}]"
    return route
