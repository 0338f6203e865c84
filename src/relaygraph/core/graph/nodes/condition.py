"""Condition node: writes the next route label into `next_node`.

A conditional edge leaving a config-driven graph node routes on `next_node`,
so a condition node followed by such an edge turns a state field into a branch.
"""

from typing import Any, ClassVar, List, Mapping

from pydantic import model_validator

from relaygraph.core.errors import ConfigurationError
from relaygraph.core.graph.config import END
from relaygraph.core.graph.nodes.base.node import Node, Updates, state_handler
from relaygraph.core.graph.nodes.registry import node_type
from relaygraph.core.graph.state import NEXT_NODE
from relaygraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.NODES)

def route_label(value: Any) -> str:
    """Render a state value as a route label ("true"/"false" for booleans)."""
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)

@node_type("CONDITION_NODE", "Chooses the next route from a state field")
class ConditionNode(Node):
    """
    Params:
        condition_field (required): State key to read
        routes (required): Field value to route label
        default_route: Label used when nothing matches (default END)
    """
    required_params: ClassVar[List[str]] = ["condition_field", "routes"]

    @model_validator(mode='after')
    def validate_routes(self) -> "ConditionNode":
        routes = self.params.get("routes")
        if not isinstance(routes, dict):
            raise ConfigurationError(
                f"Condition node '{self.id}' needs a routes object mapping field values to "
                f"route labels, got {type(routes).__name__}",
                source=self.id
            )
        return self

    @state_handler
    async def process(self, state: Mapping[str, Any]) -> Updates:
        field = self.param("condition_field")
        routes = self.param("routes")
        default_route = self.param("default_route", END)

        value = state.get(field)
        if value is None:
            logger.warning(f"Condition field '{field}' is unset, using default route {default_route}")
            target = default_route
        else:
            target = routes.get(route_label(value), default_route)
            logger.info(f"Condition '{field}'={value!r} routes to {target}")

        return {NEXT_NODE: target}
