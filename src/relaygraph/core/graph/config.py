"""Declarative graph configuration.

A GraphConfig names its state keys, nodes and edges. Both the native field
names and the stored JSON layout are accepted:

    {
        "name": "review",
        "stateConfig": {
            "keys": [{"key": "draft", "strategy": "REPLACE"}],
            "initialValues": {"draft": ""}
        },
        "nodes": [{"id": "write", "type": "LLM_NODE", "config": {...}}],
        "edges": [{"from": "START", "to": "write", "type": "SIMPLE"}]
    }
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from relaygraph.core.errors import ConfigurationError
from relaygraph.core.graph.state import MergeStrategy, StateKey

START = "START"
END = "END"

class EdgeKind(str, Enum):
    """Kind of edge."""
    SIMPLE = "SIMPLE"
    CONDITIONAL = "CONDITIONAL"

class NodeConfig(BaseModel):
    """Declaration of a single node.

    Attributes:
        id: Identifier, unique within the graph
        type: Node type code, e.g. "LLM_NODE"
        name: Display name
        description: Human-readable purpose
        params: Type-specific parameters
    """
    id: str = ""
    type: str = ""
    name: str = ""
    description: str = ""
    params: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _accept_config_alias(cls, data: Any) -> Any:
        if isinstance(data, dict) and "config" in data and "params" not in data:
            data = dict(data)
            data["params"] = data.pop("config") or {}
        return data

class EdgeConfig(BaseModel):
    """Declaration of a transition.

    Attributes:
        from_node: Source node id or START
        to: Target node id or END; unused for conditional edges
        kind: SIMPLE or CONDITIONAL
        routes: Route label to target node id or END (conditional only)
    """
    from_node: str = Field(default="", alias="from")
    to: Optional[str] = None
    kind: EdgeKind = Field(default=EdgeKind.SIMPLE, alias="type")
    routes: Dict[str, str] = Field(default_factory=dict)

    class Config:
        populate_by_name = True

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @property
    def is_conditional(self) -> bool:
        return self.kind == EdgeKind.CONDITIONAL

    @property
    def label(self) -> str:
        if self.is_conditional:
            return f"{self.from_node} -> {sorted(self.routes.values())}"
        return f"{self.from_node} -> {self.to}"

class GraphConfig(BaseModel):
    """Declarative workflow graph.

    Attributes:
        name: Workflow name
        description: Human-readable purpose
        version: Optional version tag
        state_keys: Declared state keys
        initial_values: Optional starting values
        nodes: Node declarations
        edges: Edge declarations
    """
    name: str = ""
    description: str = ""
    version: Optional[str] = None
    state_keys: List[StateKey] = Field(default_factory=list)
    initial_values: Dict[str, Any] = Field(default_factory=dict)
    nodes: List[NodeConfig] = Field(default_factory=list)
    edges: List[EdgeConfig] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_state_config(cls, data: Any) -> Any:
        """Unpack the stored `stateConfig` block into state keys and initial values."""
        if not isinstance(data, dict) or "stateConfig" not in data:
            return data
        data = dict(data)
        state_config = data.pop("stateConfig") or {}
        data.setdefault("state_keys", [
            {
                "name": key.get("key", key.get("name", "")),
                "merge_strategy": str(key.get("strategy", MergeStrategy.REPLACE.value)).upper(),
                "description": key.get("description", ""),
            }
            for key in state_config.get("keys") or []
        ])
        data.setdefault("initial_values", state_config.get("initialValues") or {})
        return data

    @property
    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    def validate_structure(self) -> List[str]:
        """Run the structural validator; an empty list means valid."""
        from relaygraph.core.graph.validator import validate_graph
        return validate_graph(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphConfig":
        """Parse a configuration mapping.

        Raises:
            ConfigurationError: If the mapping does not match the schema
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid graph configuration: {e}") from e

    @classmethod
    def from_json(cls, text: str) -> "GraphConfig":
        """Parse a JSON document.

        Raises:
            ConfigurationError: If the text is not JSON or does not match the schema
        """
        try:
            data = json.loads(text)
        except (TypeError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Malformed graph configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError("Graph configuration JSON must be an object")
        return cls.from_dict(data)
