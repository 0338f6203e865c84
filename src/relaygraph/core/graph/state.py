"""State management for the graph system.

This module provides:
1. MergeStrategy: How a write to a key combines with the existing value
2. StateKey: A declared state key with its merge strategy
3. NodeStatus: An enumeration of node execution statuses
4. WorkflowState: The typed, mergeable key-value bag for a single run
"""

import copy
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, Field, PrivateAttr

from relaygraph.core.errors import ConfigurationError
from relaygraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.GRAPH)

NEXT_NODE = "next_node"
CURRENT_NODE = "current_node"
ERROR_MESSAGE = "error_message"

class MergeStrategy(str, Enum):
    """Merge strategy of a state key."""
    REPLACE = "REPLACE"
    APPEND = "APPEND"

class StateKey(BaseModel):
    """A declared state key.

    Attributes:
        name: Key name
        merge_strategy: How writes combine with the existing value
        description: Human-readable purpose
        default: Value returned by reads of the key while it is unset
    """
    name: str
    merge_strategy: MergeStrategy = MergeStrategy.REPLACE
    description: str = ""
    default: Any = None

    class Config:
        frozen = True

    @property
    def is_append(self) -> bool:
        return self.merge_strategy == MergeStrategy.APPEND

# Keys the engine writes itself; registered as REPLACE unless declared.
ENGINE_KEYS = (
    StateKey(name=NEXT_NODE, description="Route label chosen by a condition node"),
    StateKey(name=CURRENT_NODE, description="Id of the node that produced the last update"),
    StateKey(name=ERROR_MESSAGE, description="Last error reported by a node"),
)

class NodeStatus(str, Enum):
    """Node execution status."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"

class WorkflowState(BaseModel):
    """
    Mergeable key-value bag carrying the in-flight data of one run.

    Reads never raise: an unset key yields its declared default, an empty list
    for APPEND keys, or None. Writes apply the key's merge strategy.

    Attributes:
        keys: Declared state keys by name
        data: Current values
        status: Execution status by node id
        errors: Error messages by node id
        created_at: Time of state creation
        updated_at: Time of last state modification
    """
    keys: Dict[str, StateKey] = Field(default_factory=dict)
    data: Dict[str, Any] = Field(default_factory=dict)
    status: Dict[str, NodeStatus] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    _visits: Dict[str, int] = PrivateAttr(default_factory=dict)

    @classmethod
    def create(
        cls,
        state_keys: Iterable[StateKey],
        initial_values: Optional[Mapping[str, Any]] = None,
        strict: bool = False
    ) -> "WorkflowState":
        """Create a state from declared keys and initial values.

        Engine keys are registered as REPLACE when not declared. Initial values
        for undeclared keys are ignored with a warning, or rejected when strict.

        Args:
            state_keys: Declared keys
            initial_values: Optional starting values
            strict: Reject unknown initial-value keys

        Returns:
            A fresh WorkflowState

        Raises:
            ConfigurationError: If strict and an initial value has no declared key
        """
        keys = {key.name: key for key in ENGINE_KEYS}
        keys.update({key.name: key for key in state_keys})
        state = cls(keys=keys)

        unknown = [name for name in (initial_values or {}) if name not in keys]
        if unknown:
            if strict:
                raise ConfigurationError(
                    f"Initial values reference undeclared state keys: {unknown}",
                    source=unknown[0]
                )
            logger.warning(f"Ignoring initial values for undeclared state keys: {unknown}")

        for name, value in (initial_values or {}).items():
            if name in keys:
                state.set(name, copy.deepcopy(value))
        return state

    def get(self, key: str, default: Any = None) -> Any:
        """Read a value, falling back to a default instead of raising."""
        if key in self.data:
            return self.data[key]
        if default is not None:
            return default
        declared = self.keys.get(key)
        if declared is None:
            return None
        if declared.default is not None:
            return copy.deepcopy(declared.default)
        return [] if declared.is_append else None

    def set(self, key: str, value: Any) -> None:
        """Write a value using the key's merge strategy.

        APPEND keys extend the existing list; a scalar is wrapped as a
        one-element list first. Undeclared keys behave as REPLACE.
        """
        declared = self.keys.get(key)
        if declared is None:
            logger.debug(f"Writing undeclared state key '{key}' with REPLACE semantics")

        if declared is not None and declared.is_append:
            items = list(value) if isinstance(value, (list, tuple)) else [value]
            current = self.data.get(key)
            merged: List[Any] = list(current) if isinstance(current, list) else []
            merged.extend(items)
            self.data[key] = merged
        else:
            self.data[key] = value
        self._update_timestamp()

    def update(self, values: Optional[Mapping[str, Any]]) -> None:
        """Apply several writes in order."""
        for key, value in (values or {}).items():
            self.set(key, value)

    def snapshot(self) -> Mapping[str, Any]:
        """Return a read-only deep copy of the current values.

        Every declared key is present; unset keys read as their default
        (the declared default, [] for APPEND keys, otherwise None).
        """
        values = {name: self.get(name) for name in self.keys}
        values.update(self.data)
        return MappingProxyType(copy.deepcopy(values))

    def mark_status(self, node_id: str, status: NodeStatus) -> None:
        """Mark a node's execution status."""
        self.status[node_id] = status
        self._update_timestamp()

    def add_error(self, node_id: str, error: str) -> None:
        """Add an error message for a node."""
        self.errors[node_id] = error
        self._update_timestamp()

    def record_visit(self, node_id: str) -> int:
        """Count a node execution and return the node's visit total."""
        self._visits[node_id] = self._visits.get(node_id, 0) + 1
        return self._visits[node_id]

    def visits(self, node_id: str) -> int:
        return self._visits.get(node_id, 0)

    def _update_timestamp(self) -> None:
        """Update the last modified timestamp."""
        object.__setattr__(self, "updated_at", datetime.now())
