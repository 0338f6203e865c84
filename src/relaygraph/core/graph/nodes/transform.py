"""Transform node: deterministic data shaping between model calls.

Transform types:
    MERGE: join the non-empty input values with newlines
    EXTRACT: the first input's value
    FORMAT: "key: value" lines
    SPLIT_LINES: split on `delimiter`, trim, drop empty parts
    PARSE_NUMBER: digits only, clamped to 0..100
    PARSE_JSON: object or array, else the raw string
    THRESHOLD_CHECK: "PASS" when value >= threshold, else "NEED_IMPROVEMENT"
    INCREMENT: integer value + 1
"""

import json
import re
from enum import Enum
from typing import Any, ClassVar, List, Mapping

from pydantic import model_validator

from relaygraph.core.errors import ConfigurationError
from relaygraph.core.graph.nodes.base.node import Node, Updates, state_handler
from relaygraph.core.graph.nodes.registry import node_type
from relaygraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.NODES)

_NON_DIGITS = re.compile(r"[^0-9]")

class TransformType(str, Enum):
    MERGE = "MERGE"
    EXTRACT = "EXTRACT"
    FORMAT = "FORMAT"
    SPLIT_LINES = "SPLIT_LINES"
    PARSE_NUMBER = "PARSE_NUMBER"
    PARSE_JSON = "PARSE_JSON"
    THRESHOLD_CHECK = "THRESHOLD_CHECK"
    INCREMENT = "INCREMENT"

def _text(value: Any, default: str = "") -> str:
    return default if value is None else str(value)

def _as_int(value: Any, digits_only: bool = False) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    text = _NON_DIGITS.sub("", str(value)) if digits_only else str(value).strip()
    try:
        return int(text)
    except ValueError:
        return 0

def parse_score(value: Any) -> int:
    """Parse a 0..100 score from free text. No digits yields 0."""
    digits = _NON_DIGITS.sub("", _text(value, "0"))
    if not digits:
        return 0
    return min(100, max(0, int(digits)))

@node_type("TRANSFORM_NODE", "Transforms state values without calling a model")
class TransformNode(Node):
    """
    Params:
        transform_type (required): One of TransformType
        input_keys (required): State keys to read
        output_key (required): State key to write
        delimiter: Separator for SPLIT_LINES (default newline)
        threshold: Pass mark for THRESHOLD_CHECK (default 80)
    """
    required_params: ClassVar[List[str]] = ["transform_type", "input_keys", "output_key"]

    @model_validator(mode='after')
    def validate_transform(self) -> "TransformNode":
        try:
            TransformType(str(self.params.get("transform_type")).upper())
        except ValueError:
            raise ConfigurationError(
                f"Transform node '{self.id}' has unsupported transform_type "
                f"'{self.params.get('transform_type')}' (supported: {[t.value for t in TransformType]})",
                source=self.id
            )
        if isinstance(self.params.get("input_keys"), str):
            self.params["input_keys"] = [self.params["input_keys"]]
        return self

    @property
    def transform_type(self) -> TransformType:
        return TransformType(str(self.params["transform_type"]).upper())

    @state_handler
    async def process(self, state: Mapping[str, Any]) -> Updates:
        keys = self.param("input_keys")
        result = self.apply(state, keys)
        logger.info(f"Transform node '{self.id}' ({self.transform_type.value}) produced {type(result).__name__}")
        return {self.param("output_key"): result}

    def apply(self, state: Mapping[str, Any], keys: List[str]) -> Any:
        kind = self.transform_type
        first = state.get(keys[0])

        if kind == TransformType.MERGE:
            values = [_text(state.get(key)) for key in keys]
            return "\n".join(value for value in values if value)
        if kind == TransformType.EXTRACT:
            return first
        if kind == TransformType.FORMAT:
            return "\n".join(f"{key}: {_text(state.get(key))}" for key in keys).strip()
        if kind == TransformType.SPLIT_LINES:
            delimiter = self.param("delimiter", "\n")
            return [part.strip() for part in _text(first).split(delimiter) if part.strip()]
        if kind == TransformType.PARSE_NUMBER:
            return parse_score(first)
        if kind == TransformType.PARSE_JSON:
            if isinstance(first, (dict, list)):
                return first
            raw = _text(first, "{}")
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning(f"Transform node '{self.id}' could not parse JSON, keeping raw text")
                return raw
            return parsed if isinstance(parsed, (dict, list)) else raw
        if kind == TransformType.THRESHOLD_CHECK:
            threshold = self.param("threshold", 80)
            value = _as_int(first, digits_only=True)
            logger.info(f"Threshold check: value={value}, threshold={threshold}")
            return "PASS" if value >= threshold else "NEED_IMPROVEMENT"
        # INCREMENT
        return _as_int(first) + 1
