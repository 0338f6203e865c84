"""Tests for transform nodes."""

import pytest

from relaygraph.core.errors import ConfigurationError
from relaygraph.core.graph.nodes.transform import TransformNode, TransformType, parse_score


def transform(kind: str, input_keys, **params) -> TransformNode:
    return TransformNode(
        id=f"t_{kind.lower()}",
        params={"transform_type": kind, "input_keys": input_keys, "output_key": "out", **params},
    )


async def run(node: TransformNode, state: dict):
    return (await node.process(state))["out"]


class TestParseScore:
    """Test free-text score parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("87", 87),
        ("Score: 92", 92),
        ("250", 100),
        ("no digits here", 0),
        (None, 0),
        (64, 64),
    ])
    def test_parse_score(self, text, expected):
        assert parse_score(text) == expected


class TestTransforms:
    """Test each transform type."""

    @pytest.mark.asyncio
    async def test_merge_skips_empty_values(self):
        node = transform("MERGE", ["a", "b", "c"])
        assert await run(node, {"a": "first", "b": "", "c": "third"}) == "first\nthird"

    @pytest.mark.asyncio
    async def test_extract(self):
        assert await run(transform("EXTRACT", ["a", "b"]), {"a": [1, 2], "b": "x"}) == [1, 2]

    @pytest.mark.asyncio
    async def test_format(self):
        node = transform("FORMAT", ["topic", "tone"])
        assert await run(node, {"topic": "bees", "tone": "calm"}) == "topic: bees\ntone: calm"

    @pytest.mark.asyncio
    async def test_split_lines(self):
        node = transform("SPLIT_LINES", ["text"])
        assert await run(node, {"text": " a \n\n b \n"}) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_split_custom_delimiter(self):
        node = transform("SPLIT_LINES", ["text"], delimiter=",")
        assert await run(node, {"text": "x, y,,z"}) == ["x", "y", "z"]

    @pytest.mark.asyncio
    async def test_parse_number(self):
        assert await run(transform("PARSE_NUMBER", ["reply"]), {"reply": "I'd say 75."}) == 75

    @pytest.mark.asyncio
    async def test_parse_json(self):
        node = transform("PARSE_JSON", ["raw"])
        assert await run(node, {"raw": '{"a": 1}'}) == {"a": 1}
        assert await run(node, {"raw": "[1, 2]"}) == [1, 2]
        assert await run(node, {"raw": "not json"}) == "not json"
        assert await run(node, {"raw": "3"}) == "3"
        assert await run(node, {"raw": {"already": "parsed"}}) == {"already": "parsed"}

    @pytest.mark.asyncio
    async def test_threshold_check(self):
        node = transform("THRESHOLD_CHECK", ["score"], threshold=80)
        assert await run(node, {"score": 85}) == "PASS"
        assert await run(node, {"score": "80 points"}) == "PASS"
        assert await run(node, {"score": 79}) == "NEED_IMPROVEMENT"
        assert await run(node, {}) == "NEED_IMPROVEMENT"

    @pytest.mark.asyncio
    async def test_increment(self):
        node = transform("INCREMENT", ["n"])
        assert await run(node, {"n": 2}) == 3
        assert await run(node, {"n": "4"}) == 5
        assert await run(node, {}) == 1


class TestTransformValidation:
    """Test transform node configuration errors."""

    def test_unsupported_type(self):
        with pytest.raises(ConfigurationError):
            transform("REVERSE", ["a"])

    def test_missing_output_key(self):
        with pytest.raises(ConfigurationError):
            TransformNode(id="t", params={"transform_type": "MERGE", "input_keys": ["a"]})

    def test_type_is_case_insensitive(self):
        assert transform("merge", ["a"]).transform_type == TransformType.MERGE
