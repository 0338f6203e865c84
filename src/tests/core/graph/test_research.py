"""Tests for the deep research workflow."""

from typing import List

import pytest

from relaygraph.core.graph.research import (
    DEFAULT_SCORE,
    FAILED_CHECK_SCORE,
    DeepResearchWorkflow,
    MAX_SUB_QUESTIONS
)
from tests.fakes import FakePort


class ResearchScript:
    """Answers each research prompt by its opening phrase; scores come from a list."""

    def __init__(self, scores: List[object], sub_questions: str = "sub a\nsub b"):
        self.scores = list(scores)
        self.sub_questions = sub_questions
        self.score_calls = 0

    def __call__(self, prompt: str) -> str:
        if prompt.startswith("You are a research assistant"):
            return self.sub_questions
        if prompt.startswith("As a research assistant"):
            return "facts"
        if prompt.startswith("You are a senior research analyst"):
            return "analysis"
        if prompt.startswith("You are a professional research writer"):
            return f"report v{self.score_calls + 1}"
        if prompt.startswith("Rate the quality"):
            score = self.scores[min(self.score_calls, len(self.scores) - 1)]
            self.score_calls += 1
            if isinstance(score, Exception):
                raise score
            return str(score)
        raise AssertionError(f"Unexpected prompt: {prompt[:40]}")


def workflow_for(script: ResearchScript, **kwargs) -> DeepResearchWorkflow:
    return DeepResearchWorkflow(FakePort(responder=script), **kwargs)


class TestQualityGate:
    """Test the quality-gated research loop."""

    @pytest.mark.asyncio
    async def test_stops_when_score_passes(self):
        script = ResearchScript(scores=[50, 80, 95])
        result = await workflow_for(script).research("How do heat pumps work?")

        assert result.success
        assert result.iteration_count == 2
        assert result.quality_score == 80
        assert result.answer == "report v2"
        assert result.analysis == "analysis"

    @pytest.mark.asyncio
    async def test_never_exceeds_max_iterations(self):
        script = ResearchScript(scores=[10])
        result = await workflow_for(script, max_iterations=3).research("q")

        assert result.success
        assert result.iteration_count == 3
        assert result.quality_score == 10
        assert script.score_calls == 3

    @pytest.mark.asyncio
    async def test_score_without_digits_defaults(self):
        script = ResearchScript(scores=["excellent work"])
        result = await workflow_for(script).research("q")
        assert result.quality_score == DEFAULT_SCORE
        assert result.iteration_count == 1

    @pytest.mark.asyncio
    async def test_failed_scoring_call(self):
        script = ResearchScript(scores=[RuntimeError("rate limited")])
        result = await workflow_for(script, max_iterations=2).research("q")
        assert result.success
        assert result.quality_score == FAILED_CHECK_SCORE
        assert result.iteration_count == 2

    @pytest.mark.asyncio
    async def test_findings_accumulate_across_iterations(self):
        script = ResearchScript(scores=[50, 90])
        workflow = workflow_for(script)
        state = await workflow.graph.run({"question": "q", "iteration_count": 0})
        assert state.get("sub_questions") == ["sub a", "sub b"]
        assert state.get("search_results") == ["【sub a】\nfacts", "【sub b】\nfacts"] * 2


class TestDecomposition:
    """Test sub-question handling."""

    @pytest.mark.asyncio
    async def test_sub_questions_are_capped(self):
        script = ResearchScript(scores=[90], sub_questions="\n".join(f"q{i}" for i in range(8)))
        workflow = workflow_for(script)
        state = await workflow.graph.run({"question": "q"})
        assert len(state.get("sub_questions")) == MAX_SUB_QUESTIONS


class TestResearchFailures:
    """Test failures outside the quality check."""

    @pytest.mark.asyncio
    async def test_failure_is_reported(self):
        port = FakePort(error=RuntimeError("model offline"))
        result = await DeepResearchWorkflow(port).research("q")
        assert not result.success
        assert "query_decomposition" in result.error_message
        assert "model offline" in result.error_message

    @pytest.mark.asyncio
    async def test_failure_keeps_partial_results(self):
        class WriterFailsOnRedraft(ResearchScript):
            def __call__(self, prompt: str) -> str:
                if prompt.startswith("You are a professional research writer") and self.score_calls:
                    raise RuntimeError("writer offline")
                return super().__call__(prompt)

        result = await workflow_for(WriterFailsOnRedraft(scores=[50])).research("q")

        assert not result.success
        assert "synthesis" in result.error_message
        assert result.answer == "report v1"
        assert result.analysis == "analysis"
        assert result.quality_score == 50
        assert result.iteration_count == 1


class TestResearchStream:
    """Test streamed research progress."""

    @pytest.mark.asyncio
    async def test_progress_per_node(self):
        script = ResearchScript(scores=[90])
        progress = await workflow_for(script).research_with_progress("q")

        assert [entry.node_name for entry in progress] == DeepResearchWorkflow.NODE_IDS
        assert progress[-1].quality_score == 90
        assert progress[-1].current_answer == "report v1"
        assert all(entry.question == "q" for entry in progress)

    @pytest.mark.asyncio
    async def test_stream_ends_with_error(self):
        port = FakePort(error=RuntimeError("model offline"))
        progress = [entry async for entry in DeepResearchWorkflow(port).research_stream("q")]
        assert len(progress) == 1
        assert progress[0].is_error
        assert progress[0].node_name == "query_decomposition"
