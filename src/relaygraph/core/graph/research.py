"""
Deep research workflow.

A built-in, quality-gated research loop:

    START -> query_decomposition -> information_gathering -> analysis
          -> synthesis -> quality_check --end--> END
                                        --iterate--> information_gathering

quality_check advances `iteration_count`; the `quality_gate` router ends the
loop once `quality_score >= threshold` or `iteration_count >= max_iterations`.

Example:
    ```python
    workflow = DeepResearchWorkflow(port=MirascopePort(), max_iterations=3)
    result = await workflow.research("How do heat pumps work in cold climates?")
    print(result.quality_score, result.answer)
    ```
"""

from typing import Any, AsyncIterator, ClassVar, List, Mapping, Optional

from pydantic import BaseModel, Field

from relaygraph.core.errors import WorkflowError
from relaygraph.core.graph.base import Graph, ProgressEvent
from relaygraph.core.graph.config import END
from relaygraph.core.graph.nodes.base.node import Node, Updates, state_handler
from relaygraph.core.graph.nodes.transform import parse_score
from relaygraph.core.graph.router import quality_gate
from relaygraph.core.graph.state import CURRENT_NODE, ERROR_MESSAGE, MergeStrategy, StateKey
from relaygraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.WORKFLOW)

QUESTION = "question"
SUB_QUESTIONS = "sub_questions"
SEARCH_RESULTS = "search_results"
ANALYSIS = "analysis"
FINAL_ANSWER = "final_answer"
ITERATION_COUNT = "iteration_count"
QUALITY_SCORE = "quality_score"

MAX_SUB_QUESTIONS = 5
DEFAULT_SCORE = 85
FAILED_CHECK_SCORE = 70

RESEARCH_STATE_KEYS = [
    StateKey(name=QUESTION, description="Original research question"),
    StateKey(name=SUB_QUESTIONS, merge_strategy=MergeStrategy.APPEND, description="Decomposed sub-questions"),
    StateKey(name=SEARCH_RESULTS, merge_strategy=MergeStrategy.APPEND, description="Gathered findings"),
    StateKey(name=ANALYSIS, default="", description="Analysis of the findings"),
    StateKey(name=FINAL_ANSWER, default="", description="Synthesized report"),
    StateKey(name=ITERATION_COUNT, default=0, description="Completed quality checks"),
    StateKey(name=QUALITY_SCORE, default=0, description="Latest 0-100 quality score"),
    StateKey(name=CURRENT_NODE, description="Node that produced the last update"),
    StateKey(name=ERROR_MESSAGE, description="Last error"),
]

class ResearchNode(Node):
    """Base for research steps that prompt the model through a port."""
    port: Any = Field(..., description="InvocationPort used for prompts")

    async def ask(self, prompt: str) -> str:
        return await self.port.invoke(None, [], prompt)

class QueryDecompositionNode(ResearchNode):
    """Splits the question into independently searchable sub-questions."""

    @state_handler
    async def process(self, state: Mapping[str, Any]) -> Updates:
        question = state.get(QUESTION, "")
        logger.info(f"[query_decomposition] Decomposing: {question}")

        response = await self.ask(
            "You are a research assistant. Break the following question into 3-5 "
            "sub-questions that can each be researched on their own. Each sub-question "
            "should be concrete and searchable.\n\n"
            f"Question: {question}\n\n"
            "List the sub-questions one per line, without numbering or any other text."
        )
        sub_questions = [line.strip() for line in response.splitlines() if line.strip()]
        sub_questions = sub_questions[:MAX_SUB_QUESTIONS]

        logger.info(f"[query_decomposition] {len(sub_questions)} sub-questions")
        return {SUB_QUESTIONS: sub_questions}

class InformationGatheringNode(ResearchNode):
    """Collects findings for every sub-question."""

    @state_handler
    async def process(self, state: Mapping[str, Any]) -> Updates:
        sub_questions = list(state[SUB_QUESTIONS])
        if not sub_questions:
            sub_questions = [state.get(QUESTION, "")]

        results: List[str] = []
        for sub_question in sub_questions:
            answer = await self.ask(
                "As a research assistant, give detailed information and insight on the "
                "question below. Be thorough and accurate.\n\n"
                f"Question: {sub_question}\n\n"
                "Cover:\n"
                "1. Key facts and figures\n"
                "2. Relevant background\n"
                "3. Differing views or open controversies, if any"
            )
            results.append(f"【{sub_question}】\n{answer}")
            logger.info(f"[information_gathering] Gathered: {sub_question[:50]}")

        return {SEARCH_RESULTS: results}

class AnalysisNode(ResearchNode):
    """Extracts key findings from the gathered material."""

    @state_handler
    async def process(self, state: Mapping[str, Any]) -> Updates:
        all_results = "\n\n---\n\n".join(state[SEARCH_RESULTS])
        analysis = await self.ask(
            "You are a senior research analyst. Analyze the information below and "
            "extract the key findings.\n\n"
            f"Question: {state.get(QUESTION, '')}\n\n"
            f"Collected information:\n{all_results}\n\n"
            "Provide:\n"
            "1. A summary of the main findings\n"
            "2. Key data points\n"
            "3. Consistency between sources\n"
            "4. Information gaps\n"
            "5. Preliminary conclusions"
        )
        logger.info("[analysis] Analysis complete")
        return {ANALYSIS: analysis}

class SynthesisNode(ResearchNode):
    """Writes the research report from the analysis."""

    @state_handler
    async def process(self, state: Mapping[str, Any]) -> Updates:
        report = await self.ask(
            "You are a professional research writer. Write a complete research report "
            "based on the analysis below.\n\n"
            f"Question: {state.get(QUESTION, '')}\n\n"
            f"Analysis:\n{state.get(ANALYSIS, '')}\n\n"
            f"Number of source findings: {len(state[SEARCH_RESULTS])}\n\n"
            "Structure the report as:\n"
            "1. Executive summary\n"
            "2. Main findings\n"
            "3. Detailed analysis\n"
            "4. Conclusions and recommendations\n"
            "5. Limitations\n\n"
            "Answer the question directly, clearly and rigorously."
        )
        self._log_node_result(report)
        return {FINAL_ANSWER: report}

class QualityCheckNode(ResearchNode):
    """Scores the report and advances the iteration counter.

    An answer without digits scores 85; a failed scoring call scores 70.
    """

    @state_handler
    async def process(self, state: Mapping[str, Any]) -> Updates:
        iteration = int(state.get(ITERATION_COUNT) or 0) + 1

        try:
            reply = await self.ask(
                "Rate the quality of the research report below.\n\n"
                f"Question: {state.get(QUESTION, '')}\n\n"
                f"Report:\n{state.get(FINAL_ANSWER, '')}\n\n"
                "Score it from 0 to 100 on completeness, accuracy, logical structure "
                "and usefulness. Reply with a single overall score, digits only."
            )
        except Exception as e:
            logger.error(f"[quality_check] Scoring failed: {e}")
            return {ITERATION_COUNT: iteration, QUALITY_SCORE: FAILED_CHECK_SCORE}

        score = parse_score(reply) if any(ch.isdigit() for ch in reply) else DEFAULT_SCORE
        logger.info(f"[quality_check] Score: {score}, iteration: {iteration}")
        return {ITERATION_COUNT: iteration, QUALITY_SCORE: score}

class ResearchResult(BaseModel):
    """Outcome of a research run."""
    question: str
    answer: str = ""
    analysis: str = ""
    quality_score: int = 0
    iteration_count: int = 0
    success: bool = False
    error_message: Optional[str] = None

class ResearchProgress(BaseModel):
    """Snapshot of a research run after one node."""
    node_name: Optional[str] = None
    question: str = ""
    current_answer: str = ""
    analysis: str = ""
    quality_score: int = 0
    iteration_count: int = 0
    error: Optional[str] = None

    @classmethod
    def from_event(cls, event: ProgressEvent, question: str) -> "ResearchProgress":
        state = event.state
        return cls(
            node_name=state.get(CURRENT_NODE) or event.node_name,
            question=state.get(QUESTION) or question,
            current_answer=state.get(FINAL_ANSWER) or "",
            analysis=state.get(ANALYSIS) or "",
            quality_score=state.get(QUALITY_SCORE) or 0,
            iteration_count=state.get(ITERATION_COUNT) or 0,
            error=event.error,
        )

    @property
    def is_error(self) -> bool:
        return self.error is not None

class DeepResearchWorkflow:
    """Compiled deep research graph bound to one invocation port."""

    NODE_IDS: ClassVar[List[str]] = [
        "query_decomposition",
        "information_gathering",
        "analysis",
        "synthesis",
        "quality_check",
    ]

    def __init__(
        self,
        port: Any,
        max_iterations: int = 3,
        quality_threshold: int = 80
    ):
        self.max_iterations = max_iterations
        self.quality_threshold = quality_threshold
        self.graph = self._build_graph(port)
        logger.info(f"Deep research workflow ready (max iterations: {max_iterations})")

    def _build_graph(self, port: Any) -> Graph:
        graph = Graph(
            name="deep_research",
            state_keys=RESEARCH_STATE_KEYS,
            max_node_visits=self.max_iterations + 1,
        )
        graph.chain([
            QueryDecompositionNode(id="query_decomposition", port=port),
            InformationGatheringNode(id="information_gathering", port=port),
            AnalysisNode(id="analysis", port=port),
            SynthesisNode(id="synthesis", port=port),
            QualityCheckNode(id="quality_check", port=port),
        ])
        graph.add_conditional_edges(
            "quality_check",
            quality_gate(
                QUALITY_SCORE,
                ITERATION_COUNT,
                threshold=self.quality_threshold,
                max_iterations=self.max_iterations,
            ),
            {"end": END, "iterate": "information_gathering"},
        )
        return graph

    @staticmethod
    def _initial_values(question: str) -> dict:
        return {QUESTION: question, ITERATION_COUNT: 0}

    async def research(self, question: str) -> ResearchResult:
        """Run the research loop to completion. Failures are reported in the result."""
        logger.info(f"Starting research: {question}")
        try:
            state = await self.graph.run(self._initial_values(question))
        except WorkflowError as e:
            logger.error(f"Research failed: {e}")
            return self._result(question, e.state or {}, success=False, error_message=str(e))

        return self._result(question, state.snapshot(), success=True)

    @staticmethod
    def _result(
        question: str,
        values: Mapping[str, Any],
        success: bool,
        error_message: Optional[str] = None
    ) -> ResearchResult:
        return ResearchResult(
            question=question,
            answer=values.get(FINAL_ANSWER) or "",
            analysis=values.get(ANALYSIS) or "",
            quality_score=values.get(QUALITY_SCORE) or 0,
            iteration_count=values.get(ITERATION_COUNT) or 0,
            success=success,
            error_message=error_message,
        )

    async def research_stream(self, question: str) -> AsyncIterator[ResearchProgress]:
        """Yield a ResearchProgress after each node; a failure ends with an error entry."""
        logger.info(f"Starting streamed research: {question}")
        events = self.graph.stream(self._initial_values(question))
        try:
            async for event in events:
                yield ResearchProgress.from_event(event, question)
        finally:
            await events.aclose()

    async def research_with_progress(self, question: str) -> List[ResearchProgress]:
        """Run the research loop and collect every progress entry."""
        return [progress async for progress in self.research_stream(question)]
