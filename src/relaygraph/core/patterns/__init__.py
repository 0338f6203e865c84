"""Multi-agent composition patterns.

Sequential, Parallel, Routing and Loop executors built on AgentPort
invocations, independent of the graph engine.
"""

from relaygraph.core.patterns.base import PatternExecutor
from relaygraph.core.patterns.config import AgentConfig, AgentWorkflowConfig, WorkflowPattern
from relaygraph.core.patterns.loop import LoopPatternExecutor
from relaygraph.core.patterns.parallel import ParallelPatternExecutor
from relaygraph.core.patterns.result import AgentStepResult, ExecutionStep, StepStatus, WorkflowResult
from relaygraph.core.patterns.routing import RoutingPatternExecutor
from relaygraph.core.patterns.sequential import SequentialPatternExecutor
from relaygraph.core.patterns.workflow import ConfigurableAgentWorkflow

__all__ = [
    # Configuration
    "WorkflowPattern",
    "AgentConfig",
    "AgentWorkflowConfig",

    # Results
    "WorkflowResult",
    "AgentStepResult",
    "ExecutionStep",
    "StepStatus",

    # Executors
    "PatternExecutor",
    "SequentialPatternExecutor",
    "ParallelPatternExecutor",
    "RoutingPatternExecutor",
    "LoopPatternExecutor",
    "ConfigurableAgentWorkflow",
]
