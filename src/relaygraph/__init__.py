"""Relaygraph - workflow orchestration for LLM agents."""

from relaygraph.core import (
    BaseAgent,
    ConfigurableAgentWorkflow,
    Graph,
    GraphWorkflowExecutor,
    configure_logging,
    LogLevel,
    LogComponent
)

__all__ = [
    'BaseAgent',
    'ConfigurableAgentWorkflow',
    'Graph',
    'GraphWorkflowExecutor',
    'configure_logging',
    'LogLevel',
    'LogComponent'
]
