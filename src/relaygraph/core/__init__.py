"""Core modules for relaygraph."""

from relaygraph.core.logging import configure_logging, LogLevel, LogComponent, VerbosityLevel
from relaygraph.core.errors import (
    WorkflowError,
    ConfigurationError,
    RoutingError,
    NodeExecutionError,
    RunFailure
)
from relaygraph.core.config import EngineSettings, ModelSettings
from relaygraph.core.tools import ToolRegistry
from relaygraph.core.agent import (
    AgentFactory,
    AgentRegistry,
    BaseAgent,
    MirascopePort,
    SupervisorAgentTeam,
    as_tool
)
from relaygraph.core.patterns import (
    AgentConfig,
    AgentWorkflowConfig,
    ConfigurableAgentWorkflow,
    WorkflowPattern,
    WorkflowResult
)
from relaygraph.core.graph import (
    DeepResearchWorkflow,
    Graph,
    GraphBuilder,
    GraphConfig,
    GraphWorkflowExecutor,
    WorkflowState
)

__all__ = [
    'configure_logging',
    'LogLevel',
    'LogComponent',
    'VerbosityLevel',
    'WorkflowError',
    'ConfigurationError',
    'RoutingError',
    'NodeExecutionError',
    'RunFailure',
    'EngineSettings',
    'ModelSettings',
    'ToolRegistry',
    'AgentFactory',
    'AgentRegistry',
    'BaseAgent',
    'MirascopePort',
    'SupervisorAgentTeam',
    'as_tool',
    'AgentConfig',
    'AgentWorkflowConfig',
    'ConfigurableAgentWorkflow',
    'WorkflowPattern',
    'WorkflowResult',
    'DeepResearchWorkflow',
    'Graph',
    'GraphBuilder',
    'GraphConfig',
    'GraphWorkflowExecutor',
    'WorkflowState'
]
