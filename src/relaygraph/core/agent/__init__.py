"""Agent module for relaygraph."""

from relaygraph.core.agent.base import AgentPort, BaseAgent, InvocationPort, InvocationSettings
from relaygraph.core.agent.factory import (
    AgentDefinition,
    AgentFactory,
    AgentFactoryConfig,
    WorkerDefinition
)
from relaygraph.core.agent.mirascope_port import MirascopePort
from relaygraph.core.agent.registry import AgentRegistry
from relaygraph.core.agent.supervisor import SupervisorAgentTeam, default_supervisor_instruction
from relaygraph.core.agent.tool import as_tool, tool_name_for

__all__ = [
    'AgentPort',
    'BaseAgent',
    'InvocationPort',
    'InvocationSettings',
    'MirascopePort',
    'AgentRegistry',
    'as_tool',
    'tool_name_for',
    'SupervisorAgentTeam',
    'default_supervisor_instruction',
    'AgentFactory',
    'AgentFactoryConfig',
    'AgentDefinition',
    'WorkerDefinition'
]
