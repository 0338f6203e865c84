"""
LLM Node Implementation

Calls the invocation port with one state value and stores the answer under
another key.

Params:
    input_key (required): State key holding the prompt
    output_key (required): State key receiving the answer
    system_prompt: Optional system instruction
    temperature: Optional sampling temperature
    max_tokens: Optional completion limit
"""

from typing import Any, ClassVar, List, Mapping

from pydantic import Field, model_validator

from relaygraph.core.agent.base import InvocationSettings
from relaygraph.core.errors import ConfigurationError
from relaygraph.core.graph.config import NodeConfig
from relaygraph.core.graph.nodes.base.node import Node, Updates, state_handler
from relaygraph.core.graph.nodes.registry import node_type
from relaygraph.core.logging import LogComponent, get_logger, log_verbose

logger = get_logger(LogComponent.NODES)

def as_prompt_text(value: Any) -> str:
    """Render a state value as prompt text. Lists are joined line by line."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "\n".join(str(item) for item in value)
    return str(value)

@node_type("LLM_NODE", "Calls the model with a state value and stores the answer")
class LlmNode(Node):
    """
    Node for a single model invocation.

    Attributes:
        port: InvocationPort used for the call
    """
    port: Any = Field(default=None, description="InvocationPort used for the call")

    required_params: ClassVar[List[str]] = ["input_key", "output_key"]

    @model_validator(mode='after')
    def validate_port(self) -> "LlmNode":
        if self.port is None:
            raise ConfigurationError(f"LLM node '{self.id}' requires an invocation port", source=self.id)
        return self

    @classmethod
    def from_config(cls, config: NodeConfig, port: Any = None) -> "LlmNode":
        return cls(
            id=config.id,
            name=config.name,
            description=config.description,
            params=dict(config.params),
            port=port,
        )

    def _settings(self) -> InvocationSettings:
        return InvocationSettings(
            temperature=self.param("temperature"),
            max_tokens=self.param("max_tokens"),
        )

    @state_handler
    async def process(self, state: Mapping[str, Any]) -> Updates:
        prompt = as_prompt_text(state.get(self.param("input_key")))
        if not prompt:
            logger.warning(f"LLM node '{self.id}' has an empty input '{self.param('input_key')}'")
        log_verbose(logger, f"LLM node '{self.id}' prompt: {prompt}")

        answer = await self.port.invoke(self.param("system_prompt"), [], prompt, self._settings())

        self._log_node_result(answer)
        return {self.param("output_key"): answer}
