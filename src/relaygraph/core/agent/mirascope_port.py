"""
Mirascope-backed invocation port.

Message Flow:
    1. The instruction becomes the system message, the input the user message
    2. An OpenAI call is made through Mirascope with the agent's tools
    3. Response handling:
       - No tools requested: the text content is returned
       - Tools requested: each tool is executed, results are appended to the
         conversation, and the call repeats (bounded by max_tool_rounds)

Provider calls are retried with tenacity. Tool execution is not retried.
"""

import inspect
from typing import Any, AsyncIterator, Dict, List, Optional

from mirascope.core import BaseDynamicConfig, BaseMessageParam, BaseTool, openai
from pydantic import BaseModel, Field
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from relaygraph.core.agent.base import InvocationSettings
from relaygraph.core.config import ModelSettings
from relaygraph.core.logging import LogComponent, get_logger, log_verbose

logger = get_logger(LogComponent.AGENT)


class MirascopePort(BaseModel):
    """InvocationPort that calls OpenAI models via Mirascope.

    Attributes:
        model_settings: Model name, defaults and retry policy
    """
    model_settings: ModelSettings = Field(default_factory=ModelSettings)

    def _call_params(self, settings: Optional[InvocationSettings]) -> Dict[str, Any]:
        temperature = self.model_settings.temperature
        max_tokens = self.model_settings.max_tokens
        if settings is not None:
            if settings.temperature is not None:
                temperature = settings.temperature
            if settings.max_tokens is not None:
                max_tokens = settings.max_tokens
        params: Dict[str, Any] = {}
        if temperature is not None:
            params["temperature"] = temperature
        if max_tokens is not None:
            params["max_tokens"] = max_tokens
        return params

    def _max_rounds(self, settings: Optional[InvocationSettings]) -> int:
        if settings is not None and settings.max_iterations:
            return settings.max_iterations
        return self.model_settings.max_tool_rounds

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.model_settings.retry_attempts),
            wait=wait_exponential(multiplier=1, min=4, max=10),
            reraise=True,
        )

    async def _call_model(
        self,
        messages: List[BaseMessageParam],
        tools: List[type[BaseTool]],
        call_params: Dict[str, Any],
        stream: bool = False
    ) -> Any:
        """Make one provider call with the current conversation."""

        @openai.call(self.model_settings.model, stream=stream)
        async def _call() -> BaseDynamicConfig:
            return {
                "messages": messages,
                "tools": tools,
                "call_params": call_params,
            }

        async for attempt in self._retrying():
            with attempt:
                return await _call()

    @staticmethod
    def _initial_messages(instruction: Optional[str], input: str) -> List[BaseMessageParam]:
        messages = []
        if instruction:
            messages.append(BaseMessageParam(role="system", content=instruction))
        messages.append(BaseMessageParam(role="user", content=input))
        return messages

    @staticmethod
    async def _run_tool(tool: BaseTool) -> Any:
        logger.tool(f"[Calling Tool '{tool._name()}' with args {tool.args}]")
        if inspect.iscoroutinefunction(tool.call):
            result = await tool.call()
        else:
            result = tool.call()
        log_verbose(logger, f"Tool result: {result}")
        return result

    async def invoke(
        self,
        instruction: Optional[str],
        tools: List[type[BaseTool]],
        input: str,
        settings: Optional[InvocationSettings] = None
    ) -> str:
        """Run the tool-call loop until the model answers in text.

        Args:
            instruction: System instruction, if any
            tools: Tool classes the model may call
            input: User input
            settings: Optional overrides

        Returns:
            str: Final text content
        """
        messages = self._initial_messages(instruction, input)
        call_params = self._call_params(settings)
        max_rounds = self._max_rounds(settings)

        response = None
        for round_number in range(1, max_rounds + 1):
            response = await self._call_model(messages, tools, call_params)
            messages.append(response.message_param)

            requested = response.tools
            if not requested:
                return response.content

            log_verbose(logger, f"Round {round_number}: tools to call: {requested}")
            tools_and_outputs = []
            for tool in requested:
                tools_and_outputs.append((tool, await self._run_tool(tool)))
            messages.extend(response.tool_message_params(tools_and_outputs))

        logger.warning(f"Stopped after {max_rounds} tool rounds without a final answer")
        return response.content if response is not None else ""

    async def invoke_stream(
        self,
        instruction: Optional[str],
        tools: List[type[BaseTool]],
        input: str,
        settings: Optional[InvocationSettings] = None
    ) -> AsyncIterator[str]:
        """Stream text chunks, executing requested tools between rounds."""
        messages = self._initial_messages(instruction, input)
        call_params = self._call_params(settings)

        for _ in range(self._max_rounds(settings)):
            stream = await self._call_model(messages, tools, call_params, stream=True)
            tools_and_outputs = []
            async for chunk, tool in stream:
                if tool:
                    tools_and_outputs.append((tool, await self._run_tool(tool)))
                elif chunk.content:
                    yield chunk.content

            messages.append(stream.message_param)
            if not tools_and_outputs:
                return
            messages.extend(stream.tool_message_params(tools_and_outputs))
