"""Scripted stand-ins for invocation ports and agents."""

import asyncio
from typing import Any, AsyncIterator, Callable, Dict, List, Optional


class FakePort:
    """InvocationPort returning scripted replies.

    Replies come from `responder(input)` when given, else from the `replies`
    queue, else echo the input. Every call is recorded.
    """

    def __init__(
        self,
        replies: Optional[List[str]] = None,
        responder: Optional[Callable[[str], str]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0
    ):
        self.replies = list(replies or [])
        self.responder = responder
        self.error = error
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []

    async def invoke(self, instruction, tools, input, settings=None) -> str:
        self.calls.append({
            "instruction": instruction,
            "tools": list(tools),
            "input": input,
            "settings": settings,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.responder is not None:
            return self.responder(input)
        if self.replies:
            return self.replies.pop(0)
        return f"reply to: {input}"

    async def invoke_stream(self, instruction, tools, input, settings=None) -> AsyncIterator[str]:
        text = await self.invoke(instruction, tools, input, settings)
        for word in text.split(" "):
            yield word

    @property
    def inputs(self) -> List[str]:
        return [call["input"] for call in self.calls]


class FakeAgent:
    """AgentPort with a scripted reply, error or delay."""

    def __init__(
        self,
        name: str,
        reply: Optional[str] = None,
        description: str = "",
        error: Optional[Exception] = None,
        delay: float = 0.0,
        responder: Optional[Callable[[str], str]] = None
    ):
        self.name = name
        self.description = description
        self.reply = reply
        self.error = error
        self.delay = delay
        self.responder = responder
        self.calls: List[str] = []

    async def invoke(self, input: str) -> str:
        self.calls.append(input)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.responder is not None:
            return self.responder(input)
        if self.reply is not None:
            return self.reply
        return f"{self.name}: {input}"

    async def invoke_stream(self, input: str) -> AsyncIterator[str]:
        yield await self.invoke(input)
