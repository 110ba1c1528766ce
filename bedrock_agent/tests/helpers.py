"""
Test helpers — MockLLMProvider, tool fixtures, canned completion bodies.

Provides reusable components for exercising the agent loop without a real
model endpoint, and for faking the HTTP layer with httpx.MockTransport.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Optional, Sequence

from bedrock_agent.core.models import Message, ModelResponse, ToolCallRequest
from bedrock_agent.core.providers.base import BaseLLMProvider
from bedrock_agent.core.tool_registry import ToolDefinition, ToolRegistry


def run_async(coro):
    """Run an async function in a new event loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


# ═══════════════════════════════════════════════════════════════════
#  MockLLMProvider
# ═══════════════════════════════════════════════════════════════════


class MockLLMProvider(BaseLLMProvider):
    """
    Queue-driven provider for agent tests.

    Usage::

        provider = MockLLMProvider()
        provider.enqueue_tool_call("search_restaurants", '{"query":"vegetarian"}')
        provider.enqueue_text("Here are some options...")
    """

    def __init__(self, model: str = "mock-model", latency: float = 0.0):
        super().__init__(model=model)
        self._queue: List[Any] = []
        self.calls: List[Dict[str, Any]] = []
        self._latency = latency
        self.fallback: Optional[ModelResponse] = None

    def enqueue(self, response: ModelResponse) -> None:
        self._queue.append(response)

    def enqueue_text(self, text: str) -> None:
        self._queue.append(ModelResponse(text=text, finish_reason="stop"))

    def enqueue_tool_call(
        self,
        name: str,
        arguments: str = "{}",
        call_id: Optional[str] = None,
        text: Optional[str] = None,
    ) -> None:
        call_id = call_id or f"call_{len(self._queue) + 1}"
        self._queue.append(ModelResponse(
            text=text,
            tool_call=ToolCallRequest(id=call_id, name=name, arguments=arguments),
            finish_reason="tool_calls",
        ))

    def enqueue_error(self, error: Exception) -> None:
        self._queue.append(error)

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def send_message(
        self,
        messages: Sequence[Message],
        tools: Sequence[dict],
    ) -> ModelResponse:
        if self._latency > 0:
            await asyncio.sleep(self._latency)
        self.calls.append({"messages": tuple(messages), "tools": list(tools)})

        if not self._queue:
            if self.fallback is not None:
                return self.fallback
            raise AssertionError("MockLLMProvider: no more queued responses")

        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


# ═══════════════════════════════════════════════════════════════════
#  Tools
# ═══════════════════════════════════════════════════════════════════


def echo_tool(name: str = "echo") -> ToolDefinition:
    return ToolDefinition(
        name=name,
        description="Echo the arguments back",
        executor=lambda arguments: json.dumps({"echo": json.loads(arguments)}),
        parameters={"type": "object", "properties": {"text": {"type": "string"}}},
    )


def failing_tool(name: str = "failing_tool", message: str = "Always fails!") -> ToolDefinition:
    def _fail(arguments: str) -> str:
        raise RuntimeError(message)

    return ToolDefinition(name=name, description="A tool that always fails", executor=_fail)


class RecordingTool:
    """Async executor that records arguments and returns a fixed result."""

    def __init__(self, result: str = '{"ok": true}', delay: float = 0.0):
        self.result = result
        self.delay = delay
        self.received: List[str] = []

    async def __call__(self, arguments: str) -> str:
        self.received.append(arguments)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.result


def make_registry(*tools: ToolDefinition) -> ToolRegistry:
    return ToolRegistry(list(tools))


# ═══════════════════════════════════════════════════════════════════
#  Completion bodies
# ═══════════════════════════════════════════════════════════════════


def text_completion(text: str, usage: Optional[dict] = None) -> dict:
    body: dict = {
        "id": "chatcmpl-1",
        "choices": [{
            "index": 0,
            "message": {"role": "assistant", "content": text},
            "finish_reason": "stop",
        }],
    }
    if usage:
        body["usage"] = usage
    return body


def tool_call_completion(name: str, arguments: str = "{}", call_id: str = "call_1",
                         content: Optional[str] = None) -> dict:
    return {
        "id": "chatcmpl-2",
        "choices": [{
            "index": 0,
            "message": {
                "role": "assistant",
                "content": content,
                "tool_calls": [{
                    "id": call_id,
                    "type": "function",
                    "function": {"name": name, "arguments": arguments},
                }],
            },
            "finish_reason": "tool_calls",
        }],
    }


def encode(body: dict) -> bytes:
    return json.dumps(body).encode("utf-8")
