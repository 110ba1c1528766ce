"""
Chat-completions wire format for messages and tool definitions.
This is the only place the typed Message union becomes untyped JSON.
"""

from __future__ import annotations

import json
from typing import Iterable, Optional, Sequence

from .models import (
    AssistantMessage, Message, SystemMessage, ToolCallRequest, ToolMessage, UserMessage,
)


def tool_call_to_dict(call: ToolCallRequest) -> dict:
    return {
        "id": call.id,
        "type": "function",
        "function": {"name": call.name, "arguments": call.arguments},
    }


def message_to_dict(message: Message) -> dict:
    if isinstance(message, (SystemMessage, UserMessage)):
        return {"role": message.role, "content": message.content}

    if isinstance(message, AssistantMessage):
        out: dict = {"role": "assistant"}
        if message.has_tool_calls:
            # Providers reject text alongside tool_calls; the content is dropped.
            out["tool_calls"] = [tool_call_to_dict(c) for c in message.tool_calls]
        else:
            out["content"] = message.content
        return out

    if isinstance(message, ToolMessage):
        # Tool messages never carry a "name" field.
        return {"role": "tool", "tool_call_id": message.tool_call_id, "content": message.content}

    raise TypeError(f"Unsupported message type: {type(message).__name__}")


def build_request_body(
    model: str,
    messages: Iterable[Message],
    tools: Sequence[dict] = (),
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> dict:
    """``tools``/``tool_choice`` are omitted entirely when there are no tools."""
    body: dict = {
        "model": model,
        "messages": [message_to_dict(m) for m in messages],
    }
    if tools:
        body["tools"] = list(tools)
        body["tool_choice"] = "auto"
    if temperature is not None:
        body["temperature"] = temperature
    if max_tokens is not None:
        body["max_tokens"] = max_tokens
    return body


def encode_body(body: dict) -> bytes:
    return json.dumps(body, ensure_ascii=False).encode("utf-8")
