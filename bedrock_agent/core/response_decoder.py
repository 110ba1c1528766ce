"""
Response Decoder — chat-completions envelope -> ModelResponse.

Only the first choice is used, and only the first tool call in it is
surfaced: one tool call per turn is a deliberate simplification.
Structural problems raise DecodeError instead of defaulting to empty values.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .errors import DecodeError, ErrorCode
from .models import ModelResponse, ToolCallRequest

logger = logging.getLogger(__name__)


def _expect_dict(value: Any, what: str, body: bytes) -> dict:
    if not isinstance(value, dict):
        raise DecodeError(f"Expected {what} to be an object", body=body)
    return value


def _decode_tool_call(entry: Any, body: bytes) -> ToolCallRequest:
    entry = _expect_dict(entry, "tool_calls[0]", body)
    call_id = entry.get("id")
    function = _expect_dict(entry.get("function"), "tool_calls[0].function", body)
    name = function.get("name")
    if not isinstance(call_id, str) or not call_id:
        raise DecodeError("Tool call is missing its id", body=body)
    if not isinstance(name, str) or not name:
        raise DecodeError("Tool call is missing its function name", body=body)

    arguments = function.get("arguments")
    if arguments is None:
        arguments = "{}"
    elif not isinstance(arguments, str):
        # Some gateways send the arguments object instead of its JSON text.
        arguments = json.dumps(arguments)
    return ToolCallRequest(id=call_id, name=name, arguments=arguments)


def _decode_usage(raw: Any) -> Optional[dict]:
    if not isinstance(raw, dict):
        return None
    return {
        "input_tokens": raw.get("prompt_tokens", 0) or 0,
        "output_tokens": raw.get("completion_tokens", 0) or 0,
    }


def decode_completion(body: bytes) -> ModelResponse:
    try:
        data = json.loads(body)
    except (ValueError, TypeError) as e:
        raise DecodeError(f"Response is not valid JSON: {e}", body=body,
                          code=ErrorCode.DECODE_INVALID_JSON) from e

    data = _expect_dict(data, "response", body)
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        raise DecodeError("Response has no choices", body=body)
    if len(choices) > 1:
        logger.debug(f"Ignoring {len(choices) - 1} additional choice(s)")

    choice = _expect_dict(choices[0], "choices[0]", body)
    message = _expect_dict(choice.get("message"), "choices[0].message", body)

    content = message.get("content")
    text = content if isinstance(content, str) and content.strip() else None

    tool_call = None
    tool_calls = message.get("tool_calls")
    if isinstance(tool_calls, list) and tool_calls:
        if len(tool_calls) > 1:
            logger.warning(
                f"Model returned {len(tool_calls)} tool calls; only the first is executed"
            )
        tool_call = _decode_tool_call(tool_calls[0], body)

    if text is None and tool_call is None:
        raise DecodeError("Model returned neither text nor a tool call", body=body,
                          code=ErrorCode.DECODE_EMPTY_RESPONSE)

    return ModelResponse(
        text=text,
        tool_call=tool_call,
        finish_reason=choice.get("finish_reason"),
        usage=_decode_usage(data.get("usage")),
    )
