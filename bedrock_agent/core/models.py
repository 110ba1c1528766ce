"""
Data models for the agent core.
Messages are a closed union of four frozen dataclasses; the wire format is
produced only at the boundary (see chat_format.py).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Literal, Optional, Union


@dataclass(frozen=True)
class ToolCallRequest:
    """A single tool invocation requested by the model."""
    id: str
    name: str
    arguments: str  # raw JSON text, never parsed by the orchestrator


@dataclass(frozen=True)
class SystemMessage:
    content: str
    role: Literal["system"] = field(default="system", init=False)


@dataclass(frozen=True)
class UserMessage:
    content: str
    role: Literal["user"] = field(default="user", init=False)


@dataclass(frozen=True)
class AssistantMessage:
    """Model turn. When tool_calls is non-empty the content is not meaningful."""
    content: Optional[str] = None
    tool_calls: tuple[ToolCallRequest, ...] = ()
    role: Literal["assistant"] = field(default="assistant", init=False)

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0


@dataclass(frozen=True)
class ToolMessage:
    tool_call_id: str
    content: str
    role: Literal["tool"] = field(default="tool", init=False)


Message = Union[SystemMessage, UserMessage, AssistantMessage, ToolMessage]


@dataclass(frozen=True)
class ModelResponse:
    """Normalized completion: text, one requested tool call, or both."""
    text: Optional[str] = None
    tool_call: Optional[ToolCallRequest] = None
    finish_reason: Optional[str] = None
    usage: Optional[dict] = None  # {"input_tokens": N, "output_tokens": N}

    @property
    def has_tool_call(self) -> bool:
        return self.tool_call is not None


@dataclass
class ToolResult:
    """Result from executing a tool."""
    tool_call_id: str
    success: bool
    output: str
    error: Optional[str] = None

    def to_message_content(self) -> str:
        if self.success:
            return self.output
        return f"Error: {self.error}"


EXHAUSTED_MARKER = "Workflow completed but reached max iterations."


@dataclass(frozen=True)
class OrchestrationResult:
    """Outcome of one agent run. See FinalAnswer and Exhausted."""
    model_calls: int = 0
    messages: tuple = ()

    @property
    def is_final(self) -> bool:
        return isinstance(self, FinalAnswer)


@dataclass(frozen=True)
class FinalAnswer(OrchestrationResult):
    text: str = ""


@dataclass(frozen=True)
class Exhausted(OrchestrationResult):
    last_text: str = EXHAUSTED_MARKER
