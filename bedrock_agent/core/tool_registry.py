"""
Tool Registry — caller-supplied tools the model may invoke.
Handles registration, schema export, and error-absorbing execution.
"""

from __future__ import annotations
import inspect
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Union

from .errors import ToolExecutionError, UnknownToolError
from .models import ToolCallRequest, ToolResult

logger = logging.getLogger(__name__)

# arguments JSON text -> result text (sync or async)
ToolExecutor = Callable[[str], Union[str, Awaitable[str]]]


@dataclass(frozen=True)
class ToolDefinition:
    """A named capability plus its JSON-schema parameter spec."""
    name: str
    description: str
    executor: ToolExecutor = field(compare=False, repr=False)
    parameters: dict = field(default_factory=lambda: {"type": "object", "properties": {}})

    def to_dict(self) -> dict:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    async def run(self, arguments: str) -> str:
        result: Any = self.executor(arguments)
        if inspect.isawaitable(result):
            result = await result
        if not isinstance(result, str):
            raise ToolExecutionError(
                self.name, f"Tool returned {type(result).__name__}, expected str",
            )
        return result


class ToolRegistry:
    """Registry of tools for one or more orchestration runs. Read-only while a run is active."""

    def __init__(self, tools: Optional[list[ToolDefinition]] = None):
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        if tool.name in self:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    def get_tool(self, name: str) -> ToolDefinition:
        if name not in self._tools:
            raise UnknownToolError(name, available=self.list_tools())
        return self._tools[name]

    def get_schemas(self) -> list[dict]:
        """Tool definitions in chat-completions format."""
        return [tool.to_dict() for tool in self._tools.values()]

    def list_tools(self) -> list[str]:
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    async def execute_tool(self, call: ToolCallRequest) -> ToolResult:
        """Execute one call. Failures come back as an unsuccessful ToolResult."""
        t0 = time.time()
        try:
            tool = self.get_tool(call.name)
            output = await tool.run(call.arguments)
            duration_ms = (time.time() - t0) * 1000
            logger.debug(f"Tool {call.name} completed in {duration_ms:.0f}ms")
            return ToolResult(tool_call_id=call.id, success=True, output=output)
        except UnknownToolError as e:
            logger.error(str(e))
            return ToolResult(tool_call_id=call.id, success=False, output="", error=str(e))
        except ToolExecutionError as e:
            logger.error(f"Tool execution failed: {call.name}: {e}")
            return ToolResult(
                tool_call_id=call.id, success=False, output="",
                error=f"Tool execution failed: {e}",
            )
        except Exception as e:
            logger.error(f"Tool execution failed: {call.name}: {e}", exc_info=True)
            return ToolResult(
                tool_call_id=call.id, success=False, output="",
                error=f"Tool execution failed: {e}",
            )
