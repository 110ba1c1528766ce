"""
Agent Loop — the reason-act orchestrator.
Sends the conversation to the model, executes the requested tool, feeds the
result back, and loops until the model answers in plain text or the
iteration budget runs out.
"""

from __future__ import annotations
from typing import Callable, Optional

from .cancellation import CancellationToken
from .conversation import Conversation
from .errors import ConfigurationError, ErrorCode
from .models import (
    AssistantMessage, EXHAUSTED_MARKER, Exhausted, FinalAnswer, OrchestrationResult,
    SystemMessage, ToolCallRequest, ToolMessage, ToolResult, UserMessage,
)
from .providers.base import BaseLLMProvider
from .structured_logger import AgentLogger, StructuredLogger
from .tool_registry import ToolRegistry

DEFAULT_MAX_ITERATIONS = 5

DEFAULT_SYSTEM_PROMPT = (
    "You are an intelligent AI assistant with access to tools. "
    "Call a tool whenever you need information or need to act on the user's behalf, "
    "then use the results to answer. When you have everything you need, reply with "
    "a clear, friendly final answer and no tool call."
)


class Agent:
    """
    Reason-act loop over one provider and one tool registry.

    Flow:
      [system, user] → call model
      → tool call: append assistant(tool_calls) + tool(result or error) → loop
      → plain text: append assistant(text) → FinalAnswer
      → budget spent: Exhausted(last text seen)

    The provider, registry and logger are shared read-only; every run() owns
    a fresh Conversation, so independent runs may execute concurrently.
    """

    def __init__(
        self,
        provider: BaseLLMProvider,
        registry: Optional[ToolRegistry] = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        logger: Optional[AgentLogger] = None,
        on_tool_start: Optional[Callable[[ToolCallRequest], None]] = None,
        on_tool_end: Optional[Callable[[ToolCallRequest, ToolResult], None]] = None,
    ):
        if not isinstance(max_iterations, int) or max_iterations < 1:
            raise ConfigurationError(
                f"max_iterations must be >= 1, got {max_iterations!r}",
                code=ErrorCode.CONFIG_INVALID_VALUE,
            )
        self.provider = provider
        self.registry = registry or ToolRegistry()
        self.max_iterations = max_iterations
        self.system_prompt = system_prompt
        self._logger = logger
        self.on_tool_start = on_tool_start
        self.on_tool_end = on_tool_end

    def _run_logger(self) -> AgentLogger:
        if self._logger is not None:
            return self._logger
        return StructuredLogger(__name__).with_context(
            trace_id=StructuredLogger.generate_trace_id(),
            model=getattr(self.provider, "model", ""),
        )

    async def run(
        self,
        user_input: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> OrchestrationResult:
        """
        Run one orchestration for ``user_input``.

        Raises ConfigurationError, SigningError, TransportError, DecodeError or
        OrchestrationCancelledError; tool failures never escape.
        """
        log = self._run_logger()
        token = cancel_token or CancellationToken()
        conversation = Conversation([
            SystemMessage(self.system_prompt),
            UserMessage(user_input),
        ])
        tools = self.registry.get_schemas()
        last_text: Optional[str] = None
        usage_totals = {"input_tokens": 0, "output_tokens": 0}

        log.debug(f"Starting agentic workflow: tools={len(tools)}")

        model_calls = 0
        for iteration in range(self.max_iterations):
            log.debug(f"Agentic workflow iteration {iteration + 1}/{self.max_iterations}")

            response = await token.guard(
                self.provider.send_message(conversation.messages, tools)
            )
            model_calls += 1
            if response.usage:
                for key in usage_totals:
                    usage_totals[key] += response.usage.get(key, 0)
            if response.text:
                last_text = response.text

            if response.tool_call is None:
                conversation.append(AssistantMessage(content=response.text))
                log.info(
                    f"Agentic workflow completed after {iteration + 1} iterations",
                    **usage_totals,
                )
                return FinalAnswer(
                    text=response.text or "",
                    model_calls=model_calls,
                    messages=conversation.messages,
                )

            call = response.tool_call
            log.debug(f"LLM requested tool call: {call.name} (id: {call.id})")

            # The tool-call turn and its result are appended together, so a
            # cancellation during execution leaves the history untouched.
            result = await self._execute_tool(call, token)
            conversation.append(AssistantMessage(tool_calls=(call,)))
            conversation.append(ToolMessage(
                tool_call_id=call.id,
                content=result.to_message_content(),
            ))
            if result.success:
                log.debug(f"Tool execution completed: {call.name}")
            else:
                log.error(result.error or "Tool failed", tool=call.name)

        log.warning(
            f"Agentic workflow reached max iterations ({self.max_iterations})",
            **usage_totals,
        )
        return Exhausted(
            last_text=last_text or EXHAUSTED_MARKER,
            model_calls=model_calls,
            messages=conversation.messages,
        )

    async def _execute_tool(self, call: ToolCallRequest, token: CancellationToken) -> ToolResult:
        if self.on_tool_start:
            self.on_tool_start(call)
        result = await token.guard(self.registry.execute_tool(call))
        if self.on_tool_end:
            self.on_tool_end(call, result)
        return result
