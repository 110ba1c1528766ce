"""
Abstract base class for model backends.
The agent loop talks only to this interface; tests substitute mocks.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ..models import Message, ModelResponse


class BaseLLMProvider(ABC):
    """Abstract LLM provider interface."""

    def __init__(
        self,
        model: str,
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: float = 60.0,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/") if base_url else base_url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model!r}, base_url={self.base_url!r})"

    @abstractmethod
    async def send_message(
        self,
        messages: Sequence[Message],
        tools: Sequence[dict],
    ) -> ModelResponse:
        """
        Send the conversation to the model and decode its reply.

        Args:
            messages: Full conversation history, system message first
            tools: Tool definitions in chat-completions format (may be empty)

        Returns:
            ModelResponse with text, a tool call, or both

        Raises:
            ConfigurationError, SigningError, TransportError, DecodeError
        """
        pass

    @property
    def provider_name(self) -> str:
        return self.__class__.__name__
