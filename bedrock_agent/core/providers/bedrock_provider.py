"""
Amazon Bedrock provider over the OpenAI-compatible chat-completions endpoint.

POST {base_url}/chat/completions, authenticated with SigV4 when AWS keys are
configured and with a bearer token otherwise.

Usage::

    provider = BedrockProvider(
        model="openai.gpt-oss-20b-1:0",
        base_url="https://bedrock-runtime.us-west-2.amazonaws.com/openai/v1",
        credentials=Credentials.from_keys("AKIA...", "secret", "us-west-2"),
    )
    response = await provider.send_message(messages, tools=[])
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from .base import BaseLLMProvider
from ..chat_format import build_request_body, encode_body
from ..credentials import Credentials, CredentialResolver, StaticCredentialResolver
from ..errors import DecodeError, ErrorCode
from ..models import Message, ModelResponse, SystemMessage, UserMessage
from ..request_signer import RequestSigner
from ..response_decoder import decode_completion
from ..transport import HttpRequest, TransportExecutor

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://bedrock-runtime.us-west-2.amazonaws.com/openai/v1"
DEFAULT_MODEL = "openai.gpt-oss-20b-1:0"


class BedrockProvider(BaseLLMProvider):
    """Signs, sends and decodes one chat-completions call per send_message()."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        credentials: Optional[Credentials] = None,
        credential_resolver: Optional[CredentialResolver] = None,
        service: str = "bedrock",
        transport: Optional[TransportExecutor] = None,
        signer: Optional[RequestSigner] = None,
        clock: Optional[Callable[[], datetime]] = None,
        **kwargs,
    ):
        super().__init__(model=model, base_url=base_url, **kwargs)
        if credential_resolver is None:
            credential_resolver = StaticCredentialResolver(credentials or Credentials())
        self._resolver = credential_resolver
        self._transport = transport or TransportExecutor(timeout=self.timeout)
        self._signer = signer or RequestSigner(service=service)
        self._clock = clock

    @classmethod
    def from_config(cls, config, credential_resolver: CredentialResolver, **kwargs) -> "BedrockProvider":
        return cls(
            model=config.get("llm.model", DEFAULT_MODEL),
            base_url=config.get("llm.base_url", DEFAULT_BASE_URL),
            credential_resolver=credential_resolver,
            service=config.get("llm.service", "bedrock"),
            temperature=config.get("llm.temperature"),
            max_tokens=config.get("llm.max_tokens"),
            timeout=float(config.get("llm.timeout", 60)),
            **kwargs,
        )

    @property
    def provider_name(self) -> str:
        return "bedrock"

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def build_request(self, messages: Sequence[Message], tools: Sequence[dict]) -> HttpRequest:
        body = build_request_body(
            model=self.model,
            messages=messages,
            tools=tools,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return HttpRequest(
            method="POST",
            url=self.endpoint,
            headers={"Content-Type": "application/json"},
            body=encode_body(body),
        )

    async def send_message(
        self,
        messages: Sequence[Message],
        tools: Sequence[dict],
    ) -> ModelResponse:
        credentials = self._resolver.resolve()
        request = self.build_request(messages, tools)
        now = self._clock() if self._clock else None
        signed = self._signer.sign(request, credentials, now)

        logger.debug(
            f"Sending {len(messages)} messages, {len(tools)} tools "
            f"to {self.endpoint} (auth={credentials.mode})"
        )
        raw = await self._transport.execute(signed)
        response = decode_completion(raw.body)

        if response.usage:
            logger.debug(
                f"Token usage: input={response.usage['input_tokens']} "
                f"output={response.usage['output_tokens']}"
            )
        return response

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """One-shot exchange without tools; returns the model's text."""
        response = await self.send_message(
            [SystemMessage(system_prompt), UserMessage(user_prompt)], tools=[],
        )
        if not response.text:
            raise DecodeError(
                "Model requested a tool during a one-shot completion",
                code=ErrorCode.DECODE_EMPTY_RESPONSE,
            )
        logger.debug(f"Completion processed: messageLength={len(response.text)} chars")
        return response.text
