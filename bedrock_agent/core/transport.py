"""
Transport Executor — one HTTP call per invocation, no retries.

Non-2xx responses and network failures surface as TransportError so the
caller decides what (if anything) to retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

import httpx

from .errors import ErrorCode, SigningError, TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpRequest:
    """Immutable outbound request. ``with_headers`` returns an annotated copy."""
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def with_headers(self, extra: Mapping[str, str]) -> "HttpRequest":
        lowered = {k.lower() for k in extra}
        merged = {k: v for k, v in self.headers.items() if k.lower() not in lowered}
        merged.update(extra)
        return HttpRequest(method=self.method, url=self.url, headers=merged, body=self.body)

    def header(self, name: str) -> Optional[str]:
        name = name.lower()
        for key, value in self.headers.items():
            if key.lower() == name:
                return value
        return None

    def parsed_url(self) -> httpx.URL:
        try:
            url = httpx.URL(self.url)
        except (httpx.InvalidURL, TypeError) as e:
            raise SigningError(f"Invalid URL {self.url!r}: {e}") from e
        if not url.host:
            raise SigningError(f"Invalid URL {self.url!r}: no host")
        return url


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    body: bytes


class TransportExecutor:
    """Sends signed requests with a per-call timeout."""

    def __init__(
        self,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self._transport = transport

    async def execute(self, request: HttpRequest) -> HttpResponse:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(
                    request.method,
                    request.url,
                    headers=dict(request.headers),
                    content=request.body or None,
                )
        except httpx.TimeoutException as e:
            logger.error(f"Request to {request.url} timed out after {self.timeout}s")
            raise TransportError(
                f"Request timed out after {self.timeout}s", code=ErrorCode.TRANSPORT_TIMEOUT,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Request to {request.url} failed: {e}")
            raise TransportError(
                f"Network error: {e}", code=ErrorCode.TRANSPORT_CONNECTION_FAILED,
            ) from e

        body = response.content
        if not 200 <= response.status_code < 300:
            error_type = "http_5xx" if response.status_code >= 500 else "http_4xx"
            logger.debug(f"Request failed: statusCode={response.status_code}, errorType={error_type}")
            raw = body.decode("utf-8", errors="replace") or "<no body>"
            logger.error(f"HTTP error {response.status_code}: {raw[:500]}")
            raise TransportError(
                f"HTTP error {response.status_code}",
                status_code=response.status_code,
                body=body,
            )

        logger.debug(f"Request succeeded: statusCode={response.status_code}, bytes={len(body)}")
        return HttpResponse(status_code=response.status_code, body=body)
