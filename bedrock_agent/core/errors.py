"""
Error taxonomy — every failure the core can raise, with codes and hints.

Fatal kinds (configuration, signing, transport, decode, cancellation) abort
an orchestration run and propagate to the caller.  Recoverable kinds
(unknown tool, tool execution) are folded back into the conversation by the
agent loop and never escape it.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


# ── Error categories ────────────────────────────────────────────────

class ErrorCategory(Enum):
    CONFIG = "config"          # E1xxx
    SIGNING = "signing"        # E2xxx
    TRANSPORT = "transport"    # E3xxx
    DECODE = "decode"          # E4xxx
    TOOL = "tool"              # E5xxx
    AGENT = "agent"            # E6xxx


# ── Error codes ─────────────────────────────────────────────────────

class ErrorCode(Enum):
    # Configuration errors (E1xxx)
    CONFIG_NO_CREDENTIALS = "E1001"
    CONFIG_MISSING_REGION = "E1002"
    CONFIG_INVALID_VALUE = "E1003"

    # Signing errors (E2xxx)
    SIGNING_INVALID_URL = "E2001"

    # Transport errors (E3xxx)
    TRANSPORT_HTTP_STATUS = "E3001"
    TRANSPORT_TIMEOUT = "E3002"
    TRANSPORT_CONNECTION_FAILED = "E3003"

    # Decode errors (E4xxx)
    DECODE_INVALID_JSON = "E4001"
    DECODE_MALFORMED_ENVELOPE = "E4002"
    DECODE_EMPTY_RESPONSE = "E4003"

    # Tool errors (E5xxx)
    TOOL_NOT_FOUND = "E5001"
    TOOL_EXECUTION_FAILED = "E5002"

    # Agent errors (E6xxx)
    AGENT_CANCELLED = "E6001"
    AGENT_DEADLINE_EXCEEDED = "E6002"


_PREFIX_TO_CATEGORY = {
    "1": ErrorCategory.CONFIG,
    "2": ErrorCategory.SIGNING,
    "3": ErrorCategory.TRANSPORT,
    "4": ErrorCategory.DECODE,
    "5": ErrorCategory.TOOL,
    "6": ErrorCategory.AGENT,
}


def category_for(code: ErrorCode) -> ErrorCategory:
    return _PREFIX_TO_CATEGORY[code.value[1]]


# ── Static catalog of descriptions + recovery hints ─────────────────

_CATALOG: Dict[ErrorCode, dict] = {
    ErrorCode.CONFIG_NO_CREDENTIALS: {
        "description": "No usable credentials were supplied.",
        "hint": "Set BEDROCK_API_KEY, or AWS_ACCESS_KEY, AWS_SECRET_KEY and AWS_REGION.",
        "transient": False,
    },
    ErrorCode.CONFIG_MISSING_REGION: {
        "description": "SigV4 credentials have no region and none could be derived from the host.",
        "hint": "Set AWS_REGION or use a bedrock-runtime.<region>.amazonaws.com base URL.",
        "transient": False,
    },
    ErrorCode.CONFIG_INVALID_VALUE: {
        "description": "A configuration value is invalid.",
        "hint": "Check the config YAML file and environment overrides.",
        "transient": False,
    },
    ErrorCode.SIGNING_INVALID_URL: {
        "description": "The request URL could not be canonicalized for signing.",
        "hint": "Check llm.base_url; it must be an absolute http(s) URL.",
        "transient": False,
    },
    ErrorCode.TRANSPORT_HTTP_STATUS: {
        "description": "The completion endpoint returned a non-2xx status.",
        "hint": "Inspect the response body; 401/403 usually means bad credentials.",
        "transient": False,
    },
    ErrorCode.TRANSPORT_TIMEOUT: {
        "description": "The completion endpoint did not respond within the timeout.",
        "hint": "Increase llm.timeout or retry later.",
        "transient": True,
    },
    ErrorCode.TRANSPORT_CONNECTION_FAILED: {
        "description": "Could not reach the completion endpoint.",
        "hint": "Check network connectivity and llm.base_url.",
        "transient": True,
    },
    ErrorCode.DECODE_INVALID_JSON: {
        "description": "The completion response was not valid JSON.",
        "hint": "The endpoint may not be chat-completions compatible.",
        "transient": False,
    },
    ErrorCode.DECODE_MALFORMED_ENVELOPE: {
        "description": "The completion response did not match the expected envelope.",
        "hint": "Check that the model supports the chat-completions format.",
        "transient": False,
    },
    ErrorCode.DECODE_EMPTY_RESPONSE: {
        "description": "The model returned neither text nor a tool call.",
        "hint": "Retry the request or rephrase the prompt.",
        "transient": False,
    },
    ErrorCode.TOOL_NOT_FOUND: {
        "description": "The model requested a tool that is not registered.",
        "hint": "The model is told about the failure and may try another tool.",
        "transient": False,
    },
    ErrorCode.TOOL_EXECUTION_FAILED: {
        "description": "A tool failed during execution.",
        "hint": "The model is told about the failure and may retry with other arguments.",
        "transient": False,
    },
    ErrorCode.AGENT_CANCELLED: {
        "description": "The orchestration run was cancelled.",
        "hint": "Start a new run if the result is still needed.",
        "transient": False,
    },
    ErrorCode.AGENT_DEADLINE_EXCEEDED: {
        "description": "The orchestration run exceeded its deadline.",
        "hint": "Increase agent.run_timeout or reduce agent.max_iterations.",
        "transient": True,
    },
}


def describe(code: ErrorCode) -> str:
    return _CATALOG[code]["description"]


def get_recovery_hint(code: ErrorCode) -> str:
    """Return the recovery hint for a given error code."""
    entry = _CATALOG.get(code)
    return entry["hint"] if entry else "No recovery hint available."


# ── Exceptions ──────────────────────────────────────────────────────

class AgentCoreError(Exception):
    """Base class for every error raised by the core."""

    default_code = ErrorCode.CONFIG_INVALID_VALUE

    def __init__(
        self,
        message: str = "",
        code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.code = code or self.default_code
        self.context = context or {}
        super().__init__(message or describe(self.code))

    @property
    def category(self) -> ErrorCategory:
        return category_for(self.code)

    @property
    def is_transient(self) -> bool:
        return _CATALOG[self.code]["transient"]

    @property
    def recovery_hint(self) -> str:
        return get_recovery_hint(self.code)

    def full_message(self) -> str:
        parts = [f"[{self.code.value}] {self}"]
        if self.recovery_hint:
            parts.append(f"Hint: {self.recovery_hint}")
        if self.context:
            parts.append(f"Context: {self.context}")
        return "\n".join(parts)


class ConfigurationError(AgentCoreError):
    """No usable credentials, or an invalid setting. Never retried."""

    default_code = ErrorCode.CONFIG_NO_CREDENTIALS


class SigningError(AgentCoreError):
    """The request could not be canonicalized (e.g. unparseable URL)."""

    default_code = ErrorCode.SIGNING_INVALID_URL


class TransportError(AgentCoreError):
    """Network failure or non-2xx HTTP status."""

    default_code = ErrorCode.TRANSPORT_HTTP_STATUS

    def __init__(
        self,
        message: str = "",
        status_code: Optional[int] = None,
        body: bytes = b"",
        code: Optional[ErrorCode] = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message, code=code, context={"status_code": status_code} if status_code else None)

    @property
    def is_transient(self) -> bool:
        if self.status_code is not None:
            return self.status_code == 429 or self.status_code >= 500
        return super().is_transient

    @property
    def body_text(self) -> str:
        return self.body.decode("utf-8", errors="replace") if self.body else "<no body>"


class DecodeError(AgentCoreError):
    """The completion body was not JSON or carried neither text nor a tool call."""

    default_code = ErrorCode.DECODE_MALFORMED_ENVELOPE

    def __init__(self, message: str = "", body: bytes = b"", code: Optional[ErrorCode] = None):
        self.body = body
        super().__init__(message, code=code)


class UnknownToolError(AgentCoreError):
    """The model named a tool absent from the registry. Recoverable."""

    default_code = ErrorCode.TOOL_NOT_FOUND

    def __init__(self, tool_name: str, available: Optional[list] = None):
        self.tool_name = tool_name
        self.available = list(available or [])
        super().__init__(f"Unknown tool: {tool_name}")


class ToolExecutionError(AgentCoreError):
    """A registered tool raised or returned an unusable result. Recoverable."""

    default_code = ErrorCode.TOOL_EXECUTION_FAILED

    def __init__(self, tool_name: str, message: str):
        self.tool_name = tool_name
        super().__init__(message)


class OrchestrationCancelledError(AgentCoreError):
    """The run was cancelled or its deadline passed at a suspension point."""

    default_code = ErrorCode.AGENT_CANCELLED

    def __init__(self, reason: str = "Orchestration cancelled", code: Optional[ErrorCode] = None):
        self.reason = reason
        super().__init__(reason, code=code)
