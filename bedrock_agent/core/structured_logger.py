"""
Structured Logger — per-run trace IDs and key/value fields over stdlib logging.

The agent loop only needs an object with debug/info/warning/error(msg, **fields);
StructuredLogger is the default implementation.  Output is either JSON lines
(`BEDROCK_AGENT_LOG_FORMAT=json`) or human-readable lines prefixed with
`[trace_id]`.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from typing import Any, Dict, Optional, Protocol


class AgentLogger(Protocol):
    """What the orchestrator requires from an injected logger."""

    def debug(self, msg: str, **extra: Any) -> None: ...
    def info(self, msg: str, **extra: Any) -> None: ...
    def warning(self, msg: str, **extra: Any) -> None: ...
    def error(self, msg: str, **extra: Any) -> None: ...


# Record attributes stamped by StructuredLogger
_CONTEXT_ATTRS = ("trace_id", "model")
_FIELDS_ATTR = "fields"


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for attr in _CONTEXT_ATTRS:
            value = getattr(record, attr, "")
            if value:
                entry[attr] = value
        fields = getattr(record, _FIELDS_ATTR, None)
        if fields:
            entry["fields"] = fields
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """``[trace_id] HH:MM:SS [LEVEL] name: message key=value ...``"""

    def __init__(self):
        super().__init__(fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = getattr(record, _FIELDS_ATTR, None)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        trace_id = getattr(record, "trace_id", "")
        return f"[{trace_id}] {line}" if trace_id else line


class StructuredLogger:
    """
    Stdlib logger bound to a trace context.

    Usage::

        log = StructuredLogger(__name__).with_context(trace_id="abc123", model="openai.gpt-oss-20b-1:0")
        log.error("Unknown tool: lookup", tool="lookup")
    """

    def __init__(self, name: str, trace_id: str = "", model: str = ""):
        self._logger = logging.getLogger(name)
        self._context = {"trace_id": trace_id, "model": model}

    def with_context(self, **context: str) -> "StructuredLogger":
        merged = {**self._context, **context}
        return StructuredLogger(self._logger.name, **merged)

    def debug(self, msg: str, **extra: Any) -> None:
        self._log(logging.DEBUG, msg, extra)

    def info(self, msg: str, **extra: Any) -> None:
        self._log(logging.INFO, msg, extra)

    def warning(self, msg: str, **extra: Any) -> None:
        self._log(logging.WARNING, msg, extra)

    def error(self, msg: str, **extra: Any) -> None:
        self._log(logging.ERROR, msg, extra)

    def _log(self, level: int, msg: str, fields: Dict[str, Any]) -> None:
        self._logger.log(level, msg, extra={**self._context, _FIELDS_ATTR: fields})

    @staticmethod
    def generate_trace_id() -> str:
        return uuid.uuid4().hex[:12]


def setup_structured_logging(json_mode: Optional[bool] = None, level: str = "WARNING") -> None:
    """
    Install a single root handler.

    ``json_mode=None`` reads ``BEDROCK_AGENT_LOG_FORMAT`` (``"json"`` enables it).
    """
    if json_mode is None:
        json_mode = os.getenv("BEDROCK_AGENT_LOG_FORMAT", "").lower() == "json"

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter(datefmt="%Y-%m-%dT%H:%M:%S") if json_mode else HumanFormatter())
    root.addHandler(handler)
