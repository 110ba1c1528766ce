"""
Configuration loader — YAML file + environment variable overrides.
"""

from __future__ import annotations
import os
import yaml
from pathlib import Path
from typing import Any, Optional

from ..core.errors import ConfigurationError, ErrorCode


class Config:
    """Configuration container with dot-access and env var support."""

    def __init__(self, data: dict):
        self._data = data

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-separated key path."""
        keys = key.split(".")
        value = self._data
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
            if value is None:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a config value by dot-separated key path."""
        keys = key.split(".")
        d = self._data
        for k in keys[:-1]:
            d = d.setdefault(k, {})
        d[keys[-1]] = value

    @property
    def raw(self) -> dict:
        return self._data

    def __repr__(self) -> str:
        return f"Config(keys={sorted(self._data)})"


# Later entries win, so the canonical AWS names override the short ones.
ENV_MAPPINGS = {
    "BEDROCK_MODEL_ID": "llm.model",
    "BEDROCK_BASE_URL": "llm.base_url",
    "BEDROCK_API_KEY": "credentials.api_key",
    "AWS_ACCESS_KEY": "credentials.aws_access_key",
    "AWS_ACCESS_KEY_ID": "credentials.aws_access_key",
    "AWS_SECRET_KEY": "credentials.aws_secret_key",
    "AWS_SECRET_ACCESS_KEY": "credentials.aws_secret_key",
    "AWS_REGION": "credentials.aws_region",
    "BEDROCK_AGENT_MAX_ITERATIONS": "agent.max_iterations",
    "BEDROCK_AGENT_TIMEOUT": "agent.run_timeout",
    "BEDROCK_AGENT_LOG_FORMAT": "logging.format",
}

_INT_KEYS = {"agent.max_iterations"}
_FLOAT_KEYS = {"agent.run_timeout", "llm.timeout", "llm.temperature"}


def _coerce(config_key: str, env_key: str, raw: str) -> Any:
    try:
        if config_key in _INT_KEYS:
            return int(raw)
        if config_key in _FLOAT_KEYS:
            return float(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{env_key}={raw!r} is not a number", code=ErrorCode.CONFIG_INVALID_VALUE,
        ) from e
    return raw


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file with env var overrides.

    Priority (highest to lowest):
    1. Environment variables (see ENV_MAPPINGS)
    2. User config file (if provided)
    3. Default config
    """
    default_path = Path(__file__).parent / "default_config.yaml"
    with open(default_path) as f:
        data = yaml.safe_load(f)

    if config_path:
        if not Path(config_path).exists():
            raise ConfigurationError(
                f"Config file not found: {config_path}", code=ErrorCode.CONFIG_INVALID_VALUE,
            )
        with open(config_path) as f:
            user_data = yaml.safe_load(f) or {}
        data = _deep_merge(data, user_data)

    config = Config(data)
    for env_key, config_key in ENV_MAPPINGS.items():
        env_val = os.getenv(env_key)
        if env_val is not None and env_val != "":
            config.set(config_key, _coerce(config_key, env_key, env_val))

    return config


def validate_required_configuration(config: Config) -> list[str]:
    """Return the config keys that still need a value before a client can run."""
    missing = []
    for key in ("llm.model", "llm.base_url"):
        if not config.get(key):
            missing.append(key)

    if not config.get("credentials.api_key"):
        aws_keys = (
            "credentials.aws_access_key",
            "credentials.aws_secret_key",
            "credentials.aws_region",
        )
        aws_missing = [k for k in aws_keys if not config.get(k)]
        if aws_missing:
            missing.append("credentials.api_key")
            missing.extend(aws_missing)
    return missing


def _deep_merge(base: dict, overlay: dict) -> dict:
    """Recursively merge overlay dict into base dict."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
