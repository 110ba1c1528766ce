"""
Credentials and credential resolution.

A client is configured with either SigV4 keys (access key id, secret key,
region) or a bearer token.  When both are present SigV4 takes precedence.
Resolvers are the seam to an external secret store; the core only ever sees
already-resolved values.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal, Optional

from .errors import ConfigurationError


def _mask(secret: Optional[str]) -> str:
    return f"***{secret[-4:]}" if secret and len(secret) > 4 else "***"


@dataclass(frozen=True, repr=False)
class Credentials:
    access_key_id: str = ""
    secret_key: str = ""
    region: str = ""
    bearer_token: str = ""

    @classmethod
    def from_keys(cls, access_key_id: str, secret_key: str, region: str = "") -> "Credentials":
        return cls(access_key_id=access_key_id, secret_key=secret_key, region=region)

    @classmethod
    def from_token(cls, token: str) -> "Credentials":
        return cls(bearer_token=token)

    @property
    def has_keys(self) -> bool:
        return bool(self.access_key_id and self.secret_key)

    @property
    def mode(self) -> Optional[Literal["sigv4", "bearer"]]:
        """Active auth form, or None when nothing usable was supplied."""
        if self.has_keys:
            return "sigv4"
        if self.bearer_token:
            return "bearer"
        return None

    def require_mode(self) -> Literal["sigv4", "bearer"]:
        mode = self.mode
        if mode is None:
            raise ConfigurationError(
                "Either AWS credentials (access key, secret key, region) or an API key must be provided"
            )
        return mode

    def __repr__(self) -> str:
        return (
            f"Credentials(mode={self.mode!r}, access_key_id={_mask(self.access_key_id)!r}, "
            f"region={self.region!r}, bearer_token={_mask(self.bearer_token)!r})"
        )


class CredentialResolver(ABC):
    """Supplies credentials from wherever the caller keeps them."""

    @abstractmethod
    def resolve(self) -> Credentials:
        pass


class StaticCredentialResolver(CredentialResolver):
    def __init__(self, credentials: Credentials):
        self._credentials = credentials

    def resolve(self) -> Credentials:
        return self._credentials


class ConfigCredentialResolver(CredentialResolver):
    """Reads ``credentials.*`` keys from a loaded Config (env vars already applied)."""

    def __init__(self, config):
        self._config = config

    def resolve(self) -> Credentials:
        get = self._config.get
        return Credentials(
            access_key_id=get("credentials.aws_access_key", "") or "",
            secret_key=get("credentials.aws_secret_key", "") or "",
            region=get("credentials.aws_region", "") or "",
            bearer_token=get("credentials.api_key", "") or "",
        )
