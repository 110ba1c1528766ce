"""
Request Signer — AWS Signature Version 4 and bearer-token authorization.

SigV4 derives a per-request key through a four-stage HMAC ladder
(date -> region -> service -> terminator) and signs a digest of the
canonical request.  The server recomputes everything from the same inputs,
so timestamps are always UTC.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from .canonical_request import DATE_HEADER, build_canonical_request
from .credentials import Credentials
from .errors import ConfigurationError, ErrorCode
from .transport import HttpRequest

logger = logging.getLogger(__name__)

ALGORITHM = "AWS4-HMAC-SHA256"
KEY_PREFIX = "AWS4"
SCOPE_TERMINATOR = "aws4_request"
CONTENT_SHA256_HEADER = "x-amz-content-sha256"
AUTHORIZATION_HEADER = "Authorization"


def hmac_sha256(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(secret_key: str, date_stamp: str, region: str, service: str) -> bytes:
    """Each stage's output is the key of the next. Order matters."""
    k_date = hmac_sha256((KEY_PREFIX + secret_key).encode("utf-8"), date_stamp)
    k_region = hmac_sha256(k_date, region)
    k_service = hmac_sha256(k_region, service)
    return hmac_sha256(k_service, SCOPE_TERMINATOR)


def region_from_host(host: str) -> Optional[str]:
    """``bedrock-runtime.us-west-2.amazonaws.com`` -> ``us-west-2``."""
    parts = host.split(":")[0].split(".")
    if len(parts) >= 3 and parts[0] == "bedrock-runtime":
        return parts[1]
    return None


def _utc(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


@dataclass(frozen=True)
class SigV4Signature:
    amz_date: str
    scope: str
    canonical_request: str
    string_to_sign: str
    signed_headers: str
    payload_hash: str
    signature: str
    authorization: str


class RequestSigner:
    """Signs outbound requests for one service (``bedrock`` by default)."""

    def __init__(self, service: str = "bedrock", clock: Optional[Callable[[], datetime]] = None):
        self.service = service
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def compute_signature(
        self,
        request: HttpRequest,
        credentials: Credentials,
        now: Optional[datetime] = None,
    ) -> SigV4Signature:
        """Pure function of (request, credentials, now)."""
        url = request.parsed_url()
        host = url.netloc.decode("ascii")
        path = url.raw_path.split(b"?", 1)[0].decode("ascii") or "/"
        query = url.query.decode("ascii")

        # The scope must name the region of the endpoint actually called.
        region = region_from_host(url.host) or credentials.region
        if not region:
            raise ConfigurationError(
                f"No AWS region derivable from host {url.host!r} and none configured",
                code=ErrorCode.CONFIG_MISSING_REGION,
            )

        stamp = _utc(now or self._clock())
        date_stamp = stamp.strftime("%Y%m%d")
        amz_date = stamp.strftime("%Y%m%dT%H%M%SZ")
        scope = f"{date_stamp}/{region}/{self.service}/{SCOPE_TERMINATOR}"

        canonical = build_canonical_request(
            method=request.method,
            path=path,
            query=query,
            headers=request.headers,
            body=request.body,
            host=host,
            amz_date=amz_date,
        )
        string_to_sign = "\n".join([ALGORITHM, amz_date, scope, canonical.hash_hex])

        key = derive_signing_key(credentials.secret_key, date_stamp, region, self.service)
        signature = hmac.new(key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()
        authorization = (
            f"{ALGORITHM} Credential={credentials.access_key_id}/{scope}, "
            f"SignedHeaders={canonical.signed_headers}, Signature={signature}"
        )
        return SigV4Signature(
            amz_date=amz_date,
            scope=scope,
            canonical_request=canonical.canonical,
            string_to_sign=string_to_sign,
            signed_headers=canonical.signed_headers,
            payload_hash=canonical.payload_hash,
            signature=signature,
            authorization=authorization,
        )

    def sign(
        self,
        request: HttpRequest,
        credentials: Credentials,
        now: Optional[datetime] = None,
    ) -> HttpRequest:
        """Return a copy of ``request`` carrying authorization headers."""
        mode = credentials.require_mode()
        if mode == "bearer":
            return request.with_headers({AUTHORIZATION_HEADER: f"Bearer {credentials.bearer_token}"})

        sig = self.compute_signature(request, credentials, now)
        logger.debug(f"SigV4 signed {request.method} scope={sig.scope} headers={sig.signed_headers}")
        return request.with_headers({
            DATE_HEADER: sig.amz_date,
            CONTENT_SHA256_HEADER: sig.payload_hash,
            AUTHORIZATION_HEADER: sig.authorization,
        })
