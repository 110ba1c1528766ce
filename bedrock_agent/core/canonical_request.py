"""
Canonical Request Builder — the deterministic string a SigV4 signature covers.

    METHOD\\n
    PATH\\n
    QUERY\\n
    name:value\\n ... (sorted, lower-cased)\\n
    SIGNED_HEADER_NAMES\\n
    HEX(SHA256(body))
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Mapping, Optional

HOST_HEADER = "host"
DATE_HEADER = "x-amz-date"

# Never part of the signed header set, even if the caller sends them.
_UNSIGNED_HEADERS = frozenset({"authorization", "x-amz-content-sha256"})


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


EMPTY_PAYLOAD_HASH = sha256_hex(b"")


@dataclass(frozen=True)
class CanonicalRequest:
    canonical: str
    signed_headers: str
    payload_hash: str

    @property
    def hash_hex(self) -> str:
        return sha256_hex(self.canonical.encode("utf-8"))


def canonical_query(query: Optional[str]) -> str:
    """Sort ``a=1&b=2`` style parameters; duplicates are kept in order."""
    if not query:
        return ""
    params = [p for p in query.split("&") if p]
    return "&".join(sorted(params))


def canonical_headers(
    headers: Mapping[str, str], host: str, amz_date: str
) -> tuple[str, str]:
    """Return (canonical header block, signed header names)."""
    normalized: dict[str, str] = {}
    for name, value in headers.items():
        key = name.strip().lower()
        if key in _UNSIGNED_HEADERS:
            continue
        normalized[key] = str(value).strip()
    # Bound to the signature for replay protection; caller values are overwritten.
    normalized[HOST_HEADER] = host
    normalized[DATE_HEADER] = amz_date

    names = sorted(normalized)
    block = "".join(f"{name}:{normalized[name]}\n" for name in names)
    return block, ";".join(names)


def build_canonical_request(
    method: str,
    path: str,
    query: Optional[str],
    headers: Mapping[str, str],
    body: Optional[bytes],
    host: str,
    amz_date: str,
) -> CanonicalRequest:
    header_block, signed = canonical_headers(headers, host, amz_date)
    payload_hash = sha256_hex(body or b"")
    canonical = "\n".join([
        method.upper(),
        path or "/",
        canonical_query(query),
        header_block,
        signed,
        payload_hash,
    ])
    return CanonicalRequest(canonical=canonical, signed_headers=signed, payload_hash=payload_hash)
