from __future__ import annotations

import base64
import binascii
import json
import time
from dataclasses import dataclass
from typing import Any

from .errors import TokenDecodeError


def get_token_payload(token: str) -> dict[str, Any]:
    # Only the middle segment is read; the signature is the issuer's business.
    parts = token.split(".")
    if len(parts) < 2:
        raise TokenDecodeError("Invalid token: expected at least two segments")
    base64_part = parts[1].replace("-", "+").replace("_", "/")
    padded = base64_part + "=" * ((4 - (len(base64_part) % 4)) % 4)
    try:
        decoded = base64.b64decode(padded)
        payload = json.loads(decoded.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise TokenDecodeError("Invalid token payload", e) from e
    if not isinstance(payload, dict):
        raise TokenDecodeError("Invalid token payload: expected a JSON object")
    return payload


def get_token_expiry(token: str) -> int:
    exp = get_token_payload(token).get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise TokenDecodeError("Token payload has no numeric 'exp' claim")
    return int(exp)


@dataclass(frozen=True, slots=True)
class CachedToken:
    access_token: str
    expires_at: int

    @classmethod
    def from_access_token(cls, access_token: str) -> CachedToken:
        return cls(access_token=access_token, expires_at=get_token_expiry(access_token))

    def is_expired(self, now: float | None = None) -> bool:
        current = time.time() if now is None else now
        return self.expires_at <= current


__all__ = ["CachedToken", "get_token_payload", "get_token_expiry"]
