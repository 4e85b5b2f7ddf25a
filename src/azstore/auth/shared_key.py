"""SharedKey request signing.

The storage service recomputes the signature from the request it receives, so
every step below has to match its canonicalization byte for byte:

    VERB\\n
    Content-Encoding\\n ... Range\\n     (eleven standard header lines)
    x-ms-*:value\\n ...                  (sorted, lower-cased names)
    /account/path\\nparam:v1,v2 ...      (sorted, lower-cased names)

The signature is base64(HMAC-SHA256(base64-decoded account key, utf-8 string)).
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from urllib.parse import urlsplit

from .._http import RequestDescriptor
from .errors import MalformedCredentialError

API_VERSION = "2019-12-12"

_STANDARD_HEADERS = (
    "content-encoding",
    "content-language",
    "content-length",
    "content-md5",
    "content-type",
    "date",
    "if-modified-since",
    "if-match",
    "if-none-match",
    "if-unmodified-since",
    "range",
)


@dataclass(frozen=True, slots=True)
class SharedKeyCredential:
    account_name: str
    account_key: str

    def __repr__(self) -> str:
        return f"SharedKeyCredential(account_name={self.account_name!r})"


def decode_account_key(account_key: str) -> bytes:
    try:
        return base64.b64decode(account_key, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedCredentialError("Account key is not valid base64", e) from e


def rfc1123_date(now: datetime | None = None) -> str:
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        # naive values are taken to be UTC
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def _content_length_line(request: RequestDescriptor) -> str:
    if request.body is None:
        # A declared length is signed exactly as it will be sent.
        declared = (request.header("content-length") or "").strip()
        return "" if declared in ("", "0") else declared
    length = request.content_length
    # Unknown (streamed) and zero lengths are both signed as an empty line.
    if not length:
        return ""
    return str(length)


def canonical_headers(request: RequestDescriptor, content_type: str | None = None) -> str:
    lines = [request.method.upper()]
    for name in _STANDARD_HEADERS:
        if name == "content-length":
            lines.append(_content_length_line(request))
        elif name == "content-type":
            lines.append(request.header(name) or content_type or "")
        elif name == "date":
            # carried by x-ms-date
            lines.append("")
        else:
            lines.append(request.header(name) or "")
    return "".join(f"{line}\n" for line in lines)


def canonical_ms_headers(request: RequestDescriptor) -> str:
    grouped: dict[str, list[str]] = {}
    for name, value in request.headers:
        lowered = name.lower()
        if lowered.startswith("x-ms-"):
            grouped.setdefault(lowered, []).append(value)
    return "".join(f"{name}:{','.join(grouped[name])}\n" for name in sorted(grouped))


def _query_pairs(request: RequestDescriptor) -> list[tuple[str, str]]:
    # Raw split: values are signed exactly as they appear, without decoding.
    pairs: list[tuple[str, str]] = []
    query = urlsplit(request.url).query
    if query:
        for item in query.split("&"):
            if item:
                name, _, value = item.partition("=")
                pairs.append((name, value))
    pairs.extend(request.params)
    return pairs


def canonical_resource(request: RequestDescriptor, account_name: str) -> str:
    path = urlsplit(request.url).path or "/"
    grouped: dict[str, list[str]] = {}
    for name, value in _query_pairs(request):
        grouped.setdefault(name.lower(), []).append(value)
    params = "".join(f"\n{name}:{','.join(grouped[name])}" for name in sorted(grouped))
    return f"/{account_name}{path}{params}"


def string_to_sign(
    request: RequestDescriptor,
    account_name: str,
    content_type: str | None = None,
) -> str:
    return (
        canonical_headers(request, content_type)
        + canonical_ms_headers(request)
        + canonical_resource(request, account_name)
    )


def compute_signature(payload: str, key: bytes) -> str:
    digest = hmac.new(key, payload.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def sign(
    request: RequestDescriptor,
    account_name: str,
    account_key: str,
    content_type: str | None = None,
    *,
    now: datetime | None = None,
    api_version: str = API_VERSION,
) -> RequestDescriptor:
    """Return ``request`` with x-ms-date, x-ms-version and a SharedKey Authorization header.

    Args:
        request: The unsigned request.
        account_name: Storage account name.
        account_key: Base64 encoded account key.
        content_type: Content type to sign (and send) when the request does
            not carry a content-type header itself.
        now: Clock instant for x-ms-date. Defaults to the current UTC time.
        api_version: Value of the x-ms-version header.

    Raises:
        MalformedCredentialError: If ``account_key`` is not valid base64.
    """
    key = decode_account_key(account_key)

    signed = request.with_headers(
        {"x-ms-date": rfc1123_date(now), "x-ms-version": api_version}
    )
    if content_type and signed.header("content-type") is None:
        signed = signed.with_header("content-type", content_type)

    signature = compute_signature(string_to_sign(signed, account_name, content_type), key)
    return signed.with_header("authorization", f"SharedKey {account_name}:{signature}")


__all__ = [
    "API_VERSION",
    "SharedKeyCredential",
    "decode_account_key",
    "rfc1123_date",
    "canonical_headers",
    "canonical_ms_headers",
    "canonical_resource",
    "string_to_sign",
    "compute_signature",
    "sign",
]
