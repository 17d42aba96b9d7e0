"""
Request Canonicalization

Derives the URL string that is part of the signed payload. The URL is
signed data, not metadata: signer and verifier must derive it with the same
inputs and the same flag, or every signature fails.
"""

import re
from dataclasses import dataclass
from typing import Mapping, Optional

from trustedapps.core.signing.headers import HEADER_REQUESTED_URI


# "https:/example.com" -> "https://example.com" (broken upstream rewrites)
_SINGLE_SLASH_SCHEME = re.compile(r"([a-z]+):/([^/])")


@dataclass(frozen=True)
class RequestMeta:
    """
    Framework-neutral view of an incoming request.

    Attributes:
        headers: Request headers (case-sensitive mappings get a lower-case fallback)
        scheme: Request protocol, e.g. "https"
        path: Request path including the query string
    """
    headers: Mapping[str, str]
    scheme: str
    path: str


def get_header_value(headers: Mapping[str, str], name: str) -> Optional[str]:
    """
    Look up a header by exact name, then by its lower-case form.

    Raises:
        TypeError: If headers is not a mapping
    """
    if not hasattr(headers, "get"):
        raise TypeError(f"Request headers must be a mapping, got {type(headers).__name__}")
    value = headers.get(name)
    if value:
        return value
    return headers.get(name.lower()) or None


def normalize_url(url: str, allow_multiple_protocols: bool) -> str:
    """Collapse the first "scheme:/host" into "scheme://host" when the flag is set."""
    if not allow_multiple_protocols:
        return url
    return _SINGLE_SLASH_SCHEME.sub(r"\1://\2", url, count=1)


def get_request_url(request: RequestMeta, allow_multiple_protocols: bool = False) -> str:
    """
    Build the canonical URL of a request.

    Uses the X-Requested-URI header verbatim when present, otherwise
    {scheme}://{Host}{path}.
    """
    url = get_header_value(request.headers, HEADER_REQUESTED_URI)
    if not url:
        host = get_header_value(request.headers, "Host") or ""
        url = f"{request.scheme}://{host}{request.path}"
    return normalize_url(url, allow_multiple_protocols)
