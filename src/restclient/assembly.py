"""Turn a verb, URL, headers and body into a transport-ready request."""
from __future__ import annotations

from typing import Mapping, Optional

import httpx

from .types import Verb


def assemble(
    verb: Verb,
    url: str,
    headers: Mapping[str, str] | None = None,
    body: Optional[bytes] = None,
) -> httpx.Request:
    """Build the outgoing request.

    The body is attached for POST, PUT and DELETE only; GET and HEAD drop it.
    """

    request_headers = httpx.Headers()
    for key, value in (headers or {}).items():
        request_headers[key] = value
    content = body if verb.carries_body and body is not None else None
    return httpx.Request(verb.value, url, headers=request_headers, content=content)


__all__ = ["assemble"]
