"""URL construction for outgoing requests."""
from __future__ import annotations

import logging
from typing import Mapping, Optional
from urllib.parse import quote, urlencode, urljoin

import httpx

LOGGER = logging.getLogger(__name__)

# RFC 3986 unreserved + reserved characters, plus "%" so existing escapes survive.
PATH_SAFE = "-._~:/?#[]@!$&'()*+,;=%"
# Characters a query item leaves literal; "&" and "=" must always be escaped.
QUERY_SAFE = "-._~:/?@!$'()*+,;"


def encode_path(path: str) -> Optional[str]:
    """Percent-encode ``path`` as UTF-8, or ``None`` if it cannot be encoded."""

    try:
        return quote(path, safe=PATH_SAFE, encoding="utf-8", errors="strict")
    except UnicodeEncodeError:
        return None


def encode_query(query_params: Mapping[str, str]) -> str:
    """Serialise parameters in ascending key order with ``+`` escaped."""

    items = sorted((str(key), str(value)) for key, value in query_params.items())
    encoded = urlencode(items, safe=QUERY_SAFE, quote_via=quote)
    return encoded.replace("+", "%2B")


def build_url(
    path: str,
    query_params: Mapping[str, str] | None = None,
    *,
    base_url: str | None = None,
) -> Optional[str]:
    """Return an absolute URL for ``path`` and ``query_params``.

    ``None`` means the URL could not be built; no request should be sent.
    """

    encoded = encode_path(path)
    if encoded is None:
        LOGGER.debug("Path is not encodable", extra={"path": path})
        return None
    if base_url:
        encoded = urljoin(base_url.rstrip("/") + "/", encoded.lstrip("/"))

    if query_params:
        fragment = ""
        if "#" in encoded:
            encoded, fragment = encoded.split("#", 1)
            fragment = "#" + fragment
        # Given params replace any query already present in the path.
        encoded = encoded.split("?", 1)[0]
        try:
            query = encode_query(query_params)
        except UnicodeEncodeError:
            LOGGER.debug("Query parameters are not encodable", extra={"path": path})
            return None
        encoded = f"{encoded}?{query}{fragment}"

    try:
        url = httpx.URL(encoded)
    except httpx.InvalidURL:
        LOGGER.debug("Path is not a valid URL", extra={"path": path})
        return None
    if url.scheme not in {"http", "https"} or not url.host:
        LOGGER.debug("URL is not absolute", extra={"path": path})
        return None
    return encoded


__all__ = ["build_url", "encode_path", "encode_query"]
