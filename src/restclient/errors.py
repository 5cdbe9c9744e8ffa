"""Structured error raised or reported for every failed request."""
from __future__ import annotations

import weakref
from typing import Any, Mapping, Optional

from .types import Verb

HTML_PREFIX = "<!doctype html>"


def stringify_body(data: Optional[bytes]) -> str:
    """Best-effort text rendering of a response body for messages and logs."""

    if not data:
        return ""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return ""
    return text.replace(HTML_PREFIX, "")


def _weak(sender: Any) -> Optional[weakref.ReferenceType]:
    if sender is None:
        return None
    try:
        return weakref.ref(sender)
    except TypeError:
        return None


class ApiError(Exception):
    """A failed request together with everything needed to diagnose it.

    ``response_code`` is ``0`` whenever no HTTP response was obtained: the URL
    could not be built, the transport failed, or the reply was not HTTP.
    """

    def __init__(
        self,
        *,
        url: str,
        response_code: int,
        request_type: Verb,
        message: str = "",
        sender: Any = None,
        error: Optional[BaseException] = None,
        data: Optional[bytes] = None,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> None:
        self.url = url
        self.response_code = response_code
        self.request_type = request_type
        self.message = message
        self.error = error
        self.data = data
        self.headers = dict(headers or {})
        self.params = dict(params or {})
        self._sender = _weak(sender)
        super().__init__(self.to_string())

    @property
    def sender(self) -> Any:
        """The object that issued the request, if it is still alive."""

        return self._sender() if self._sender is not None else None

    @property
    def received_response(self) -> bool:
        return self.response_code != 0

    @property
    def body_text(self) -> str:
        return stringify_body(self.data)

    def to_string(self) -> str:
        headers = ", ".join(f"{key}: {self.headers[key]}" for key in sorted(self.headers))
        params = "&".join(f"{key}={self.params[key]}" for key in sorted(self.params))
        parts = [
            f"{self.request_type.value} {self.url}",
            f"code: {self.response_code}",
            f"message: {self.message}",
            f"headers: [{headers}]",
            f"params: [{params}]",
        ]
        if self.error is not None:
            parts.append(f"error: {type(self.error).__name__}: {self.error}")
        return " | ".join(parts)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return (
            f"ApiError(request_type={self.request_type.value!r}, url={self.url!r}, "
            f"response_code={self.response_code}, message={self.message!r})"
        )


__all__ = ["ApiError", "HTML_PREFIX", "stringify_body"]
