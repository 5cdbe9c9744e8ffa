"""Transport seam: hands one request to a worker and reports its completion."""
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

import httpx

from .config import SessionConfig

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransportOutcome:
    """What the transport observed for one request.

    Either ``error`` is set, or ``response`` (with optional ``content``) is.
    ``response`` is ``None`` with no error when the reply was not HTTP.
    """

    content: Optional[bytes] = None
    response: Optional[httpx.Response] = None
    error: Optional[BaseException] = None


CompletionHandler = Callable[[TransportOutcome], None]


class Transport(Protocol):
    """Issues requests on its own workers and calls back on completion."""

    def submit(self, request: httpx.Request, on_complete: CompletionHandler) -> None:
        ...

    def close(self) -> None:
        ...


class HTTPXTransport:
    """Default transport backed by :class:`httpx.Client` and a thread pool."""

    def __init__(
        self,
        *,
        session: SessionConfig | None = None,
        verify: str | bool = True,
        transport: httpx.BaseTransport | None = None,
        client: httpx.Client | None = None,
        max_workers: int = 4,
    ) -> None:
        self._session = session or SessionConfig()
        if client is None:
            timeout = self._session.timeout_for_response
            client = httpx.Client(
                timeout=httpx.Timeout(connect=timeout, read=timeout, write=timeout, pool=None),
                verify=verify,
                transport=transport,
            )
        self._client = client
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="restclient")

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._client.close()

    def __enter__(self) -> "HTTPXTransport":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def submit(self, request: httpx.Request, on_complete: CompletionHandler) -> None:
        self._executor.submit(self._run, request, on_complete)

    def _run(self, request: httpx.Request, on_complete: CompletionHandler) -> None:
        try:
            outcome = self._exchange(request)
        except Exception as exc:
            LOGGER.error(
                "Transport raised a non-HTTP error",
                extra={"method": request.method, "url": str(request.url), "error": repr(exc)},
            )
            outcome = TransportOutcome(error=exc)
        try:
            on_complete(outcome)
        except Exception:
            LOGGER.exception(
                "Completion handler raised",
                extra={"method": request.method, "url": str(request.url)},
            )

    def _exchange(self, request: httpx.Request) -> TransportOutcome:
        deadline = time.monotonic() + self._session.timeout_resource
        try:
            response = self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            LOGGER.debug(
                "Transport error",
                extra={"method": request.method, "url": str(request.url), "error": str(exc)},
            )
            return TransportOutcome(error=exc)

        chunks: list[bytes] = []
        try:
            for chunk in response.iter_bytes():
                chunks.append(chunk)
                if time.monotonic() > deadline:
                    msg = f"Resource timeout of {self._session.timeout_resource}s exceeded"
                    raise httpx.ReadTimeout(msg, request=request)
        except httpx.HTTPError as exc:
            return TransportOutcome(content=b"".join(chunks) or None, error=exc)
        finally:
            response.close()

        content = b"".join(chunks)
        return TransportOutcome(content=content or None, response=response)


__all__ = ["CompletionHandler", "HTTPXTransport", "Transport", "TransportOutcome"]
