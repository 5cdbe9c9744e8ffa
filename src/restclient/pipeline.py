"""Request execution shared by every calling convention.

A call moves through ``PENDING -> SENT -> SUCCEEDED | FAILED``. The terminal
transition happens once per call: the result slot accepts a single value and
anything the transport reports afterwards is dropped.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, InvalidStateError
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

from .assembly import assemble
from .classify import RequestContext, SuccessPolicy, build_failure, classify
from .diagnostics import log_begin, log_failure, log_success
from .transport import Transport, TransportOutcome
from .types import ApiResponse, Result, Verb
from .urls import build_url

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
ResultHandler = Callable[[Result[ApiResponse]], None]


class OneShot(Generic[T]):
    """A slot that can be filled exactly once and waited on."""

    def __init__(self) -> None:
        self._future: Future[T] = Future()

    def settle(self, value: T) -> bool:
        """Store ``value`` unless the slot is already filled."""

        try:
            self._future.set_result(value)
        except InvalidStateError:
            return False
        return True

    @property
    def settled(self) -> bool:
        return self._future.done()

    def wait(self, timeout: Optional[float] = None) -> T:
        return self._future.result(timeout=timeout)


def coerce_body(body: Any) -> Optional[bytes]:
    if body is None:
        return None
    if isinstance(body, bytes):
        return body
    if isinstance(body, (bytearray, memoryview)):
        return bytes(body)
    msg = f"Request body must be bytes, not {type(body).__name__}"
    raise TypeError(msg)


class RequestPipeline:
    """Build, send, classify and log one request per :meth:`execute` call."""

    def __init__(
        self,
        transport: Transport,
        *,
        base_url: str | None = None,
        default_headers: Mapping[str, str] | None = None,
        sender: Any = None,
    ) -> None:
        self._transport = transport
        self._base_url = base_url
        self._default_headers = dict(default_headers or {})
        self._sender = sender

    @property
    def transport(self) -> Transport:
        return self._transport

    def execute(
        self,
        verb: Verb | str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        body: Any = None,
        policy: SuccessPolicy = SuccessPolicy.RANGE,
        on_result: Optional[ResultHandler] = None,
    ) -> OneShot[Result[ApiResponse]]:
        """Issue one request; the returned slot receives its single outcome."""

        verb = Verb.coerce(verb)
        body = coerce_body(body)
        merged_headers = {**self._default_headers, **(headers or {})}
        params = dict(params or {})
        context = RequestContext(
            verb=verb,
            path=path,
            headers=merged_headers,
            params=params,
            sender=self._sender,
        )
        slot: OneShot[Result[ApiResponse]] = OneShot()

        url = build_url(path, params, base_url=self._base_url)
        if url is None:
            self._finish(slot, context, Result.failure(build_failure(context)), on_result)
            return slot

        request = assemble(verb, url, merged_headers, body)
        log_begin(verb, path, url, merged_headers, body if verb.carries_body else None)

        def on_complete(outcome: TransportOutcome) -> None:
            self._finish(slot, context, classify(outcome, context, policy), on_result)

        try:
            self._transport.submit(request, on_complete)
        except Exception as exc:
            LOGGER.error("Transport rejected request", extra={"method": verb.value, "path": path, "error": str(exc)})
            self._finish(slot, context, classify(TransportOutcome(error=exc), context, policy), on_result)
        return slot

    def _finish(
        self,
        slot: OneShot[Result[ApiResponse]],
        context: RequestContext,
        result: Result[ApiResponse],
        on_result: Optional[ResultHandler],
    ) -> None:
        if not slot.settle(result):
            LOGGER.debug(
                "Ignoring repeated completion",
                extra={"method": context.verb.value, "path": context.path},
            )
            return
        if result.error is not None:
            log_failure(context.verb, context.path, result.error)
        else:
            assert result.value is not None
            log_success(context.verb, context.path, result.value)
        if on_result is None:
            return
        try:
            on_result(result)
        except Exception:
            LOGGER.exception(
                "Result handler raised",
                extra={"method": context.verb.value, "path": context.path},
            )


__all__ = ["OneShot", "RequestPipeline", "ResultHandler", "coerce_body"]
