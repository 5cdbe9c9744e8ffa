"""Calling conventions over :class:`restclient.pipeline.RequestPipeline`.

``BlockingAdapter`` parks the caller until the outcome is known and returns a
:class:`Result`. ``CallbackAdapter`` returns immediately and invokes exactly
one of ``on_success``/``on_fail``; it only accepts a 200 with a body.
``StreamAdapter`` returns a cold :class:`Single` that sends the request each
time it is subscribed.

Callbacks and subscribers run on the transport's worker thread.
"""
from __future__ import annotations

import asyncio
from concurrent.futures import Future
from typing import Any, Callable, Generator, Mapping, Optional

from .classify import SuccessPolicy
from .errors import ApiError
from .pipeline import RequestPipeline, coerce_body
from .types import ApiResponse, Endpoint, Result, Verb

SuccessCallback = Callable[[ApiResponse], None]
FailureCallback = Callable[[ApiError], None]


class BlockingAdapter:
    """Synchronous calls returning :class:`Result`."""

    def __init__(self, pipeline: RequestPipeline) -> None:
        self._pipeline = pipeline

    def request(
        self,
        verb: Verb | str,
        path: str,
        body: Optional[bytes] = None,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Result[ApiResponse]:
        slot = self._pipeline.execute(verb, path, headers=headers, params=params, body=body)
        return slot.wait()

    def get(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Result[ApiResponse]:
        return self.request(Verb.GET, path, headers=headers, params=params)

    def post(
        self,
        path: str,
        body: Optional[bytes] = None,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Result[ApiResponse]:
        return self.request(Verb.POST, path, body, headers=headers, params=params)

    def put(
        self,
        path: str,
        body: Optional[bytes] = None,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Result[ApiResponse]:
        return self.request(Verb.PUT, path, body, headers=headers, params=params)

    def delete(
        self,
        path: str,
        body: Optional[bytes] = None,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Result[ApiResponse]:
        return self.request(Verb.DELETE, path, body, headers=headers, params=params)

    def head(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Result[ApiResponse]:
        return self.request(Verb.HEAD, path, headers=headers, params=params)


class CallbackAdapter:
    """Fire-and-return calls reporting through ``on_success``/``on_fail``."""

    def __init__(self, pipeline: RequestPipeline) -> None:
        self._pipeline = pipeline

    def request(
        self,
        verb: Verb | str,
        path: str,
        body: Optional[bytes] = None,
        *,
        on_success: SuccessCallback,
        on_fail: FailureCallback,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> None:
        def deliver(result: Result[ApiResponse]) -> None:
            if result.error is not None:
                on_fail(result.error)
            else:
                assert result.value is not None
                on_success(result.value)

        self._pipeline.execute(
            verb,
            path,
            headers=headers,
            params=params,
            body=body,
            policy=SuccessPolicy.EXACT_200,
            on_result=deliver,
        )

    def get(
        self,
        path: str,
        *,
        on_success: SuccessCallback,
        on_fail: FailureCallback,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> None:
        self.request(Verb.GET, path, on_success=on_success, on_fail=on_fail, headers=headers, params=params)

    def post(
        self,
        path: str,
        body: Optional[bytes] = None,
        *,
        on_success: SuccessCallback,
        on_fail: FailureCallback,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> None:
        self.request(Verb.POST, path, body, on_success=on_success, on_fail=on_fail, headers=headers, params=params)

    def put(
        self,
        path: str,
        body: Optional[bytes] = None,
        *,
        on_success: SuccessCallback,
        on_fail: FailureCallback,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> None:
        self.request(Verb.PUT, path, body, on_success=on_success, on_fail=on_fail, headers=headers, params=params)

    def delete(
        self,
        path: str,
        body: Optional[bytes] = None,
        *,
        on_success: SuccessCallback,
        on_fail: FailureCallback,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> None:
        self.request(Verb.DELETE, path, body, on_success=on_success, on_fail=on_fail, headers=headers, params=params)

    def head(
        self,
        path: str,
        *,
        on_success: SuccessCallback,
        on_fail: FailureCallback,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> None:
        self.request(Verb.HEAD, path, on_success=on_success, on_fail=on_fail, headers=headers, params=params)


class Single:
    """Cold single-value stream.

    Nothing is sent until :meth:`subscribe` is called, and every subscription
    sends the request again. Each subscription sees exactly one value followed
    by completion, or exactly one error.
    """

    def __init__(self, fire: Callable[[Callable[[Result[ApiResponse]], None]], None]) -> None:
        self._fire = fire

    def subscribe(
        self,
        on_success: Optional[SuccessCallback] = None,
        on_failure: Optional[FailureCallback] = None,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> "Future[ApiResponse]":
        """Send the request; the returned future mirrors the emitted outcome.

        ``on_complete`` follows a value even when ``on_success`` raises.
        """

        future: Future[ApiResponse] = Future()
        future.set_running_or_notify_cancel()

        def emit(result: Result[ApiResponse]) -> None:
            try:
                if result.error is not None:
                    if on_failure is not None:
                        on_failure(result.error)
                else:
                    assert result.value is not None
                    try:
                        if on_success is not None:
                            on_success(result.value)
                    finally:
                        if on_complete is not None:
                            on_complete()
            finally:
                if result.error is not None:
                    future.set_exception(result.error)
                else:
                    future.set_result(result.value)

        self._fire(emit)
        return future

    def result(self, timeout: Optional[float] = None) -> ApiResponse:
        """Subscribe and wait; raises :class:`ApiError` on failure."""

        return self.subscribe().result(timeout=timeout)

    def __await__(self) -> Generator[Any, None, ApiResponse]:
        return asyncio.wrap_future(self.subscribe()).__await__()


class StreamAdapter:
    """Calls returning a cold :class:`Single`."""

    def __init__(self, pipeline: RequestPipeline) -> None:
        self._pipeline = pipeline

    def request(
        self,
        verb: Verb | str,
        path: str,
        body: Optional[bytes] = None,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Single:
        verb = Verb.coerce(verb)
        body = coerce_body(body)
        headers = dict(headers or {})
        params = dict(params or {})

        def fire(emit: Callable[[Result[ApiResponse]], None]) -> None:
            self._pipeline.execute(verb, path, headers=headers, params=params, body=body, on_result=emit)

        return Single(fire)

    def get(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Single:
        return self.request(Verb.GET, path, headers=headers, params=params)

    def post(
        self,
        path: str,
        body: Optional[bytes] = None,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Single:
        return self.request(Verb.POST, path, body, headers=headers, params=params)

    def put(
        self,
        path: str,
        body: Optional[bytes] = None,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Single:
        return self.request(Verb.PUT, path, body, headers=headers, params=params)

    def delete(
        self,
        path: str,
        body: Optional[bytes] = None,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Single:
        return self.request(Verb.DELETE, path, body, headers=headers, params=params)

    def head(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Single:
        return self.request(Verb.HEAD, path, headers=headers, params=params)

    def perform(
        self,
        endpoint: Endpoint,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        body: Optional[bytes] = None,
    ) -> Single:
        """Route ``endpoint`` to the method matching its verb."""

        verb = Verb.coerce(endpoint.verb)
        if verb is Verb.GET:
            return self.get(endpoint.path, headers=headers, params=params)
        if verb is Verb.POST:
            return self.post(endpoint.path, body, headers=headers, params=params)
        if verb is Verb.PUT:
            return self.put(endpoint.path, body, headers=headers, params=params)
        if verb is Verb.DELETE:
            return self.delete(endpoint.path, body, headers=headers, params=params)
        return self.head(endpoint.path, headers=headers, params=params)


__all__ = [
    "BlockingAdapter",
    "CallbackAdapter",
    "FailureCallback",
    "Single",
    "StreamAdapter",
    "SuccessCallback",
]
