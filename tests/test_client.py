from __future__ import annotations

import asyncio
from contextlib import contextmanager
import logging
import threading
import time
from typing import Callable, Iterator, List

import httpx
import pytest

from restclient import diagnostics
from restclient.client import RestClient
from restclient.config import ClientConfig, SessionConfig
from restclient.errors import ApiError
from restclient.transport import HTTPXTransport, TransportOutcome
from restclient.types import ApiEndpoint, ApiResponse, Verb

BASE = "https://api.example.com"


@contextmanager
def mock_client(handler: Callable[[httpx.Request], httpx.Response], **session: float) -> Iterator[RestClient]:
    with HTTPXTransport(session=SessionConfig(**session), transport=httpx.MockTransport(handler)) as transport:
        yield RestClient(transport, config=ClientConfig(base_url=BASE))


def test_get_sorts_query_parameters() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"items": []})

    with mock_client(handler) as client:
        result = client.get("/items", params={"b": "2", "a": "1"})
    assert result.ok
    assert result.value.json() == {"items": []}
    assert seen[0].method == "GET"
    assert str(seen[0].url) == f"{BASE}/items?a=1&b=2"


def test_plus_in_parameter_reaches_server_escaped() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"ok")

    with mock_client(handler) as client:
        client.get("/search", params={"q": "c++"})
    assert seen[0].url.query == b"q=c%2B%2B"


def test_not_found_reports_status_and_raw_body() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(404, content=b'{"error":"not found"}')

    with mock_client(handler) as client:
        result = client.get("/items/9")
    assert not result.ok
    assert result.error.response_code == 404
    assert result.error.data == b'{"error":"not found"}'
    assert result.error.sender is client
    with pytest.raises(ApiError):
        result.unwrap()


def test_no_content_is_success_without_body() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(204, headers={"X-Request-Id": "abc"})

    with mock_client(handler) as client:
        response = client.delete("/items/1").unwrap()
    assert response.data is None
    assert response.code == 204
    assert response.header_value("X-Request-Id") == "abc"


def test_unbuildable_url_never_reaches_transport(recording_transport) -> None:
    transport = recording_transport()
    client = RestClient(transport)
    result = client.get("not a url")
    assert result.error.response_code == 0
    assert result.error.message == "unable to build url"
    assert transport.requests == []


def test_transport_failure_is_status_zero() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with mock_client(handler) as client:
        result = client.post("/items", b"{}")
    assert result.error.response_code == 0
    assert isinstance(result.error.error, httpx.ConnectError)


def test_resource_timeout_fails_slow_transfer() -> None:
    def slow_body() -> Iterator[bytes]:
        yield b"part"
        time.sleep(0.2)
        yield b"rest"

    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=slow_body())

    with mock_client(handler, timeout_resource=0.05) as client:
        result = client.get("/large")
    assert result.error.response_code == 0
    assert isinstance(result.error.error, httpx.ReadTimeout)


def test_blocking_call_settles_once_on_repeated_completion(recording_transport, outcome) -> None:
    failure = TransportOutcome(error=httpx.ReadError("reset"))
    transport = recording_transport(lambda _request: [failure, outcome(200, b"late")])
    client = RestClient(transport, config=ClientConfig(base_url=BASE))
    result = client.get("/items")
    assert result.error is not None
    assert result.error.response_code == 0


def test_default_headers_merge_with_call_headers(recording_transport) -> None:
    transport = recording_transport()
    config = ClientConfig(base_url=BASE, default_headers={"Accept": "application/json", "X-App": "a"})
    client = RestClient(transport, config=config)
    client.put("/items/1", b"{}", headers={"X-App": "b"})
    request = transport.requests[0]
    assert request.headers["Accept"] == "application/json"
    assert request.headers["X-App"] == "b"
    assert request.read() == b"{}"


def test_head_never_sends_body(recording_transport) -> None:
    transport = recording_transport()
    client = RestClient(transport, config=ClientConfig(base_url=BASE))
    client.blocking.request("HEAD", "/items", b"ignored")
    assert transport.requests[0].method == "HEAD"
    assert transport.requests[0].read() == b""


def test_non_bytes_body_is_rejected(recording_transport) -> None:
    client = RestClient(recording_transport(), config=ClientConfig(base_url=BASE))
    with pytest.raises(TypeError):
        client.post("/items", "text")  # type: ignore[arg-type]


def test_callbacks_fire_on_worker_thread() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"payload")

    done = threading.Event()
    received: List[ApiResponse] = []
    threads: List[str] = []

    def on_success(response: ApiResponse) -> None:
        received.append(response)
        threads.append(threading.current_thread().name)
        done.set()

    def on_fail(error: ApiError) -> None:
        pytest.fail(f"unexpected failure: {error}")

    with mock_client(handler) as client:
        client.callbacks.get("/items", on_success=on_success, on_fail=on_fail)
        assert done.wait(timeout=5)
    assert received[0].data == b"payload"
    assert threads[0] != threading.current_thread().name


@pytest.mark.parametrize(
    ("status", "body", "succeeds"),
    [(200, b"payload", True), (200, b"", False), (201, b"created", False), (500, b"oops", False)],
)
def test_callbacks_accept_only_200_with_body(
    recording_transport, outcome, status: int, body: bytes, succeeds: bool
) -> None:
    transport = recording_transport(lambda _request: outcome(status, body))
    client = RestClient(transport, config=ClientConfig(base_url=BASE))
    successes: List[ApiResponse] = []
    failures: List[ApiError] = []
    client.callbacks.post("/items", b"{}", on_success=successes.append, on_fail=failures.append)
    assert len(successes) + len(failures) == 1
    assert bool(successes) is succeeds
    if failures:
        assert failures[0].response_code == status


def test_callbacks_invoked_once_on_repeated_completion(recording_transport, outcome) -> None:
    transport = recording_transport(lambda _request: [outcome(200, b"first"), outcome(500, b"second")])
    client = RestClient(transport, config=ClientConfig(base_url=BASE))
    calls: List[object] = []
    client.callbacks.get("/items", on_success=calls.append, on_fail=calls.append)
    assert len(calls) == 1
    assert isinstance(calls[0], ApiResponse)


def test_stream_is_cold_and_resubscription_resends(recording_transport, outcome) -> None:
    transport = recording_transport(lambda _request: outcome(200, b"value"))
    client = RestClient(transport, config=ClientConfig(base_url=BASE))
    single = client.streams.get("/items")
    assert transport.requests == []

    values: List[ApiResponse] = []
    completions: List[bool] = []
    single.subscribe(on_success=values.append, on_complete=lambda: completions.append(True))
    single.subscribe(on_success=values.append)
    assert len(transport.requests) == 2
    assert [value.data for value in values] == [b"value", b"value"]
    assert completions == [True]


def test_stream_failure_terminates_with_error(recording_transport, outcome) -> None:
    transport = recording_transport(lambda _request: outcome(503, b"unavailable"))
    client = RestClient(transport, config=ClientConfig(base_url=BASE))
    errors: List[ApiError] = []
    future = client.streams.put("/items/1", b"{}").subscribe(on_failure=errors.append)
    assert errors[0].response_code == 503
    with pytest.raises(ApiError):
        future.result(timeout=1)


def test_stream_can_be_awaited(recording_transport, outcome) -> None:
    transport = recording_transport(lambda _request: outcome(201, b"created"))
    client = RestClient(transport, config=ClientConfig(base_url=BASE))

    async def run() -> ApiResponse:
        return await client.streams.post("/items", b"{}")

    response = asyncio.run(run())
    assert response.code == 201


@pytest.mark.parametrize("verb", list(Verb))
def test_perform_routes_by_endpoint_verb(recording_transport, verb: Verb) -> None:
    transport = recording_transport()
    client = RestClient(transport, config=ClientConfig(base_url=BASE))
    client.perform(ApiEndpoint(verb=verb, path="/things"), body=b"x").result(timeout=1)
    request = transport.requests[0]
    assert request.method == verb.value
    assert request.read() == (b"x" if verb.carries_body else b"")


def test_upload_reports_classified_result(recording_transport, outcome) -> None:
    transport = recording_transport(lambda _request: outcome(413, b"too large"))
    client = RestClient(transport, config=ClientConfig(base_url=BASE))
    results = []
    client.upload("/files", b"\x00\x01", results.append, headers={"Content-Type": "application/octet-stream"})
    assert transport.requests[0].method == "POST"
    assert transport.requests[0].read() == b"\x00\x01"
    assert results[0].error.response_code == 413


def test_adapters_send_identical_requests(recording_transport) -> None:
    transport = recording_transport()
    client = RestClient(transport, config=ClientConfig(base_url=BASE))
    headers = {"Accept": "application/json"}
    params = {"z": "1", "a": "2"}
    client.post("/items", b"{}", headers=headers, params=params)
    client.callbacks.post(
        "/items", b"{}", on_success=lambda _r: None, on_fail=lambda _e: None, headers=headers, params=params
    )
    client.streams.post("/items", b"{}", headers=headers, params=params).result(timeout=1)
    first, second, third = transport.requests
    for request in (second, third):
        assert request.method == first.method
        assert request.url == first.url
        assert request.headers == first.headers
        assert request.read() == first.read()


def test_context_manager_closes_owned_transport(monkeypatch: pytest.MonkeyPatch) -> None:
    closed: List[bool] = []
    monkeypatch.setattr(HTTPXTransport, "close", lambda self: closed.append(True))
    with RestClient(config=ClientConfig(base_url=BASE)):
        pass
    assert closed == [True]


def test_injected_transport_left_open(recording_transport) -> None:
    transport = recording_transport()
    with RestClient(transport):
        pass
    assert not transport.closed


def test_unexpected_transport_exception_is_status_zero() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        raise ValueError("boom")

    with mock_client(handler) as client:
        result = client.get("/items")
    assert result.error.response_code == 0
    assert isinstance(result.error.error, ValueError)


def test_pipeline_logs_begin_success_and_failure(recording_transport, outcome, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger=diagnostics.API_CATEGORY)
    replies = iter([outcome(200, b"fine"), outcome(500, b"broken")])
    transport = recording_transport(lambda _request: next(replies))
    client = RestClient(transport, config=ClientConfig(base_url=BASE))

    assert client.get("/items").ok
    assert not client.post("/items", b"{}").ok

    records = [record for record in caplog.records if record.name == diagnostics.API_CATEGORY]
    assert [(record.levelno, record.phase) for record in records] == [
        (logging.DEBUG, "begin"),
        (logging.INFO, "success"),
        (logging.DEBUG, "begin"),
        (logging.WARNING, "failure"),
    ]
    assert 'curl -vX "GET" "https://api.example.com/items"' in records[0].getMessage()
    assert "response data: fine" in records[1].getMessage()
    assert "500" in records[3].getMessage()


def test_broken_diagnostic_logger_leaves_result_intact(
    recording_transport, outcome, caplog, monkeypatch: pytest.MonkeyPatch
) -> None:
    caplog.set_level(logging.DEBUG, logger=diagnostics.API_CATEGORY)

    def broken(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("handler down")

    monkeypatch.setattr(diagnostics.API_LOGGER, "log", broken)
    transport = recording_transport(lambda _request: outcome(200, b"payload"))
    client = RestClient(transport, config=ClientConfig(base_url=BASE))
    result = client.get("/items")
    assert result.ok
    assert result.value.data == b"payload"


def test_stream_completes_even_when_success_handler_raises(recording_transport, outcome) -> None:
    transport = recording_transport(lambda _request: outcome(200, b"value"))
    client = RestClient(transport, config=ClientConfig(base_url=BASE))
    completions: List[bool] = []

    def on_success(_response: ApiResponse) -> None:
        raise RuntimeError("subscriber failed")

    future = client.streams.get("/items").subscribe(
        on_success=on_success,
        on_complete=lambda: completions.append(True),
    )
    assert completions == [True]
    assert future.result(timeout=1).data == b"value"
