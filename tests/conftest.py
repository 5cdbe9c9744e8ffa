from __future__ import annotations

from typing import Callable, List, Mapping, Optional

import httpx
import pytest

from restclient.transport import CompletionHandler, TransportOutcome


def http_outcome(status: int, content: bytes = b"", headers: Mapping[str, str] | None = None) -> TransportOutcome:
    response = httpx.Response(status, content=content, headers=headers)
    return TransportOutcome(content=content or None, response=response)


class RecordingTransport:
    """Completes synchronously on the calling thread and keeps every request."""

    def __init__(self, reply: Callable[[httpx.Request], TransportOutcome | List[TransportOutcome]]) -> None:
        self._reply = reply
        self.requests: List[httpx.Request] = []
        self.closed = False

    def submit(self, request: httpx.Request, on_complete: CompletionHandler) -> None:
        self.requests.append(request)
        outcomes = self._reply(request)
        if isinstance(outcomes, TransportOutcome):
            outcomes = [outcomes]
        for outcome in outcomes:
            on_complete(outcome)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def recording_transport() -> Callable[..., RecordingTransport]:
    def factory(
        reply: Optional[Callable[[httpx.Request], TransportOutcome | List[TransportOutcome]]] = None,
    ) -> RecordingTransport:
        return RecordingTransport(reply or (lambda _request: http_outcome(200, b"ok")))

    return factory


@pytest.fixture
def outcome() -> Callable[..., TransportOutcome]:
    return http_outcome


@pytest.fixture(autouse=True)
def _no_env_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RESTCLIENT_BASE_URL", raising=False)
    monkeypatch.delenv("RESTCLIENT_CA_BUNDLE", raising=False)
