"""REST client exposing one request pipeline through three calling conventions."""
from __future__ import annotations

from typing import Callable, Mapping, Optional

from .adapters import BlockingAdapter, CallbackAdapter, Single, StreamAdapter
from .config import ClientConfig, SessionConfig
from .pipeline import RequestPipeline
from .transport import HTTPXTransport, Transport
from .types import ApiResponse, Endpoint, Result, Verb


class RestClient:
    """Entry point for issuing requests.

    Blocking calls are available directly (``client.get(...)``); callback and
    stream calls live on ``client.callbacks`` and ``client.streams``. All of
    them share one transport and one request pipeline, so switching calling
    convention never changes what goes over the wire.

    Example::

        with RestClient(config=ClientConfig(base_url="https://api.example.com")) as client:
            result = client.get("/items", params={"b": "2", "a": "1"})
            if result.ok:
                print(result.value.json())
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        config: ClientConfig | None = None,
        session: SessionConfig | None = None,
    ) -> None:
        config = config or ClientConfig()
        self._owns_transport = transport is None
        if transport is None:
            transport = HTTPXTransport(
                session=session or config.session,
                verify=config.verify,
                max_workers=config.max_workers,
            )
        self._transport = transport
        self._pipeline = RequestPipeline(
            transport,
            base_url=config.base_url,
            default_headers=config.default_headers,
            sender=self,
        )
        self.blocking = BlockingAdapter(self._pipeline)
        self.callbacks = CallbackAdapter(self._pipeline)
        self.streams = StreamAdapter(self._pipeline)

    @classmethod
    def from_config(cls, config: ClientConfig) -> "RestClient":
        return cls(config=config)

    def close(self) -> None:
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> "RestClient":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def get(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Result[ApiResponse]:
        return self.blocking.get(path, headers=headers, params=params)

    def post(
        self,
        path: str,
        body: Optional[bytes] = None,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Result[ApiResponse]:
        return self.blocking.post(path, body, headers=headers, params=params)

    def put(
        self,
        path: str,
        body: Optional[bytes] = None,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Result[ApiResponse]:
        return self.blocking.put(path, body, headers=headers, params=params)

    def delete(
        self,
        path: str,
        body: Optional[bytes] = None,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Result[ApiResponse]:
        return self.blocking.delete(path, body, headers=headers, params=params)

    def head(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Result[ApiResponse]:
        return self.blocking.head(path, headers=headers, params=params)

    def perform(
        self,
        endpoint: Endpoint,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        body: Optional[bytes] = None,
    ) -> Single:
        return self.streams.perform(endpoint, headers=headers, params=params, body=body)

    def upload(
        self,
        path: str,
        body: bytes,
        handler: Callable[[Result[ApiResponse]], None],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        """POST raw bytes and hand the classified outcome to ``handler``."""

        self._pipeline.execute(Verb.POST, path, headers=headers, body=body, on_result=handler)


__all__ = ["RestClient"]
