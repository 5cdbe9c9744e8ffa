"""REST client with blocking, callback and single-value stream calling conventions."""

from __future__ import annotations

import os
from pathlib import Path


def _load_local_env() -> None:
    """Load ``RESTCLIENT_*`` and other variables from the nearest .env file."""

    search_roots = [Path.cwd(), *Path.cwd().parents]
    for directory in search_roots:
        env_path = directory / ".env"
        if not env_path.is_file():
            continue
        with env_path.open("r", encoding="utf-8") as env_file:
            for raw_line in env_file:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                os.environ.setdefault(key.strip(), value.strip().strip('"').strip("'"))
        break


_load_local_env()

from .adapters import BlockingAdapter, CallbackAdapter, Single, StreamAdapter  # noqa: E402
from .client import RestClient  # noqa: E402
from .config import ClientConfig, SessionConfig, build_session_config, load_config  # noqa: E402
from .errors import ApiError  # noqa: E402
from .transport import HTTPXTransport, Transport, TransportOutcome  # noqa: E402
from .types import ApiEndpoint, ApiResponse, Endpoint, Result, Verb  # noqa: E402

__all__ = [
    "ApiEndpoint",
    "ApiError",
    "ApiResponse",
    "BlockingAdapter",
    "CallbackAdapter",
    "ClientConfig",
    "Endpoint",
    "HTTPXTransport",
    "RestClient",
    "Result",
    "SessionConfig",
    "Single",
    "StreamAdapter",
    "Transport",
    "TransportOutcome",
    "Verb",
    "build_session_config",
    "load_config",
]
