"""Configuration helpers for the REST client.

A light weight typed wrapper around the optional YAML configuration file used
by the command line tool. Environment variables fill in the base URL and CA
bundle when the file leaves them out.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional
import os

DEFAULT_TIMEOUT_FOR_RESPONSE = 20.0
DEFAULT_TIMEOUT_RESOURCE = 120.0


@dataclass(slots=True)
class SessionConfig:
    """Timeouts handed to the transport when it is constructed."""

    timeout_for_response: float = DEFAULT_TIMEOUT_FOR_RESPONSE
    timeout_resource: float = DEFAULT_TIMEOUT_RESOURCE

    def __post_init__(self) -> None:
        if self.timeout_for_response <= 0:
            msg = "Response timeout must be positive"
            raise ValueError(msg)
        if self.timeout_resource <= 0:
            msg = "Resource timeout must be positive"
            raise ValueError(msg)


def build_session_config(
    timeout_for_response: float = DEFAULT_TIMEOUT_FOR_RESPONSE,
    timeout_resource: float = DEFAULT_TIMEOUT_RESOURCE,
) -> SessionConfig:
    return SessionConfig(timeout_for_response=float(timeout_for_response), timeout_resource=float(timeout_resource))


@dataclass(slots=True)
class ClientConfig:
    """Connectivity configuration for :class:`restclient.client.RestClient`."""

    base_url: str | None = None
    base_url_env: str | None = "RESTCLIENT_BASE_URL"
    ca_bundle: str | bool | None = None
    ca_bundle_env: str | None = "RESTCLIENT_CA_BUNDLE"
    default_headers: Dict[str, str] = field(default_factory=dict)
    max_workers: int = 4
    session: SessionConfig = field(default_factory=SessionConfig)

    def __post_init__(self) -> None:
        self.base_url = self.base_url.strip() if isinstance(self.base_url, str) else self.base_url
        self.base_url_env = self.base_url_env.strip() if isinstance(self.base_url_env, str) else self.base_url_env
        self.ca_bundle_env = self.ca_bundle_env.strip() if isinstance(self.ca_bundle_env, str) else self.ca_bundle_env
        if not self.base_url:
            self.base_url = None
            if self.base_url_env:
                token = os.getenv(self.base_url_env)
                if token is not None and token.strip():
                    self.base_url = token.strip()
        if self.ca_bundle is None and self.ca_bundle_env:
            env_value = os.getenv(self.ca_bundle_env)
            if env_value is not None and env_value != "":
                cleaned = env_value.strip()
                lowered = cleaned.lower()
                if lowered in {"false", "0", "no"}:
                    self.ca_bundle = False
                else:
                    self.ca_bundle = cleaned
        self.default_headers = {str(key): str(value) for key, value in self.default_headers.items()}
        if self.max_workers <= 0:
            msg = "max_workers must be at least one"
            raise ValueError(msg)

    @property
    def verify(self) -> str | bool:
        """Value for httpx ``verify``."""

        if self.ca_bundle:
            return self.ca_bundle
        if self.ca_bundle is False:
            return False
        return True


def _load_yaml(path: Path) -> Mapping[str, object]:
    try:
        import yaml  # type: ignore
    except ModuleNotFoundError as exc:  # pragma: no cover - requires optional dependency
        msg = "PyYAML is required to load configuration files"
        raise RuntimeError(msg) from exc
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if not isinstance(data, Mapping):
        msg = "Configuration file must contain a mapping"
        raise ValueError(msg)
    return data


def _optional_env_name(raw: object, default: str) -> Optional[str]:
    if raw is None:
        return default
    name = str(raw)
    if not name.strip():
        return None
    return name


def load_config(path: Path | str) -> ClientConfig:
    """Load client configuration from a YAML file."""

    path = Path(path)
    data = _load_yaml(path)

    client = data.get("client")
    if not isinstance(client, Mapping):
        msg = "Configuration requires a 'client' mapping"
        raise ValueError(msg)

    base_url_raw = client.get("base_url")
    base_url = str(base_url_raw).strip() if base_url_raw is not None else None

    headers_raw = client.get("headers", {})
    if not isinstance(headers_raw, Mapping):
        msg = "'client.headers' must be a mapping"
        raise ValueError(msg)

    session_raw = client.get("session", {})
    if isinstance(session_raw, Mapping):
        session = build_session_config(
            timeout_for_response=float(session_raw.get("timeout_for_response", DEFAULT_TIMEOUT_FOR_RESPONSE)),
            timeout_resource=float(session_raw.get("timeout_resource", DEFAULT_TIMEOUT_RESOURCE)),
        )
    else:
        session = SessionConfig()

    return ClientConfig(
        base_url=base_url or None,
        base_url_env=_optional_env_name(client.get("base_url_env"), "RESTCLIENT_BASE_URL"),
        ca_bundle=client.get("ca_bundle"),
        ca_bundle_env=_optional_env_name(client.get("ca_bundle_env"), "RESTCLIENT_CA_BUNDLE"),
        default_headers=dict(headers_raw),
        max_workers=int(client.get("max_workers", 4)),
        session=session,
    )


__all__ = [
    "ClientConfig",
    "DEFAULT_TIMEOUT_FOR_RESPONSE",
    "DEFAULT_TIMEOUT_RESOURCE",
    "SessionConfig",
    "build_session_config",
    "load_config",
]
