"""Value types shared by every calling convention of the client."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, Mapping, Optional, Protocol, TypeVar

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .errors import ApiError

T = TypeVar("T")

Headers = Mapping[str, str]
QueryParams = Mapping[str, str]


class Verb(str, Enum):
    """HTTP methods supported by the client."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"

    @property
    def carries_body(self) -> bool:
        return self in _BODY_VERBS

    @classmethod
    def coerce(cls, value: "Verb | str") -> "Verb":
        if isinstance(value, Verb):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            msg = f"Unsupported HTTP verb: {value!r}"
            raise ValueError(msg) from None

    def __str__(self) -> str:
        return self.value


_BODY_VERBS = frozenset({Verb.POST, Verb.PUT, Verb.DELETE})


@dataclass(frozen=True, slots=True)
class ApiResponse:
    """Successful outcome of a request.

    ``data`` is ``None`` for 204 responses and for responses that carried no
    body bytes at all.
    """

    data: Optional[bytes]
    headers: Mapping[str, str]
    code: int

    def header_value(self, key: str) -> Optional[str]:
        """Case-insensitive header lookup."""

        wanted = key.lower()
        for name, value in self.headers.items():
            if str(name).lower() == wanted:
                return value
        return None

    @property
    def text(self) -> str:
        if not self.data:
            return ""
        return self.data.decode("utf-8", errors="replace")

    def json(self) -> Any:
        if not self.data:
            return None
        return json.loads(self.data)


class Endpoint(Protocol):
    """Anything carrying its own verb and path can be dispatched."""

    @property
    def verb(self) -> Verb:
        ...

    @property
    def path(self) -> str:
        ...


@dataclass(frozen=True, slots=True)
class ApiEndpoint:
    """Plain endpoint descriptor."""

    verb: Verb
    path: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "verb", Verb.coerce(self.verb))
        if not self.path:
            msg = "Endpoint requires a path"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Holds exactly one of a success value or an :class:`ApiError`."""

    value: Optional[T] = None
    error: Optional["ApiError"] = field(default=None)

    def __post_init__(self) -> None:
        if (self.value is None) == (self.error is None):
            msg = "Result requires exactly one of value or error"
            raise ValueError(msg)

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: "ApiError") -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the carried error."""

        if self.error is not None:
            raise self.error
        assert self.value is not None
        return self.value


__all__ = [
    "ApiEndpoint",
    "ApiResponse",
    "Endpoint",
    "Headers",
    "QueryParams",
    "Result",
    "Verb",
]
