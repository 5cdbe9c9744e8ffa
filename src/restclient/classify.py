"""Decide whether a transport outcome is a success or a failure.

Every calling convention routes its outcome through :func:`classify`; they
differ only in the :class:`SuccessPolicy` they pass.

``SuccessPolicy.RANGE`` (blocking and stream calls): any 2xx status succeeds,
and a 204 never carries a body.

``SuccessPolicy.EXACT_200`` (callback calls): only status 200 succeeds, and
only when a body was received. Callers of the callback API rely on this to
tell "200 with payload" apart from "201/202 accepted", so the two policies
are kept separate on purpose.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

import httpx

from .errors import ApiError, stringify_body
from .transport import TransportOutcome
from .types import ApiResponse, Result, Verb

NO_CONTENT = 204


class SuccessPolicy(Enum):
    RANGE = "range"
    EXACT_200 = "exact_200"


@dataclass(frozen=True, slots=True)
class RequestContext:
    """What was attempted, kept so errors can describe the request."""

    verb: Verb
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, str] = field(default_factory=dict)
    sender: Any = None

    def error(self, response_code: int, message: str, **kwargs: Any) -> ApiError:
        return ApiError(
            sender=self.sender,
            url=self.path,
            response_code=response_code,
            message=message,
            request_type=self.verb,
            headers=self.headers,
            params=self.params,
            **kwargs,
        )


def build_failure(context: RequestContext) -> ApiError:
    """Error for a URL that could not be built; nothing was sent."""

    return context.error(0, "unable to build url")


def classify(
    outcome: TransportOutcome,
    context: RequestContext,
    policy: SuccessPolicy = SuccessPolicy.RANGE,
) -> Result[ApiResponse]:
    data = outcome.content

    if outcome.error is not None:
        return Result.failure(
            context.error(0, f"error occurred: {stringify_body(data)}", error=outcome.error, data=data)
        )

    response = outcome.response
    if not isinstance(response, httpx.Response):
        return Result.failure(context.error(0, f"no response: {stringify_body(data)}", data=data))

    code = response.status_code
    headers = dict(response.headers.items())

    if policy is SuccessPolicy.EXACT_200:
        if code != 200:
            return Result.failure(
                context.error(code, f"incorrect request: {stringify_body(data)}", data=data)
            )
        if data is None:
            return Result.failure(context.error(code, "no response body"))
        return Result.success(ApiResponse(data=data, headers=headers, code=code))

    if code < 200 or code >= 300:
        return Result.failure(context.error(code, f"bad response: {stringify_body(data)}", data=data))
    if code == NO_CONTENT:
        return Result.success(ApiResponse(data=None, headers=headers, code=code))
    return Result.success(ApiResponse(data=data, headers=headers, code=code))


__all__ = ["RequestContext", "SuccessPolicy", "build_failure", "classify"]
