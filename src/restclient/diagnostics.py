"""Request transcripts and outcome logging.

Nothing in here influences whether a call succeeds; every failure while
rendering or emitting a log record stays inside this module.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Mapping, Optional

from .errors import ApiError
from .types import ApiResponse, Verb

LOGGER = logging.getLogger(__name__)
API_CATEGORY = "restclient.api"
API_LOGGER = logging.getLogger(API_CATEGORY)


class Phase(Enum):
    BEGIN = "beginning"
    SUCCESS = "successful"
    FAILURE = "unsuccessful"


_LEVELS = {
    Phase.BEGIN: logging.DEBUG,
    Phase.SUCCESS: logging.INFO,
    Phase.FAILURE: logging.WARNING,
}


def _ansi_c_quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n").replace("\r", "\\r")
    return f"$'{escaped}'"


def render_command(verb: Verb, url: str, headers: Mapping[str, str], body: Optional[bytes]) -> str:
    """Render a request as a curl command that can be pasted into a shell."""

    lines = [f'curl -vX "{verb.value}" "{url}"']
    for key, value in headers.items():
        lines.append(f"-H '{key}: {value}'")
    payload = ""
    if body:
        try:
            payload = body.decode("utf-8")
        except UnicodeDecodeError:
            payload = ""
    lines.append(f"-d {_ansi_c_quote(payload)}")
    return " \\\n     ".join(lines)


def log_event(phase: Phase, verb: Verb, path: str, detail: str = "") -> None:
    """Emit one diagnostic record for ``phase``; never raises."""

    try:
        level = _LEVELS[phase]
        if not API_LOGGER.isEnabledFor(level):
            return
        API_LOGGER.log(
            level,
            "%s %s %s\n%s",
            phase.value,
            verb.value,
            path,
            detail,
            extra={"phase": phase.name.lower(), "method": verb.value, "path": path},
        )
    except Exception:  # logging is best effort
        LOGGER.debug("Diagnostic logging failed", exc_info=True)


def log_begin(verb: Verb, path: str, url: str, headers: Mapping[str, str], body: Optional[bytes]) -> None:
    try:
        detail = render_command(verb, url, headers, body)
    except Exception:  # logging is best effort
        detail = ""
    log_event(Phase.BEGIN, verb, path, detail)


def log_success(verb: Verb, path: str, response: ApiResponse) -> None:
    try:
        detail = f"response data: {response.text}\nheaders: {dict(response.headers)}"
    except Exception:  # logging is best effort
        detail = ""
    log_event(Phase.SUCCESS, verb, path, detail)


def log_failure(verb: Verb, path: str, error: ApiError) -> None:
    try:
        detail = f"error: {error.to_string()}"
    except Exception:  # logging is best effort
        detail = ""
    log_event(Phase.FAILURE, verb, path, detail)


__all__ = ["API_CATEGORY", "Phase", "log_begin", "log_event", "log_failure", "log_success", "render_command"]
