"""Logging helpers for the REST client command line tools."""
from __future__ import annotations

import logging
from typing import Iterable

from .diagnostics import API_CATEGORY


def configure_logging(
    level: int = logging.INFO,
    *,
    api_level: int | None = None,
    modules: Iterable[str] | None = None,
) -> None:
    """Configure plain text logging for scripts.

    ``api_level`` controls the request diagnostics category separately; pass
    ``logging.DEBUG`` to see a curl transcript for every request.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    logging.getLogger(API_CATEGORY).setLevel(level if api_level is None else api_level)
    for module in modules or ():
        logging.getLogger(module).setLevel(level)


__all__ = ["API_CATEGORY", "configure_logging"]
