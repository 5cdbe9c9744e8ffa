"""CLI helper that issues one request and prints the outcome."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Dict, List

from restclient.client import RestClient
from restclient.config import ClientConfig, load_config
from restclient.logging_setup import configure_logging
from restclient.types import Verb

LOGGER = logging.getLogger(__name__)


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send a single REST request")
    parser.add_argument("--config", help="Path to a client configuration file")
    parser.add_argument("--method", default="GET", choices=[verb.value for verb in Verb], help="HTTP method")
    parser.add_argument("--path", required=True, help="Absolute URL, or path relative to the configured base URL")
    parser.add_argument("--param", action="append", default=[], help="Query parameter as key=value (repeatable)")
    parser.add_argument("--header", action="append", default=[], help="Header as 'Name: value' (repeatable)")
    parser.add_argument("--data", help="Request body sent as UTF-8 text")
    parser.add_argument("--verbose", action="store_true", help="Log a curl transcript for the request")
    return parser.parse_args(argv)


def _split_pairs(raw: List[str], separator: str) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    for item in raw:
        if separator not in item:
            msg = f"Expected '{separator}' in {item!r}"
            raise SystemExit(msg)
        key, value = item.split(separator, 1)
        pairs[key.strip()] = value.strip()
    return pairs


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(level=logging.WARNING, api_level=logging.DEBUG if args.verbose else logging.WARNING)
    config = load_config(args.config) if args.config else ClientConfig()
    params = _split_pairs(args.param, "=")
    headers = _split_pairs(args.header, ":")
    body = args.data.encode("utf-8") if args.data is not None else None

    with RestClient.from_config(config) as client:
        result = client.blocking.request(args.method, args.path, body, headers=headers, params=params)

    if result.error is not None:
        LOGGER.error("Request failed: %s", result.error)
        print(result.error.body_text, file=sys.stderr)
        return 1
    response = result.unwrap()
    print(f"HTTP {response.code}")
    for key, value in response.headers.items():
        print(f"{key}: {value}")
    print()
    print(response.text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
