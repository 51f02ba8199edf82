from __future__ import annotations
"""Minimal JSON-over-HTTP helper shared by hosting-platform selectors."""

import json
from typing import Any, Callable
from urllib.error import HTTPError, URLError
from urllib.request import Request

from git_fanout.domain.errors import SelectionError


def request_json(
    url: str,
    *,
    headers: dict[str, str],
    timeout_seconds: float,
    urlopen_fn: Callable[..., Any],
    service: str,
) -> tuple[Any, dict[str, str]]:
    """Fetch `url` and return the decoded payload with the response headers."""
    request = Request(url, headers=headers)
    try:
        with urlopen_fn(request, timeout=timeout_seconds) as response:
            content = response.read()
            response_headers = dict(response.headers.items()) if response.headers is not None else {}
    except HTTPError as error:
        raise SelectionError(f"{service} API request failed with HTTP {error.code} for URL: {url}") from error
    except URLError as error:
        raise SelectionError(f"{service} API request failed for URL: {url}: {error.reason}") from error

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as error:
        raise SelectionError(f"Invalid JSON received from {service} API for URL: {url}") from error

    return parsed, response_headers
