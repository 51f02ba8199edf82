from __future__ import annotations

import re
from typing import Any, Callable
from urllib.parse import quote
from urllib.request import urlopen

from git_fanout.domain.entities import RepositoryURI
from git_fanout.domain.errors import SelectionError
from git_fanout.domain.ports import RepositorySelector

from .http_json import request_json


_NEXT_LINK_PATTERN = re.compile(r'<([^>]+)>\s*;\s*rel="next"')


class GitHubOrgPrefixSelector(RepositorySelector):
    """Select the HTTPS clone URLs of organization repositories by name prefix."""

    def __init__(
        self,
        organization: str,
        prefix: str,
        *,
        token: str | None = None,
        api_base_url: str = "https://api.github.com",
        page_size: int = 100,
        timeout_seconds: float = 30.0,
        urlopen_fn: Callable[..., Any] = urlopen,
    ) -> None:
        if not organization.strip():
            raise ValueError("GitHub organization must not be empty")
        self._organization = organization.strip()
        self._prefix = prefix
        self._token = token
        self._api_base_url = api_base_url.rstrip("/")
        self._page_size = page_size
        self._timeout_seconds = timeout_seconds
        self._urlopen_fn = urlopen_fn

    def get_uris(self) -> list[RepositoryURI]:
        encoded_org = quote(self._organization, safe="")
        next_url: str | None = f"{self._api_base_url}/orgs/{encoded_org}/repos?per_page={self._page_size}"
        uris: list[RepositoryURI] = []

        while next_url:
            payload, headers = request_json(
                next_url,
                headers=self._build_headers(),
                timeout_seconds=self._timeout_seconds,
                urlopen_fn=self._urlopen_fn,
                service="GitHub",
            )
            if not isinstance(payload, list):
                raise SelectionError("Unexpected GitHub API payload: repository listing must be a list")

            for item in payload:
                if not isinstance(item, dict):
                    continue
                name = item.get("name")
                clone_url = item.get("clone_url")
                if not isinstance(name, str) or not isinstance(clone_url, str) or not clone_url:
                    continue
                if name.startswith(self._prefix):
                    uris.append(clone_url)

            next_url = _next_link(headers)

        return uris

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers


def _next_link(headers: dict[str, str]) -> str | None:
    for key, value in headers.items():
        if key.lower() != "link":
            continue
        match = _NEXT_LINK_PATTERN.search(value)
        if match:
            return match.group(1)
    return None
