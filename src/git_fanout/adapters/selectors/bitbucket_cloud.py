from __future__ import annotations

import base64
from typing import Any, Callable
from urllib.parse import quote
from urllib.request import urlopen

from git_fanout.domain.entities import RepositoryURI
from git_fanout.domain.errors import SelectionError
from git_fanout.domain.ports import RepositorySelector

from .http_json import request_json


class BitbucketWorkspacePrefixSelector(RepositorySelector):
    """Select clone URLs of Bitbucket Cloud workspace repositories by slug prefix."""

    def __init__(
        self,
        workspace: str,
        prefix: str = "",
        *,
        api_base_url: str = "https://api.bitbucket.org/2.0",
        token: str | None = None,
        username: str | None = None,
        app_password: str | None = None,
        prefer_ssh: bool = False,
        timeout_seconds: float = 30.0,
        urlopen_fn: Callable[..., Any] = urlopen,
    ) -> None:
        if not workspace.strip():
            raise ValueError("Bitbucket workspace must not be empty")
        self._workspace = workspace.strip()
        self._prefix = prefix
        self._api_base_url = api_base_url.rstrip("/")
        self._token = token
        self._username = username
        self._app_password = app_password
        self._prefer_ssh = prefer_ssh
        self._timeout_seconds = timeout_seconds
        self._urlopen_fn = urlopen_fn

    def get_uris(self) -> list[RepositoryURI]:
        encoded_workspace = quote(self._workspace, safe="")
        next_url: str | None = f"{self._api_base_url}/repositories/{encoded_workspace}"
        uris: list[RepositoryURI] = []

        while next_url:
            payload, _ = request_json(
                next_url,
                headers=self._build_headers(),
                timeout_seconds=self._timeout_seconds,
                urlopen_fn=self._urlopen_fn,
                service="Bitbucket",
            )
            if not isinstance(payload, dict):
                raise SelectionError("Unexpected Bitbucket API payload: top-level object must be a JSON object")

            items = payload.get("values", [])
            if not isinstance(items, list):
                raise SelectionError("Unexpected Bitbucket API payload: 'values' must be a list")

            for item in items:
                if not isinstance(item, dict):
                    continue
                slug = item.get("slug")
                if not isinstance(slug, str) or not slug.strip().startswith(self._prefix):
                    continue
                clone_url = self._extract_clone_url(item)
                if clone_url:
                    uris.append(clone_url)

            next_value = payload.get("next")
            next_url = next_value if isinstance(next_value, str) and next_value else None

        return uris

    def _build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Accept": "application/json"}

        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
            return headers

        if self._username and self._app_password:
            credentials = f"{self._username}:{self._app_password}".encode("utf-8")
            encoded = base64.b64encode(credentials).decode("ascii")
            headers["Authorization"] = f"Basic {encoded}"

        return headers

    def _extract_clone_url(self, payload: dict[str, Any]) -> str | None:
        links = payload.get("links")
        if not isinstance(links, dict):
            return None

        clone_links = links.get("clone")
        if not isinstance(clone_links, list):
            return None

        by_name: dict[str, str] = {}
        for link in clone_links:
            if not isinstance(link, dict):
                continue
            href = link.get("href")
            name = link.get("name")
            if isinstance(name, str) and isinstance(href, str) and href.strip():
                by_name[name] = href.strip()

        preferred = ("ssh", "https") if self._prefer_ssh else ("https", "ssh")
        for name in preferred:
            if name in by_name:
                return by_name[name]
        return None
