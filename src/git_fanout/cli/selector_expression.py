from __future__ import annotations
"""Parse `type[:content]` selector expressions from the command line.

Supported forms:
- `org-repo-prefix:<organization>/<prefix>` (GitHub, requires an access token)
- `bitbucket-prefix:<workspace>/<prefix>` (Bitbucket Cloud)
- `file:<path>[;<path>...]`
- `list:<uri>[,<uri>...]`
- `stdin`
"""

import re
from collections.abc import Mapping
from pathlib import Path
from typing import TextIO

from git_fanout.adapters.selectors import (
    BitbucketWorkspacePrefixSelector,
    FileRepositorySelector,
    GitHubOrgPrefixSelector,
    StaticRepositorySelector,
    StreamRepositorySelector,
)
from git_fanout.domain.ports import RepositorySelector


_EXPRESSION_PATTERN = re.compile(r"^([\w-]+)(?::(.*))?$", re.DOTALL)
_OWNER_PREFIX_PATTERN = re.compile(r"^([^/]+)/(.*)$")

SELECTOR_TYPES = ("org-repo-prefix", "bitbucket-prefix", "file", "list", "stdin")


def parse_selector_expression(
    expression: str,
    *,
    access_token: str | None = None,
    env: Mapping[str, str] | None = None,
    stdin: TextIO | None = None,
) -> RepositorySelector:
    match = _EXPRESSION_PATTERN.match(expression.strip())
    if not match:
        raise ValueError('Invalid selector expression. Should be "selector-type[:expression]"')

    kind = match.group(1).lower()
    content = (match.group(2) or "").strip() or None
    env = env or {}

    if kind == "org-repo-prefix":
        if access_token is None:
            raise ValueError("Missing required access token for the GitHub org-repo-prefix selector")
        organization, prefix = _owner_and_prefix(kind, content)
        return GitHubOrgPrefixSelector(organization, prefix, token=access_token)

    if kind == "bitbucket-prefix":
        workspace, prefix = _owner_and_prefix(kind, content)
        return BitbucketWorkspacePrefixSelector(
            workspace,
            prefix,
            token=access_token or env.get("BITBUCKET_TOKEN") or None,
            username=env.get("BITBUCKET_USERNAME") or None,
            app_password=env.get("BITBUCKET_APP_PASSWORD") or None,
        )

    if kind == "file":
        if content is None:
            raise ValueError("No file paths were given")
        paths = [Path(item.strip()).expanduser() for item in content.split(";") if item.strip()]
        return FileRepositorySelector(paths)

    if kind == "list":
        if content is None:
            raise ValueError("No repository URIs were given")
        return StaticRepositorySelector(item.strip() for item in content.split(",") if item.strip())

    if kind == "stdin":
        return StreamRepositorySelector(stdin)

    raise ValueError(f"Unsupported selector type: {kind}. Allowed values: {', '.join(SELECTOR_TYPES)}")


def _owner_and_prefix(kind: str, content: str | None) -> tuple[str, str]:
    if content is None:
        raise ValueError(f"Missing required selector expression for {kind}")
    match = _OWNER_PREFIX_PATTERN.match(content)
    if not match:
        raise ValueError(f'Invalid content for {kind} selector. Should be "owner/prefix"')
    return match.group(1), match.group(2)
