from __future__ import annotations

import io
import json
from pathlib import Path
from urllib.error import HTTPError

import pytest

from git_fanout.adapters.selectors import (
    BitbucketWorkspacePrefixSelector,
    FileRepositorySelector,
    GitHubOrgPrefixSelector,
    StaticRepositorySelector,
    StreamRepositorySelector,
)
from git_fanout.cli.selector_expression import parse_selector_expression
from git_fanout.domain.errors import SelectionError


class FakeResponse:
    def __init__(self, payload, headers: dict[str, str] | None = None) -> None:
        self._content = json.dumps(payload).encode("utf-8")
        self.headers = headers or {}

    def read(self) -> bytes:
        return self._content

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc_info) -> None:
        return None


class FakeUrlopen:
    def __init__(self, pages: dict[str, FakeResponse]) -> None:
        self.pages = pages
        self.requests = []

    def __call__(self, request, timeout):
        self.requests.append(request)
        return self.pages[request.full_url]


def test_static_selector_returns_copy() -> None:
    selector = StaticRepositorySelector(["a", "b"])

    uris = selector.get_uris()
    uris.append("c")

    assert selector.get_uris() == ["a", "b"]


def test_file_selector_reads_all_files_skipping_blank_lines(tmp_path: Path) -> None:
    first = tmp_path / "first.txt"
    second = tmp_path / "second.txt"
    first.write_text("https://example.test/a.git\n\n   \n", encoding="utf-8")
    second.write_text("  https://example.test/b.git  \n", encoding="utf-8")

    uris = FileRepositorySelector([first, second]).get_uris()

    assert uris == ["https://example.test/a.git", "https://example.test/b.git"]


def test_file_selector_validates_paths_up_front(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="does not exist"):
        FileRepositorySelector([tmp_path / "missing.txt"])
    with pytest.raises(ValueError, match="not a regular file"):
        FileRepositorySelector([tmp_path])


def test_stream_selector_reads_lines() -> None:
    stream = io.StringIO("https://example.test/a.git\n\nhttps://example.test/b.git\n")

    assert StreamRepositorySelector(stream).get_uris() == [
        "https://example.test/a.git",
        "https://example.test/b.git",
    ]


def test_github_selector_filters_by_prefix_and_follows_pagination() -> None:
    first_url = "https://api.github.com/orgs/acme/repos?per_page=100"
    second_url = "https://api.github.com/organizations/1/repos?per_page=100&page=2"
    urlopen = FakeUrlopen(
        {
            first_url: FakeResponse(
                [
                    {"name": "svc-billing", "clone_url": "https://github.com/acme/svc-billing.git"},
                    {"name": "docs", "clone_url": "https://github.com/acme/docs.git"},
                ],
                headers={"Link": f'<{second_url}>; rel="next", <{second_url}>; rel="last"'},
            ),
            second_url: FakeResponse(
                [{"name": "svc-auth", "clone_url": "https://github.com/acme/svc-auth.git"}],
            ),
        }
    )

    selector = GitHubOrgPrefixSelector("acme", "svc-", token="ghp_token", urlopen_fn=urlopen)

    assert selector.get_uris() == [
        "https://github.com/acme/svc-billing.git",
        "https://github.com/acme/svc-auth.git",
    ]
    assert urlopen.requests[0].get_header("Authorization") == "Bearer ghp_token"


def test_github_selector_http_error_is_selection_error() -> None:
    def failing_urlopen(request, timeout):
        raise HTTPError(request.full_url, 404, "Not Found", {}, None)

    selector = GitHubOrgPrefixSelector("acme", "svc-", urlopen_fn=failing_urlopen)

    with pytest.raises(SelectionError, match="HTTP 404"):
        selector.get_uris()


def test_bitbucket_selector_prefers_https_and_filters_by_prefix() -> None:
    first_url = "https://api.bitbucket.org/2.0/repositories/team"
    second_url = "https://api.bitbucket.org/2.0/repositories/team?page=2"
    urlopen = FakeUrlopen(
        {
            first_url: FakeResponse(
                {
                    "values": [
                        {
                            "slug": "svc-orders",
                            "links": {
                                "clone": [
                                    {"name": "ssh", "href": "git@bitbucket.org:team/svc-orders.git"},
                                    {"name": "https", "href": "https://bitbucket.org/team/svc-orders.git"},
                                ]
                            },
                        },
                        {"slug": "infra", "links": {"clone": [{"name": "https", "href": "https://bitbucket.org/team/infra.git"}]}},
                    ],
                    "next": second_url,
                }
            ),
            second_url: FakeResponse(
                {"values": [{"slug": "svc-users", "links": {"clone": [{"name": "ssh", "href": "git@bitbucket.org:team/svc-users.git"}]}}]}
            ),
        }
    )

    selector = BitbucketWorkspacePrefixSelector("team", "svc-", urlopen_fn=urlopen)

    assert selector.get_uris() == [
        "https://bitbucket.org/team/svc-orders.git",
        "git@bitbucket.org:team/svc-users.git",
    ]


def test_selector_expression_list_and_stdin() -> None:
    selector = parse_selector_expression("list:https://example.test/a.git, https://example.test/b.git")
    assert selector.get_uris() == ["https://example.test/a.git", "https://example.test/b.git"]

    stdin_selector = parse_selector_expression("stdin", stdin=io.StringIO("https://example.test/c.git\n"))
    assert stdin_selector.get_uris() == ["https://example.test/c.git"]


def test_selector_expression_file_paths(tmp_path: Path) -> None:
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    first.write_text("one\n", encoding="utf-8")
    second.write_text("two\n", encoding="utf-8")

    selector = parse_selector_expression(f"file:{first};{second}")

    assert selector.get_uris() == ["one", "two"]


def test_selector_expression_github_requires_token() -> None:
    with pytest.raises(ValueError, match="access token"):
        parse_selector_expression("org-repo-prefix:acme/svc-")

    selector = parse_selector_expression("org-repo-prefix:acme/svc-", access_token="token")
    assert isinstance(selector, GitHubOrgPrefixSelector)


@pytest.mark.parametrize(
    "expression",
    ["", "unknown:thing", "org-repo-prefix:no-slash", "file:", "bitbucket-prefix"],
)
def test_selector_expression_rejects_invalid_input(expression: str) -> None:
    with pytest.raises(ValueError):
        parse_selector_expression(expression, access_token="token")
