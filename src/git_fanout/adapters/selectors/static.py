from __future__ import annotations
"""Selectors backed by in-memory lists, files and text streams."""

import sys
from pathlib import Path
from typing import Iterable, Sequence, TextIO

from git_fanout.domain.entities import RepositoryURI
from git_fanout.domain.errors import SelectionError
from git_fanout.domain.ports import RepositorySelector


class StaticRepositorySelector(RepositorySelector):
    """Select a fixed list of URIs."""

    def __init__(self, uris: Iterable[RepositoryURI]) -> None:
        self._uris = tuple(uris)

    def get_uris(self) -> list[RepositoryURI]:
        return list(self._uris)


class FileRepositorySelector(RepositorySelector):
    """Read URIs from one or more newline-delimited files.

    Blank lines are skipped and surrounding whitespace is stripped. Paths are
    validated at construction so a typo fails before any run starts.
    """

    def __init__(self, paths: Sequence[Path]) -> None:
        if not paths:
            raise ValueError("No file paths were given")
        for path in paths:
            if not path.exists():
                raise ValueError(f"File {path} does not exist")
            if not path.is_file():
                raise ValueError(f"File {path} is not a regular file")
        self._paths = tuple(paths)

    def get_uris(self) -> list[RepositoryURI]:
        uris: list[RepositoryURI] = []
        for path in self._paths:
            try:
                content = path.read_text(encoding="utf-8")
            except OSError as error:
                raise SelectionError(f"Could not read repository list {path}: {error}") from error
            uris.extend(_non_blank_lines(content.splitlines()))
        return uris


class StreamRepositorySelector(RepositorySelector):
    """Read URIs line by line from a text stream, standard input by default."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def get_uris(self) -> list[RepositoryURI]:
        stream = self._stream or sys.stdin
        try:
            return list(_non_blank_lines(stream))
        except (OSError, ValueError) as error:
            raise SelectionError(f"Could not read repository list from stream: {error}") from error


def _non_blank_lines(lines: Iterable[str]) -> Iterable[str]:
    for line in lines:
        stripped = line.strip()
        if stripped:
            yield stripped
