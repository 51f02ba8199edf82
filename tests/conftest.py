from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable

import pytest

from git_fanout.domain.entities import CloneCommand
from git_fanout.domain.errors import CloneError
from git_fanout.domain.ports import GitClientPort, GitRepository, StatusSink


class RecordingStatusSink(StatusSink):
    def __init__(self) -> None:
        self.progress: list[float] = []
        self.messages: list[str] = []

    def on_progress(self, fraction: float) -> None:
        self.progress.append(fraction)

    def on_message(self, text: str) -> None:
        self.messages.append(text)


class FakeRepository(GitRepository):
    def __init__(self, uri: str, work_tree: Path) -> None:
        super().__init__(uri, work_tree)
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1
        super().close()

    def run_git(self, *args: str) -> str:
        return ""


class FakeGitClient(GitClientPort):
    """Creates the clone directory with a marker file instead of running git."""

    def __init__(self, unreachable: set[str] | None = None) -> None:
        self.unreachable = unreachable or set()
        self.commands: list[CloneCommand] = []
        self.repositories: list[FakeRepository] = []

    def clone(self, command: CloneCommand) -> GitRepository:
        self.commands.append(command)
        if command.uri in self.unreachable:
            raise CloneError(f"Repository not found: {command.uri}")
        command.directory.mkdir(parents=True)
        (command.directory / "README.md").write_text(command.uri, encoding="utf-8")
        repository = FakeRepository(command.uri, command.directory)
        self.repositories.append(repository)
        return repository


@pytest.fixture
def status_sink() -> RecordingStatusSink:
    return RecordingStatusSink()


def _git(cwd: Path, *args: str) -> None:
    subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )


@pytest.fixture
def make_remote(tmp_path: Path) -> Callable[[str], str]:
    """Create a bare repository with one commit and return its file:// URI."""
    remotes_root = tmp_path / "remotes"
    remotes_root.mkdir()

    def _make(name: str) -> str:
        source = remotes_root / f"{name}-src"
        source.mkdir()
        _git(source, "init")
        _git(source, "config", "user.name", "Test")
        _git(source, "config", "user.email", "test@example.com")
        (source / "README.md").write_text(f"# {name}\n", encoding="utf-8")
        _git(source, "add", "README.md")
        _git(source, "commit", "-m", "init")
        bare = remotes_root / f"{name}.git"
        _git(remotes_root, "clone", "--bare", str(source), str(bare))
        return bare.as_uri()

    return _make
