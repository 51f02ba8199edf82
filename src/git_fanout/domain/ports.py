from __future__ import annotations
"""Hexagonal architecture port interfaces.

The fan-out engine depends only on these abstractions. Adapters provide
concrete implementations for selectors, credentials, actions, status
reporting, git and the local filesystem.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from .entities import CloneCommand, RepositoryURI
from .errors import CleanupError


class GitRepository(ABC):
    """Open handle to a materialized local repository."""

    def __init__(self, uri: RepositoryURI, work_tree: Path) -> None:
        self.uri = uri
        self.work_tree = work_tree
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the handle. Calling it again has no effect."""
        self._closed = True

    @abstractmethod
    def run_git(self, *args: str) -> str:
        """Run a git subcommand inside the work tree and return its stdout."""
        raise NotImplementedError

    def head_revision(self) -> str:
        return self.run_git("rev-parse", "HEAD").strip()


class RepositorySelector(ABC):
    """Produces the list of repository URIs to operate on."""

    @abstractmethod
    def get_uris(self) -> list[RepositoryURI]:
        """Return repository URIs; raise `SelectionError` on failure."""
        raise NotImplementedError


class GitCredentials(ABC):
    """Attaches transport authentication to a clone command."""

    @abstractmethod
    def attach(self, command: CloneCommand) -> None:
        """Mutate `command` in place; raise `CredentialError` on failure."""
        raise NotImplementedError


class StatusSink(ABC):
    """Receives progress fractions and human-readable messages during a run."""

    @abstractmethod
    def on_progress(self, fraction: float) -> None:
        """Called with a value between 0.0 and 1.0 after every completed step."""
        raise NotImplementedError

    @abstractmethod
    def on_message(self, text: str) -> None:
        raise NotImplementedError


class GitClientPort(ABC):
    """Local git operations used by the materializer."""

    @abstractmethod
    def clone(self, command: CloneCommand) -> GitRepository:
        """Clone `command.uri` into `command.directory`; raise `CloneError`."""
        raise NotImplementedError


class WorkingDirectoryPort(ABC):
    """Owns the single root directory of a run."""

    @abstractmethod
    def prepare(self, path: Path, *, clear_existing: bool = True) -> None:
        """Ensure `path` exists and is empty; raise `DirectoryNotEmptyError`."""
        raise NotImplementedError

    @abstractmethod
    def remove(self, path: Path) -> list[CleanupError]:
        """Best-effort recursive deletion; return errors instead of raising."""
        raise NotImplementedError
