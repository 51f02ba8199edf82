from __future__ import annotations
"""Core domain entities shared by the fan-out engine and its adapters.

These data models are framework-agnostic and live only for the duration of
one run; nothing here is persisted.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ports import GitRepository


RepositoryURI = str

PHASE_CREDENTIALS = "credentials"
PHASE_CLONE = "clone"
PHASE_ACTION = "action"
PHASE_FINALIZATION = "finalization"


@dataclass(slots=True)
class CloneCommand:
    """Mutable description of one `git clone` invocation.

    Credential providers attach authentication by adding environment
    variables or git configuration entries before the clone runs.

    Attributes:
        uri: Remote repository location to clone from.
        directory: Local directory the repository is cloned into.
        env: Extra environment variables for the git process.
        config: Git configuration entries scoped to this clone only.
    """

    uri: RepositoryURI
    directory: Path
    env: dict[str, str] = field(default_factory=dict)
    config: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class RepositorySlot:
    """Per-repository state for one run.

    Attributes:
        uri: Remote repository location.
        ordinal: 1-based position in the run, names the local subdirectory.
        local_path: `<working_dir>/<ordinal>`.
        repository: Open handle when materialized, otherwise `None`.
        error: Materialization failure when the clone did not succeed.
    """

    uri: RepositoryURI
    ordinal: int
    local_path: Path
    repository: GitRepository | None = None
    error: BaseException | None = None


@dataclass(slots=True)
class ProgressState:
    """Step counter for one run.

    `steps_total` is fixed once the repository count is known and equals
    repository count times the number of phases (materialize, action and
    optionally finalization).
    """

    steps_complete: int = 0
    steps_total: int = 0

    def complete_step(self) -> float:
        if self.steps_complete < self.steps_total:
            self.steps_complete += 1
        return self.fraction

    @property
    def fraction(self) -> float:
        if self.steps_total <= 0:
            return 1.0
        return self.steps_complete / self.steps_total


@dataclass(slots=True, frozen=True)
class RepositoryFailure:
    """A per-repository error recorded in lenient mode."""

    uri: RepositoryURI
    phase: str
    error: BaseException

    @property
    def message(self) -> str:
        return f"{self.phase} failed for {self.uri}: {self.error}"


@dataclass(slots=True, frozen=True)
class RunOutcome:
    """Result of a run that finished without a fatal error.

    In lenient mode `failures` lists every per-repository error that was
    reported and skipped past; strict runs never return with failures.
    """

    working_dir: Path
    repository_count: int
    steps_complete: int
    steps_total: int
    failures: tuple[RepositoryFailure, ...] = ()

    @property
    def failed_repositories(self) -> tuple[RepositoryURI, ...]:
        return tuple(dict.fromkeys(failure.uri for failure in self.failures))
