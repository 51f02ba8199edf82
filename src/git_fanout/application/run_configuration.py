from __future__ import annotations
"""Immutable configuration for one fan-out run."""

from dataclasses import dataclass, field
from pathlib import Path

from git_fanout.adapters.credentials import NoCredentials
from git_fanout.adapters.status import LoggingStatusSink
from git_fanout.domain.actions import RepositoryAction
from git_fanout.domain.errors import ConfigurationError
from git_fanout.domain.ports import GitCredentials, RepositorySelector, StatusSink


DEFAULT_WORKING_DIR = Path(".", ".git_fanout_tmp")


@dataclass(slots=True, frozen=True)
class RunConfiguration:
    """Everything a `RepositoryFanout` run needs, validated on construction.

    Attributes:
        selector: Resolves the repository URIs. Mandatory.
        action: Primary action applied to every repository. Mandatory.
        finalization_action: Optional second pass run after the primary
            action has been applied to all repositories.
        credentials: Attached to every clone command.
        status_sink: Receives progress fractions and messages.
        working_dir: Root directory holding one subdirectory per repository.
        strict_fail: Abort the run on the first error when `True`; report
            and continue when `False`.
        cleanup: Remove `working_dir` at the end of the run, also on error.
        clear_existing: Delete leftovers of a previous run found in
            `working_dir`; when `False` an occupied directory is an error.
    """

    selector: RepositorySelector
    action: RepositoryAction
    finalization_action: RepositoryAction | None = None
    credentials: GitCredentials = field(default_factory=NoCredentials)
    status_sink: StatusSink = field(default_factory=LoggingStatusSink)
    working_dir: Path = DEFAULT_WORKING_DIR
    strict_fail: bool = True
    cleanup: bool = False
    clear_existing: bool = True

    def __post_init__(self) -> None:
        if self.selector is None:
            raise ConfigurationError("A repository selector is required")
        if self.action is None:
            raise ConfigurationError("A repository action is required")
        if self.credentials is None:
            raise ConfigurationError("Credentials must not be None; use NoCredentials")
        if self.status_sink is None:
            raise ConfigurationError("Status sink must not be None; use NullStatusSink")
        object.__setattr__(self, "working_dir", Path(self.working_dir).absolute())

    @property
    def phase_count(self) -> int:
        """Materialize plus one pass per configured action."""
        return 2 if self.finalization_action is None else 3
