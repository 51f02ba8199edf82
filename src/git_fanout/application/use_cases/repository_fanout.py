from __future__ import annotations
"""Application use case fanning actions out over many repositories."""

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
import threading

from git_fanout.adapters.filesystem.local_filesystem import LocalWorkingDirectory
from git_fanout.adapters.git_client.shell_git_client import ShellGitClientAdapter
from git_fanout.application.action_applier import ActionApplier
from git_fanout.application.failure_policy import FailurePolicy
from git_fanout.application.materializer import RepositoryMaterializer
from git_fanout.application.progress import ProgressReporter
from git_fanout.application.run_configuration import RunConfiguration
from git_fanout.domain.entities import PHASE_ACTION, PHASE_FINALIZATION, RepositorySlot, RepositoryURI, RunOutcome
from git_fanout.domain.errors import (
    DirectoryNotEmptyError,
    FanoutError,
    RunError,
    RunInProgressError,
    SelectionError,
)
from git_fanout.domain.ports import GitClientPort, WorkingDirectoryPort


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RepositoryFanout:
    """Core orchestration use case.

    Pipeline, strictly sequential, never branching back:
    prepare working directory -> resolve URIs -> materialize all
    repositories -> apply primary action to all -> apply finalization action
    to all (when configured) -> cleanup (when requested).

    Responsibilities:
    - enforce the strict/lenient failure policy
    - account progress as materialize + action (+ finalization) steps
    - release every repository handle and, on request, the working
      directory, also when a phase raised
    - allow at most one in-flight run per instance
    """

    config: RunConfiguration
    git_client: GitClientPort = field(default_factory=ShellGitClientAdapter)
    working_directory: WorkingDirectoryPort = field(default_factory=LocalWorkingDirectory)
    _run_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def execute(self) -> RunOutcome:
        """Run the whole pipeline once.

        Returns:
            `RunOutcome`; in lenient mode its `failures` lists every
            per-repository error that was reported and skipped past.

        Raises:
            RunError: always for directory preparation and URI selection
                failures, and for any per-repository failure in strict mode.
            RunInProgressError: another run is executing on this instance.
        """
        if not self._run_lock.acquire(blocking=False):
            raise RunInProgressError("A run is already in progress for this orchestrator")
        try:
            return self._execute_locked()
        finally:
            self._run_lock.release()

    def execute_async(self) -> Future[RunOutcome]:
        """Run the pipeline on a background thread.

        The returned future resolves with the `RunOutcome` or fails with the
        run-level error. The run itself stays sequential.
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="git-fanout")
        try:
            return executor.submit(self.execute)
        finally:
            executor.shutdown(wait=False)

    def _execute_locked(self) -> RunOutcome:
        config = self.config
        status = config.status_sink
        working_dir = config.working_dir
        progress = ProgressReporter(status)
        policy = FailurePolicy(strict=config.strict_fail, status_sink=status)
        slots: dict[RepositoryURI, RepositorySlot] = {}

        # An occupied directory we refused to clear is never cleaned up.
        try:
            self.working_directory.prepare(working_dir, clear_existing=config.clear_existing)
        except (DirectoryNotEmptyError, OSError) as error:
            status.on_message(f"Error: {error}")
            raise RunError(f"Could not prepare working directory {working_dir}: {error}", error) from error
        status.on_message("Prepared temporary directory for repositories.")

        try:
            uris = self._resolve_uris()
            LOGGER.info(
                "repositories selected",
                extra={"event": "fanout.repositories.selected", "count": len(uris), "working_dir": str(working_dir)},
            )
            if not uris:
                progress.finish()
                status.on_message("No repositories were selected.")
                return self._outcome(progress, policy, 0)

            progress.start(len(uris) * config.phase_count)
            materializer = RepositoryMaterializer(
                git_client=self.git_client,
                credentials=config.credentials,
                status_sink=status,
                failure_policy=policy,
                progress=progress,
            )
            applier = ActionApplier(status_sink=status, failure_policy=policy, progress=progress)

            try:
                materializer.materialize(uris, working_dir, slots)
                applier.apply(config.action, slots, phase=PHASE_ACTION)
                if config.finalization_action is not None:
                    applier.apply(config.finalization_action, slots, phase=PHASE_FINALIZATION)
            except FanoutError:
                raise
            except Exception as error:  # noqa: BLE001
                raise RunError(f"Run failed unexpectedly: {error}", error) from error

            outcome = self._outcome(progress, policy, len(uris))
            LOGGER.info(
                "fan-out completed",
                extra={
                    "event": "fanout.completed",
                    "repo_count": outcome.repository_count,
                    "failed_repositories": len(outcome.failed_repositories),
                    "strict": config.strict_fail,
                },
            )
            return outcome
        finally:
            ActionApplier.release(slots)
            if config.cleanup:
                status.on_message("Removing all repositories.")
                for cleanup_error in self.working_directory.remove(working_dir):
                    status.on_message(f"Warning: {cleanup_error}")

    def _resolve_uris(self) -> list[RepositoryURI]:
        status = self.config.status_sink
        try:
            uris = self.config.selector.get_uris()
        except Exception as error:  # noqa: BLE001
            status.on_message(f"Error: could not select repositories: {error}")
            LOGGER.exception("repository selection failed", extra={"event": "fanout.selection.failed"})
            cause = error if isinstance(error, SelectionError) else SelectionError(str(error))
            if cause is not error:
                cause.__cause__ = error
            raise RunError(f"Could not select repositories: {error}", cause) from cause

        unique = list(dict.fromkeys(uris))
        if len(unique) != len(uris):
            LOGGER.info(
                "duplicate repository URIs collapsed",
                extra={"event": "fanout.repositories.deduplicated", "count": len(uris), "unique": len(unique)},
            )
        return unique

    def _outcome(self, progress: ProgressReporter, policy: FailurePolicy, repository_count: int) -> RunOutcome:
        return RunOutcome(
            working_dir=self.config.working_dir,
            repository_count=repository_count,
            steps_complete=progress.state.steps_complete,
            steps_total=progress.state.steps_total,
            failures=policy.failures,
        )
