from __future__ import annotations
"""Action that runs an external command inside each repository."""

import logging
import os
import subprocess
from collections.abc import Mapping
from pathlib import Path
from typing import Callable, Sequence

from git_fanout.domain.actions import RepositoryAction
from git_fanout.domain.errors import ActionError
from git_fanout.domain.ports import GitRepository


INVOKE_DIR_ENV = "GIT_FANOUT_INVOKE_DIR"
WORKING_DIR_ENV = "GIT_FANOUT_WORKING_DIR"


class CommandAction(RepositoryAction):
    """Run a system command with the repository work tree as current directory.

    The child process inherits standard input, output and error, and sees
    two extra environment variables:

    - `GIT_FANOUT_INVOKE_DIR`: directory git-fanout was invoked from.
    - `GIT_FANOUT_WORKING_DIR`: run working directory holding all repositories.

    Any non-zero exit code is reported as `ActionError`. No timeout is applied
    unless `timeout_seconds` is given.
    """

    def __init__(
        self,
        command: Sequence[str],
        *,
        invoke_dir: Path | None = None,
        env: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        if not command:
            raise ValueError("CommandAction requires a non-empty command")
        self._command = tuple(command)
        self._invoke_dir = (invoke_dir or Path.cwd()).absolute()
        self._env = env
        self._timeout_seconds = timeout_seconds
        self._runner = runner
        self._logger = logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return " ".join(self._command)

    @property
    def command(self) -> tuple[str, ...]:
        return self._command

    def apply(self, repository: GitRepository) -> None:
        work_tree = repository.work_tree.absolute()
        if not work_tree.is_dir():
            raise ActionError(f"Repository work tree does not exist: {work_tree}")
        env = dict(self._env if self._env is not None else os.environ)
        env[INVOKE_DIR_ENV] = str(self._invoke_dir)
        env[WORKING_DIR_ENV] = str(work_tree.parent)

        self._logger.info(
            "running command",
            extra={"event": "action.command.start", "command": self.name, "cwd": str(work_tree)},
        )
        try:
            completed = self._runner(
                list(self._command),
                cwd=str(work_tree),
                env=env,
                check=False,
                timeout=self._timeout_seconds,
            )
        except FileNotFoundError as error:
            raise ActionError(f"Command '{self._command[0]}' was not found") from error
        except OSError as error:
            raise ActionError(f"Command '{self._command[0]}' could not be started: {error}") from error
        except subprocess.TimeoutExpired as error:
            raise ActionError(
                f"Command timed out after {self._timeout_seconds}s in {work_tree}: {self.name}"
            ) from error

        if completed.returncode != 0:
            raise ActionError(
                f"Non-zero exit code ({completed.returncode}) from command '{self.name}' in {work_tree}"
            )
        self._logger.info(
            "command completed",
            extra={"event": "action.command.success", "command": self.name, "cwd": str(work_tree)},
        )
