from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping
from pathlib import Path
from typing import Callable, Sequence

from git_fanout.domain.entities import CloneCommand, RepositoryURI
from git_fanout.domain.errors import CloneError, FanoutError
from git_fanout.domain.ports import GitClientPort, GitRepository


Runner = Callable[..., subprocess.CompletedProcess[str]]


class ShellGitRepository(GitRepository):
    """Repository handle backed by the `git` executable."""

    def __init__(
        self,
        uri: RepositoryURI,
        work_tree: Path,
        *,
        git_executable: str = "git",
        runner: Runner = subprocess.run,
    ) -> None:
        super().__init__(uri, work_tree)
        self._git_executable = git_executable
        self._runner = runner

    def run_git(self, *args: str) -> str:
        if self.closed:
            raise FanoutError(f"Repository handle for {self.uri} is closed")

        command = [self._git_executable, *args]
        try:
            completed = self._runner(
                command,
                cwd=str(self.work_tree),
                check=True,
                text=True,
                capture_output=True,
            )
        except FileNotFoundError as error:
            raise FanoutError(f"Git executable '{self._git_executable}' was not found in PATH") from error
        except subprocess.CalledProcessError as error:
            details = (error.stderr or "").strip() or (error.stdout or "").strip() or "No command output"
            raise FanoutError(f"Git command failed ({error.returncode}): {' '.join(command)}\n{details}") from error
        return completed.stdout or ""


class ShellGitClientAdapter(GitClientPort):
    def __init__(
        self,
        *,
        git_executable: str = "git",
        timeout_seconds: float | None = None,
        runner: Runner = subprocess.run,
        base_env: Mapping[str, str] | None = None,
    ) -> None:
        self._git_executable = git_executable
        self._timeout_seconds = timeout_seconds
        self._runner = runner
        self._base_env = base_env
        self._logger = logging.getLogger(__name__)

    def clone(self, command: CloneCommand) -> GitRepository:
        target = command.directory.absolute()
        target.parent.mkdir(parents=True, exist_ok=True)
        self._logger.info(
            "cloning repository",
            extra={
                "event": "git.clone.start",
                "clone_url": command.uri,
                "local_path": str(target),
            },
        )
        self._run_git(
            ["clone", "--", command.uri, str(target)],
            cwd=target.parent,
            env=self._build_env(command),
        )
        self._logger.info(
            "clone completed",
            extra={"event": "git.clone.success", "local_path": str(target)},
        )
        return self._handle(command.uri, target)

    def _handle(self, uri: RepositoryURI, local_path: Path) -> GitRepository:
        return ShellGitRepository(uri, local_path, git_executable=self._git_executable, runner=self._runner)

    def _build_env(self, command: CloneCommand) -> dict[str, str]:
        env = dict(self._base_env if self._base_env is not None else os.environ)
        # Never block on an interactive credential prompt.
        env.setdefault("GIT_TERMINAL_PROMPT", "0")
        env.update(command.env)

        # Scoped config through the environment keeps secrets out of argv.
        if command.config:
            offset = int(env.get("GIT_CONFIG_COUNT", "0") or "0")
            for index, (key, value) in enumerate(command.config.items(), start=offset):
                env[f"GIT_CONFIG_KEY_{index}"] = key
                env[f"GIT_CONFIG_VALUE_{index}"] = value
            env["GIT_CONFIG_COUNT"] = str(offset + len(command.config))
        return env

    def _run_git(self, args: Sequence[str], cwd: Path, env: Mapping[str, str]) -> subprocess.CompletedProcess[str]:
        command = [self._git_executable, *args]
        try:
            return self._runner(
                command,
                cwd=str(cwd),
                env=dict(env),
                check=True,
                text=True,
                capture_output=True,
                timeout=self._timeout_seconds,
            )
        except FileNotFoundError as error:
            raise CloneError(
                f"Git executable '{self._git_executable}' was not found in PATH"
            ) from error
        except subprocess.TimeoutExpired as error:
            raise CloneError(
                f"Git command timed out after {self._timeout_seconds}s: {' '.join(command)}"
            ) from error
        except subprocess.CalledProcessError as error:
            stderr = (error.stderr or "").strip()
            stdout = (error.stdout or "").strip()
            details = stderr or stdout or "No command output"
            self._logger.error(
                "git command failed",
                extra={
                    "event": "git.command.error",
                    "command": " ".join(command),
                    "cwd": str(cwd),
                    "return_code": error.returncode,
                    "details": details,
                },
            )
            raise CloneError(
                f"Git command failed ({error.returncode}): {' '.join(command)}\n{details}"
            ) from error
