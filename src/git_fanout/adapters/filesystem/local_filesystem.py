from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from git_fanout.domain.errors import CleanupError, DirectoryNotEmptyError
from git_fanout.domain.ports import WorkingDirectoryPort


class LocalWorkingDirectory(WorkingDirectoryPort):
    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def prepare(self, path: Path, *, clear_existing: bool = True) -> None:
        if _is_occupied(path):
            if not clear_existing:
                raise DirectoryNotEmptyError(f"Working directory is not empty: {path}")

            self._logger.info(
                "removing leftovers from previous run",
                extra={"event": "workdir.prepare.clear", "path": str(path)},
            )
            errors = self.remove(path)
            if errors or _is_occupied(path):
                raise DirectoryNotEmptyError(
                    f"Working directory could not be cleared: {path} ({len(errors)} paths left behind)"
                )

        try:
            path.mkdir(parents=True, exist_ok=True)
        except FileExistsError as error:
            raise DirectoryNotEmptyError(f"Working directory path is occupied by a file: {path}") from error
        self._logger.info(
            "working directory prepared",
            extra={"event": "workdir.prepare.done", "path": str(path)},
        )

    def remove(self, path: Path) -> list[CleanupError]:
        if not path.exists() and not path.is_symlink():
            return []

        errors: list[CleanupError] = []
        if path.is_symlink() or not path.is_dir():
            self._unlink(path, errors)
            return errors

        # Children before parents.
        for root, dirs, files in os.walk(path, topdown=False):
            root_path = Path(root)
            for name in files:
                self._unlink(root_path / name, errors)
            for name in dirs:
                child = root_path / name
                if child.is_symlink():
                    self._unlink(child, errors)
                else:
                    self._rmdir(child, errors)
        self._rmdir(path, errors)

        self._logger.info(
            "working directory removed",
            extra={"event": "workdir.remove.done", "path": str(path), "error_count": len(errors)},
        )
        return errors

    def _unlink(self, path: Path, errors: list[CleanupError]) -> None:
        try:
            path.unlink()
        except PermissionError:
            # git marks pack files read-only.
            try:
                path.chmod(stat.S_IWRITE | stat.S_IREAD)
                path.unlink()
            except OSError as error:
                self._record(path, error, errors)
        except FileNotFoundError:
            return
        except OSError as error:
            self._record(path, error, errors)

    def _rmdir(self, path: Path, errors: list[CleanupError]) -> None:
        try:
            path.rmdir()
        except FileNotFoundError:
            return
        except OSError as error:
            self._record(path, error, errors)

    def _record(self, path: Path, error: OSError, errors: list[CleanupError]) -> None:
        cleanup_error = CleanupError(f"Could not delete {path}: {error}")
        cleanup_error.__cause__ = error
        errors.append(cleanup_error)
        self._logger.warning(
            "path could not be deleted",
            extra={"event": "workdir.remove.failed", "path": str(path), "error": str(error)},
        )


def _is_occupied(path: Path) -> bool:
    if path.is_symlink():
        return True
    if not path.exists():
        return False
    if not path.is_dir():
        return True
    return any(path.iterdir())
