from __future__ import annotations
"""Strict/lenient handling of per-repository errors."""

import logging

from git_fanout.domain.entities import RepositoryFailure
from git_fanout.domain.errors import RunError
from git_fanout.domain.ports import StatusSink


LOGGER = logging.getLogger(__name__)


class FailurePolicy:
    """Decide whether a per-repository error aborts the run.

    Strict mode raises `RunError` (original error as cause) on the first
    failure. Lenient mode records the failure and lets the caller continue
    with the next unit of work. Both modes report the error to the status
    sink first.
    """

    def __init__(self, *, strict: bool, status_sink: StatusSink) -> None:
        self.strict = strict
        self._status_sink = status_sink
        self._failures: list[RepositoryFailure] = []

    @property
    def failures(self) -> tuple[RepositoryFailure, ...]:
        return tuple(self._failures)

    def handle(self, failure: RepositoryFailure) -> None:
        self._status_sink.on_message(f"Error: {failure.message}")
        LOGGER.error(
            "repository step failed",
            extra={
                "event": "fanout.repository.failed",
                "clone_url": failure.uri,
                "phase": failure.phase,
                "error": str(failure.error),
                "strict": self.strict,
            },
        )
        if self.strict:
            raise RunError(f"Run aborted: {failure.message}", failure.error) from failure.error
        self._failures.append(failure)
