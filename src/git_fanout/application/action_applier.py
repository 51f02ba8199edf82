from __future__ import annotations

import logging
from collections.abc import Mapping

from git_fanout.domain.actions import RepositoryAction
from git_fanout.domain.entities import RepositoryFailure, RepositorySlot, RepositoryURI
from git_fanout.domain.errors import ActionError
from git_fanout.domain.ports import StatusSink

from .failure_policy import FailurePolicy
from .progress import ProgressReporter


LOGGER = logging.getLogger(__name__)


class ActionApplier:
    """Apply one action to every materialized repository of a run."""

    def __init__(
        self,
        *,
        status_sink: StatusSink,
        failure_policy: FailurePolicy,
        progress: ProgressReporter,
    ) -> None:
        self._status_sink = status_sink
        self._failure_policy = failure_policy
        self._progress = progress

    def apply(
        self,
        action: RepositoryAction,
        slots: Mapping[RepositoryURI, RepositorySlot],
        *,
        phase: str,
    ) -> None:
        """Apply `action` to each slot, counting one progress step per slot.

        Slots that failed to materialize are skipped but still counted.
        """
        for uri, slot in slots.items():
            if slot.repository is None:
                self._status_sink.on_message(
                    f"Skipping {phase} on repository {uri} because it could not be downloaded."
                )
            else:
                self._apply_one(action, slot, phase)
            self._progress.complete_step()

    def _apply_one(self, action: RepositoryAction, slot: RepositorySlot, phase: str) -> None:
        assert slot.repository is not None
        self._status_sink.on_message(f"Applying {phase} to repository {slot.uri}")
        try:
            action.apply(slot.repository)
        except Exception as error:  # noqa: BLE001
            if not isinstance(error, ActionError):
                wrapped = ActionError(f"Action '{action.name}' failed for {slot.uri}: {error}")
                wrapped.__cause__ = error
                error = wrapped
            self._failure_policy.handle(RepositoryFailure(slot.uri, phase, error))
            return

        LOGGER.info(
            "action applied",
            extra={
                "event": "fanout.repository.action.applied",
                "clone_url": slot.uri,
                "phase": phase,
                "action": action.name,
            },
        )

    @staticmethod
    def release(slots: Mapping[RepositoryURI, RepositorySlot]) -> int:
        """Close every live handle exactly once; return how many were closed."""
        released = 0
        for slot in slots.values():
            repository = slot.repository
            if repository is None or repository.closed:
                continue
            try:
                repository.close()
            except Exception:  # noqa: BLE001
                LOGGER.exception(
                    "repository handle could not be closed",
                    extra={"event": "fanout.repository.close.failed", "clone_url": slot.uri},
                )
                continue
            released += 1
        return released
