from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from git_fanout.domain.entities import (
    PHASE_CLONE,
    PHASE_CREDENTIALS,
    CloneCommand,
    RepositoryFailure,
    RepositorySlot,
    RepositoryURI,
)
from git_fanout.domain.errors import CloneError, CredentialError
from git_fanout.domain.ports import GitClientPort, GitCredentials, StatusSink

from .failure_policy import FailurePolicy
from .progress import ProgressReporter


LOGGER = logging.getLogger(__name__)


class RepositoryMaterializer:
    """Clone every URI into `<working_dir>/<ordinal>`, one at a time, in order."""

    def __init__(
        self,
        *,
        git_client: GitClientPort,
        credentials: GitCredentials,
        status_sink: StatusSink,
        failure_policy: FailurePolicy,
        progress: ProgressReporter,
    ) -> None:
        self._git_client = git_client
        self._credentials = credentials
        self._status_sink = status_sink
        self._failure_policy = failure_policy
        self._progress = progress

    def materialize(
        self,
        uris: Sequence[RepositoryURI],
        working_dir: Path,
        slots: dict[RepositoryURI, RepositorySlot] | None = None,
    ) -> dict[RepositoryURI, RepositorySlot]:
        """Fill and return one slot per URI; failed slots carry no handle.

        Passing `slots` lets the caller keep the handles opened before a
        strict-mode abort so they can still be released.
        """
        slots = {} if slots is None else slots
        for ordinal, uri in enumerate(uris, start=1):
            slot = RepositorySlot(uri=uri, ordinal=ordinal, local_path=working_dir / str(ordinal))
            slots[uri] = slot
            self._materialize_one(slot)
            self._progress.complete_step()
        return slots

    def _materialize_one(self, slot: RepositorySlot) -> None:
        self._status_sink.on_message(f"Cloning repository {slot.uri} to {slot.local_path}")
        command = CloneCommand(uri=slot.uri, directory=slot.local_path)

        try:
            self._credentials.attach(command)
        except Exception as error:  # noqa: BLE001
            slot.error = error if isinstance(error, CredentialError) else _wrap(CredentialError, error, slot.uri)
            self._failure_policy.handle(RepositoryFailure(slot.uri, PHASE_CREDENTIALS, slot.error))
            return

        try:
            slot.repository = self._git_client.clone(command)
        except Exception as error:  # noqa: BLE001
            slot.error = error if isinstance(error, CloneError) else _wrap(CloneError, error, slot.uri)
            self._failure_policy.handle(RepositoryFailure(slot.uri, PHASE_CLONE, slot.error))
            return

        LOGGER.info(
            "repository materialized",
            extra={
                "event": "fanout.repository.materialized",
                "clone_url": slot.uri,
                "ordinal": slot.ordinal,
                "local_path": str(slot.local_path),
            },
        )


def _wrap(kind: type[Exception], error: Exception, uri: RepositoryURI) -> Exception:
    wrapped = kind(f"{error} ({uri})")
    wrapped.__cause__ = error
    return wrapped
