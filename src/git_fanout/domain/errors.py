from __future__ import annotations
"""Error kinds raised by the fan-out engine and its adapters."""


class FanoutError(RuntimeError):
    """Base class for every error raised by git-fanout."""


class ConfigurationError(FanoutError):
    """Run configuration is missing a mandatory collaborator."""


class DirectoryNotEmptyError(FanoutError):
    """Working directory is occupied and could not be prepared."""


class SelectionError(FanoutError):
    """Repository URIs could not be resolved."""


class CredentialError(FanoutError):
    """Credentials could not be attached to a clone command."""


class CloneError(FanoutError):
    """Repository could not be materialized locally."""


class ActionError(FanoutError):
    """Action failed for one repository."""


class CleanupError(FanoutError):
    """A path could not be removed during best-effort cleanup."""


class RunInProgressError(FanoutError):
    """Another run is already executing on the same orchestrator."""


class RunError(FanoutError):
    """Run-level failure wrapping the error that aborted the run."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
