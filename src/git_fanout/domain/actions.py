from __future__ import annotations
"""Domain action contracts and composition primitives."""

from abc import ABC, abstractmethod
from typing import Callable, Sequence

from .errors import ActionError
from .ports import GitRepository


class RepositoryAction(ABC):
    """Pluggable per-repository action interface.

    Implementers should:
    - work inside `repository.work_tree` (or through `repository.run_git`),
    - return normally on success,
    - raise `ActionError` describing the failure otherwise.
    """

    @property
    def name(self) -> str:
        """Stable default action name used in messages and logging."""
        return self.__class__.__name__

    @abstractmethod
    def apply(self, repository: GitRepository) -> None:
        """Execute action logic for a single repository.

        Args:
            repository: Open handle to the materialized repository.
        """
        raise NotImplementedError


class CallableAction(RepositoryAction):
    """Adapt a plain function taking a repository handle into an action."""

    def __init__(self, fn: Callable[[GitRepository], object], *, name: str | None = None) -> None:
        self._fn = fn
        self._name = name or getattr(fn, "__name__", None) or "CallableAction"

    @property
    def name(self) -> str:
        return self._name

    def apply(self, repository: GitRepository) -> None:
        try:
            self._fn(repository)
        except ActionError:
            raise
        except Exception as error:  # noqa: BLE001
            raise ActionError(f"Action '{self._name}' failed for {repository.uri}: {error}") from error


class ActionSequence(RepositoryAction):
    """Ordered sequence of actions applied to one repository as a single action."""

    def __init__(self, actions: Sequence[RepositoryAction]) -> None:
        """Create a sequence from an ordered list of actions."""
        if not actions:
            raise ValueError("ActionSequence requires at least one action")
        self._actions = tuple(actions)

    @property
    def actions(self) -> tuple[RepositoryAction, ...]:
        """Read-only ordered actions configured for this sequence."""
        return self._actions

    @property
    def name(self) -> str:
        return " -> ".join(action.name for action in self._actions)

    def apply(self, repository: GitRepository) -> None:
        """Apply configured actions in order, stopping at the first failure."""
        for action in self._actions:
            action.apply(repository)
