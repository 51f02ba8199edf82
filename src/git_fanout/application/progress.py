from __future__ import annotations

from git_fanout.domain.entities import ProgressState
from git_fanout.domain.ports import StatusSink


class ProgressReporter:
    """Counts completed steps and pushes the fraction to a status sink."""

    def __init__(self, status_sink: StatusSink) -> None:
        self._status_sink = status_sink
        self.state = ProgressState()

    def start(self, steps_total: int) -> None:
        self.state = ProgressState(steps_complete=0, steps_total=steps_total)

    def complete_step(self) -> None:
        self._status_sink.on_progress(self.state.complete_step())

    def finish(self) -> None:
        self.state.steps_complete = self.state.steps_total
        self._status_sink.on_progress(1.0)
