from __future__ import annotations

import logging
import sys
from typing import TextIO

from git_fanout.domain.ports import StatusSink


class NullStatusSink(StatusSink):
    def on_progress(self, fraction: float) -> None:
        return None

    def on_message(self, text: str) -> None:
        return None


class LoggingStatusSink(StatusSink):
    """Forward status updates to the `git_fanout.status` logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("git_fanout.status")

    def on_progress(self, fraction: float) -> None:
        self._logger.info(
            "progress updated",
            extra={"event": "status.progress", "progress": round(fraction, 4)},
        )

    def on_message(self, text: str) -> None:
        self._logger.info(text, extra={"event": "status.message"})


class ConsoleStatusSink(StatusSink):
    """Human-readable progress for the command line."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def on_progress(self, fraction: float) -> None:
        print(f"Progress: {fraction * 100:.1f}%", file=self._stream or sys.stdout, flush=True)

    def on_message(self, text: str) -> None:
        print(text, file=self._stream or sys.stdout, flush=True)
