"""Status sinks receiving run progress and messages."""

from .sinks import ConsoleStatusSink, LoggingStatusSink, NullStatusSink

__all__ = [
	"ConsoleStatusSink",
	"LoggingStatusSink",
	"NullStatusSink",
]
