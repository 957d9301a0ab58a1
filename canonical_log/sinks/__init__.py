"""Output sinks for canonical log lines."""

from canonical_log.sinks.base import Sink
from canonical_log.sinks.logger import LoggerSink
from canonical_log.sinks.null import NullSink
from canonical_log.sinks.stdout import StdoutSink

__all__ = ["LoggerSink", "NullSink", "Sink", "StdoutSink"]
