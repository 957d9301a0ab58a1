"""Side-channel logging: human-readable for development, JSON for production.

Canonical log lines go to sinks. Everything else the library has to say
(a hook raised, a sink failed) goes through loggers from get_logger(),
which sit on top of stdlib logging. Unconfigured, Python's last-resort
handler prints warnings to stderr, so diagnostics never land on stdout
next to canonical lines. configure_logging() installs a root handler with
one of the formatters below.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

# Added to every diagnostic, whether it came from structlog or plain logging
_SHARED_PROCESSORS: list[Processor] = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
]


def get_logger(name: str) -> Any:
    """Structlog logger bound to the stdlib logger `name`.

    Keyword context (hook, sink, error) travels as structured fields once
    configure_logging() has run.
    """
    return structlog.wrap_logger(logging.getLogger(name))


class JsonFormatter(structlog.stdlib.ProcessorFormatter):
    """One JSON object per diagnostic, context keys at the top level.

    Output example:
        {"sink": "StdoutSink", "error": "broken pipe", "level": "warning",
         "logger": "canonical_log.emitter", "timestamp": "...", "message": "Sink write failed"}
    """

    def __init__(self) -> None:
        super().__init__(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.EventRenamer("message"),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(default=str),
            ],
            foreign_pre_chain=[*_SHARED_PROCESSORS, structlog.stdlib.ExtraAdder()],
        )


class DevFormatter(structlog.stdlib.ProcessorFormatter):
    """Human-readable formatter for local development.

    Output example:
        2025-01-15T10:23:45Z [warning  ] Sink write failed  [canonical_log.emitter] sink=StdoutSink
    """

    def __init__(self) -> None:
        super().__init__(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(colors=False),
            ],
            foreign_pre_chain=[*_SHARED_PROCESSORS, structlog.stdlib.ExtraAdder()],
        )


def configure_logging(
    level: str | int = "INFO",
    *,
    environment: str = "production",
    stream: Any = None,
) -> None:
    """Configure root logging and route structlog through it. Call once at startup.

    Args:
        level: Root logger level (e.g. "INFO", logging.INFO).
        environment: "development" for human-readable output, anything else for JSON.
        stream: Output stream; defaults to sys.stderr so diagnostics never
            interleave with canonical lines written to stdout.
    """
    if stream is None:
        stream = sys.stderr
    root = logging.getLogger()
    root.setLevel(level if isinstance(level, int) else getattr(logging, level.upper()))
    root.handlers.clear()

    handler = logging.StreamHandler(stream)
    formatter = DevFormatter() if environment == "development" else JsonFormatter()
    handler.setFormatter(formatter)
    handler.setLevel(root.level)
    root.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


__all__ = ["DevFormatter", "JsonFormatter", "configure_logging", "get_logger"]
