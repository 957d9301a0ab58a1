"""Forward each line to a stdlib logger, e.g. the application's configured root handler."""

import logging


class LoggerSink:
    """Log serialized lines at a fixed level on a named stdlib logger."""

    def __init__(self, logger: logging.Logger | str = "canonical_log", level: int = logging.INFO) -> None:
        self.logger = logging.getLogger(logger) if isinstance(logger, str) else logger
        self.level = level

    def write(self, serialized: str) -> None:
        self.logger.log(self.level, serialized)


__all__ = ["LoggerSink"]
