"""Core: configuration and side-channel logging."""

from canonical_log.core.config import Settings, configure, get_settings, reset_settings
from canonical_log.core.logging import DevFormatter, JsonFormatter, configure_logging, get_logger

__all__ = [
    "DevFormatter",
    "JsonFormatter",
    "Settings",
    "configure",
    "configure_logging",
    "get_logger",
    "get_settings",
    "reset_settings",
]
