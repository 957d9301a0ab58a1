"""Canonical log configuration settings."""

from collections.abc import Callable, Mapping
import re
import threading
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from canonical_log.sinks import Sink, StdoutSink

DEFAULT_PARAM_FILTER_KEYS = ["password", "password_confirmation", "token", "secret"]


class Settings(BaseSettings):
    """Canonical log configuration settings.

    Scalar settings can be overridden via CANONICAL_LOG_* environment variables.
    Hooks and sinks are Python objects and must be passed in code. Instances are
    frozen; build a new one and swap it with configure() to reconfigure.
    """

    model_config = SettingsConfigDict(
        env_prefix="CANONICAL_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        arbitrary_types_allowed=True,
    )

    # Output
    sinks: list[Any] | None = Field(
        default=None, description="Sinks to write to; None means a single StdoutSink"
    )

    # Hooks
    before_emit: Callable[[Any], None] | None = Field(
        default=None, description="Called with the live Event right before it is snapshotted"
    )
    user_context: Callable[[Any], Mapping[str, Any] | None] | None = Field(
        default=None, description="Called with the request; a returned mapping is merged into the event"
    )
    sampling: Callable[[Any, Any], bool] | None = Field(
        default=None, description="Custom (snapshot, settings) -> bool; overrides every built-in rule"
    )

    # Requests
    ignored_paths: list[str | re.Pattern[str]] = Field(
        default_factory=list, description="Path prefixes or compiled patterns that get no canonical line"
    )
    param_filter_keys: list[str] = Field(default_factory=lambda: list(DEFAULT_PARAM_FILTER_KEYS))

    # Sampling
    sample_rate: float = Field(default=1.0, ge=0.0, le=1.0, description="Share of ordinary events kept")
    slow_request_threshold_ms: float = 2000.0

    # Instrumentation
    slow_query_threshold_ms: float = 100.0

    @field_validator("sinks", mode="before")
    @classmethod
    def _wrap_single_sink(cls, value: Any) -> Any:
        if value is None or isinstance(value, list | tuple):
            return value
        return [value]

    @field_validator("sinks")
    @classmethod
    def _check_sinks(cls, value: list[Any] | None) -> list[Any] | None:
        for sink in value or []:
            if not isinstance(sink, Sink):
                raise ValueError(f"{type(sink).__name__} does not implement write(serialized)")
        return value

    def resolved_sinks(self) -> list[Sink]:
        """Configured sinks, defaulting to stdout."""
        if self.sinks is None:
            return [StdoutSink()]
        return list(self.sinks)


class SettingsHandle:
    """Holds the active Settings; replacing it is a single atomic swap.

    Units of work that already resolved a Settings instance finish with it, so
    a reconfiguration during live traffic is seen per unit of work as either
    the old or the new settings, never a mix.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._settings: Settings | None = None

    def get(self) -> Settings:
        settings = self._settings
        if settings is None:
            with self._lock:
                if self._settings is None:
                    self._settings = Settings()
                settings = self._settings
        return settings

    def swap(self, settings: Settings) -> Settings:
        with self._lock:
            self._settings = settings
        return settings

    def reset(self) -> None:
        with self._lock:
            self._settings = None


_handle = SettingsHandle()


def get_settings() -> Settings:
    """Get the active settings instance."""
    return _handle.get()


def configure(settings: Settings | None = None, **overrides: Any) -> Settings:
    """Install new process-wide settings.

    Args:
        settings: A complete Settings instance to install.
        **overrides: Field values applied on top of `settings` (or of the
            defaults and environment when `settings` is None).

    Returns:
        The installed Settings.
    """
    if settings is None:
        settings = Settings(**overrides)
    elif overrides:
        settings = Settings(**{**dict(settings), **overrides})
    return _handle.swap(settings)


def reset_settings() -> None:
    """Drop the installed settings; the next get_settings() rebuilds defaults."""
    _handle.reset()


__all__ = [
    "DEFAULT_PARAM_FILTER_KEYS",
    "Settings",
    "SettingsHandle",
    "configure",
    "get_settings",
    "reset_settings",
]
