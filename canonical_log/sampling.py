"""Keep-or-drop decision for a finished event.

Errors and slow requests are always kept by the default policy; ordinary
events are kept with probability sample_rate. A custom sampling function
replaces all of this, including the always-keep rules.
"""

from collections.abc import Callable, Mapping
import random
from typing import Any

from canonical_log.core.config import Settings
from canonical_log.errors import HookFailure


def _number(value: Any) -> float:
    """Numeric value of a snapshot field; missing or non-numeric counts as 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def default_policy(
    snapshot: Mapping[str, Any],
    settings: Settings,
    rng: Callable[[], float] = random.random,
) -> bool:
    """Always keep server errors, captured errors and slow requests; sample the rest.

    Args:
        snapshot: Finished event data.
        settings: Supplies sample_rate and slow_request_threshold_ms.
        rng: Uniform [0, 1) source, injectable for tests.

    Returns:
        True if the event should be emitted.
    """
    if _number(snapshot.get("http_status")) >= 500:
        return True
    error = snapshot.get("error")
    if error is not None and error is not False:
        return True
    if _number(snapshot.get("duration_ms")) >= settings.slow_request_threshold_ms:
        return True
    return rng() < settings.sample_rate


def builtin_decision(snapshot: Mapping[str, Any], settings: Settings) -> bool:
    """Decision without the custom sampling function."""
    if settings.sample_rate >= 1.0:
        return True
    return default_policy(snapshot, settings)


def should_sample(snapshot: Mapping[str, Any], settings: Settings) -> bool:
    """Decide whether a snapshot is emitted.

    A configured custom function is authoritative and its result is returned as-is.

    Raises:
        HookFailure: If the custom sampling function raises.
    """
    if settings.sampling is not None:
        try:
            return settings.sampling(snapshot, settings)
        except Exception as e:
            raise HookFailure("sampling", e) from e
    return builtin_decision(snapshot, settings)


__all__ = ["builtin_decision", "default_policy", "should_sample"]
