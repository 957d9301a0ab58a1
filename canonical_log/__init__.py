"""Canonical log lines: one structured JSON record per request or job.

Producers anywhere in the call chain write into the event bound to the
current unit of work:

    import canonical_log

    canonical_log.set("order_id", order.id)
    canonical_log.increment("cache_misses")
    canonical_log.context("user", {"id": user.id, "tier": user.tier})

The calls are no-ops when no unit of work is active.
"""

from canonical_log.binding import (
    add,
    add_error,
    append,
    clear,
    context,
    current,
    increment,
    init,
    scope,
    set,  # noqa: A004
)
from canonical_log.core.config import Settings, configure, get_settings, reset_settings
from canonical_log.emitter import build_message, emit
from canonical_log.errors import CanonicalLogError, HookFailure, InvalidCategory, SinkFailure
from canonical_log.event import CATEGORIES, Event, Snapshot
from canonical_log.middleware import CanonicalLogMiddleware
from canonical_log.sampling import default_policy, should_sample

__version__ = "0.1.0"

__all__ = [
    "CATEGORIES",
    "CanonicalLogError",
    "CanonicalLogMiddleware",
    "Event",
    "HookFailure",
    "InvalidCategory",
    "Settings",
    "SinkFailure",
    "Snapshot",
    "add",
    "add_error",
    "append",
    "build_message",
    "clear",
    "configure",
    "context",
    "current",
    "default_policy",
    "emit",
    "get_settings",
    "increment",
    "init",
    "reset_settings",
    "scope",
    "set",
    "should_sample",
]
