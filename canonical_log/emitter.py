"""End-of-life sequence for one unit of work: hook, snapshot, sample, serialize, fan out.

Nothing in here raises to the caller. Failures are reported through the
logging side channel and the unit of work carries on.
"""

from collections.abc import Mapping
import json
from typing import Any

from canonical_log.binding import current
from canonical_log.core.config import Settings, get_settings
from canonical_log.core.logging import get_logger
from canonical_log.errors import HookFailure, SinkFailure
from canonical_log.event import Event
from canonical_log.sampling import builtin_decision, should_sample

logger = get_logger(__name__)

MESSAGE_FIELDS = ("http_method", ("path", "job_class"), "http_status")


def build_message(record: Mapping[str, Any]) -> str:
    """Summary such as "GET /orders 200" or "SendInvoiceJob"; absent parts are skipped."""
    parts: list[str] = []
    for names in MESSAGE_FIELDS:
        for name in (names,) if isinstance(names, str) else names:
            value = record.get(name)
            if value is not None and value != "":
                parts.append(str(value))
                break
    return " ".join(parts)


def _run_before_emit(event: Event, settings: Settings) -> None:
    if settings.before_emit is None:
        return
    try:
        settings.before_emit(event)
    except Exception as e:
        failure = HookFailure("before_emit", e)
        logger.warning("before_emit hook failed", hook=failure.hook, error=str(e))


def _sampled(snapshot: Mapping[str, Any], settings: Settings) -> bool:
    try:
        return should_sample(snapshot, settings)
    except HookFailure as failure:
        logger.warning(
            "sampling hook failed, using built-in rules",
            hook=failure.hook,
            error=str(failure.error),
        )
        return builtin_decision(snapshot, settings)


def _write_all(serialized: str, settings: Settings) -> None:
    for sink in settings.resolved_sinks():
        try:
            sink.write(serialized)
        except Exception as e:
            failure = SinkFailure(sink, e)
            logger.warning("Sink write failed", sink=type(failure.sink).__name__, error=str(e))


def emit(
    event: Event | None = None,
    settings: Settings | None = None,
    *,
    sample: bool = True,
) -> bool:
    """Emit the canonical log line for a finished unit of work.

    Args:
        event: Event to emit; defaults to the one bound to the current context.
        settings: Settings to use; defaults to the active process-wide settings.
        sample: Apply the sampling decision. Background jobs pass False so
            every execution gets a line.

    Returns:
        True if a line was serialized and handed to the sinks, False if it
        was skipped (no event, sampled out, or an unexpected failure).
    """
    try:
        if event is None:
            event = current()
        if event is None:
            return False
        if settings is None:
            settings = get_settings()

        _run_before_emit(event, settings)

        snapshot = event.snapshot()
        if sample and not _sampled(snapshot, settings):
            return False

        record = snapshot.to_dict()
        if record.get("message") is None:
            record["message"] = build_message(record)

        serialized = json.dumps(record, default=str)
        _write_all(serialized, settings)
        return True
    except Exception as e:
        logger.error("Emit failed", error=str(e), exc_info=True)
        return False


__all__ = ["build_message", "emit"]
