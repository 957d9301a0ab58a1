"""SQLAlchemy engine instrumentation: query counts, total time and slow queries.

Example:
    ```python
    engine = create_engine("postgresql://...")
    instrument(engine)
    ```
"""

from collections.abc import Callable
import time
from typing import Any
import weakref

from sqlalchemy import event as sa_event
from sqlalchemy.engine import Engine

from canonical_log.binding import current
from canonical_log.core.config import Settings, get_settings

_START_KEY = "canonical_log_query_start"

# Engine -> after_cursor_execute listener, so uninstrument() can remove it.
# Weak keys: a discarded engine drops out instead of shadowing a new one.
_listeners: weakref.WeakKeyDictionary[Engine, Callable[..., None]] = weakref.WeakKeyDictionary()


def _before_cursor_execute(
    conn: Any,
    cursor: Any,  # noqa: ARG001
    statement: str,  # noqa: ARG001
    parameters: Any,  # noqa: ARG001
    context: Any,  # noqa: ARG001
    executemany: bool,  # noqa: ARG001
) -> None:
    conn.info.setdefault(_START_KEY, []).append(time.perf_counter())


def _handle_error(exception_context: Any) -> None:
    conn = exception_context.connection
    if conn is not None and conn.info.get(_START_KEY):
        conn.info[_START_KEY].pop()


def _make_after_cursor_execute(settings: Settings | None) -> Callable[..., None]:
    def _after_cursor_execute(
        conn: Any,
        cursor: Any,  # noqa: ARG001
        statement: str,
        parameters: Any,  # noqa: ARG001
        context: Any,  # noqa: ARG001
        executemany: bool,  # noqa: ARG001
    ) -> None:
        starts = conn.info.get(_START_KEY)
        if not starts:
            return
        duration_ms = round((time.perf_counter() - starts.pop()) * 1000, 2)

        event = current()
        if event is None:
            return

        event.increment("db_query_count")
        event.increment("db_total_time_ms", duration_ms)

        threshold = (settings or get_settings()).slow_query_threshold_ms
        if duration_ms >= threshold:
            event.append("slow_queries", {"sql": statement, "duration_ms": duration_ms})

    return _after_cursor_execute


def instrument(engine: Engine, settings: Settings | None = None) -> None:
    """Attach query listeners to an engine. Calling it twice is a no-op.

    Args:
        engine: Engine whose queries should be recorded.
        settings: Supplies slow_query_threshold_ms; defaults to the active
            settings at query time.
    """
    if engine in _listeners:
        return
    after = _make_after_cursor_execute(settings)
    _listeners[engine] = after
    sa_event.listen(engine, "before_cursor_execute", _before_cursor_execute)
    sa_event.listen(engine, "after_cursor_execute", after)
    sa_event.listen(engine, "handle_error", _handle_error)


def uninstrument(engine: Engine) -> None:
    """Detach listeners added by instrument()."""
    after = _listeners.pop(engine, None)
    if after is None:
        return
    sa_event.remove(engine, "before_cursor_execute", _before_cursor_execute)
    sa_event.remove(engine, "after_cursor_execute", after)
    sa_event.remove(engine, "handle_error", _handle_error)


__all__ = ["instrument", "uninstrument"]
