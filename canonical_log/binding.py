"""Binds one Event to the currently executing unit of work.

The binding lives in a ContextVar, so each thread and each asyncio task sees
its own Event. A task created while an Event is bound inherits a copy of that
context and therefore writes into the same Event; spawn background tasks
after clear() (or inside their own scope()) if they must not contribute to
the request's line.

Drivers that already carry the Event along their call chain should pass it
explicitly (emit(event=...)); the ambient lookup here is for producers that
have no other way to reach it.
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from canonical_log.event import Event

_current_event: ContextVar[Event | None] = ContextVar("canonical_log_event", default=None)


def init() -> Event:
    """Bind a fresh Event to the calling context, replacing any existing binding."""
    event = Event()
    _current_event.set(event)
    return event


def current() -> Event | None:
    """Return the bound Event, or None when no unit of work is active."""
    return _current_event.get()


def clear() -> None:
    """Remove the binding for the calling context."""
    _current_event.set(None)


@contextmanager
def scope() -> Iterator[Event]:
    """Bind a fresh Event for the duration of the block, then restore the previous binding."""
    event = Event()
    token = _current_event.set(event)
    try:
        yield event
    finally:
        _current_event.reset(token)


# Convenience delegations: silent no-ops when nothing is bound.


def add(fields: Mapping[Any, Any]) -> None:
    event = current()
    if event is not None:
        event.add(fields)


def set(key: object, value: Any) -> None:  # noqa: A001
    event = current()
    if event is not None:
        event.set(key, value)


def increment(key: object, by: int | float = 1) -> None:
    event = current()
    if event is not None:
        event.increment(key, by)


def append(key: object, value: Any) -> None:
    event = current()
    if event is not None:
        event.append(key, value)


def context(category: object, data: Mapping[Any, Any]) -> None:
    """Categorized context, e.g. context("user", {"id": 123})."""
    event = current()
    if event is not None:
        event.context(category, data)


def add_error(error: BaseException, metadata: Mapping[Any, Any] | None = None) -> None:
    event = current()
    if event is not None:
        event.add_error(error, metadata)


__all__ = [
    "add",
    "add_error",
    "append",
    "clear",
    "context",
    "current",
    "increment",
    "init",
    "scope",
    "set",
]
