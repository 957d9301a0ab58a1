"""Per-unit-of-work field accumulator and its immutable snapshot."""

from collections.abc import Iterator, Mapping
from datetime import datetime, timezone
from enum import Enum
import json
import threading
import time
from typing import Any, Literal, TypeAlias

from canonical_log.errors import InvalidCategory

JsonValue: TypeAlias = (
    str | int | float | bool | None | list["JsonValue"] | dict[str, "JsonValue"]
)

Category = Literal["user", "business", "infra", "service"]
CATEGORIES: frozenset[str] = frozenset({"user", "business", "infra", "service"})


def normalize_key(key: object) -> str:
    """Canonical string form of a field or category name."""
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)


def _copy_value(value: Any) -> Any:
    """Copy nested containers so a snapshot never aliases live accumulator state."""
    if isinstance(value, Mapping):
        return {normalize_key(k): _copy_value(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_copy_value(v) for v in value]
    return value


def _utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-01-15T10:23:45.123Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Snapshot(Mapping[str, Any]):
    """Immutable point-in-time view of an Event.

    Behaves as a read-only mapping. Use to_dict() for a mutable copy.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = _copy_value(data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Snapshot({self._data!r})"

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable deep copy of the snapshot data."""
        return _copy_value(self._data)

    def to_json(self) -> str:
        """Serialize to a single-line JSON object."""
        return json.dumps(self._data, default=str)


class Event:
    """Mutable, thread-safe bag of fields for one canonical log line.

    Every mutation and snapshot() takes the same lock, so compound operations
    such as increment() never lose updates and a snapshot never observes a
    partial write.

    Example:
        ```python
        event = Event()
        event.set("http_status", 200)
        event.increment("db_query_count")
        event.context("user", {"id": 42})
        event.snapshot()["user"]  # {"id": 42}
        ```
    """

    def __init__(self) -> None:
        self._fields: dict[str, Any] = {}
        self._categories: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._started_at = time.monotonic()

    def add(self, fields: Mapping[Any, Any]) -> None:
        """Merge key/value pairs into the event. Existing keys are overwritten."""
        with self._lock:
            for key, value in fields.items():
                self._fields[normalize_key(key)] = value

    def set(self, key: object, value: Any) -> None:
        """Set a single field."""
        with self._lock:
            self._fields[normalize_key(key)] = value

    def increment(self, key: object, by: int | float = 1) -> None:
        """Add `by` to a numeric field, treating a missing field as 0."""
        name = normalize_key(key)
        with self._lock:
            self._fields[name] = (self._fields.get(name) or 0) + by

    def append(self, key: object, value: Any) -> None:
        """Append to a list field, creating it on first use."""
        name = normalize_key(key)
        with self._lock:
            self._fields.setdefault(name, []).append(value)

    def context(self, category: object, data: Mapping[Any, Any]) -> None:
        """Merge data into one of the fixed categories (user, business, infra, service).

        Raises:
            InvalidCategory: If the category is not one of the fixed names.
        """
        name = normalize_key(category)
        if name not in CATEGORIES:
            raise InvalidCategory(category)
        with self._lock:
            bucket = self._categories.setdefault(name, {})
            for key, value in data.items():
                bucket[normalize_key(key)] = value

    def add_error(self, error: BaseException, metadata: Mapping[Any, Any] | None = None) -> None:
        """Record an error as the `error` field; metadata keys win over class/message."""
        record: dict[str, Any] = {"class": type(error).__name__, "message": str(error)}
        for key, value in (metadata or {}).items():
            record[normalize_key(key)] = value
        with self._lock:
            self._fields["error"] = record

    def duration_ms(self) -> float:
        """Elapsed monotonic time since construction, in milliseconds."""
        return round((time.monotonic() - self._started_at) * 1000, 2)

    def snapshot(self) -> Snapshot:
        """Build an immutable view: timestamp, duration_ms, fields, then non-empty categories.

        A duration_ms field replaces the measured one; timestamp is always the
        ISO-8601 time of the snapshot.
        """
        timestamp = _utc_timestamp()
        with self._lock:
            data: dict[str, Any] = {"timestamp": timestamp, "duration_ms": self.duration_ms()}
            data.update(self._fields)
            data["timestamp"] = timestamp
            for name, values in self._categories.items():
                if values:
                    data[name] = values
            return Snapshot(data)

    def to_json(self) -> str:
        """Serialize a fresh snapshot."""
        return self.snapshot().to_json()

    @property
    def fields(self) -> dict[str, Any]:
        """Copy of the current fields."""
        with self._lock:
            return _copy_value(self._fields)

    @property
    def categories(self) -> dict[str, dict[str, Any]]:
        """Copy of the current categorized context."""
        with self._lock:
            return _copy_value(self._categories)


__all__ = ["CATEGORIES", "Category", "Event", "JsonValue", "Snapshot", "normalize_key"]
