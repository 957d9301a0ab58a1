"""Sink interface: anything with write(serialized: str) -> None."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Sink(Protocol):
    """Output destination for one serialized canonical log line.

    Implementations may raise; the emitter catches and reports failures per sink.
    """

    def write(self, serialized: str) -> None: ...


__all__ = ["Sink"]
