"""Exceptions raised or reported by the canonical log core."""


class CanonicalLogError(Exception):
    """Base class for canonical log errors."""


class InvalidCategory(CanonicalLogError, ValueError):
    """Raised when a context category outside the fixed set is used."""

    def __init__(self, category: object) -> None:
        super().__init__(f"Unknown category: {category}")
        self.category = category


class HookFailure(CanonicalLogError):
    """A user-supplied hook (before_emit, user_context, sampling) raised."""

    def __init__(self, hook: str, error: BaseException) -> None:
        super().__init__(f"{hook} hook failed: {error}")
        self.hook = hook
        self.error = error


class SinkFailure(CanonicalLogError):
    """A sink's write raised."""

    def __init__(self, sink: object, error: BaseException) -> None:
        super().__init__(f"Sink error ({type(sink).__name__}): {error}")
        self.sink = sink
        self.error = error


__all__ = ["CanonicalLogError", "HookFailure", "InvalidCategory", "SinkFailure"]
