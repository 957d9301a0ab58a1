"""Discard everything. Useful in tests and for disabling output without removing the middleware."""


class NullSink:
    def write(self, serialized: str) -> None:  # noqa: ARG002
        return None


__all__ = ["NullSink"]
