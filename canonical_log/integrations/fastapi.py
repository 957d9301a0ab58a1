"""One-call setup for a FastAPI application."""

from typing import Any

from fastapi import FastAPI

from canonical_log.core.config import Settings
from canonical_log.middleware.http import CanonicalLogMiddleware


def install(app: FastAPI, *, settings: Settings | None = None, engine: Any = None) -> None:
    """Add the canonical log middleware and optionally instrument a SQLAlchemy engine.

    Call after any middleware that should run inside the canonical scope has
    been added: the last middleware added runs first (outermost).

    Args:
        app: Application to instrument.
        settings: Fixed settings; omitted means the active process-wide settings.
        engine: SQLAlchemy engine whose queries should be counted.
    """
    app.add_middleware(CanonicalLogMiddleware, settings=settings)
    if engine is not None:
        from canonical_log.subscribers.sql import instrument  # noqa: PLC0415

        instrument(engine, settings)


__all__ = ["install"]
