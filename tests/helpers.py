"""Test doubles and the sample app shared across test modules."""

import json
from typing import Any

from fastapi import FastAPI, HTTPException

import canonical_log
from canonical_log import Settings
from canonical_log.integrations import capture_errors, install


class RecordingSink:
    """Sink that keeps every serialized line in memory."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def write(self, serialized: str) -> None:
        self.lines.append(serialized)

    @property
    def records(self) -> list[dict[str, Any]]:
        return [json.loads(line) for line in self.lines]


class FailingSink:
    """Sink whose write always raises."""

    def __init__(self) -> None:
        self.calls = 0

    def write(self, serialized: str) -> None:  # noqa: ARG002
        self.calls += 1
        raise OSError("disk full")


def build_app(settings: Settings) -> FastAPI:
    """Small app exercising the middleware: success, failure, params, ignored paths."""
    app = FastAPI()

    @app.get("/orders/{order_id}")
    async def get_order(order_id: str) -> dict[str, str]:
        canonical_log.set("order_lookup", True)
        canonical_log.context("business", {"order_id": order_id})
        return {"order_id": order_id}

    @app.get("/search")
    def search(q: str = "") -> dict[str, str]:
        # Sync endpoints run in the threadpool with a copy of the request context
        canonical_log.increment("search_count")
        return {"q": q}

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("kaboom")

    @app.get("/missing")
    @capture_errors
    async def missing() -> None:
        raise HTTPException(status_code=404, detail="no such thing")

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"bound": canonical_log.current() is not None}

    install(app, settings=settings)
    return app
