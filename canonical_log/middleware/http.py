"""HTTP middleware producing one canonical log line per request."""

from collections.abc import Awaitable, Callable, Mapping
import re
from typing import Any
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from canonical_log import binding
from canonical_log.core.config import Settings, get_settings
from canonical_log.core.logging import get_logger
from canonical_log.emitter import emit
from canonical_log.errors import HookFailure
from canonical_log.event import Event
from canonical_log.subscribers.routing import record_route

logger = get_logger(__name__)


def _response_format(content_type: str | None) -> str | None:
    """Short format name from a media type: "application/problem+json; charset=utf-8" -> "json"."""
    if not content_type:
        return None
    media_type = content_type.split(";", 1)[0].strip().lower()
    subtype = media_type.rpartition("/")[2]
    return subtype.rpartition("+")[2] or None


def _user_attr(user: object, name: str) -> Any:
    """Read a Starlette BaseUser attribute; identity may be left unimplemented."""
    try:
        return getattr(user, name, None)
    except NotImplementedError:
        return None


class CanonicalLogMiddleware(BaseHTTPMiddleware):
    """Binds an Event to each request, seeds request fields and emits it at the end.

    Handler exceptions are recorded on the event (error + http_status 500)
    and re-raised unchanged; emission itself never raises.
    """

    def __init__(self, app: ASGIApp, settings: Settings | None = None) -> None:
        """Initialize middleware.

        Args:
            app: The ASGI application.
            settings: Fixed settings for this middleware. When omitted the
                active process-wide settings are resolved per request.
        """
        super().__init__(app)
        self._settings = settings

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request inside a canonical log scope.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response from handler, with X-Request-ID set.
        """
        settings = self._settings or get_settings()
        if self._is_ignored(request.url.path, settings):
            return await call_next(request)

        event = binding.init()
        try:
            request_id = self._seed_request_fields(request, event)
            response = await call_next(request)
            event.set("http_status", response.status_code)
            event.set("format", _response_format(response.headers.get("Content-Type")))
            self._enrich_user_context(request, event, settings)
            response.headers["X-Request-ID"] = request_id
            return response
        except Exception as e:
            event.add_error(e)
            event.set("http_status", 500)
            raise
        finally:
            record_route(request, event, settings)
            emit(event, settings)
            binding.clear()

    def _seed_request_fields(self, request: Request, event: Event) -> str:
        """Add request metadata to the event.

        Returns:
            The request id (from X-Request-ID or freshly generated).
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            remote_ip = forwarded.split(",")[0].strip()
        else:
            remote_ip = request.client.host if request.client else None

        event.add(
            {
                "request_id": request_id,
                "http_method": request.method,
                "path": request.url.path,
                "query_string": request.url.query or None,
                "remote_ip": remote_ip,
                "user_agent": request.headers.get("User-Agent"),
                "content_type": request.headers.get("Content-Type"),
            }
        )
        return request_id

    def _enrich_user_context(self, request: Request, event: Event, settings: Settings) -> None:
        if settings.user_context is not None:
            try:
                user_fields = settings.user_context(request)
            except Exception as e:
                failure = HookFailure("user_context", e)
                logger.warning("user_context hook failed", hook=failure.hook, error=str(e))
                return
            if isinstance(user_fields, Mapping):
                event.add(user_fields)
            return

        # Fall back to Starlette's AuthenticationMiddleware, when installed
        user = request.scope.get("user")
        if user is not None and _user_attr(user, "is_authenticated"):
            event.context(
                "user",
                {
                    "id": _user_attr(user, "identity"),
                    "display_name": _user_attr(user, "display_name"),
                },
            )

    @staticmethod
    def _is_ignored(path: str, settings: Settings) -> bool:
        for pattern in settings.ignored_paths:
            if isinstance(pattern, re.Pattern):
                if pattern.search(path):
                    return True
            elif path.startswith(pattern):
                return True
        return False
