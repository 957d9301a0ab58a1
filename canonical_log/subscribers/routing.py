"""Records which route and endpoint handled the request, with redacted params.

Run by the middleware once the downstream app has returned (or raised),
when the router has already written the match into the ASGI scope.
"""

from typing import Any

from starlette.requests import Request

from canonical_log.binding import current
from canonical_log.core.config import Settings, get_settings
from canonical_log.event import Event
from canonical_log.utils.params import filter_params


def _query_params(request: Request) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for key in request.query_params:
        values = request.query_params.getlist(key)
        params[key] = values[0] if len(values) == 1 else values
    return params


def record_route(
    request: Request,
    event: Event | None = None,
    settings: Settings | None = None,
) -> None:
    """Add route, controller, action and params fields for the matched endpoint.

    When the SQL producer recorded query time, it is also reported as db_runtime_ms.

    Args:
        request: The request after routing.
        event: Event to write to; defaults to the current one.
        settings: Supplies param_filter_keys; defaults to the active settings.
    """
    if event is None:
        event = current()
    if event is None:
        return

    route = request.scope.get("route")
    endpoint = request.scope.get("endpoint")
    if route is None and endpoint is None:
        return

    if settings is None:
        settings = get_settings()
    params = {**request.path_params, **_query_params(request)}

    event.add(
        {
            "route": getattr(route, "path", None),
            "controller": getattr(endpoint, "__module__", None),
            "action": getattr(endpoint, "__name__", None),
            "params": filter_params(params, settings.param_filter_keys),
        }
    )

    db_total_time_ms = event.fields.get("db_total_time_ms")
    if db_total_time_ms is not None:
        event.set("db_runtime_ms", round(db_total_time_ms, 2))


__all__ = ["record_route"]
