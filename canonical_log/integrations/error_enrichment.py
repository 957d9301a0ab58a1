"""Endpoint decorator that records exceptions before FastAPI handlers turn them into responses.

An exception handler registered on the app converts an error into, say, a
404 response before the middleware sees it, so the canonical line would
otherwise show the status but not the cause.
"""

from collections.abc import Callable
import functools
import inspect
from typing import Any, TypeVar

from canonical_log import binding

F = TypeVar("F", bound=Callable[..., Any])


def _record(error: Exception) -> None:
    binding.add(
        {
            "rescued_error_class": type(error).__name__,
            "rescued_error_message": str(error),
        }
    )


def capture_errors(func: F) -> F:
    """Record rescued_error_class/rescued_error_message for any exception, then re-raise."""
    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                _record(e)
                raise

        return async_wrapper  # type: ignore[return-value]

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            _record(e)
            raise

    return wrapper  # type: ignore[return-value]


__all__ = ["capture_errors"]
