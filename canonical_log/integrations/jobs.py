"""Canonical log lines for background jobs.

Jobs have no request-facing latency budget to protect, so every execution
is emitted regardless of sampling configuration.

Example:
    ```python
    @canonical_job(queue="mailers")
    def send_invoice(invoice_id: int) -> None:
        canonical_log.set("invoice_id", invoice_id)
        ...


    with job_scope("ReindexJob", queue="search", job_id=message.id):
        reindex()
    ```
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
import functools
import inspect
from typing import Any, TypeVar
import uuid

from canonical_log import binding
from canonical_log.core.config import Settings
from canonical_log.emitter import emit
from canonical_log.event import Event

F = TypeVar("F", bound=Callable[..., Any])


@contextmanager
def job_scope(
    job_class: str,
    *,
    queue: str = "default",
    job_id: str | None = None,
    settings: Settings | None = None,
) -> Iterator[Event]:
    """Run a block as one job unit of work.

    Seeds job_class, queue and job_id, records any exception with add_error
    and re-raises it, then always emits. The previous binding (for example a
    request that runs the job inline) is restored on exit.
    """
    with binding.scope() as event:
        event.add({"job_class": job_class, "queue": queue, "job_id": job_id or uuid.uuid4().hex})
        try:
            yield event
        except Exception as e:
            event.add_error(e)
            raise
        finally:
            emit(event, settings, sample=False)


def canonical_job(
    job_class: str | Callable[..., Any] | None = None,
    *,
    queue: str = "default",
    settings: Settings | None = None,
) -> Any:
    """Decorate a sync or async job function so each call gets its own canonical line.

    Usable bare (@canonical_job) or with arguments (@canonical_job("Name", queue="q")).
    The job class defaults to the function's qualified name.
    """

    def decorator(func: F) -> F:
        name = job_class if isinstance(job_class, str) else func.__qualname__

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with job_scope(name, queue=queue, settings=settings):
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with job_scope(name, queue=queue, settings=settings):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    if callable(job_class):
        return decorator(job_class)  # type: ignore[arg-type]
    return decorator


__all__ = ["canonical_job", "job_scope"]
