"""Instrumentation that feeds the current event.

The SQLAlchemy recorder lives in canonical_log.subscribers.sql and is
imported on demand so SQLAlchemy stays optional.
"""

from canonical_log.subscribers.routing import record_route

__all__ = ["record_route"]
