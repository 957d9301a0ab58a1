"""Middleware module."""

from canonical_log.middleware.http import CanonicalLogMiddleware

__all__ = ["CanonicalLogMiddleware"]
