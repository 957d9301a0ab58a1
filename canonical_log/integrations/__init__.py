"""Drivers and helpers for units of work other than a plain HTTP request."""

from canonical_log.integrations.error_enrichment import capture_errors
from canonical_log.integrations.fastapi import install
from canonical_log.integrations.jobs import canonical_job, job_scope

__all__ = ["canonical_job", "capture_errors", "install", "job_scope"]
