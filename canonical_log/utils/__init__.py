"""Utility modules."""

from canonical_log.utils.params import FILTERED, filter_params

__all__ = ["FILTERED", "filter_params"]
