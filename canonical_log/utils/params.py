"""Parameter redaction for request params recorded on canonical lines."""

from collections.abc import Iterable, Mapping
from typing import Any

FILTERED = "[FILTERED]"


def filter_params(params: Mapping[str, Any], filter_keys: Iterable[str]) -> dict[str, Any]:
    """Replace values of sensitive keys with a placeholder, recursing into nested mappings.

    Matching is exact on the string form of the key.

    Example:
        >>> filter_params({"user": {"password": "x", "name": "ada"}}, ["password"])
        {'user': {'password': '[FILTERED]', 'name': 'ada'}}
    """
    keys = frozenset(filter_keys)
    return _filter(params, keys)


def _filter(params: Mapping[str, Any], keys: frozenset[str]) -> dict[str, Any]:
    filtered: dict[str, Any] = {}
    for key, value in params.items():
        if str(key) in keys:
            filtered[key] = FILTERED
        elif isinstance(value, Mapping):
            filtered[key] = _filter(value, keys)
        else:
            filtered[key] = value
    return filtered


__all__ = ["FILTERED", "filter_params"]
