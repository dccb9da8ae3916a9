# src/narratopia/models/validators.py
"""Custom validators for Pydantic models."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

# Scalars allowed in a codex entity's attribute bag; nested maps recurse.
_ATTRIBUTE_SCALARS = (str, int, float, bool)


def validate_non_empty(value: str) -> str:
    """Ensure ``value`` is not empty or whitespace."""
    if not value.strip():
        raise ValueError("must not be empty")
    return value


def validate_string_list(values: list[str]) -> list[str]:
    """Strip entries and drop blanks from a list of tags or image references."""
    return [v.strip() for v in values if v and v.strip()]


def validate_attribute_bag(value: Any, path: str = "attributes") -> dict[str, Any]:
    """Check that ``value`` is a map of scalars or nested maps.

    Keys must be strings; values must be ``str``, ``int``, ``float``,
    ``bool``, ``None`` or another map obeying the same rule.
    """
    if not isinstance(value, Mapping):
        raise ValueError(f"{path} must be an object")
    result: dict[str, Any] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise ValueError(f"{path} keys must be strings")
        item_path = f"{path}.{key}"
        if item is None or isinstance(item, _ATTRIBUTE_SCALARS):
            result[key] = item
        elif isinstance(item, Mapping):
            result[key] = validate_attribute_bag(item, item_path)
        else:
            raise ValueError(
                f"{item_path} must be a string, number, boolean, null or object"
            )
    return result


__all__ = ["validate_non_empty", "validate_string_list", "validate_attribute_bag"]
