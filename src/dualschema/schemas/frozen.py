"""Read-only containers for compiled schema models.

Compiled trees are shared between every schema that embeds them, so the
containers they hold are frozen on validation: mappings become
``MappingProxyType`` and lists become tuples. ``thaw`` restores plain
dicts and lists for serialization.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel


def freeze(value: Any) -> Any:
    """Recursively convert mappings to read-only mappings and lists to tuples.

    Models are left as-is; they freeze their own containers.
    """
    if isinstance(value, BaseModel):
        return value
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of ``freeze``, producing plain dicts and lists."""
    if isinstance(value, BaseModel):
        return value
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    return value
