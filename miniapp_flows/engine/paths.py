"""Dotted-path lookup into an execution context."""

from collections.abc import Mapping, Sequence
from typing import Any


class _Missing:
    """Marker for a path that does not resolve"""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def resolve_path(path: str, context: Any) -> Any:
    """Walks `a.b.0.c` through nested mappings and lists; returns MISSING on any gap"""
    value = context
    for part in path.strip().split('.'):
        if value is None or value is MISSING:
            return MISSING
        value = _lookup(value, part)
    return value


def _lookup(value: Any, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key, MISSING)
    
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        if not key.isdigit():
            return MISSING
        index = int(key)
        return value[index] if index < len(value) else MISSING
    
    return MISSING
