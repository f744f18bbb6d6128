"""Placeholder substitution for {{ path.to.value }} syntax."""

import json
import re
from typing import Any, Dict
from miniapp_flows.engine.paths import MISSING, resolve_path

PLACEHOLDER_PATTERN = re.compile(r'\{\{([^}]+)\}\}')


def has_placeholder(value: Any) -> bool:
    return isinstance(value, str) and PLACEHOLDER_PATTERN.search(value) is not None


def substitute(value: Any, context: Dict[str, Any]) -> Any:
    """Replaces placeholders in a string; unresolved ones are left as written"""
    if not isinstance(value, str):
        return value
    
    def replace(match: re.Match) -> str:
        resolved = resolve_path(match.group(1), context)
        if resolved is MISSING:
            return match.group(0)
        return _to_text(resolved)
    
    return PLACEHOLDER_PATTERN.sub(replace, value)


def resolve_value(value: Any, context: Dict[str, Any]) -> Any:
    """Like substitute, but a string that is exactly one placeholder keeps the resolved type"""
    if isinstance(value, str):
        match = PLACEHOLDER_PATTERN.fullmatch(value.strip())
        if match:
            resolved = resolve_path(match.group(1), context)
            return value if resolved is MISSING else resolved
    return substitute(value, context)


def substitute_recursive(value: Any, context: Dict[str, Any]) -> Any:
    """Recursively walks dicts and lists substituting every string"""
    if isinstance(value, str):
        return substitute(value, context)
    
    elif isinstance(value, dict):
        return {k: substitute_recursive(v, context) for k, v in value.items()}
    
    elif isinstance(value, list):
        return [substitute_recursive(item, context) for item in value]
    
    else:
        return value


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None or isinstance(value, (bool, dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def resolve_recursive(value: Any, context: Dict[str, Any]) -> Any:
    """Recursively walks dicts and lists, keeping the type of whole-placeholder leaves"""
    if isinstance(value, dict):
        return {k: resolve_recursive(v, context) for k, v in value.items()}
    if isinstance(value, list):
        return [resolve_recursive(item, context) for item in value]
    return resolve_value(value, context)
