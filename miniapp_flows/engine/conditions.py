"""Edge condition evaluation against an execution context."""

import operator
from numbers import Number
from typing import Any, Dict, Iterable
from miniapp_flows.engine.paths import MISSING, resolve_path
from miniapp_flows.engine.template import resolve_value
from miniapp_shared.types import Condition

_ORDERING_OPERATORS = {
    "gt": operator.gt,
    "lt": operator.lt,
    "gte": operator.ge,
    "lte": operator.le,
}


def evaluate_condition(condition: Condition, context: Dict[str, Any]) -> bool:
    """Evaluates one comparison; a path that does not resolve never passes"""
    field_value = resolve_path(condition.field, context)
    if field_value is MISSING:
        return False
    
    expected = resolve_value(condition.value, context)
    op = condition.operator
    
    if op == "eq":
        return _equals(field_value, expected)
    if op == "ne":
        return not _equals(field_value, expected)
    if op in _ORDERING_OPERATORS:
        if not _comparable(field_value, expected):
            return False
        return _ORDERING_OPERATORS[op](field_value, expected)
    if op == "contains":
        return _contains(field_value, expected)
    
    return False


def evaluate_all(conditions: Iterable[Condition], context: Dict[str, Any]) -> bool:
    return all(evaluate_condition(condition, context) for condition in conditions)


def _equals(left: Any, right: Any) -> bool:
    # True == 1 in Python; flow documents treat booleans and numbers as distinct
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _comparable(left: Any, right: Any) -> bool:
    if _is_number(left) and _is_number(right):
        return True
    return isinstance(left, str) and isinstance(right, str)


def _contains(container: Any, item: Any) -> bool:
    if isinstance(container, str):
        return isinstance(item, str) and item in container
    if isinstance(container, (list, tuple)):
        return any(_equals(element, item) for element in container)
    return False
