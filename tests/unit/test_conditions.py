"""
Unit tests for condition evaluation.
"""

import pytest
from miniapp_flows.engine.conditions import evaluate_condition, evaluate_all
from miniapp_shared.types import Condition


def cond(field, operator, value):
    return Condition(field=field, operator=operator, value=value)


def test_eq_on_nested_path():
    """eq walks dotted paths into nested dicts"""
    assert evaluate_condition(cond("a.b", "eq", 5), {"a": {"b": 5}}) is True
    assert evaluate_condition(cond("a.b", "eq", 5), {"a": {"b": 4}}) is False


def test_ne():
    """ne is the negation of eq for resolved values"""
    assert evaluate_condition(cond("status", "ne", "error"), {"status": "success"}) is True
    assert evaluate_condition(cond("status", "ne", "success"), {"status": "success"}) is False


@pytest.mark.parametrize("operator", ["eq", "ne", "gt", "lt", "gte", "lte", "contains"])
def test_missing_path_never_passes(operator):
    """A path that does not resolve fails every operator"""
    assert evaluate_condition(cond("missing.deep.value", operator, 1), {"missing": {}}) is False


def test_path_through_none_is_missing():
    """Walking through None does not raise"""
    assert evaluate_condition(cond("a.b.c", "eq", 1), {"a": {"b": None}}) is False


def test_ordering_operators():
    """Numeric comparisons"""
    context = {"lastResult": {"data": {"v": 100}}}

    assert evaluate_condition(cond("lastResult.data.v", "gte", 100), context) is True
    assert evaluate_condition(cond("lastResult.data.v", "gt", 100), context) is False
    assert evaluate_condition(cond("lastResult.data.v", "lt", 150.5), context) is True
    assert evaluate_condition(cond("lastResult.data.v", "lte", 99), context) is False


def test_string_ordering_is_lexicographic():
    """Two strings compare lexicographically"""
    assert evaluate_condition(cond("name", "lt", "bob"), {"name": "alice"}) is True


def test_ordering_with_incomparable_types_fails():
    """Mixed string/number comparisons fail instead of raising"""
    assert evaluate_condition(cond("v", "gt", 10), {"v": "100"}) is False
    assert evaluate_condition(cond("v", "lt", "z"), {"v": 3}) is False


def test_booleans_are_not_numbers():
    """True does not equal 1"""
    assert evaluate_condition(cond("flag", "eq", 1), {"flag": True}) is False
    assert evaluate_condition(cond("flag", "eq", True), {"flag": True}) is True


def test_contains_substring():
    """contains matches substrings"""
    assert evaluate_condition(cond("a", "contains", "world"), {"a": "hello world"}) is True
    assert evaluate_condition(cond("a", "contains", "mars"), {"a": "hello world"}) is False


def test_contains_list_member():
    """contains matches list elements"""
    assert evaluate_condition(cond("tags", "contains", "vip"), {"tags": ["new", "vip"]}) is True
    assert evaluate_condition(cond("tags", "contains", "gold"), {"tags": ["new", "vip"]}) is False


def test_contains_on_other_types_fails():
    """contains on a number or dict fails"""
    assert evaluate_condition(cond("n", "contains", "1"), {"n": 123}) is False
    assert evaluate_condition(cond("d", "contains", "k"), {"d": {"k": 1}}) is False


def test_list_index_in_path():
    """Numeric path segments index into lists"""
    context = {"items": [{"price": 10}, {"price": 20}]}

    assert evaluate_condition(cond("items.1.price", "eq", 20), context) is True
    assert evaluate_condition(cond("items.5.price", "eq", 20), context) is False


def test_condition_value_from_context():
    """A value that is a single placeholder compares against the resolved value"""
    context = {"limit": 100, "lastResult": {"data": {"v": 150}}}

    assert evaluate_condition(cond("lastResult.data.v", "gt", "{{limit}}"), context) is True


def test_evaluate_all_is_conjunction():
    """All conditions must hold; an empty list holds vacuously"""
    context = {"a": 1, "b": "x"}

    assert evaluate_all([], context) is True
    assert evaluate_all([cond("a", "eq", 1), cond("b", "eq", "x")], context) is True
    assert evaluate_all([cond("a", "eq", 1), cond("b", "eq", "y")], context) is False
