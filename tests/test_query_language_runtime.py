"""Tests for path resolution and broadcast semantics."""

from __future__ import annotations

import copy
import logging

import pytest

from treepath.query_language.ast import FieldStep, Path, SliceStep, Value
from treepath.query_language.errors import (
    QueryArgumentError,
    QuerySyntaxError,
    UnknownFunctionError,
)
from treepath.query_language.functions import DEFAULT_REGISTRY
from treepath.query_language.parser import parse_path
from treepath.query_language.runtime import (
    EvalContext,
    filter_array,
    get_node,
    resolve,
    resolve_field,
    resolve_index,
    slice_array,
)


def _context() -> EvalContext:
    return EvalContext(DEFAULT_REGISTRY)


def _get(node: Value, text: str) -> Value:
    return get_node(node, text, _context())


ORDERS: dict[str, Value] = {
    "orders": [
        {"id": "A1", "qty": 2, "price": 10.5, "tags": ["new", "gift"]},
        {"id": "B2", "qty": 1, "price": 3, "tags": []},
        {"id": "C3", "qty": 5, "price": 7.25, "tags": ["bulk"]},
    ],
    "owner": {"name": "Ada", "address": {"city": "London"}},
}


def test_index_scenarios() -> None:
    """Positive and negative indices should address array elements."""
    context: dict[str, Value] = {"a": [1, 2, 3]}

    assert _get(context, "a[2]") == 3
    assert _get(context, "a[-1]") == 3
    assert _get(context, "a[3]") is None
    assert _get(context, "a[-4]") is None


def test_filter_scenario_keeps_matches() -> None:
    """Filters should keep every matching element."""
    context: dict[str, Value] = {"list": [{"v": 5}, {"v": 1}, {"v": 9}]}

    assert _get(context, "list[v>3].v") == [5, 9]


def test_nested_field_access() -> None:
    """Field steps should descend into objects."""
    assert _get(ORDERS, "owner.address.city") == "London"
    assert _get(ORDERS, "owner.missing.city") is None


def test_field_on_scalar_is_null() -> None:
    """Field access on a scalar should yield null rather than fail."""
    assert _get(ORDERS, "owner.name.first") is None
    assert resolve_field(42, "x") is None


def test_broadcast_law() -> None:
    """Field over an array should equal per-element field access."""
    orders = ORDERS["orders"]
    assert isinstance(orders, list)
    path = Path("qty", (FieldStep("qty"),))
    broadcast = resolve(orders, path, _context())

    assert isinstance(broadcast, list)
    assert len(broadcast) == len(orders)
    assert broadcast == [resolve(element, path, _context()) for element in orders]


def test_broadcast_inserts_null_for_non_objects() -> None:
    """Broadcast should keep array length with null for inapplicable elements."""
    assert _get([{"a": 1}, 2, None, {"b": 3}], "a") == [1, None, None, None]


def test_broadcast_is_recursive_over_nested_arrays() -> None:
    """Field access should broadcast through nested arrays."""
    assert _get([[{"a": 1}], [{"a": 2}, {"a": 3}]], "a") == [[1], [2, 3]]


def test_index_and_slice_do_not_broadcast() -> None:
    """Index applies to the array itself, not to each element."""
    assert _get(ORDERS, "orders.tags[0]") == ["new", "gift"]
    assert _get(ORDERS, "orders.id[1:]") == ["B2", "C3"]


def test_current_node_is_identity() -> None:
    """The current-node marker should return its input unchanged."""
    assert _get(ORDERS, "owner.?") == ORDERS["owner"]
    assert _get([1, 2], "?") == [1, 2]


@pytest.mark.parametrize(
    ("start", "end", "step", "expected"),
    [
        (None, None, None, [0, 1, 2, 3, 4]),
        (1, 3, None, [1, 2]),
        (-2, None, None, [3, 4]),
        (None, -1, None, [0, 1, 2, 3]),
        (0, 100, 2, [0, 2, 4]),
        (None, None, -1, [4, 3, 2, 1, 0]),
        (1, 4, -1, [3, 2, 1]),
        (-1, 5, -1, [4]),
        (3, 1, None, []),
        (-100, 2, None, [0, 1]),
    ],
)
def test_slice_array(
    start: int | None, end: int | None, step: int | None, expected: list[int]
) -> None:
    """Slices should normalize negatives, clamp and walk in step direction."""
    assert slice_array([0, 1, 2, 3, 4], start, end, step) == expected


def test_slice_law() -> None:
    """Identity slice returns the array and a reverse slice from -1 the last element."""
    values: list[Value] = ["a", "b", "c", "d"]
    n = len(values)
    context = _context()

    assert resolve(values, Path("", (SliceStep(0, n, 1),)), context) == values
    assert resolve(values, Path("", (SliceStep(-1, n, -1),)), context) == [values[n - 1]]


def test_slice_step_zero_is_fatal() -> None:
    """A zero slice step should raise an argument error."""
    with pytest.raises(QueryArgumentError, match="Slice step cannot be zero"):
        _get([1, 2, 3], "[::0]")


def test_slice_on_non_array_is_null() -> None:
    """Slicing a non-array value should yield null."""
    assert slice_array({"a": 1}, 0, 1, None) is None
    assert resolve_index("abc", 0) is None


def test_filter_coerces_object_to_array() -> None:
    """A filter on an object should treat it as a one-element array."""
    assert _get(ORDERS, "owner[name='Ada'].name") == ["Ada"]
    assert _get(ORDERS, "owner[name='Bob']") == []


def test_filter_on_null_is_null() -> None:
    """A filter applied to null should yield null."""
    assert _get({"a": None}, "a[x=1]") is None


def test_filter_idempotence() -> None:
    """Filtering a filtered result with the same predicate changes nothing."""
    once = _get(ORDERS, "orders[qty>1]")

    assert get_node(once, "[qty>1]", _context()) == once
    assert [order["id"] for order in once] == ["A1", "C3"]  # type: ignore[index]


def test_filter_with_index_function() -> None:
    """Operands should see the candidate's index in the original array."""
    assert _get(ORDERS, "orders[index()>0].id") == ["B2", "C3"]
    assert _get(["a", "b", "c"], "[index()=1]") == ["b"]


def test_filter_with_current_node_operand() -> None:
    """The current-node marker compares the candidate itself."""
    assert _get(["x", "y", "x"], "[?='x']") == ["x", "x"]


def test_filter_with_nested_function_operand() -> None:
    """Operands may call functions on the candidate."""
    assert _get(ORDERS, "orders[tags.size()>0].id") == ["A1", "C3"]


def test_filter_logs_kept_count(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Filter evaluation should log kept and candidate counts at debug level."""
    monkeypatch.setattr(logging.getLogger("treepath"), "propagate", True)
    expression = parse_path("[qty>1]").steps[0].expression  # type: ignore[attr-defined]
    with caplog.at_level(logging.DEBUG, logger="treepath"):
        filter_array(ORDERS["orders"], expression, _context())

    assert "Filter [qty>1] kept 2 of 3 candidates" in caplog.text


def test_unknown_function_fails() -> None:
    """Calling an unregistered function should fail with its name."""
    with pytest.raises(UnknownFunctionError, match="unknown function: nope"):
        _get(ORDERS, "nope()")


def test_resolve_never_mutates_input() -> None:
    """Evaluation of any path should leave the input structurally unchanged."""
    document = copy.deepcopy(ORDERS)
    paths = [
        "orders[qty>1]",
        "orders.sort(qty, -1)",
        "orders.field(total:price, tags:)",
        "orders.map(id, ?)",
        "orders.reverse()",
        "orders.tags.flatten()",
        "owner.field(?, name:'Bob')",
    ]
    for text in paths:
        _get(document, text)

    assert document == ORDERS


def test_eval_context_at_returns_copy() -> None:
    """at() should not modify the original context."""
    context = _context()
    moved = context.at(3)

    assert context.index is None
    assert moved.index == 3
    assert moved.registry is context.registry


def test_dynamic_name_step_in_resolver_is_rejected() -> None:
    """Dynamic names are rejected before resolution reaches them."""
    with pytest.raises(QuerySyntaxError):
        _get(ORDERS, ":owner")
