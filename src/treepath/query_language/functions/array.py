"""Array-aware collection functions."""

from __future__ import annotations

import json

from treepath.query_language.ast import Value
from treepath.query_language.functions.params import (
    is_value_node,
    navigate,
    optional_path_target,
    param_as_int,
    param_as_number,
    param_as_text,
    value_to_text,
)
from treepath.query_language.literals import is_literal
from treepath.query_language.operation_stack import OTHER_RANK, type_rank
from treepath.query_language.registry import FunctionRegistry
from treepath.query_language.runtime import EvalContext, get_node, slice_array


def _sort_key(value: Value) -> tuple[int, object]:
    rank = type_rank(value)
    return (rank, 0 if rank == OTHER_RANK else value)


def func_sort(node: Value, params: list[str], context: EvalContext) -> Value:
    """Sort by value or by a path, a negative ordering sign reverses.

    Elements whose sort path resolves to null are placed last in both
    directions. A leading ordering literal ends the parameters, so any path
    after it is ignored.
    """
    if not isinstance(node, list):
        return node
    path: str | None = None
    ordering: int | float = 1
    if params:
        if is_literal(params[0]):
            ordering = param_as_number(node, params[0], context)
        else:
            path = params[0]
            if len(params) > 1:
                ordering = param_as_number(node, params[1], context)

    keyed: list[tuple[Value, Value]] = []
    missing: list[Value] = []
    for element in node:
        key = element
        if path is not None and isinstance(element, dict):
            key = get_node(element, path, context)
            if key is None:
                missing.append(element)
                continue
        keyed.append((key, element))

    keyed.sort(key=lambda item: _sort_key(item[0]), reverse=ordering < 0)
    return [element for _key, element in keyed] + missing


def _distinct_marker(value: Value) -> tuple[int, object]:
    rank = type_rank(value)
    if rank == OTHER_RANK:
        return (rank, json.dumps(value, sort_keys=True))
    return (rank, value)


def func_distinct(node: Value, _params: list[str], _context: EvalContext) -> Value:
    """Remove duplicate elements preserving first occurrence order."""
    if not isinstance(node, list):
        return node
    seen: set[tuple[int, object]] = set()
    output: list[Value] = []
    for element in node:
        marker = _distinct_marker(element)
        if marker in seen:
            continue
        seen.add(marker)
        output.append(element)
    return output


def func_reverse(node: Value, _params: list[str], _context: EvalContext) -> Value:
    """Reverse an array or the characters of a string."""
    if isinstance(node, str):
        return node[::-1]
    if isinstance(node, list):
        return list(reversed(node))
    return None


def func_slice(node: Value, params: list[str], context: EvalContext) -> Value:
    """Slice an array with `slice(start[, end[, step]])`."""
    if not isinstance(node, list):
        return node
    bounds = [param_as_int(node, token, context) for token in params]
    start = bounds[0]
    end = bounds[1] if len(bounds) > 1 else None
    step = bounds[2] if len(bounds) > 2 else None
    return slice_array(node, start, end, step)


def func_first(node: Value, _params: list[str], _context: EvalContext) -> Value:
    """Return the first element of an array."""
    if not isinstance(node, list):
        return node
    return node[0] if node else None


def func_last(node: Value, _params: list[str], _context: EvalContext) -> Value:
    """Return the last element of an array."""
    if not isinstance(node, list):
        return node
    return node[-1] if node else None


def func_size(node: Value, _params: list[str], _context: EvalContext) -> Value:
    """Return the element count of an array or object."""
    if isinstance(node, list | dict):
        return len(node)
    return None


def func_index(_node: Value, _params: list[str], context: EvalContext) -> Value:
    """Return the position of the current candidate in its array."""
    return context.index


def _numbers(node: Value, params: list[str], context: EvalContext) -> list[int | float] | None:
    """Collect numeric elements, optionally through a per-element path."""
    if not isinstance(node, list):
        return None
    path = params[0] if params else None
    values = [navigate(element, path, context) for element in node]
    return [
        value
        for value in values
        if isinstance(value, int | float) and not isinstance(value, bool)
    ]


def func_max(node: Value, params: list[str], context: EvalContext) -> Value:
    """Return the largest number of an array."""
    numbers = _numbers(node, params, context)
    return max(numbers) if numbers else None


def func_min(node: Value, params: list[str], context: EvalContext) -> Value:
    """Return the smallest number of an array."""
    numbers = _numbers(node, params, context)
    return min(numbers) if numbers else None


def func_sum(node: Value, params: list[str], context: EvalContext) -> Value:
    """Return the sum of the numbers of an array."""
    numbers = _numbers(node, params, context)
    return None if numbers is None else sum(numbers)


def func_avg(node: Value, params: list[str], context: EvalContext) -> Value:
    """Return the mean of the numbers of an array."""
    numbers = _numbers(node, params, context)
    return sum(numbers) / len(numbers) if numbers else None


def func_join(node: Value, params: list[str], context: EvalContext) -> Value:
    """Join the value elements of an array into text."""
    if not isinstance(node, list):
        return None
    separator = param_as_text(node, params[0], context) if params else ""
    return (separator or "").join(
        value_to_text(element) for element in node if is_value_node(element)
    )


def _flatten_into(output: list[Value], node: list[Value], level: int) -> None:
    for element in node:
        if not isinstance(element, list):
            output.append(element)
        elif level == 1:
            output.extend(element)
        else:
            _flatten_into(output, element, level - 1)


def func_flatten(node: Value, params: list[str], context: EvalContext) -> Value:
    """Flatten nested arrays by `flatten([path][, levels])`, one level by default."""
    path: str | None = None
    levels_token: str | None = None
    if len(params) == 2:
        path, levels_token = params
    elif params and is_literal(params[0]):
        levels_token = params[0]
    elif params:
        path = params[0]

    target = navigate(node, path, context)
    levels = 1 if levels_token is None else param_as_int(target, levels_token, context)
    if not isinstance(target, list) or levels < 1:
        return target
    output: list[Value] = []
    _flatten_into(output, target, levels)
    return output


def func_to_array(node: Value, params: list[str], context: EvalContext) -> Value:
    """Collect object values and nested array elements into one array."""
    container = optional_path_target(node, params, context)
    if isinstance(container, dict):
        return list(container.values())
    if not isinstance(container, list):
        return None
    output: list[Value] = []
    for element in container:
        if isinstance(element, list):
            output.extend(element)
        elif isinstance(element, dict):
            output.extend(element.values())
        else:
            output.append(element)
    return output


def register(registry: FunctionRegistry) -> None:
    """Register array functions."""
    registry.register("sort", func_sort, max_args=2, array_aware=True)
    registry.register("distinct", func_distinct, array_aware=True)
    registry.register("reverse", func_reverse, array_aware=True)
    registry.register("slice", func_slice, min_args=1, max_args=3, array_aware=True)
    registry.register("first", func_first, array_aware=True)
    registry.register("last", func_last, array_aware=True)
    registry.register("size", func_size, array_aware=True)
    registry.register("index", func_index, array_aware=True)
    registry.register("max", func_max, max_args=1, array_aware=True)
    registry.register("min", func_min, max_args=1, array_aware=True)
    registry.register("sum", func_sum, max_args=1, array_aware=True)
    registry.register("avg", func_avg, max_args=1, array_aware=True)
    registry.register("join", func_join, max_args=1, array_aware=True)
    registry.register("flatten", func_flatten, max_args=2, array_aware=True)
    registry.register("toArray", func_to_array, max_args=1, array_aware=True)
