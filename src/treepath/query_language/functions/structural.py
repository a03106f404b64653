"""Object construction and structural conversion functions."""

from __future__ import annotations

import csv
import io
import json

from treepath.query_language.ast import Value
from treepath.query_language.errors import QueryArgumentError
from treepath.query_language.functions.params import (
    NamePath,
    evaluate_entry_name,
    is_value_node,
    map_text_values,
    name_path_pairs,
    optional_path_target,
    resolve_param,
    value_to_text,
)
from treepath.query_language.literals import is_literal, parse_literal
from treepath.query_language.parser import CURRENT_NODE
from treepath.query_language.registry import FunctionRegistry
from treepath.query_language.runtime import EvalContext


def _coalesce_one(node: Value, params: list[str], context: EvalContext) -> Value:
    if isinstance(node, dict):
        for token in params:
            value = resolve_param(node, token, context)
            if value is not None:
                return value
        return None
    if isinstance(node, list):
        return None
    if node is not None:
        return node
    for token in params:
        if not is_literal(token):
            continue
        value = parse_literal(token)
        if value is not None:
            return value
    return None


def func_coalesce(node: Value, params: list[str], context: EvalContext) -> Value:
    """Return the first non-null of the node or its fallbacks.

    For objects each parameter is a path or literal tried in order. A null
    value node falls back to the first non-null literal parameter.
    """
    if isinstance(node, list):
        return [
            _coalesce_one(element, params, context.at(index))
            for index, element in enumerate(node)
        ]
    return _coalesce_one(node, params, context)


def _collect_csv_values(values: list[Value], node: list[Value] | dict[str, Value]) -> None:
    elements = node.values() if isinstance(node, dict) else node
    for element in elements:
        if isinstance(element, list | dict):
            _collect_csv_values(values, element)
        elif element is not None:
            values.append(element)


def func_csv(node: Value, params: list[str], context: EvalContext) -> Value:
    """Render the flattened values of a container as one CSV record."""
    container = optional_path_target(node, params, context)
    if not isinstance(container, list | dict):
        return None
    values: list[Value] = []
    _collect_csv_values(values, container)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="")
    writer.writerow([value_to_text(value) for value in values])
    return buffer.getvalue()


def _build_object(
    base: dict[str, Value],
    node: Value,
    pairs: list[NamePath],
    context: EvalContext,
) -> dict[str, Value]:
    """Apply name/path pairs to base, evaluating paths against node."""
    for name, path in pairs:
        if name == CURRENT_NODE:
            if isinstance(node, dict):
                base.update(node)
            continue
        key = evaluate_entry_name(name, node, context)
        if path is None:
            base.pop(key, None)
        else:
            base[key] = resolve_param(node, path, context)
    return base


def func_field(node: Value, params: list[str], context: EvalContext) -> Value:
    """Return a copy of each object with fields added, replaced or removed."""
    pairs = name_path_pairs(params)
    if isinstance(node, dict):
        return _build_object(dict(node), node, pairs, context)
    if isinstance(node, list):
        return [
            _build_object(dict(element), element, pairs, context.at(index))
            if isinstance(element, dict)
            else None
            for index, element in enumerate(node)
        ]
    return None


def func_map(node: Value, params: list[str], context: EvalContext) -> Value:
    """Build a new object per element from name/path pairs."""
    pairs = name_path_pairs(params)
    if isinstance(node, list):
        return [
            _build_object({}, element, pairs, context.at(index))
            for index, element in enumerate(node)
        ]
    return _build_object({}, node, pairs, context)


def _parse_json(text: str) -> Value:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise QueryArgumentError(f"Invalid JSON text: {exc}") from exc


def func_json(node: Value, params: list[str], context: EvalContext) -> Value:
    """Parse JSON text, per element over arrays."""
    return map_text_values(optional_path_target(node, params, context), _parse_json)


def func_to_text(node: Value, params: list[str], context: EvalContext) -> Value:
    """Render a value node as text."""
    target = optional_path_target(node, params, context)
    return value_to_text(target) if is_value_node(target) else None


def register(registry: FunctionRegistry) -> None:
    """Register structural functions."""
    registry.register("coalesce", func_coalesce, min_args=1, max_args=-1, array_aware=True)
    registry.register("csv", func_csv, max_args=1, array_aware=True)
    registry.register("field", func_field, min_args=1, max_args=-1, array_aware=True)
    registry.register("map", func_map, min_args=1, max_args=-1, array_aware=True)
    registry.register("json", func_json, max_args=1, array_aware=True)
    registry.register("toText", func_to_text, max_args=1)
