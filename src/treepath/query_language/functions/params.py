"""Parameter helpers shared by standard library functions."""

from __future__ import annotations

import json
from collections.abc import Callable

from treepath.query_language.ast import FieldStep, Value
from treepath.query_language.errors import (
    MalformedLiteralError,
    QueryArgumentError,
    QuerySyntaxError,
)
from treepath.query_language.literals import is_literal, parse_literal
from treepath.query_language.parser import (
    CURRENT_NODE,
    DYNAMIC_NAME_MARKER,
    classify,
    parse_dynamic_name,
)
from treepath.query_language.runtime import EvalContext, get_node, resolve
from treepath.query_language.tokenizer import decompose_path, scan


type NamePath = tuple[str, str | None]


def resolve_param(node: Value, token: str, context: EvalContext) -> Value:
    """Resolve a parameter token as a literal or as a path against node."""
    if is_literal(token):
        return parse_literal(token)
    return get_node(node, token, context)


def to_int(value: Value, token: str) -> int:
    """Coerce a resolved parameter value to an integer."""
    if isinstance(value, bool):
        raise MalformedLiteralError(token, "Expected an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise MalformedLiteralError(token, "Expected an integer") from exc
    raise MalformedLiteralError(token, "Expected an integer")


def param_as_int(node: Value, token: str, context: EvalContext) -> int:
    """Resolve a parameter and require an integer."""
    return to_int(resolve_param(node, token, context), token)


def param_as_number(node: Value, token: str, context: EvalContext) -> int | float:
    """Resolve a parameter and require a number."""
    value = resolve_param(node, token, context)
    if isinstance(value, int | float) and not isinstance(value, bool):
        return value
    raise MalformedLiteralError(token, "Expected a number")


def value_to_text(value: Value) -> str:
    """Render a value as plain text."""
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def param_as_text(node: Value, token: str, context: EvalContext) -> str | None:
    """Resolve a parameter as text, None when it resolves to null."""
    value = resolve_param(node, token, context)
    if value is None:
        return None
    return value_to_text(value)


def is_value_node(value: Value) -> bool:
    """Return whether value is a non-null scalar."""
    return value is not None and not isinstance(value, list | dict)


def split_path_and_params(params: list[str], max_extra: int) -> tuple[str | None, list[str]]:
    """Split an optional leading path from typed parameters.

    The first token is a path when more than `max_extra` tokens were given.
    """
    if len(params) > max_extra:
        return (params[0], params[1:])
    return (None, params)


def navigate(node: Value, path: str | None, context: EvalContext) -> Value:
    """Resolve an optional leading path, returning node itself when absent."""
    if path is None:
        return node
    return get_node(node, path, context)


def optional_path_target(node: Value, params: list[str], context: EvalContext) -> Value:
    """Resolve the single optional path parameter of a function."""
    return navigate(node, params[0] if params else None, context)


def map_text_values(node: Value, transform: Callable[[str], Value]) -> Value:
    """Apply transform to text, per element over arrays, None for non-text."""
    if isinstance(node, list):
        return [transform(element) if isinstance(element, str) else None for element in node]
    if isinstance(node, str):
        return transform(node)
    return None


def check_element_name(name: str) -> str:
    """Validate an object key produced at evaluation time."""
    if "." in name:
        raise QuerySyntaxError("Illegal '.' in element name", name)
    return name


def last_element_name(path: str) -> str:
    """Return the last field name of a path, skipping function calls."""
    for token in reversed(decompose_path(path)):
        steps = classify(token)
        head = steps[0]
        if isinstance(head, FieldStep):
            return head.name
        if token == CURRENT_NODE:
            break
    raise QuerySyntaxError("Cannot derive an element name from path", path)


def _split_name_path(token: str) -> NamePath:
    """Split `name:path` at the first top-level colon after the name."""
    skip_leading = token.startswith(DYNAMIC_NAME_MARKER)
    for position, char, depth in scan(token):
        if char != DYNAMIC_NAME_MARKER or depth != 0:
            continue
        if skip_leading and position == 0:
            continue
        name = token[:position].strip()
        path = token[position + 1 :].strip()
        return (name, path or None)
    if skip_leading:
        raise QuerySyntaxError("Missing path for dynamic name", token)
    return (last_element_name(token), token)


def name_path_pairs(params: list[str]) -> list[NamePath]:
    """Parse object constructor arguments.

    Accepted forms are `name:path`, `name:` to remove a key, `?` to merge the
    current object, `:namePath:path` for a dynamic key and a bare `path`
    named after its last field.
    """
    pairs: list[NamePath] = []
    for token in params:
        if token == CURRENT_NODE:
            pairs.append((CURRENT_NODE, None))
            continue
        name, path = _split_name_path(token)
        if not name or name == DYNAMIC_NAME_MARKER:
            raise QuerySyntaxError("Missing element name", token)
        if not name.startswith(DYNAMIC_NAME_MARKER):
            check_element_name(name)
        pairs.append((name, path))
    return pairs


def evaluate_entry_name(name: str, node: Value, context: EvalContext) -> str:
    """Return the destination key, resolving dynamic names against node."""
    if not name.startswith(DYNAMIC_NAME_MARKER):
        return name
    step = parse_dynamic_name(name, context.limits)
    value = resolve(node, step.path, context)
    if not is_value_node(value):
        raise QueryArgumentError(f"Dynamic name {name!r} must resolve to a value, got {value!r}")
    return check_element_name(value_to_text(value))
