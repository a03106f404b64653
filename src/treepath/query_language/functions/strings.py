"""Text functions applied per element by the dispatcher."""

from __future__ import annotations

import html
from collections.abc import Callable

from parsy import ParseError

from treepath.query_language.ast import Value
from treepath.query_language.functions.params import (
    is_value_node,
    optional_path_target,
    param_as_text,
    resolve_param,
    value_to_text,
)
from treepath.query_language.literals import FLOAT_TOKEN, INTEGER_TOKEN
from treepath.query_language.registry import FunctionImpl, FunctionRegistry
from treepath.query_language.runtime import EvalContext


def _text_function(transform: Callable[[str], Value]) -> FunctionImpl:
    """Build a function applying transform to text, None for other values."""

    def impl(node: Value, params: list[str], context: EvalContext) -> Value:
        target = optional_path_target(node, params, context)
        return transform(target) if isinstance(target, str) else None

    return impl


def func_concat(node: Value, params: list[str], context: EvalContext) -> Value:
    """Concatenate resolved parameters, None if any is not a value."""
    parts: list[str] = []
    for token in params:
        value = resolve_param(node, token, context)
        if not is_value_node(value):
            return None
        parts.append(value_to_text(value))
    return "".join(parts)


def _text_predicate(check: Callable[[str, str], bool]) -> FunctionImpl:
    """Build a function testing node text against one text parameter."""

    def impl(node: Value, params: list[str], context: EvalContext) -> Value:
        if not isinstance(node, str):
            return None
        other = param_as_text(node, params[0], context)
        return None if other is None else check(node, other)

    return impl


def func_replace(node: Value, params: list[str], context: EvalContext) -> Value:
    """Replace every occurrence of the target text."""
    if not isinstance(node, str):
        return None
    target = param_as_text(node, params[0], context)
    replacement = param_as_text(node, params[1], context)
    if target is None or replacement is None:
        return None
    return node.replace(target, replacement)


def _to_number(text: str) -> Value:
    stripped = text.strip()
    parser = FLOAT_TOKEN if "." in stripped else INTEGER_TOKEN
    try:
        return parser.parse(stripped)
    except ParseError:
        return None


def func_to_number(node: Value, params: list[str], context: EvalContext) -> Value:
    """Convert text to a number, None when it is not numeric."""
    target = optional_path_target(node, params, context)
    if isinstance(target, bool):
        return None
    if isinstance(target, int | float):
        return target
    if isinstance(target, str):
        return _to_number(target)
    return None


def register(registry: FunctionRegistry) -> None:
    """Register text functions."""
    registry.register("upperCase", _text_function(str.upper), max_args=1)
    registry.register("lowerCase", _text_function(str.lower), max_args=1)
    registry.register("trim", _text_function(str.strip), max_args=1)
    registry.register("length", _text_function(len), max_args=1)
    registry.register("unescapeHtml", _text_function(html.unescape), max_args=1)
    registry.register("concat", func_concat, min_args=1, max_args=-1)
    registry.register("replace", func_replace, min_args=2, max_args=2)
    registry.register("startsWith", _text_predicate(str.startswith), min_args=1, max_args=1)
    registry.register("endsWith", _text_predicate(str.endswith), min_args=1, max_args=1)
    registry.register(
        "contains", _text_predicate(lambda text, part: part in text), min_args=1, max_args=1
    )
    registry.register("toNumber", func_to_number, max_args=1)
