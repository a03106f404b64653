"""Null and boolean predicates."""

from __future__ import annotations

from treepath.query_language.ast import Value
from treepath.query_language.functions.params import optional_path_target
from treepath.query_language.operation_stack import as_boolean
from treepath.query_language.registry import FunctionRegistry
from treepath.query_language.runtime import EvalContext


def func_is_null(node: Value, params: list[str], context: EvalContext) -> Value:
    return optional_path_target(node, params, context) is None


def func_is_not_null(node: Value, params: list[str], context: EvalContext) -> Value:
    return optional_path_target(node, params, context) is not None


def func_not(node: Value, params: list[str], context: EvalContext) -> Value:
    """Negate filter truthiness."""
    return not as_boolean(optional_path_target(node, params, context))


def func_is_empty(node: Value, params: list[str], context: EvalContext) -> Value:
    """Return whether a value is null, empty text or an empty container."""
    target = optional_path_target(node, params, context)
    if target is None:
        return True
    if isinstance(target, str | list | dict):
        return len(target) == 0
    return False


def register(registry: FunctionRegistry) -> None:
    """Register logical functions."""
    registry.register("isNull", func_is_null, max_args=1)
    registry.register("isNotNull", func_is_not_null, max_args=1)
    registry.register("not", func_not, max_args=1)
    registry.register("isEmpty", func_is_empty, max_args=1, array_aware=True)
