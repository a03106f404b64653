"""Compiler entrypoints for path expressions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import tzinfo

from treepath.query_language.ast import Path, Value
from treepath.query_language.functions import DEFAULT_REGISTRY
from treepath.query_language.limits import DEFAULT_PARSE_LIMITS, ParseLimits
from treepath.query_language.parser import parse_path
from treepath.query_language.registry import FunctionRegistry
from treepath.query_language.runtime import EvalContext, resolve


type CompiledPath = Callable[[Value], Value]


def build_context(
    registry: FunctionRegistry | None = None,
    limits: ParseLimits | None = None,
    zone: tzinfo | None = None,
) -> EvalContext:
    """Create a root evaluation context.

    `zone` defaults to UTC.
    """
    context = EvalContext(
        registry=DEFAULT_REGISTRY if registry is None else registry,
        limits=DEFAULT_PARSE_LIMITS if limits is None else limits,
    )
    return context if zone is None else replace(context, zone=zone)


def parse(text: str, limits: ParseLimits | None = None) -> Path:
    """Parse path text into steps."""
    return parse_path(text, limits)


def evaluate(
    node: Value,
    path: Path | str,
    registry: FunctionRegistry | None = None,
    limits: ParseLimits | None = None,
    zone: tzinfo | None = None,
) -> Value:
    """Evaluate a path against node.

    The input document is never mutated. Paths that match nothing yield None.
    """
    context = build_context(registry, limits, zone)
    if isinstance(path, str):
        path = parse_path(path, context.limits)
    return resolve(node, path, context)


def compile_path(
    path: Path,
    registry: FunctionRegistry | None = None,
    limits: ParseLimits | None = None,
    zone: tzinfo | None = None,
) -> CompiledPath:
    """Compile parsed path into an executable callable."""
    context = build_context(registry, limits, zone)

    def _compiled(node: Value) -> Value:
        return resolve(node, path, context)

    return _compiled


def compile_path_text(
    text: str,
    registry: FunctionRegistry | None = None,
    limits: ParseLimits | None = None,
    zone: tzinfo | None = None,
) -> CompiledPath:
    """Parse and compile path text."""
    return compile_path(parse_path(text, limits), registry, limits, zone)
