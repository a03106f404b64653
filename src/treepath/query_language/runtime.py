"""Path resolution with array broadcast semantics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import UTC, tzinfo

from treepath.query_language.ast import (
    CurrentNodeStep,
    DynamicNameStep,
    FieldStep,
    FilterExpression,
    FilterStep,
    FunctionStep,
    IndexStep,
    Path,
    SliceStep,
    Step,
    Value,
)
from treepath.query_language.errors import (
    QueryArgumentError,
    QueryLanguageError,
    QuerySyntaxError,
)
from treepath.query_language.limits import DEFAULT_PARSE_LIMITS, ParseLimits
from treepath.query_language.operation_stack import OperationStack
from treepath.query_language.parser import parse_path
from treepath.query_language.registry import FunctionRegistry


logger = logging.getLogger("treepath")


@dataclass(frozen=True, slots=True)
class EvalContext:
    """Execution context for path evaluation.

    `index` is the position of the current candidate within the array it was
    taken from, or None outside filters and broadcast function calls. `zone`
    is the time zone local date-times are converted from and to.
    """

    registry: FunctionRegistry
    index: int | None = None
    limits: ParseLimits = DEFAULT_PARSE_LIMITS
    zone: tzinfo = UTC

    def at(self, index: int | None) -> EvalContext:
        """Return a copy of the context positioned at index."""
        return replace(self, index=index)


def resolve(node: Value, path: Path, context: EvalContext) -> Value:
    """Apply path steps left to right starting from node."""
    current = node
    for step in path.steps:
        current = apply_step(current, step, context)
    return current


def resolve_at(array: list[Value], index: int, path: Path, context: EvalContext) -> Value:
    """Resolve path against one array element, threading its index."""
    return resolve(array[index], path, context.at(index))


def get_node(node: Value, text: str, context: EvalContext) -> Value:
    """Parse path text and resolve it against node."""
    return resolve(node, parse_path(text, context.limits), context)


def apply_step(node: Value, step: Step, context: EvalContext) -> Value:
    """Apply one step to the value produced by the previous step."""
    match step:
        case FieldStep(name=name):
            return resolve_field(node, name)
        case IndexStep(index=index):
            return resolve_index(node, index)
        case SliceStep(start=start, end=end, step=stride):
            return slice_array(node, start, end, stride)
        case FilterStep(expression=expression):
            return filter_array(node, expression, context)
        case FunctionStep(name=name, raw_args=raw_args):
            return context.registry.invoke(name, raw_args, node, context)
        case CurrentNodeStep():
            return node
        case DynamicNameStep(path=dynamic_path):
            raise QuerySyntaxError(
                "Dynamic name is only allowed as an object key", f":{dynamic_path.text}"
            )
    raise QueryLanguageError(f"Unsupported path step: {type(step).__name__}")


def resolve_field(node: Value, name: str) -> Value:
    """Resolve object member access, broadcasting over arrays."""
    if isinstance(node, dict):
        return node.get(name)
    if isinstance(node, list):
        return [resolve_field(element, name) for element in node]
    return None


def resolve_index(node: Value, index: int) -> Value:
    """Resolve array element access with None for misses."""
    if not isinstance(node, list):
        return None
    position = index + len(node) if index < 0 else index
    if 0 <= position < len(node):
        return node[position]
    return None


def _clamp(value: int, length: int) -> int:
    if value < 0:
        value += length
    return min(max(value, 0), length)


def slice_array(node: Value, start: int | None, end: int | None, step: int | None) -> Value:
    """Return an array sub-sequence with negative index and step semantics."""
    if not isinstance(node, list):
        return None
    stride = 1 if step is None else step
    if stride == 0:
        raise QueryArgumentError("Slice step cannot be zero")
    length = len(node)
    first = 0 if start is None else _clamp(start, length)
    last = length if end is None else _clamp(end, length)
    if stride > 0:
        return [node[position] for position in range(first, last, stride)]
    return [node[position] for position in range(last - 1, first - 1, stride)]


def filter_array(node: Value, expression: FilterExpression, context: EvalContext) -> Value:
    """Keep candidates of the array-coerced node satisfying the filter."""
    if node is None:
        return None
    candidates = node if isinstance(node, list) else [node]

    def resolve_operand(path: Path, index: int) -> Value:
        return resolve_at(candidates, index, path, context)

    stack = OperationStack(resolve_operand)
    kept = [
        candidate
        for index, candidate in enumerate(candidates)
        if stack.evaluate(expression, index)
    ]
    logger.debug(
        "Filter [%s] kept %d of %d candidates", expression.text, len(kept), len(candidates)
    )
    return kept
