"""Parsed path steps and filter expression nodes."""

from __future__ import annotations

from dataclasses import dataclass


type Value = None | bool | int | float | str | list[Value] | dict[str, Value]


@dataclass(frozen=True, slots=True)
class Step:
    """Base path step type."""


@dataclass(frozen=True, slots=True)
class FieldStep(Step):
    """Object member access."""

    name: str


@dataclass(frozen=True, slots=True)
class IndexStep(Step):
    """Array element access, negative indices count from the end."""

    index: int


@dataclass(frozen=True, slots=True)
class SliceStep(Step):
    """Array sub-sequence with optional start, end and step."""

    start: int | None
    end: int | None
    step: int | None


@dataclass(frozen=True, slots=True)
class FilterStep(Step):
    """Boolean filter applied to each array element."""

    text: str
    expression: FilterExpression


@dataclass(frozen=True, slots=True)
class FunctionStep(Step):
    """Named function invocation with its unparsed argument list."""

    name: str
    raw_args: str


@dataclass(frozen=True, slots=True)
class CurrentNodeStep(Step):
    """Reference to the evaluation context itself."""


@dataclass(frozen=True, slots=True)
class DynamicNameStep(Step):
    """Object key computed by resolving a path at evaluation time."""

    path: Path


@dataclass(frozen=True, slots=True)
class Path:
    """Ordered sequence of steps parsed from one path string."""

    text: str
    steps: tuple[Step, ...]


@dataclass(frozen=True, slots=True)
class Operand:
    """Base filter operand type."""


@dataclass(frozen=True, slots=True)
class LiteralOperand(Operand):
    """Literal value operand."""

    value: Value


@dataclass(frozen=True, slots=True)
class PathOperand(Operand):
    """Path evaluated against the filter candidate."""

    path: Path


@dataclass(frozen=True, slots=True)
class GroupOperand(Operand):
    """Parenthesized sub-expression."""

    expression: FilterExpression


@dataclass(frozen=True, slots=True)
class OperationStep:
    """One `(operator, operand)` entry of a filter expression.

    The first step of an expression has no operator. `negations` counts the
    unary `!` prefixes applied to the operand.
    """

    operator: str | None
    negations: int
    operand: Operand


@dataclass(frozen=True, slots=True)
class FilterExpression:
    """Flat operator/operand sequence parsed from filter text."""

    text: str
    steps: tuple[OperationStep, ...]
