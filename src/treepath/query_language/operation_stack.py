"""Operator-precedence stack evaluation of filter expressions."""

from __future__ import annotations

import operator as op
from collections.abc import Callable
from dataclasses import dataclass

from treepath.query_language.ast import (
    FilterExpression,
    GroupOperand,
    LiteralOperand,
    Operand,
    OperationStep,
    Path,
    PathOperand,
    Value,
)
from treepath.query_language.errors import QueryLanguageError


type OperandResolver = Callable[[Path, int], Value]

PRECEDENCE: dict[str, int] = {
    "|": 1,
    "&": 2,
    "=": 3,
    "!=": 3,
    ">": 3,
    ">=": 3,
    "<": 3,
    "<=": 3,
}

_ORDERING: dict[str, Callable[[object, object], bool]] = {
    "=": op.eq,
    "!=": op.ne,
    ">": op.gt,
    ">=": op.ge,
    "<": op.lt,
    "<=": op.le,
}

# Cross-type order: Number < String < Bool < anything else (null, containers)
NUMBER_RANK = 0
STRING_RANK = 1
BOOL_RANK = 2
OTHER_RANK = 3


def type_rank(value: Value) -> int:
    """Return the cross-type ordering rank of a value."""
    if isinstance(value, bool):
        return BOOL_RANK
    if isinstance(value, int | float):
        return NUMBER_RANK
    if isinstance(value, str):
        return STRING_RANK
    return OTHER_RANK


def as_boolean(value: Value) -> bool:
    """Return filter truthiness of a value.

    Containers are truthy when non-empty, strings when they read `true`
    ignoring case, numbers when non-zero.
    """
    if value is None:
        return False
    if isinstance(value, list | dict):
        return len(value) > 0
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def compare_values(operator: str, left: Value, right: Value) -> bool:
    """Apply one relational operator with the cross-type policy."""
    left_rank = type_rank(left)
    right_rank = type_rank(right)
    if left_rank != right_rank:
        if operator == "=":
            return False
        if operator == "!=":
            return True
        return _ORDERING[operator](left_rank, right_rank)

    if left_rank == OTHER_RANK:
        equal = left == right
        if operator in ("=", ">=", "<="):
            return equal
        if operator == "!=":
            return not equal
        return False

    return _ORDERING[operator](left, right)


def _combine(operator: str, left: Value, right: Value) -> Value:
    if operator == "&":
        return as_boolean(left) and as_boolean(right)
    if operator == "|":
        return as_boolean(left) or as_boolean(right)
    if operator in _ORDERING:
        return compare_values(operator, left, right)
    raise QueryLanguageError(f"Unsupported filter operator: {operator}")


@dataclass(slots=True)
class _Entry:
    operator: str | None
    value: Value


class OperationStack:
    """Evaluate filter expressions for candidates of one array.

    Operand paths are resolved through `resolver`, which receives the path
    and the candidate index so position-dependent functions see the
    candidate's place in the original array.
    """

    def __init__(self, resolver: OperandResolver) -> None:
        self.resolver = resolver

    def evaluate(self, expression: FilterExpression, index: int) -> bool:
        """Return whether the candidate at index satisfies the expression."""
        return as_boolean(self._evaluate_expression(expression, index))

    def _evaluate_expression(self, expression: FilterExpression, index: int) -> Value:
        stack: list[_Entry] = []
        steps = expression.steps
        position = 0
        while position < len(steps):
            step = steps[position]
            position += 1
            if step.operator is None:
                stack.append(_Entry(None, self._evaluate_step(step, index)))
                continue

            precedence = PRECEDENCE[step.operator]
            self._collapse(stack, precedence)
            if self._short_circuits(step.operator, stack[-1].value):
                stack[-1].value = step.operator == "|"
                while position < len(steps):
                    following = steps[position].operator
                    if following is None or PRECEDENCE[following] <= precedence:
                        break
                    position += 1
                continue

            stack.append(_Entry(step.operator, self._evaluate_step(step, index)))

        self._collapse(stack, 0)
        return stack[0].value if stack else None

    @staticmethod
    def _short_circuits(operator: str, left: Value) -> bool:
        if operator == "&":
            return not as_boolean(left)
        if operator == "|":
            return as_boolean(left)
        return False

    @staticmethod
    def _collapse(stack: list[_Entry], precedence: int) -> None:
        """Apply stacked operators binding at least as tightly as precedence."""
        while len(stack) > 1:
            top = stack[-1]
            if top.operator is None or PRECEDENCE[top.operator] < precedence:
                return
            stack.pop()
            stack[-1].value = _combine(top.operator, stack[-1].value, top.value)

    def _evaluate_step(self, step: OperationStep, index: int) -> Value:
        value = self._evaluate_operand(step.operand, index)
        if step.negations == 0:
            return value
        result = as_boolean(value)
        return result if step.negations % 2 == 0 else not result

    def _evaluate_operand(self, operand: Operand, index: int) -> Value:
        if isinstance(operand, LiteralOperand):
            return operand.value
        if isinstance(operand, PathOperand):
            return self.resolver(operand.path, index)
        if isinstance(operand, GroupOperand):
            return self._evaluate_expression(operand.expression, index)
        raise QueryLanguageError("Unsupported filter operand")
