"""Step classification and filter expression parsing."""

from __future__ import annotations

import logging
from functools import lru_cache

from parsy import ParseError, regex, seq, string

from treepath.query_language.ast import (
    CurrentNodeStep,
    DynamicNameStep,
    FieldStep,
    FilterExpression,
    FilterStep,
    FunctionStep,
    GroupOperand,
    IndexStep,
    LiteralOperand,
    Operand,
    OperationStep,
    Path,
    PathOperand,
    SliceStep,
    Step,
)
from treepath.query_language.errors import QuerySyntaxError
from treepath.query_language.limits import DEFAULT_PARSE_LIMITS, ParseLimits
from treepath.query_language.literals import INTEGER_TOKEN, is_literal, parse_literal
from treepath.query_language.tokenizer import decompose_path, find_closing, scan


CURRENT_NODE = "?"
DYNAMIC_NAME_MARKER = ":"

RELATIONAL_OPERATORS = ("!=", ">=", "<=", "=", ">", "<")
LOGICAL_OPERATORS = ("&", "|")
NOT_OPERATOR = "!"

_OPERATOR_CHARS = frozenset("=!<>&|")

_IDENTIFIER = regex(r"[A-Za-z_][A-Za-z0-9_]*")
_FIELD_NAME = regex(r"[^.\[\]()'?:,=<>!&|\s]+")
_WS = regex(r"\s*")
_SLICE_BOUND = (_WS >> INTEGER_TOKEN << _WS) | _WS.result(None)
_SLICE = seq(
    _SLICE_BOUND << string(":"),
    _SLICE_BOUND,
    (string(":") >> _SLICE_BOUND).optional(),
).combine(SliceStep)
_INDEX = (_WS >> INTEGER_TOKEN << _WS).map(IndexStep)


logger = logging.getLogger("treepath")


def _classify_bracket(content: str, token: str, position: int, limits: ParseLimits) -> Step:
    """Classify the text between `[` and `]` as index, slice or filter."""
    if not content.strip():
        raise QuerySyntaxError("Empty brackets", token, position)
    try:
        return _INDEX.parse(content)
    except ParseError:
        pass
    try:
        return _SLICE.parse(content)
    except ParseError:
        pass
    return FilterStep(content.strip(), parse_filter(content, limits))


def _classify_suffixes(token: str, position: int, limits: ParseLimits) -> list[Step]:
    """Classify trailing `[...]` suffixes starting at position."""
    steps: list[Step] = []
    while position < len(token):
        if token[position] != "[":
            raise QuerySyntaxError(f"Unexpected '{token[position]}'", token, position)
        close = find_closing(token, position, limits)
        steps.append(_classify_bracket(token[position + 1 : close], token, position, limits))
        position = close + 1
    return steps


def _classify_function(token: str, limits: ParseLimits) -> list[Step] | None:
    """Classify `name(args)` with optional suffixes, or return None."""
    try:
        name, remainder = _IDENTIFIER.parse_partial(token)
    except ParseError:
        return None
    if not remainder.startswith("("):
        return None
    open_position = len(name)
    close = find_closing(token, open_position, limits)
    raw_args = token[open_position + 1 : close]
    return [FunctionStep(name, raw_args), *_classify_suffixes(token, close + 1, limits)]


def classify(token: str, limits: ParseLimits | None = None) -> list[Step]:
    """Classify one raw path token into its steps.

    A token combining a field name with bracket suffixes such as `items[0]`
    yields the field step followed by one step per suffix. Any character left
    unconsumed is a syntax error.
    """
    limits = limits or DEFAULT_PARSE_LIMITS
    text = token.strip()
    if text == CURRENT_NODE:
        return [CurrentNodeStep()]
    if text.startswith(DYNAMIC_NAME_MARKER):
        raise QuerySyntaxError("Dynamic name is only allowed as an object key", token, 0)

    function_steps = _classify_function(text, limits)
    if function_steps is not None:
        return function_steps

    if text.startswith("["):
        return _classify_suffixes(text, 0, limits)

    try:
        name, remainder = _FIELD_NAME.parse_partial(text)
    except ParseError as exc:
        raise QuerySyntaxError("Invalid path step", token, 0) from exc
    return [FieldStep(name), *_classify_suffixes(text, len(text) - len(remainder), limits)]


@lru_cache(maxsize=512)
def _parse_path_cached(text: str, limits: ParseLimits) -> Path:
    logger.debug("Parsing path %r", text)
    steps: list[Step] = []
    for token in decompose_path(text, limits):
        steps.extend(classify(token, limits))
    return Path(text, tuple(steps))


def parse_path(text: str, limits: ParseLimits | None = None) -> Path:
    """Parse path text into an immutable, reusable `Path`."""
    return _parse_path_cached(text, limits or DEFAULT_PARSE_LIMITS)


def parse_dynamic_name(text: str, limits: ParseLimits | None = None) -> DynamicNameStep:
    """Parse `:path` object key text into a dynamic name step."""
    if not text.startswith(DYNAMIC_NAME_MARKER):
        raise QuerySyntaxError("Dynamic name must start with ':'", text, 0)
    return DynamicNameStep(parse_path(text[len(DYNAMIC_NAME_MARKER) :], limits))


def _skip_whitespace(text: str, position: int) -> int:
    while position < len(text) and text[position].isspace():
        position += 1
    return position


def _read_operator(text: str, position: int) -> tuple[str, int]:
    """Read a binary operator at position."""
    for operator in (*RELATIONAL_OPERATORS, *LOGICAL_OPERATORS):
        if text.startswith(operator, position):
            return (operator, position + len(operator))
    raise QuerySyntaxError("Expected operator", text, position)


def _operand_end(text: str, position: int, limits: ParseLimits) -> int:
    """Return where the operand starting at position ends."""
    for index, char, depth in scan(text, position, limits):
        if depth == 0 and char in _OPERATOR_CHARS:
            return index
    return len(text)


def _parse_operand(raw: str, limits: ParseLimits) -> Operand:
    if is_literal(raw):
        return LiteralOperand(parse_literal(raw))
    return PathOperand(parse_path(raw, limits))


def parse_filter(text: str, limits: ParseLimits | None = None) -> FilterExpression:
    """Parse filter text into an operator/operand sequence.

    Grammar, highest precedence first: unary `!`, relational
    `= != > >= < <=`, conjunction `&`, disjunction `|`. Parentheses at
    operand position group a sub-expression.
    """
    limits = limits or DEFAULT_PARSE_LIMITS
    if not text.strip():
        raise QuerySyntaxError("Empty filter", text)

    steps: list[OperationStep] = []
    operator: str | None = None
    position = 0
    while True:
        position = _skip_whitespace(text, position)
        negations = 0
        while text.startswith(NOT_OPERATOR, position) and not text.startswith("!=", position):
            negations += 1
            position = _skip_whitespace(text, position + 1)

        if position >= len(text):
            raise QuerySyntaxError("Missing operand", text, position)

        operand: Operand
        if text[position] == "(":
            close = find_closing(text, position, limits)
            operand = GroupOperand(parse_filter(text[position + 1 : close], limits))
            position = close + 1
        else:
            end = _operand_end(text, position, limits)
            raw = text[position:end].strip()
            if not raw:
                raise QuerySyntaxError("Missing operand", text, position)
            try:
                operand = _parse_operand(raw, limits)
            except QuerySyntaxError as exc:
                raise type(exc)(exc.message, text, position) from exc
            position = end
        steps.append(OperationStep(operator, negations, operand))

        position = _skip_whitespace(text, position)
        if position >= len(text):
            break
        operator, position = _read_operator(text, position)

    return FilterExpression(text.strip(), tuple(steps))
