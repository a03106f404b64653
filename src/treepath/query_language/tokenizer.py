"""Decomposition of path and argument text into raw tokens."""

from __future__ import annotations

from collections.abc import Iterator

from treepath.query_language.errors import ArityError, QuerySyntaxError
from treepath.query_language.limits import (
    DEFAULT_PARSE_LIMITS,
    ParseLimits,
    check_depth,
    check_path_length,
)
from treepath.query_language.literals import QUOTE


PATH_SEPARATOR = "."
ARGUMENT_SEPARATOR = ","

_OPENERS = {"(": ")", "[": "]"}
_CLOSERS = {")": "(", "]": "["}


def scan(
    text: str,
    start: int = 0,
    limits: ParseLimits | None = None,
) -> Iterator[tuple[int, str, int]]:
    """Yield `(position, char, depth)` for every character outside quotes.

    Openers report the depth after entering them and closers the depth after
    leaving them, so a closer matching the bracket at `start` has depth 0.
    Raises `QuerySyntaxError` for unterminated quotes and unbalanced brackets
    once scanning reaches the end of the text.
    """
    limits = limits or DEFAULT_PARSE_LIMITS
    stack: list[tuple[str, int]] = []
    quote_start: int | None = None
    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if quote_start is not None:
            if char == QUOTE:
                if index + 1 < length and text[index + 1] == QUOTE:
                    index += 2
                    continue
                quote_start = None
        elif char == QUOTE:
            quote_start = index
        elif char in _OPENERS:
            stack.append((char, index))
            check_depth(len(stack), text, index, limits)
            yield (index, char, len(stack))
        elif char in _CLOSERS:
            if not stack or stack[-1][0] != _CLOSERS[char]:
                raise QuerySyntaxError(f"Unbalanced '{char}'", text, index)
            stack.pop()
            yield (index, char, len(stack))
        else:
            yield (index, char, len(stack))
        index += 1

    if quote_start is not None:
        raise QuerySyntaxError("Unterminated quote", text, quote_start)
    if stack:
        opener, position = stack[-1]
        raise QuerySyntaxError(f"Unbalanced '{opener}'", text, position)


def find_closing(text: str, start: int, limits: ParseLimits | None = None) -> int:
    """Return the position of the bracket closing the one at `start`."""
    if text[start] not in _OPENERS:
        raise QuerySyntaxError(f"Expected '(' or '[' at position {start}", text, start)
    for position, char, depth in scan(text, start, limits):
        if depth == 0 and char in _CLOSERS:
            return position
    raise QuerySyntaxError(f"Unbalanced '{text[start]}'", text, start)


def split_top_level(text: str, separator: str, limits: ParseLimits | None = None) -> list[str]:
    """Split text on separators outside quotes, brackets and parentheses."""
    check_path_length(text, limits)
    pieces: list[str] = []
    previous = 0
    for position, char, depth in scan(text, 0, limits):
        if char == separator and depth == 0:
            pieces.append(text[previous:position])
            previous = position + 1
    pieces.append(text[previous:])
    return pieces


def decompose_path(path: str, limits: ParseLimits | None = None) -> list[str]:
    """Split a path into raw step tokens on top-level `.` separators."""
    if not path.strip():
        raise QuerySyntaxError("Empty path", path)
    tokens = [piece.strip() for piece in split_top_level(path, PATH_SEPARATOR, limits)]
    if any(not token for token in tokens):
        raise QuerySyntaxError("Empty step", path)
    return tokens


def _describe_arity(min_args: int, max_args: int) -> str:
    if max_args < 0:
        return f"at least {min_args}"
    if min_args == max_args:
        return f"exactly {min_args}"
    return f"{min_args} to {max_args}"


def decompose_args(
    args: str,
    min_args: int,
    max_args: int,
    limits: ParseLimits | None = None,
    name: str | None = None,
) -> list[str]:
    """Split a function argument list and enforce its arity.

    Args:
        args: Raw text between the function parentheses
        min_args: Minimum number of arguments
        max_args: Maximum number of arguments, -1 for unbounded
        limits: Parse limits applied while scanning
        name: Function name used in error messages

    Returns:
        Stripped argument tokens

    Raises:
        ArityError: If the argument count is outside the declared bounds
        QuerySyntaxError: If the text is unbalanced or has an empty argument
    """
    tokens: list[str] = []
    if args.strip():
        tokens = [piece.strip() for piece in split_top_level(args, ARGUMENT_SEPARATOR, limits)]
        if any(not token for token in tokens):
            raise QuerySyntaxError("Empty argument", args)

    if len(tokens) < min_args or (max_args >= 0 and len(tokens) > max_args):
        subject = f"{name}()" if name else "Function"
        raise ArityError(
            f"{subject} expects {_describe_arity(min_args, max_args)} arguments, "
            f"got {len(tokens)}",
            args,
        )
    return tokens
