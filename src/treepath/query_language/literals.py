"""Literal tokens used in path arguments and filter operands."""

from __future__ import annotations

from parsy import ParseError, regex

from treepath.query_language.ast import Value
from treepath.query_language.errors import MalformedLiteralError


QUOTE = "'"

_KEYWORDS: dict[str, Value] = {"null": None, "true": True, "false": False}

INTEGER_TOKEN = regex(r"[-+]?\d+").map(int)
FLOAT_TOKEN = regex(r"[-+]?(?:\d+\.\d*|\.\d+)(?:[eE][-+]?\d+)?").map(float)


def quote_text(text: str) -> str:
    """Wrap text in quotes, doubling embedded quote characters."""
    return QUOTE + text.replace(QUOTE, QUOTE * 2) + QUOTE


def unquote_text(token: str) -> str:
    """Decode a quoted string literal token."""
    if len(token) < 2 or not token.startswith(QUOTE) or not token.endswith(QUOTE):
        raise MalformedLiteralError(token, "Not a valid string literal")
    body = token[1:-1]
    if QUOTE in body.replace(QUOTE * 2, ""):
        raise MalformedLiteralError(token, "Unescaped quote in string literal")
    return body.replace(QUOTE * 2, QUOTE)


def _parse_number(token: str) -> int | float:
    parser = FLOAT_TOKEN if "." in token else INTEGER_TOKEN
    try:
        return parser.parse(token)
    except ParseError as exc:
        raise MalformedLiteralError(token) from exc


def parse_literal(token: str) -> Value:
    """Convert a literal token into a value.

    Keywords `null`, `true` and `false` match case-insensitively. A token
    starting with a quote is a string literal, anything else must be an
    integer (no `.`) or a floating point number.
    """
    text = token.strip()
    if not text:
        raise MalformedLiteralError(token, "Empty literal")
    keyword = text.lower()
    if keyword in _KEYWORDS:
        return _KEYWORDS[keyword]
    if text.startswith(QUOTE):
        return unquote_text(text)
    return _parse_number(text)


def is_literal(token: str) -> bool:
    """Return whether a token is literal syntax rather than a path."""
    text = token.strip()
    if not text:
        return False
    if text.startswith(QUOTE) or text.lower() in _KEYWORDS:
        return True
    parser = FLOAT_TOKEN if "." in text else INTEGER_TOKEN
    try:
        parser.parse(text)
    except ParseError:
        return False
    return True
