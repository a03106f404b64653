"""Errors for path parsing and evaluation."""

from __future__ import annotations


class QueryLanguageError(Exception):
    """Base exception for path query failures."""


def format_syntax_error(message: str, text: str, position: int | None) -> str:
    """Build syntax error message with an optional pointer into the text."""
    summary = f"{message} in '{text}'"
    if position is None or "\n" in text:
        return summary
    pointer = " " * max(position, 0) + "^"
    return f"{summary}\n\n{text}\n{pointer}"


class QuerySyntaxError(QueryLanguageError):
    """Raised when path or filter text does not conform to the grammar."""

    def __init__(self, message: str, text: str, position: int | None = None) -> None:
        super().__init__(format_syntax_error(message, text, position))
        self.message = message
        self.text = text
        self.position = position


class ArityError(QuerySyntaxError):
    """Raised when a function receives fewer or more arguments than declared."""


class LimitExceededError(QuerySyntaxError):
    """Raised when path text exceeds configured parse limits."""


class MalformedLiteralError(QueryLanguageError):
    """Raised when a literal token cannot be coerced to its implied type."""

    def __init__(self, token: str, message: str = "Malformed literal") -> None:
        super().__init__(f"{message}: {token!r}")
        self.token = token


class UnknownFunctionError(QueryLanguageError):
    """Raised when a path calls a function with no registered implementation."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown function: {name}")
        self.name = name


class QueryArgumentError(QueryLanguageError):
    """Raised when a function or step receives an invalid argument value."""
