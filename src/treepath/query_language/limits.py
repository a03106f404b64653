"""Resource limits for path parsing.

Nesting of brackets, parentheses and function arguments is the only
recursive structure in a path, so bounding it bounds the recursion of the
tokenizer, the step classifier and the filter parser.
"""

from __future__ import annotations

from dataclasses import dataclass

from treepath.query_language.errors import LimitExceededError


@dataclass(frozen=True, slots=True)
class ParseLimits:
    """Path parse limits configuration."""

    # Maximum nesting of `(` and `[` at any point of a path
    max_depth: int = 32

    # Maximum path text length in characters
    max_path_length: int = 8192


DEFAULT_PARSE_LIMITS = ParseLimits()


def check_path_length(text: str, limits: ParseLimits | None = None) -> None:
    """Validate that path length is within limits."""
    limits = limits or DEFAULT_PARSE_LIMITS
    if len(text) > limits.max_path_length:
        raise LimitExceededError(
            f"Path length {len(text)} exceeds limit of {limits.max_path_length}",
            text[:64] + "...",
        )


def check_depth(depth: int, text: str, position: int, limits: ParseLimits | None = None) -> None:
    """Validate nesting depth while scanning path text."""
    limits = limits or DEFAULT_PARSE_LIMITS
    if depth > limits.max_depth:
        raise LimitExceededError(
            f"Nesting depth {depth} exceeds limit of {limits.max_depth}",
            text,
            position,
        )
