"""Tests for path and argument decomposition."""

from __future__ import annotations

import pytest

from treepath.query_language.errors import ArityError, LimitExceededError, QuerySyntaxError
from treepath.query_language.limits import ParseLimits
from treepath.query_language.tokenizer import (
    decompose_args,
    decompose_path,
    find_closing,
    scan,
    split_top_level,
)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("a", ["a"]),
        ("a.b.c", ["a", "b", "c"]),
        ("a[b.c=1].d", ["a[b.c=1]", "d"]),
        ("map(x:a.b, y)", ["map(x:a.b, y)"]),
        ("a[name='x.y'].b", ["a[name='x.y']", "b"]),
        ("a[name='it''s.ok']", ["a[name='it''s.ok']"]),
        (" a . b ", ["a", "b"]),
    ],
)
def test_decompose_path_splits_on_top_level_dots(path: str, expected: list[str]) -> None:
    """Dots inside brackets, parentheses and quotes should not split."""
    assert decompose_path(path) == expected


@pytest.mark.parametrize("path", ["", "   ", "a..b", ".a", "a."])
def test_decompose_path_rejects_empty_steps(path: str) -> None:
    """Empty paths and empty steps should be syntax errors."""
    with pytest.raises(QuerySyntaxError):
        decompose_path(path)


def test_decompose_path_unbalanced_bracket_names_offender() -> None:
    """Unbalanced brackets should be reported with the opening position."""
    with pytest.raises(QuerySyntaxError) as exc_info:
        decompose_path("a[unclosed")

    assert exc_info.value.message == "Unbalanced '['"
    assert exc_info.value.text == "a[unclosed"
    assert exc_info.value.position == 1
    assert "a[unclosed\n ^" in str(exc_info.value)


def test_decompose_path_unterminated_quote() -> None:
    """Unterminated quotes should be syntax errors."""
    with pytest.raises(QuerySyntaxError, match="Unterminated quote"):
        decompose_path("a[b='x]")


def test_decompose_path_mismatched_closer() -> None:
    """A closer not matching the innermost opener should fail."""
    with pytest.raises(QuerySyntaxError, match=r"Unbalanced '\)'"):
        decompose_path("a[b)")


def test_decompose_path_respects_max_length() -> None:
    """Paths longer than the configured limit should be rejected."""
    with pytest.raises(LimitExceededError):
        decompose_path("a" * 20, ParseLimits(max_path_length=10))


def test_scan_enforces_max_depth() -> None:
    """Nesting beyond max_depth should be rejected."""
    limits = ParseLimits(max_depth=2)
    with pytest.raises(LimitExceededError, match="Nesting depth 3"):
        list(scan("a[b[c[0]]]", 0, limits))


def test_scan_skips_quoted_text() -> None:
    """Characters inside quotes should not be yielded."""
    chars = "".join(char for _pos, char, _depth in scan("a'b.c'd"))

    assert chars == "ad"


def test_find_closing_matches_nested_brackets() -> None:
    """find_closing should skip nested pairs."""
    text = "f(a(b), [c])"

    assert find_closing(text, 1) == len(text) - 1
    assert find_closing(text, 3) == 5


def test_split_top_level_keeps_empty_pieces() -> None:
    """split_top_level should preserve empty pieces for callers to validate."""
    assert split_top_level("a,,b", ",") == ["a", "", "b"]


@pytest.mark.parametrize(
    ("args", "expected"),
    [
        ("", []),
        ("   ", []),
        ("a", ["a"]),
        ("a, 'x,y', f(1,2)", ["a", "'x,y'", "f(1,2)"]),
        ("list[v>1,2]", ["list[v>1,2]"]),
    ],
)
def test_decompose_args_splits_on_top_level_commas(args: str, expected: list[str]) -> None:
    """Commas inside quotes and nesting should not split arguments."""
    assert decompose_args(args, 0, -1) == expected


def test_decompose_args_enforces_minimum() -> None:
    """Too few arguments should raise an arity error."""
    with pytest.raises(ArityError, match=r"replace\(\) expects exactly 2 arguments, got 1"):
        decompose_args("a", 2, 2, name="replace")


def test_decompose_args_enforces_maximum() -> None:
    """Too many arguments should raise an arity error."""
    with pytest.raises(ArityError, match="expects 1 to 3 arguments, got 4"):
        decompose_args("1,2,3,4", 1, 3, name="slice")


def test_decompose_args_unbounded_maximum() -> None:
    """A maximum of -1 should accept any number of arguments."""
    assert len(decompose_args(",".join(["a"] * 50), 1, -1)) == 50


def test_decompose_args_rejects_empty_argument() -> None:
    """Empty arguments between commas should fail."""
    with pytest.raises(QuerySyntaxError, match="Empty argument"):
        decompose_args("a,,b", 0, -1)
