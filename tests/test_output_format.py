"""Tests for output formatting."""

from __future__ import annotations

import io

import pytest
from rich.console import Console
from rich.syntax import Syntax

from treepath.output_format import (
    DEFAULT_OUTPUT_THEME,
    JsonOutputFormatter,
    OutputFormatError,
    OutputOperation,
    PreparedOutput,
    TextOutputFormatter,
    _normalize_syntax_theme,
    get_formatter,
    print_prepared_output,
)


def _render(prepared: PreparedOutput) -> str:
    buffer = io.StringIO()
    console = Console(file=buffer, no_color=True, highlight=False)
    print_prepared_output(console, prepared)
    return buffer.getvalue()


def test_json_formatter_pretty_and_compact() -> None:
    """JSON output should be indented unless compact."""
    value = {"a": [1, None], "b": "é"}

    pretty = _render(JsonOutputFormatter(compact=False).prepare(value, False, "monokai"))
    compact = _render(JsonOutputFormatter(compact=True).prepare(value, False, "monokai"))

    assert pretty == '{\n  "a": [\n    1,\n    null\n  ],\n  "b": "é"\n}\n'
    assert compact == '{"a":[1,null],"b":"é"}\n'


def test_json_formatter_uses_syntax_when_color_enabled() -> None:
    """Color output should wrap JSON in a Syntax renderable."""
    prepared = JsonOutputFormatter(compact=True).prepare([1], True, "monokai")

    operation = prepared.operations[0]
    assert operation.kind == "console_print"
    assert isinstance(operation.renderable, Syntax)


def test_text_formatter_prints_one_line_per_element() -> None:
    """Text output should print strings raw and other values as JSON."""
    prepared = TextOutputFormatter().prepare(["a", 1, None, {"k": True}], False, "")

    assert _render(prepared) == 'a\n1\nnull\n{"k":true}\n'


def test_text_formatter_scalar() -> None:
    """A scalar result should print on one line."""
    assert _render(TextOutputFormatter().prepare("hi", True, "")) == "hi\n"


def test_get_formatter_selects_by_name() -> None:
    """Formatter selection should be case-insensitive."""
    assert isinstance(get_formatter("JSON", False), JsonOutputFormatter)
    assert isinstance(get_formatter(" text ", False), TextOutputFormatter)


def test_get_formatter_rejects_unknown_format() -> None:
    """Unknown formats should raise OutputFormatError."""
    with pytest.raises(OutputFormatError, match="Unsupported output format 'yaml'"):
        get_formatter("yaml", False)


def test_normalize_syntax_theme_defaults_blank() -> None:
    """Blank themes should fall back to the default."""
    assert _normalize_syntax_theme("  ") == DEFAULT_OUTPUT_THEME
    assert _normalize_syntax_theme(" monokai ") == "monokai"


def test_print_prepared_output_console_text() -> None:
    """console_print operations without renderables print their text."""
    prepared = PreparedOutput(operations=(OutputOperation(kind="console_print", text="plain"),))

    assert _render(prepared) == "plain\n"
