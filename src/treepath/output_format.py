"""Output format abstraction and format-specific renderers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from rich.console import Console
from rich.syntax import Syntax

from treepath.query_language.ast import Value
from treepath.query_language.functions.params import value_to_text


DEFAULT_OUTPUT_THEME = "github-dark"


class OutputFormat(StrEnum):
    """Supported output formats."""

    JSON = "json"
    TEXT = "text"


class OutputFormatter(Protocol):
    """Formatter interface for query results."""

    def prepare(self, value: Value, color_enabled: bool, out_theme: str) -> PreparedOutput:
        """Prepare one query result for rendering."""
        ...


@dataclass(frozen=True)
class OutputOperation:
    """One prepared output operation."""

    kind: str
    text: str | None = None
    renderable: object | None = None
    markup: bool = False


@dataclass(frozen=True)
class PreparedOutput:
    """Prepared output operations ready for console rendering."""

    operations: tuple[OutputOperation, ...]


class OutputFormatError(RuntimeError):
    """Raised when output formatting fails."""


def build_console(color_enabled: bool) -> Console:
    """Create the console used for command output."""
    return Console(
        force_terminal=color_enabled,
        no_color=not color_enabled,
        highlight=False,
        soft_wrap=True,
    )


def _write_plain_output(console: Console, text: str) -> None:
    """Write plain output directly to console stream."""
    console.file.write(f"{text}\n")
    console.file.flush()


def print_prepared_output(console: Console, prepared_output: PreparedOutput) -> None:
    """Print already prepared output operations."""
    for operation in prepared_output.operations:
        if operation.kind == "plain_write":
            if operation.text is not None:
                _write_plain_output(console, operation.text)
            continue
        if operation.renderable is not None:
            console.print(operation.renderable)
            continue
        console.print(operation.text if operation.text is not None else "", markup=operation.markup)


def _normalize_syntax_theme(out_theme: str) -> str:
    """Return a valid theme name for syntax rendering."""
    normalized_theme = out_theme.strip()
    if normalized_theme:
        return normalized_theme
    return DEFAULT_OUTPUT_THEME


def _prepare_output(
    text: str,
    color_enabled: bool,
    language: str | None,
    out_theme: str,
) -> PreparedOutput:
    """Prepare output with syntax highlighting when available."""
    if color_enabled and language is not None:
        return PreparedOutput(
            operations=(
                OutputOperation(
                    kind="console_print",
                    renderable=Syntax(
                        text,
                        language,
                        theme=_normalize_syntax_theme(out_theme),
                        line_numbers=False,
                        word_wrap=True,
                    ),
                ),
            )
        )
    return PreparedOutput(operations=(OutputOperation(kind="plain_write", text=text),))


def serialize_json(value: Value, compact: bool) -> str:
    """Serialize a result value as JSON text."""
    try:
        if compact:
            return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        return json.dumps(value, ensure_ascii=False, indent=2)
    except (TypeError, ValueError) as exc:
        raise OutputFormatError(str(exc)) from exc


class JsonOutputFormatter:
    """JSON output formatter."""

    def __init__(self, compact: bool) -> None:
        self.compact = compact

    def prepare(self, value: Value, color_enabled: bool, out_theme: str) -> PreparedOutput:
        return _prepare_output(
            serialize_json(value, self.compact), color_enabled, OutputFormat.JSON, out_theme
        )


class TextOutputFormatter:
    """Plain text formatter printing one line per array element."""

    def prepare(self, value: Value, color_enabled: bool, out_theme: str) -> PreparedOutput:
        del color_enabled
        del out_theme
        values = value if isinstance(value, list) else [value]
        return PreparedOutput(
            operations=tuple(
                OutputOperation(kind="plain_write", text=value_to_text(item)) for item in values
            )
        )


_TEXT_FORMATTER = TextOutputFormatter()


def get_formatter(output_format: str, compact: bool) -> OutputFormatter:
    """Return formatter for selected output format."""
    normalized_output = output_format.strip().lower()
    if normalized_output == OutputFormat.JSON:
        return JsonOutputFormatter(compact)
    if normalized_output == OutputFormat.TEXT:
        return _TEXT_FORMATTER
    supported = ", ".join(fmt.value for fmt in OutputFormat)
    raise OutputFormatError(f"Unsupported output format '{output_format}' (expected {supported})")
