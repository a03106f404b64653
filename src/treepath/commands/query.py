"""Query command evaluating a path against a JSON document."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass

import click
import typer

from treepath import config as config_module
from treepath.color import should_use_color
from treepath.output_format import (
    DEFAULT_OUTPUT_THEME,
    OutputFormat,
    OutputFormatError,
    build_console,
    get_formatter,
    print_prepared_output,
)
from treepath.query_language import (
    DEFAULT_PARSE_LIMITS,
    ParseLimits,
    QueryLanguageError,
    Value,
    compile_path_text,
)


logger = logging.getLogger("treepath")

STDIN_FILE = "-"


@dataclass
class QueryArgs:
    """Arguments for the query command."""

    path: str
    file: str | None
    config: str
    color_flag: bool | None
    compact: bool
    max_depth: int
    out: str
    out_theme: str


def _read_document_text(file: str | None) -> tuple[str, str]:
    """Return document text and a display name for error messages."""
    if file is None or file == STDIN_FILE:
        return (sys.stdin.read(), "<stdin>")
    try:
        with open(file, encoding="utf-8") as f:
            return (f.read(), file)
    except FileNotFoundError as err:
        raise click.UsageError(f"File '{file}' not found") from err
    except PermissionError as err:
        raise click.UsageError(f"Permission denied for '{file}'") from err
    except IsADirectoryError as err:
        raise click.UsageError(f"'{file}' is a directory") from err
    except UnicodeDecodeError as err:
        raise click.UsageError(f"'{file}' is not valid UTF-8 text") from err


def load_document(file: str | None) -> Value:
    """Load a JSON document from a file or stdin.

    Raises:
        click.UsageError: If the input cannot be read or is not valid JSON
    """
    text, name = _read_document_text(file)
    try:
        document = json.loads(text)
    except json.JSONDecodeError as err:
        raise click.UsageError(f"Invalid JSON in '{name}': {err}") from err
    logger.info("Loaded document from %s", name)
    return document


def run_query(args: QueryArgs) -> None:
    """Run the query command."""
    if args.max_depth < 1:
        raise typer.BadParameter("--max-depth must be at least 1")
    color_enabled = should_use_color(args.color_flag)
    console = build_console(color_enabled)
    try:
        formatter = get_formatter(args.out, args.compact)
    except OutputFormatError as exc:
        raise click.UsageError(str(exc)) from exc

    path_text = config_module.resolve_alias(args.path, config_module.CONFIG_ALIASES)
    limits = ParseLimits(max_depth=args.max_depth)
    try:
        compiled_path = compile_path_text(path_text, limits=limits)
    except QueryLanguageError as exc:
        raise click.UsageError(str(exc)) from exc

    document = load_document(args.file)
    try:
        result = compiled_path(document)
    except QueryLanguageError as exc:
        raise click.UsageError(str(exc)) from exc

    try:
        prepared_output = formatter.prepare(result, color_enabled, args.out_theme)
    except OutputFormatError as exc:
        raise click.UsageError(str(exc)) from exc

    print_prepared_output(console, prepared_output)


def register(app: typer.Typer) -> None:
    """Register the query command."""

    @app.command("query")
    def query_command(  # noqa: PLR0913
        path: str = typer.Argument(..., metavar="PATH", help="Path expression or @alias"),
        file: str | None = typer.Argument(
            None, metavar="FILE", help="JSON document to query, '-' or omitted for stdin"
        ),
        config: str = typer.Option(
            config_module.DEFAULT_CONFIG_NAME,
            "--config",
            metavar="FILE",
            help="Config file name to load from current directory",
        ),
        color_flag: bool | None = typer.Option(
            None,
            "--color/--no-color",
            help="Force colored output",
        ),
        compact: bool = typer.Option(
            False,
            "--compact",
            help="Print JSON on a single line",
        ),
        max_depth: int = typer.Option(
            DEFAULT_PARSE_LIMITS.max_depth,
            "--max-depth",
            metavar="N",
            help="Maximum bracket and parenthesis nesting depth",
        ),
        out: str = typer.Option(
            OutputFormat.JSON,
            "--out",
            help="Output format: json or text",
        ),
        out_theme: str = typer.Option(
            DEFAULT_OUTPUT_THEME,
            "--out-theme",
            help="Syntax theme for highlighted output",
        ),
    ) -> None:
        """Evaluate a path expression against a JSON document."""
        args = QueryArgs(
            path=path,
            file=file,
            config=config,
            color_flag=color_flag,
            compact=compact,
            max_depth=max_depth,
            out=out,
            out_theme=out_theme,
        )
        config_module.log_applied_config_defaults("query")
        config_module.log_command_arguments(args, "query")
        run_query(args)
