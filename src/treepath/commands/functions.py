"""Functions command listing the registered path functions."""

from __future__ import annotations

from dataclasses import dataclass

import typer
from rich.table import Table

from treepath.color import escape_text, flag_style, function_name_style, should_use_color
from treepath.output_format import build_console
from treepath.query_language import DEFAULT_REGISTRY, FunctionRegistry


@dataclass
class FunctionsArgs:
    """Arguments for the functions command."""

    color_flag: bool | None
    array_aware_only: bool


def build_functions_table(
    registry: FunctionRegistry, color_enabled: bool, array_aware_only: bool = False
) -> Table:
    """Build a table of function names, argument counts and dispatch mode."""
    table = Table(title="Functions", show_lines=False)
    table.add_column("Name")
    table.add_column("Arguments", justify="right")
    table.add_column("Array-aware")
    for spec in registry.specs():
        if array_aware_only and not spec.array_aware:
            continue
        table.add_row(
            function_name_style(spec.name, color_enabled),
            escape_text(spec.arity_text, color_enabled),
            flag_style(spec.array_aware, color_enabled),
        )
    return table


def run_functions(args: FunctionsArgs, registry: FunctionRegistry = DEFAULT_REGISTRY) -> None:
    """Run the functions command."""
    color_enabled = should_use_color(args.color_flag)
    console = build_console(color_enabled)
    console.print(build_functions_table(registry, color_enabled, args.array_aware_only))


def register(app: typer.Typer) -> None:
    """Register the functions command."""

    @app.command("functions")
    def functions_command(
        color_flag: bool | None = typer.Option(
            None,
            "--color/--no-color",
            help="Force colored output",
        ),
        array_aware_only: bool = typer.Option(
            False,
            "--array-aware",
            help="Only list functions that receive whole arrays",
        ),
    ) -> None:
        """List functions available in path expressions."""
        run_functions(FunctionsArgs(color_flag=color_flag, array_aware_only=array_aware_only))
