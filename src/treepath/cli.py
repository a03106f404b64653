#!/usr/bin/env python
"""CLI interface for treepath - path queries over JSON documents."""

from __future__ import annotations

import sys

import typer

from treepath import config, logging_config
from treepath.commands import functions, query


app = typer.Typer(
    help="Query and reshape JSON documents with path expressions.",
    no_args_is_help=True,
)


DEFAULT_VERBOSE: dict[str, bool] = {"value": False}


def _resolve_verbose(verbose: bool | None) -> bool:
    if verbose is None:
        return DEFAULT_VERBOSE["value"]
    return verbose


@app.callback()
def main_callback(
    verbose: bool | None = typer.Option(
        None,
        "--verbose",
        "-v",
        help="Enable verbose logging output",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable engine debug logging",
    ),
) -> None:
    """Global CLI options."""
    if verbose is None and not debug and not DEFAULT_VERBOSE["value"]:
        return
    logging_config.configure_logging(_resolve_verbose(verbose), debug=debug)


query.register(app)
functions.register(app)


def main() -> None:
    """Main CLI entry point."""
    loaded_config = config.load_cli_config(sys.argv)
    defaults = dict(loaded_config.defaults)
    DEFAULT_VERBOSE["value"] = bool(defaults.pop("verbose", False))
    config.CONFIG_DEFAULTS.clear()
    config.CONFIG_DEFAULTS.update(defaults)
    config.CONFIG_ALIASES.clear()
    config.CONFIG_ALIASES.update(loaded_config.aliases)

    command = typer.main.get_command(app)
    default_map = config.build_default_map(defaults) if defaults else None
    command.main(
        args=sys.argv[1:],
        prog_name="treepath",
        standalone_mode=True,
        default_map=default_map,
    )


if __name__ == "__main__":
    main()
