"""Tests for query command behavior and output formatting."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import click
import pytest
import typer
from typer.testing import CliRunner

from treepath import config
from treepath.cli import app
from treepath.commands.query import QueryArgs, load_document, run_query
from treepath.output_format import OutputFormat


FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "..", "fixtures")
ORDERS_PATH = os.path.join(FIXTURES_DIR, "orders.json")


def _make_args(path: str, file: str | None = ORDERS_PATH, **overrides: object) -> QueryArgs:
    args = QueryArgs(
        path=path,
        file=file,
        config=".treepath.json",
        color_flag=False,
        compact=True,
        max_depth=32,
        out=OutputFormat.JSON,
        out_theme="github-dark",
    )
    for key, value in overrides.items():
        setattr(args, key, value)
    return args


def test_run_query_prints_compact_json(capsys: pytest.CaptureFixture[str]) -> None:
    """Query results should print as JSON."""
    run_query(_make_args("orders[qty>1].id"))

    assert capsys.readouterr().out == '["A1","C3"]\n'


def test_run_query_pretty_json(capsys: pytest.CaptureFixture[str]) -> None:
    """Without --compact, JSON output should be indented."""
    run_query(_make_args("orders[0].tags", compact=False))

    assert json.loads(capsys.readouterr().out) == ["new", "gift"]


def test_run_query_text_output(capsys: pytest.CaptureFixture[str]) -> None:
    """Text output should print one raw line per element."""
    path = "orders.map(id, day:placed.day()).map(line:concat(id, '@', day)).line"
    run_query(_make_args(path, out="text"))

    assert capsys.readouterr().out == "A1@1\nB2@2\nC3@4\n"


def test_run_query_null_result(capsys: pytest.CaptureFixture[str]) -> None:
    """Missing paths should print null rather than fail."""
    run_query(_make_args("customer.name"))

    assert capsys.readouterr().out == "null\n"


def test_run_query_syntax_error_is_usage_error() -> None:
    """Malformed paths should surface as usage errors."""
    with pytest.raises(click.UsageError, match=r"Unbalanced '\['"):
        run_query(_make_args("orders[qty>1"))


def test_run_query_evaluation_error_is_usage_error() -> None:
    """Fatal evaluation errors should surface as usage errors."""
    with pytest.raises(click.UsageError, match="unknown function: nope"):
        run_query(_make_args("orders.nope()"))


def test_run_query_rejects_unknown_format() -> None:
    """Unsupported output formats should be usage errors."""
    with pytest.raises(click.UsageError, match="Unsupported output format"):
        run_query(_make_args("store", out="yaml"))


def test_run_query_rejects_small_max_depth() -> None:
    """--max-depth below one should be rejected."""
    with pytest.raises(typer.BadParameter):
        run_query(_make_args("store", max_depth=0))


def test_run_query_max_depth_limits_nesting() -> None:
    """--max-depth should bound path nesting."""
    with pytest.raises(click.UsageError, match="Nesting depth 2 exceeds limit of 1"):
        run_query(_make_args("orders[tags[0]='new']", max_depth=1))


def test_run_query_expands_alias(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """@name paths should expand to configured aliases."""
    monkeypatch.setitem(config.CONFIG_ALIASES, "big", "orders[qty>=5].id")

    run_query(_make_args("@big"))

    assert capsys.readouterr().out == '["C3"]\n'


def test_load_document_errors(tmp_path: Path) -> None:
    """Unreadable and invalid inputs should be usage errors."""
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    with pytest.raises(click.UsageError, match="not found"):
        load_document(str(tmp_path / "missing.json"))
    with pytest.raises(click.UsageError, match="Invalid JSON"):
        load_document(str(broken))
    with pytest.raises(click.UsageError, match="is a directory"):
        load_document(str(tmp_path))


def test_query_command_reads_file() -> None:
    """The query command should evaluate against a file argument."""
    runner = CliRunner()
    result = runner.invoke(app, ["query", "orders.sum(qty)", ORDERS_PATH, "--no-color"])

    assert result.exit_code == 0
    assert result.output.strip() == "8"


def test_query_command_reads_stdin() -> None:
    """Without a file, the query command should read stdin."""
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["query", "items.sort(-1)", "-", "--no-color", "--compact"],
        input='{"items": [2, 3, 1]}',
    )

    assert result.exit_code == 0
    assert result.output == "[3,2,1]\n"


def test_query_command_usage_error_exit_code() -> None:
    """Syntax errors should exit with the usage error code."""
    runner = CliRunner()
    result = runner.invoke(app, ["query", "a[", "--no-color"], input="{}")

    assert result.exit_code == 2
    assert "Unbalanced" in result.output


def test_query_command_verbose_logs_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    """--verbose should log the command arguments."""
    logger = logging.getLogger("treepath")
    monkeypatch.setattr(logger, "handlers", [])
    monkeypatch.setattr(logger, "level", logger.level)
    monkeypatch.setattr(logger, "propagate", logger.propagate)
    runner = CliRunner()
    result = runner.invoke(app, ["--verbose", "query", "store", ORDERS_PATH, "--no-color"])

    assert result.exit_code == 0
    assert "Command arguments (query)" in result.output
    assert '"north"' in result.output


def test_query_command_debug_logs_engine_records(monkeypatch: pytest.MonkeyPatch) -> None:
    """--debug should surface filter and dispatch records from the engine."""
    logger = logging.getLogger("treepath")
    monkeypatch.setattr(logger, "handlers", [])
    monkeypatch.setattr(logger, "level", logger.level)
    monkeypatch.setattr(logger, "propagate", logger.propagate)
    runner = CliRunner()
    result = runner.invoke(
        app, ["--debug", "query", "orders[qty>1].id.size()", ORDERS_PATH, "--no-color"]
    )

    assert result.exit_code == 0
    assert "Filter [qty>1] kept 2 of 3 candidates" in result.output
    assert "Calling size()" in result.output
    assert result.output.rstrip().endswith("2")
