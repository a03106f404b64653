"""Tests for treepath.cli main entrypoint wiring."""

from __future__ import annotations

import sys
from types import SimpleNamespace

import pytest
import typer

from treepath import cli, config


def test_cli_main_builds_default_map(monkeypatch: pytest.MonkeyPatch) -> None:
    """main should load config defaults and pass default_map to Typer command."""
    recorded: dict[str, object] = {}

    class DummyCommand:
        def main(
            self, args: list[str], prog_name: str, standalone_mode: bool, default_map: object
        ) -> None:
            recorded["args"] = args
            recorded["prog_name"] = prog_name
            recorded["standalone_mode"] = standalone_mode
            recorded["default_map"] = default_map

    def fake_get_command(_app: object) -> DummyCommand:
        return DummyCommand()

    monkeypatch.setattr(
        config,
        "load_cli_config",
        lambda _argv: config.LoadedCliConfig(defaults={"max_depth": 3}, aliases={}),
    )
    monkeypatch.setattr(typer.main, "get_command", fake_get_command)
    monkeypatch.setattr(sys, "argv", ["treepath", "query", "--no-color", "a.b", "file.json"])
    monkeypatch.setitem(cli.DEFAULT_VERBOSE, "value", False)
    monkeypatch.setattr(config, "CONFIG_DEFAULTS", {})
    monkeypatch.setattr(config, "CONFIG_ALIASES", {})

    cli.main()

    assert recorded["args"] == ["query", "--no-color", "a.b", "file.json"]
    assert recorded["prog_name"] == "treepath"
    assert recorded["standalone_mode"] is True
    assert recorded["default_map"] == {"query": {"max_depth": 3}, "functions": {}}


def test_cli_main_updates_config_globals(monkeypatch: pytest.MonkeyPatch) -> None:
    """main should store defaults, aliases and the verbose default."""
    recorded: dict[str, object] = {}

    def fake_get_command(_app: object) -> SimpleNamespace:
        return SimpleNamespace(main=lambda **kwargs: recorded.update(kwargs))

    monkeypatch.setattr(
        config,
        "load_cli_config",
        lambda _argv: config.LoadedCliConfig(
            defaults={"verbose": True, "compact": True},
            aliases={"ids": "orders.id"},
        ),
    )
    monkeypatch.setattr(typer.main, "get_command", fake_get_command)
    monkeypatch.setattr(sys, "argv", ["treepath", "query", "@ids"])
    monkeypatch.setitem(cli.DEFAULT_VERBOSE, "value", False)
    monkeypatch.setattr(config, "CONFIG_DEFAULTS", {"stale": 1})
    monkeypatch.setattr(config, "CONFIG_ALIASES", {"old": "x"})

    cli.main()

    assert config.CONFIG_DEFAULTS == {"compact": True}
    assert config.CONFIG_ALIASES == {"ids": "orders.id"}
    assert cli.DEFAULT_VERBOSE["value"] is True
    assert recorded["default_map"] == {"query": {"compact": True}, "functions": {}}


def test_cli_main_without_defaults_passes_no_default_map(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """An empty config should not build a default map."""
    recorded: dict[str, object] = {}

    def fake_get_command(_app: object) -> SimpleNamespace:
        return SimpleNamespace(main=lambda **kwargs: recorded.update(kwargs))

    monkeypatch.setattr(
        config, "load_cli_config", lambda _argv: config.LoadedCliConfig(defaults={}, aliases={})
    )
    monkeypatch.setattr(typer.main, "get_command", fake_get_command)
    monkeypatch.setattr(sys, "argv", ["treepath", "functions"])
    monkeypatch.setitem(cli.DEFAULT_VERBOSE, "value", False)
    monkeypatch.setattr(config, "CONFIG_DEFAULTS", {})
    monkeypatch.setattr(config, "CONFIG_ALIASES", {})

    cli.main()

    assert recorded["default_map"] is None
