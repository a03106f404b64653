"""Configuration handling for the treepath CLI.

Config lives in `.treepath.json` in the working directory (or the file named
by `--config`) and holds two optional sections:

  {
    "defaults": {"--out": "text", "--compact": true, "--max-depth": 16},
    "aliases": {"ids": "orders.id"}
  }

`defaults` feed Click's `default_map`, `aliases` let `query @ids` stand for
a stored path.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TypeGuard, cast

import typer

from treepath.output_format import OutputFormat


DEFAULT_CONFIG_NAME = ".treepath.json"
ALIAS_PREFIX = "@"
CONFIG_SECTIONS = frozenset({"defaults", "aliases"})
COLOR_KEYS = ("--color", "--no-color")


CONFIG_DEFAULTS: dict[str, object] = {}
CONFIG_ALIASES: dict[str, str] = {}


logger = logging.getLogger("treepath")


@dataclass(frozen=True)
class OptionRule:
    """How one `defaults` entry maps onto a command parameter."""

    dest: str
    kind: type
    min_value: int | None = None
    choices: frozenset[str] | None = None
    required_text: bool = False


@dataclass
class LoadedCliConfig:
    """Fully parsed CLI config payload."""

    defaults: dict[str, object]
    aliases: dict[str, str]


OPTION_RULES: dict[str, OptionRule] = {
    "--max-depth": OptionRule("max_depth", int, min_value=1),
    "--compact": OptionRule("compact", bool),
    "--verbose": OptionRule("verbose", bool),
    "--out": OptionRule("out", str, choices=frozenset(fmt.value for fmt in OutputFormat)),
    "--out-theme": OptionRule("out_theme", str),
    "--config": OptionRule("config", str, required_text=True),
}

DEST_TO_OPTION_NAME: dict[str, str] = {
    "color_flag": "--color/--no-color",
    **{rule.dest: key for key, rule in OPTION_RULES.items()},
}


def load_config(filepath: str) -> tuple[dict[str, object], bool]:
    """Read a config file.

    A missing file is not an error. Unreadable files, invalid JSON and top
    level values other than objects are reported as malformed.

    Returns:
        Tuple of (raw config object, malformed flag)
    """
    try:
        raw = json.loads(Path(filepath).read_text(encoding="utf-8"))
    except FileNotFoundError:
        return ({}, False)
    except (OSError, ValueError):
        return ({}, True)

    if not isinstance(raw, dict):
        return ({}, True)
    return (raw, False)


def parse_color_defaults(config: dict[str, object]) -> tuple[dict[str, object], bool]:
    """Map `--color`/`--no-color` booleans onto `color_flag`."""
    flags = {key: config[key] for key in COLOR_KEYS if key in config}
    if any(not isinstance(value, bool) for value in flags.values()):
        return ({}, False)
    if flags.get("--color") is True and flags.get("--no-color") is True:
        return ({}, False)
    if flags.get("--color") is True:
        return ({"color_flag": True}, True)
    if flags.get("--no-color") is True:
        return ({"color_flag": False}, True)
    return ({}, True)


def check_option_value(rule: OptionRule, value: object) -> bool:
    """Return whether value is acceptable for the option rule."""
    if rule.kind is bool:
        return isinstance(value, bool)
    if rule.kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        return rule.min_value is None or value >= rule.min_value
    if not isinstance(value, str):
        return False
    text = value.strip()
    if rule.choices is not None:
        return text.lower() in rule.choices
    return bool(text) or not rule.required_text


def build_config_defaults(config: dict[str, object]) -> dict[str, object] | None:
    """Validate the `defaults` section.

    Args:
        config: Raw `defaults` section keyed by option name

    Returns:
        Defaults keyed by command parameter name, or None if malformed
    """
    color_defaults, color_valid = parse_color_defaults(config)
    if not color_valid:
        return None

    defaults: dict[str, object] = dict(color_defaults)
    for key, value in config.items():
        if key in COLOR_KEYS:
            continue
        rule = OPTION_RULES.get(key)
        if rule is None or not check_option_value(rule, value):
            return None
        defaults[rule.dest] = value
    return defaults


def is_valid_alias_name(name: str) -> bool:
    """Check that an alias name is usable after the `@` prefix."""
    return bool(name) and name == name.strip() and not name.startswith(ALIAS_PREFIX)


def is_alias_table(value: object) -> TypeGuard[dict[str, str]]:
    """Check for a mapping of alias names to non-blank path text."""
    if not isinstance(value, dict):
        return False
    return all(
        isinstance(name, str)
        and isinstance(path, str)
        and is_valid_alias_name(name)
        and bool(path.strip())
        for name, path in value.items()
    )


def parse_config_sections(
    raw_config: dict[str, object],
) -> tuple[dict[str, object], dict[str, str]] | None:
    """Split the raw config into its `defaults` and `aliases` sections.

    Returns None for unknown sections or sections of the wrong shape.
    """
    if not set(raw_config) <= CONFIG_SECTIONS:
        return None

    defaults_section = raw_config.get("defaults", {})
    aliases_section = raw_config.get("aliases", {})
    if not isinstance(defaults_section, dict) or not is_alias_table(aliases_section):
        return None
    return (cast(dict[str, object], defaults_section), dict(aliases_section))


def parse_config_argument(argv: list[str]) -> str:
    """Find the `--config` value in argv without full option parsing."""
    args = argv[1:]
    for idx, arg in enumerate(args):
        if arg.startswith("--config="):
            return arg.partition("=")[2]
        if arg == "--config" and idx + 1 < len(args):
            return args[idx + 1]
    return DEFAULT_CONFIG_NAME


def load_cli_config(argv: list[str]) -> LoadedCliConfig:
    """Load defaults and aliases from the configured file.

    Raises:
        typer.BadParameter: If the file exists but is malformed
    """
    config_path = Path(parse_config_argument(argv))
    if not config_path.is_absolute():
        config_path = Path.cwd() / config_path
    raw_config, malformed = load_config(str(config_path))

    sections = None if malformed else parse_config_sections(raw_config)
    defaults = None if sections is None else build_config_defaults(sections[0])
    if sections is None or defaults is None:
        raise typer.BadParameter("Malformed config")
    return LoadedCliConfig(defaults=defaults, aliases=sections[1])


def build_default_map(defaults: dict[str, object]) -> dict[str, dict[str, object]]:
    """Build Click default_map for Typer commands."""
    query_defaults = {key: value for key, value in defaults.items() if key != "verbose"}
    functions_defaults = {
        key: value for key, value in defaults.items() if key == "color_flag"
    }
    return {"query": query_defaults, "functions": functions_defaults}


def resolve_alias(path: str, aliases: dict[str, str]) -> str:
    """Expand an `@name` path to its configured alias.

    Paths that do not name a configured alias are returned unchanged.
    """
    if not path.startswith(ALIAS_PREFIX):
        return path
    expanded = aliases.get(path[len(ALIAS_PREFIX) :])
    if expanded is None:
        return path
    logger.info("Expanded alias %s to %s", path, expanded)
    return expanded


def _format_log_entry(name: str, value: object) -> str:
    return f"{name}={value!r}"


def log_applied_config_defaults(command_name: str) -> None:
    """Log config defaults loaded from config file."""
    if not logger.isEnabledFor(logging.INFO):
        return

    entries = [
        _format_log_entry(DEST_TO_OPTION_NAME[dest], value)
        for dest, value in sorted(CONFIG_DEFAULTS.items())
        if dest in DEST_TO_OPTION_NAME
    ]
    if entries:
        logger.info("Config defaults applied (%s): %s", command_name, ", ".join(entries))


def log_command_arguments(args: object, command_name: str) -> None:
    """Log all final argument values used to run a command."""
    if not logger.isEnabledFor(logging.INFO):
        return

    try:
        arg_items = vars(args).items()
    except TypeError:
        return

    entries = [
        _format_log_entry(arg_name, arg_value)
        for arg_name, arg_value in sorted(arg_items, key=lambda item: item[0])
    ]
    logger.info("Command arguments (%s): %s", command_name, ", ".join(entries))
