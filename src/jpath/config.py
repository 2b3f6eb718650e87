"""Configuration handling for the jpath CLI."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import cast

import typer


DEFAULT_CONFIG_NAME = ".jpath.json"

QUERY_ONLY_OPTIONS = {"wrap"}


@dataclass
class ConfigOptions:
    """Config option mapping metadata."""

    int_options: dict[str, tuple[str, int | None]]
    bool_options: dict[str, str]
    str_options: dict[str, str]


CONFIG_OPTIONS = ConfigOptions(
    int_options={"--max-depth": ("max_depth", 1)},
    bool_options={
        "--silent": "silent",
        "--wrap": "wrap",
        "--verbose": "verbose",
    },
    str_options={"--out-theme": "out_theme"},
)


DEST_TO_OPTION_NAME: dict[str, str] = {
    "color_flag": "--color/--no-color",
    "max_depth": "--max-depth",
    "out_theme": "--out-theme",
    "silent": "--silent/--no-silent",
    "verbose": "--verbose",
    "wrap": "--wrap",
}


CONFIG_DEFAULTS: dict[str, object] = {}
CONFIG_VARIABLES: dict[str, object] = {}


logger = logging.getLogger("jpath")


@dataclass
class LoadedCliConfig:
    """Fully parsed CLI config payload."""

    defaults: dict[str, object]
    variables: dict[str, object]


def load_config(filepath: str) -> tuple[dict[str, object], bool]:
    """Load config from JSON file.

    Args:
        filepath: Path to config file

    Returns:
        Tuple of (config dict, malformed flag)
    """
    try:
        with open(filepath, encoding="utf-8") as f:
            config = json.load(f, parse_float=Decimal)
    except FileNotFoundError:
        return ({}, False)
    except PermissionError:
        return ({}, True)
    except OSError:
        return ({}, True)
    except json.JSONDecodeError:
        return ({}, True)

    if not isinstance(config, dict):
        return ({}, True)

    return (config, False)


def parse_color_defaults(config: dict[str, object]) -> tuple[dict[str, object], bool]:
    """Parse color-related config defaults."""
    defaults: dict[str, object] = {}
    color_value = config.get("--color")
    no_color_value = config.get("--no-color")

    if "--color" in config and not isinstance(color_value, bool):
        return ({}, False)
    if "--no-color" in config and not isinstance(no_color_value, bool):
        return ({}, False)
    if color_value is True and no_color_value is True:
        return ({}, False)

    if color_value is True:
        defaults["color_flag"] = True
    if no_color_value is True:
        defaults["color_flag"] = False

    return (defaults, True)


def validate_int_option(value: object, min_value: int | None) -> int | None:
    """Validate integer option value."""
    if not isinstance(value, int) or isinstance(value, bool):
        return None
    if min_value is not None and value < min_value:
        return None
    return value


def apply_int_option(
    value: object,
    dest: str,
    min_value: int | None,
    defaults: dict[str, object],
) -> bool:
    """Apply integer config option."""
    int_value = validate_int_option(value, min_value)
    if int_value is None:
        return False
    defaults[dest] = int_value
    return True


def apply_bool_option(value: object, dest: str, defaults: dict[str, object]) -> bool:
    """Apply boolean config option."""
    if not isinstance(value, bool):
        return False
    defaults[dest] = value
    return True


def apply_str_option(value: object, dest: str, defaults: dict[str, object]) -> bool:
    """Apply string config option."""
    if not isinstance(value, str) or not value.strip():
        return False
    defaults[dest] = value
    return True


def apply_config_entry(key: str, value: object, defaults: dict[str, object]) -> bool:
    """Apply a config entry to defaults if valid."""
    if key in CONFIG_OPTIONS.int_options:
        dest, min_value = CONFIG_OPTIONS.int_options[key]
        return apply_int_option(value, dest, min_value, defaults)
    if key in CONFIG_OPTIONS.bool_options:
        return apply_bool_option(value, CONFIG_OPTIONS.bool_options[key], defaults)
    if key in CONFIG_OPTIONS.str_options:
        return apply_str_option(value, CONFIG_OPTIONS.str_options[key], defaults)
    return False


def parse_config_sections(
    raw_config: dict[str, object],
) -> tuple[dict[str, object], dict[str, object]] | None:
    """Parse top-level config sections.

    Accepted shape:
      {
        "defaults": {"--max-depth": 64, "--no-color": true, ...},
        "variables": {"name": <any JSON value>}
      }
    """
    allowed_keys = {"defaults", "variables"}
    if any(key not in allowed_keys for key in raw_config):
        return None

    defaults_section = raw_config.get("defaults", {})
    if not isinstance(defaults_section, dict):
        return None

    variables_section = raw_config.get("variables", {})
    if not isinstance(variables_section, dict):
        return None

    return (
        cast(dict[str, object], defaults_section),
        cast(dict[str, object], variables_section),
    )


def build_config_defaults(config: dict[str, object]) -> dict[str, object] | None:
    """Validate config values and build defaults.

    Args:
        config: Raw "defaults" section

    Returns:
        Defaults keyed by command parameter name, or None if any entry is invalid
    """
    defaults, valid = parse_color_defaults(config)
    if not valid:
        return None

    for key, value in config.items():
        if key in ("--color", "--no-color"):
            continue
        if not apply_config_entry(key, value, defaults):
            logger.warning("Invalid config default %s=%r", key, value)
            return None

    return defaults


def parse_config_argument(argv: list[str]) -> str:
    """Parse only the --config argument from argv."""
    default = DEFAULT_CONFIG_NAME
    for idx, arg in enumerate(argv[1:], start=1):
        if arg == "--config" and idx + 1 < len(argv):
            return argv[idx + 1]
        if arg.startswith("--config="):
            return arg.split("=", 1)[1]
    return default


def load_cli_config(argv: list[str]) -> LoadedCliConfig:
    """Load config defaults from the configured file path."""
    config_name = parse_config_argument(argv)
    config_path = Path(config_name)
    if not config_path.is_absolute():
        config_path = Path.cwd() / config_name
    config, load_error = load_config(str(config_path))

    if load_error:
        raise typer.BadParameter(f"Malformed config: {config_path}")

    config_sections = parse_config_sections(config)
    if config_sections is None:
        raise typer.BadParameter(f"Malformed config: {config_path}")

    defaults_config, variables = config_sections

    defaults = build_config_defaults(defaults_config)
    if defaults is None:
        raise typer.BadParameter(f"Malformed config: {config_path}")

    return LoadedCliConfig(defaults=defaults, variables=dict(variables))


def build_default_map(defaults: dict[str, object]) -> dict[str, dict[str, object]]:
    """Build Click default_map for Typer commands."""
    query_defaults = dict(defaults)
    predicate_defaults = {
        key: value for key, value in defaults.items() if key not in QUERY_ONLY_OPTIONS
    }
    return {
        "query": query_defaults,
        "exists": predicate_defaults,
        "match": dict(predicate_defaults),
    }


def _format_default_log_entry(option_name: str, value: object) -> str:
    """Format one option/value pair for config-default logging."""
    return f"{option_name}={value!r}"


def log_applied_config_defaults(command_name: str) -> None:
    """Log config defaults loaded from config file."""
    if not logger.isEnabledFor(logging.INFO):
        return

    entries: list[str] = []
    for dest, default_value in sorted(CONFIG_DEFAULTS.items(), key=lambda item: item[0]):
        option_name = DEST_TO_OPTION_NAME.get(dest)
        if option_name is None:
            continue
        entries.append(_format_default_log_entry(option_name, default_value))

    if CONFIG_VARIABLES:
        entries.append(_format_default_log_entry("variables", sorted(CONFIG_VARIABLES)))

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
        f"{arg_name}={arg_value!r}"
        for arg_name, arg_value in sorted(arg_items, key=lambda item: item[0])
    ]
    logger.info("Command arguments (%s): %s", command_name, ", ".join(entries))
