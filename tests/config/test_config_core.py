"""Tests for jpath.config helpers."""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace

import pytest
import typer

from jpath import config


def test_load_config_missing_file_returns_empty(tmp_path: Path) -> None:
    """Missing config should return empty config without error."""
    missing = tmp_path / "missing.json"
    data, malformed = config.load_config(str(missing))

    assert data == {}
    assert malformed is False


def test_load_config_directory_path_is_malformed(tmp_path: Path) -> None:
    """Directory path should be treated as malformed config."""
    config_dir = tmp_path / "cfgdir"
    config_dir.mkdir()
    data, malformed = config.load_config(str(config_dir))

    assert data == {}
    assert malformed is True


def test_load_config_non_dict_is_malformed(tmp_path: Path) -> None:
    """Non-object JSON should be marked malformed."""
    config_path = tmp_path / "config.json"
    config_path.write_text("[1, 2, 3]", encoding="utf-8")

    data, malformed = config.load_config(str(config_path))

    assert data == {}
    assert malformed is True


def test_parse_color_defaults_conflict() -> None:
    """Conflicting color flags should be rejected."""
    defaults, valid = config.parse_color_defaults({"--color": True, "--no-color": True})

    assert defaults == {}
    assert valid is False


def test_parse_color_defaults_sets_color_flag() -> None:
    """--no-color should turn the color flag off."""
    defaults, valid = config.parse_color_defaults({"--no-color": True})

    assert defaults == {"color_flag": False}
    assert valid is True


def test_build_config_defaults_applies_values() -> None:
    """Config defaults should map option names onto parameter names."""
    raw: dict[str, object] = {
        "--max-depth": 64,
        "--silent": True,
        "--wrap": True,
        "--out-theme": "monokai",
        "--color": True,
    }

    defaults = config.build_config_defaults(raw)

    assert defaults == {
        "max_depth": 64,
        "silent": True,
        "wrap": True,
        "out_theme": "monokai",
        "color_flag": True,
    }


@pytest.mark.parametrize(
    "raw",
    [
        {"--max-depth": 0},
        {"--max-depth": "10"},
        {"--max-depth": True},
        {"--silent": "yes"},
        {"--out-theme": "  "},
        {"--unknown": 1},
    ],
)
def test_build_config_defaults_rejects_invalid_entry(raw: dict[str, object]) -> None:
    """Invalid values should cause config defaults to be rejected."""
    assert config.build_config_defaults(raw) is None


def test_parse_config_sections() -> None:
    """Only defaults and variables sections should be accepted."""
    sections = config.parse_config_sections(
        {"defaults": {"--silent": True}, "variables": {"limit": 3}}
    )

    assert sections == ({"--silent": True}, {"limit": 3})
    assert config.parse_config_sections({}) == ({}, {})
    assert config.parse_config_sections({"other": {}}) is None
    assert config.parse_config_sections({"variables": [1]}) is None


def test_parse_config_argument_prefers_cli_value() -> None:
    """--config argument should override default config name."""
    argv = ["jpath", "query", "--config", "custom.json", "$"]

    assert config.parse_config_argument(argv) == "custom.json"


def test_parse_config_argument_supports_equals_form() -> None:
    """--config=FILE format should be parsed."""
    argv = ["jpath", "query", "--config=inline.json", "$"]

    assert config.parse_config_argument(argv) == "inline.json"


def test_parse_config_argument_default() -> None:
    """Default config name should be used when not specified."""
    assert config.parse_config_argument(["jpath", "query", "$"]) == ".jpath.json"


def test_load_cli_config_reads_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """load_cli_config should load defaults and variables from the config file."""
    config_path = tmp_path / ".jpath.json"
    config_path.write_text(
        json.dumps({"defaults": {"--max-depth": 7}, "variables": {"limit": 2}}),
        encoding="utf-8",
    )

    monkeypatch.chdir(config_path.parent)
    loaded = config.load_cli_config(["jpath"])

    assert loaded.defaults == {"max_depth": 7}
    assert loaded.variables == {"limit": 2}


def test_load_cli_config_missing_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Without a config file nothing should be loaded."""
    monkeypatch.chdir(tmp_path)
    loaded = config.load_cli_config(["jpath"])

    assert loaded.defaults == {}
    assert loaded.variables == {}


@pytest.mark.parametrize(
    "content",
    [
        "{bad json",
        json.dumps({"defaults": {"--max-depth": -1}}),
        json.dumps({"unexpected": True}),
    ],
)
def test_load_cli_config_malformed(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, content: str
) -> None:
    """Malformed config should raise a BadParameter error."""
    config_path = tmp_path / ".jpath.json"
    config_path.write_text(content, encoding="utf-8")

    monkeypatch.chdir(config_path.parent)
    with pytest.raises(typer.BadParameter, match="Malformed config"):
        config.load_cli_config(["jpath"])


def test_build_default_map_skips_query_only_options() -> None:
    """Predicate commands should not receive query-only defaults."""
    default_map = config.build_default_map({"wrap": True, "silent": True})

    assert default_map["query"] == {"wrap": True, "silent": True}
    assert default_map["exists"] == {"silent": True}
    assert default_map["match"] == {"silent": True}


def test_validate_int_option() -> None:
    """Integer validation should reject booleans and small values."""
    assert config.validate_int_option(3, 1) == 3
    assert config.validate_int_option(0, 1) is None
    assert config.validate_int_option(True, None) is None
    assert config.validate_int_option("nope", None) is None


def test_log_applied_config_defaults(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Applied defaults should be logged with their option names."""
    monkeypatch.setattr(logging.getLogger("jpath"), "propagate", True)
    original_defaults = dict(config.CONFIG_DEFAULTS)
    original_variables = dict(config.CONFIG_VARIABLES)
    config.CONFIG_DEFAULTS.clear()
    config.CONFIG_DEFAULTS.update({"max_depth": 9, "color_flag": False})
    config.CONFIG_VARIABLES.clear()
    config.CONFIG_VARIABLES.update({"limit": 1})

    try:
        with caplog.at_level(logging.INFO, logger="jpath"):
            config.log_applied_config_defaults("query")
    finally:
        config.CONFIG_DEFAULTS.clear()
        config.CONFIG_DEFAULTS.update(original_defaults)
        config.CONFIG_VARIABLES.clear()
        config.CONFIG_VARIABLES.update(original_variables)

    assert "Config defaults applied (query)" in caplog.text
    assert "--max-depth=9" in caplog.text
    assert "--color/--no-color=False" in caplog.text
    assert "variables=['limit']" in caplog.text


def test_log_command_arguments(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Final command arguments should be logged in name order."""
    monkeypatch.setattr(logging.getLogger("jpath"), "propagate", True)
    args = SimpleNamespace(path="$", silent=False)

    with caplog.at_level(logging.INFO, logger="jpath"):
        config.log_command_arguments(args, "exists")

    assert "Command arguments (exists): path='$', silent=False" in caplog.text


def test_load_config_reads_exact_decimals(tmp_path: Path) -> None:
    """Config numbers with a fraction should load as exact decimals."""
    config_path = tmp_path / "config.json"
    config_path.write_text('{"variables": {"rate": 0.10}}', encoding="utf-8")

    data, malformed = config.load_config(str(config_path))

    assert data == {"variables": {"rate": Decimal("0.10")}}
    assert malformed is False
