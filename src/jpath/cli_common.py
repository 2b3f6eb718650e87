"""Shared CLI helpers for jpath commands."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass

import click
import typer

from jpath import config as config_module
from jpath.path_language import CompiledPath, PathParseError, compile_path_text, load_json


logger = logging.getLogger("jpath")


@dataclass
class PathArgs:
    """Arguments shared by the path commands."""

    path: str
    file: str | None
    config: str
    variables: str | None
    silent: bool
    max_depth: int
    color_flag: bool | None
    out_theme: str
    wrap: bool = False
    first: bool = False


def read_text_argument(source: str | None, what: str) -> str:
    """Read text from a file path, or from stdin for None or "-"."""
    if source is None or source == "-":
        return sys.stdin.read()
    try:
        with open(source, encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError as err:
        raise typer.BadParameter(f"{what} file '{source}' not found") from err
    except PermissionError as err:
        raise typer.BadParameter(f"Permission denied for '{source}'") from err
    except IsADirectoryError as err:
        raise typer.BadParameter(f"{what} path '{source}' is a directory") from err


def load_document(source: str | None) -> object:
    """Load the JSON document to query."""
    text = read_text_argument(source, "Document")
    try:
        return load_json(text)
    except json.JSONDecodeError as err:
        name = "stdin" if source is None or source == "-" else f"'{source}'"
        raise typer.BadParameter(f"Invalid JSON in {name}: {err}") from err


def load_variables(source: str | None) -> dict[str, object]:
    """Build the variables object from config and the --vars option.

    Args:
        source: Inline JSON object, `@file` with a JSON object, or None

    Returns:
        Config variables overridden by the --vars members
    """
    variables = dict(config_module.CONFIG_VARIABLES)
    if source is None:
        return variables

    text = read_text_argument(source[1:], "Variables") if source.startswith("@") else source
    try:
        parsed = load_json(text)
    except json.JSONDecodeError as err:
        raise typer.BadParameter(f"Invalid JSON in --vars: {err}") from err
    if not isinstance(parsed, dict):
        raise typer.BadParameter("--vars must be a JSON object")

    variables.update(parsed)
    return variables


def compile_path_argument(path: str) -> CompiledPath:
    """Compile the PATH argument, reporting syntax errors as usage errors."""
    try:
        compiled = compile_path_text(path)
    except PathParseError as exc:
        raise click.UsageError(str(exc)) from exc
    logger.info("Compiled %s path: %s", compiled.mode, path)
    return compiled


def validate_path_args(args: PathArgs) -> None:
    """Validate numeric options."""
    if args.max_depth < 1:
        raise typer.BadParameter("--max-depth must be positive")
