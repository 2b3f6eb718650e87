"""Exists and match commands: answer a yes/no question about a document."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

import click
import typer

from jpath import config as config_module
from jpath.cli_common import (
    PathArgs,
    compile_path_argument,
    load_document,
    load_variables,
    validate_path_args,
)
from jpath.output import (
    DEFAULT_OUTPUT_THEME,
    build_console,
    prepare_json_output,
    print_prepared_output,
    processing_status,
    should_use_color,
)
from jpath.path_language import PathLanguageError, path_exists, path_match, render_json
from jpath.path_language.context import DEFAULT_MAX_DEPTH


PathPredicate: TypeAlias = Callable[..., bool | None]


def run_predicate(args: PathArgs, predicate: PathPredicate) -> None:
    """Evaluate a boolean path function and print true, false or null."""
    validate_path_args(args)
    color_enabled = should_use_color(args.color_flag)
    console = build_console(color_enabled)

    with processing_status(console, color_enabled):
        compiled = compile_path_argument(args.path)
        document = load_document(args.file)
        variables = load_variables(args.variables)
        try:
            result = predicate(
                compiled,
                document,
                variables,
                silent=args.silent,
                max_depth=args.max_depth,
            )
        except PathLanguageError as exc:
            raise click.UsageError(str(exc)) from exc

    prepared = prepare_json_output([render_json(result)], color_enabled, args.out_theme)
    print_prepared_output(console, prepared)


def run_exists(args: PathArgs) -> None:
    """Run the exists command."""
    run_predicate(args, path_exists)


def run_match(args: PathArgs) -> None:
    """Run the match command."""
    run_predicate(args, path_match)


def _register_predicate_command(
    app: typer.Typer, name: str, runner: Callable[[PathArgs], None], help_text: str
) -> None:
    @app.command(name, help=help_text)
    def predicate_command(  # noqa: PLR0913
        path: str = typer.Argument(..., metavar="PATH", help="SQL/JSON path expression"),
        file: str | None = typer.Argument(
            None, metavar="FILE", help="JSON document to query (default: stdin)"
        ),
        config: str = typer.Option(
            config_module.DEFAULT_CONFIG_NAME,
            "--config",
            metavar="FILE",
            help="Config file name to load from current directory",
        ),
        variables: str | None = typer.Option(
            None,
            "--vars",
            metavar="JSON",
            help="JSON object with path variables, or @FILE to read it from a file",
        ),
        silent: bool = typer.Option(
            False,
            "--silent/--no-silent",
            help="Print null instead of failing on recoverable evaluation errors",
        ),
        max_depth: int = typer.Option(
            DEFAULT_MAX_DEPTH,
            "--max-depth",
            metavar="N",
            help="Maximum evaluation nesting depth",
        ),
        color_flag: bool | None = typer.Option(
            None,
            "--color/--no-color",
            help="Force colored output",
        ),
        out_theme: str = typer.Option(
            DEFAULT_OUTPUT_THEME,
            "--out-theme",
            help="Syntax theme for highlighted output",
        ),
    ) -> None:
        args = PathArgs(
            path=path,
            file=file,
            config=config,
            variables=variables,
            silent=silent,
            max_depth=max_depth,
            color_flag=color_flag,
            out_theme=out_theme,
        )
        config_module.log_applied_config_defaults(name)
        config_module.log_command_arguments(args, name)
        runner(args)


def register(app: typer.Typer) -> None:
    """Register the exists and match commands."""
    _register_predicate_command(
        app, "exists", run_exists, "Print whether the path produces any item."
    )
    _register_predicate_command(
        app, "match", run_match, "Print the boolean result of a path predicate."
    )
