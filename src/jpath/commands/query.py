"""Query command: print the items a path produces."""

from __future__ import annotations

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
from jpath.path_language import PathLanguageError, path_query_array, render_json
from jpath.path_language.context import DEFAULT_MAX_DEPTH


def format_items(items: list[object], wrap: bool, first: bool) -> list[str]:
    """Render result items as output lines."""
    if first:
        items = items[:1]
    if wrap:
        return [render_json(items)]
    return [render_json(item) for item in items]


def run_query(args: PathArgs) -> None:
    """Run the query command."""
    validate_path_args(args)
    color_enabled = should_use_color(args.color_flag)
    console = build_console(color_enabled)

    with processing_status(console, color_enabled):
        compiled = compile_path_argument(args.path)
        document = load_document(args.file)
        variables = load_variables(args.variables)
        try:
            items = path_query_array(
                compiled,
                document,
                variables,
                silent=args.silent,
                max_depth=args.max_depth,
            )
        except PathLanguageError as exc:
            raise click.UsageError(str(exc)) from exc

    lines = format_items(items, args.wrap, args.first)
    print_prepared_output(console, prepare_json_output(lines, color_enabled, args.out_theme))


def register(app: typer.Typer) -> None:
    """Register the query command."""

    @app.command("query")
    def query_command(  # noqa: PLR0913
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
            help="Suppress recoverable evaluation errors",
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
        wrap: bool = typer.Option(
            False,
            "--wrap",
            help="Print all items as a single JSON array",
        ),
        first: bool = typer.Option(
            False,
            "--first",
            help="Print only the first item",
        ),
    ) -> None:
        """Print every item the path produces, one JSON value per line."""
        args = PathArgs(
            path=path,
            file=file,
            config=config,
            variables=variables,
            silent=silent,
            max_depth=max_depth,
            color_flag=color_flag,
            out_theme=out_theme,
            wrap=wrap,
            first=first,
        )
        config_module.log_applied_config_defaults("query")
        config_module.log_command_arguments(args, "query")
        run_query(args)
