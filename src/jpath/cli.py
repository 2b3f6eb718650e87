#!/usr/bin/env python
"""CLI interface for jpath - SQL/JSON path queries over JSON documents."""

from __future__ import annotations

import locale
import logging
import sys

import typer

from jpath import config, logging_config
from jpath.commands import predicates, query


app = typer.Typer(
    help="Evaluate SQL/JSON path expressions against JSON documents.",
    no_args_is_help=True,
)


DEFAULT_VERBOSITY: dict[str, int] = {"value": 0}


logger = logging.getLogger("jpath")


@app.callback()
def main_callback(
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Enable verbose logging output to stderr (repeat for evaluation traces)",
    ),
) -> None:
    """Global CLI options."""
    verbosity = verbose or DEFAULT_VERBOSITY["value"]
    if verbosity:
        logging_config.configure_logging(verbosity)


query.register(app)
predicates.register(app)


def configure_collation() -> None:
    """Order strings by the collation of the environment locale."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        logger.warning("Unsupported collation locale, ordering strings by code point: %s", exc)


def main() -> None:
    """Main CLI entry point."""
    configure_collation()
    loaded_config = config.load_cli_config(sys.argv)
    defaults = loaded_config.defaults
    DEFAULT_VERBOSITY["value"] = 1 if defaults.pop("verbose", False) else 0
    config.CONFIG_DEFAULTS.clear()
    config.CONFIG_DEFAULTS.update(defaults)
    config.CONFIG_VARIABLES.clear()
    config.CONFIG_VARIABLES.update(loaded_config.variables)

    command = typer.main.get_command(app)
    default_map = config.build_default_map(defaults) if defaults else None
    command.main(
        args=sys.argv[1:],
        prog_name="jpath",
        standalone_mode=True,
        default_map=default_map,
    )


if __name__ == "__main__":
    main()
