"""Console output helpers for the jpath CLI."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from rich.console import Console
from rich.syntax import Syntax


DEFAULT_OUTPUT_THEME = "github-dark"


@dataclass(frozen=True)
class OutputOperation:
    """One prepared output operation."""

    kind: str
    text: str | None = None
    renderable: object | None = None


@dataclass(frozen=True)
class PreparedOutput:
    """Prepared output operations ready for console rendering."""

    operations: tuple[OutputOperation, ...]


def should_use_color(color_flag: bool | None) -> bool:
    """Determine if color should be used based on flag and TTY detection.

    Args:
        color_flag: Explicit color preference (True/False) or None for auto-detect

    Returns:
        True if colors should be used, False otherwise
    """
    if color_flag is None:
        return sys.stdout.isatty()
    return color_flag


def build_console(color_enabled: bool) -> Console:
    """Build the console used for command output."""
    return Console(
        force_terminal=color_enabled,
        no_color=not color_enabled,
        highlight=False,
        soft_wrap=True,
    )


@contextmanager
def processing_status(console: Console, color_enabled: bool) -> Iterator[None]:
    """Show a spinner while a query runs on an interactive console."""
    if not color_enabled:
        yield
        return
    with console.status("Evaluating path..."):
        yield


def normalize_syntax_theme(out_theme: str) -> str:
    """Return a valid theme name for syntax rendering."""
    normalized_theme = out_theme.strip()
    if normalized_theme:
        return normalized_theme
    return DEFAULT_OUTPUT_THEME


def prepare_json_output(lines: list[str], color_enabled: bool, out_theme: str) -> PreparedOutput:
    """Prepare JSON lines with syntax highlighting when color is enabled."""
    if not lines:
        return PreparedOutput(operations=())
    text = "\n".join(lines)
    if color_enabled:
        return PreparedOutput(
            operations=(
                OutputOperation(
                    kind="console_print",
                    renderable=Syntax(
                        text,
                        "json",
                        theme=normalize_syntax_theme(out_theme),
                        line_numbers=False,
                        word_wrap=True,
                    ),
                ),
            )
        )
    return PreparedOutput(operations=(OutputOperation(kind="plain_write", text=text),))


def _write_plain_output(console: Console, text: str) -> None:
    """Write plain output directly to console stream."""
    console.file.write(f"{text}\n")
    console.file.flush()


def print_prepared_output(console: Console, prepared_output: PreparedOutput) -> None:
    """Print already prepared output operations."""
    for operation in prepared_output.operations:
        if operation.kind == "plain_write":
            if operation.text is not None:
                _write_plain_output(console, operation.text)
            continue
        if operation.renderable is not None:
            console.print(operation.renderable)
            continue
        console.print(operation.text if operation.text is not None else "", markup=False)
