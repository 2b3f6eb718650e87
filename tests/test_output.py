"""Tests for console output helpers."""

from __future__ import annotations

import io
import sys

import pytest
from rich.console import Console
from rich.syntax import Syntax

from jpath import output


def test_should_use_color_respects_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    """Explicit color flag should override TTY detection."""
    monkeypatch.setattr(sys.stdout, "isatty", lambda: False)

    assert output.should_use_color(True) is True
    assert output.should_use_color(False) is False


def test_should_use_color_uses_tty(monkeypatch: pytest.MonkeyPatch) -> None:
    """When flag is None, use TTY detection."""
    monkeypatch.setattr(sys.stdout, "isatty", lambda: True)

    assert output.should_use_color(None) is True


def test_normalize_syntax_theme() -> None:
    """Blank themes should fall back to the default theme."""
    assert output.normalize_syntax_theme(" monokai ") == "monokai"
    assert output.normalize_syntax_theme("  ") == output.DEFAULT_OUTPUT_THEME


def test_prepare_json_output_plain() -> None:
    """Without color the lines should be written as plain text."""
    prepared = output.prepare_json_output(["1", "2"], False, "monokai")

    assert prepared.operations == (output.OutputOperation(kind="plain_write", text="1\n2"),)


def test_prepare_json_output_empty() -> None:
    """No lines should produce no operations."""
    assert output.prepare_json_output([], True, "monokai").operations == ()


def test_prepare_json_output_colored() -> None:
    """With color the lines should be rendered as JSON syntax."""
    prepared = output.prepare_json_output(['{"a": 1}'], True, "")

    assert len(prepared.operations) == 1
    operation = prepared.operations[0]
    assert operation.kind == "console_print"
    assert isinstance(operation.renderable, Syntax)


def test_print_prepared_output_plain() -> None:
    """Plain operations should be written directly to the console file."""
    stream = io.StringIO()
    console = Console(file=stream, no_color=True)

    output.print_prepared_output(console, output.prepare_json_output(["[1, 2]"], False, ""))

    assert stream.getvalue() == "[1, 2]\n"


def test_print_prepared_output_colored() -> None:
    """Syntax operations should be printed through the console."""
    stream = io.StringIO()
    console = Console(file=stream, force_terminal=True, width=80)

    output.print_prepared_output(console, output.prepare_json_output(['"abc"'], True, "monokai"))

    assert "abc" in stream.getvalue()
