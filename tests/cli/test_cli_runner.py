"""CliRunner tests for the Typer CLI."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from typer.testing import CliRunner

from jpath import logging_config
from jpath.cli import app


STORE = {
    "store": {
        "books": [
            {"title": "Alpha", "price": 10},
            {"title": "Beta", "price": 25.5},
            {"title": "Gamma", "price": 7},
        ],
    }
}


def _write_document(tmp_path: Path, document: object = STORE) -> str:
    path = tmp_path / "store.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return str(path)


def test_cli_runner_query_prints_one_item_per_line(tmp_path: Path) -> None:
    """query should print each item as JSON on its own line."""
    runner = CliRunner()
    document = _write_document(tmp_path)

    result = runner.invoke(app, ["query", "--no-color", "$.store.books[*].title", document])

    assert result.exit_code == 0
    assert result.stdout == '"Alpha"\n"Beta"\n"Gamma"\n'


def test_cli_runner_query_keeps_number_text(tmp_path: Path) -> None:
    """Numbers should be printed exactly as in the document."""
    runner = CliRunner()
    document = _write_document(tmp_path)

    result = runner.invoke(app, ["query", "--no-color", "$.store.books[*].price", document])

    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["10", "25.5", "7"]


def test_cli_runner_query_filter_with_vars(tmp_path: Path) -> None:
    """--vars should provide filter variables."""
    runner = CliRunner()
    document = _write_document(tmp_path)

    result = runner.invoke(
        app,
        [
            "query",
            "--no-color",
            "--vars",
            '{"limit": 9}',
            "$.store.books[*] ? (@.price > $limit).title",
            document,
        ],
    )

    assert result.exit_code == 0
    assert result.stdout.splitlines() == ['"Alpha"', '"Beta"']


def test_cli_runner_query_vars_from_file(tmp_path: Path) -> None:
    """--vars @FILE should read variables from a file."""
    runner = CliRunner()
    document = _write_document(tmp_path)
    vars_path = tmp_path / "vars.json"
    vars_path.write_text('{"name": "Gamma"}', encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "query",
            "--no-color",
            "--vars",
            f"@{vars_path}",
            "$.store.books[*] ? (@.title == $name).price",
            document,
        ],
    )

    assert result.exit_code == 0
    assert result.stdout == "7\n"


def test_cli_runner_query_wrap_and_first(tmp_path: Path) -> None:
    """--wrap should print one array and --first only the first item."""
    runner = CliRunner()
    document = _write_document(tmp_path)
    path = "$.store.books[*].price"

    wrapped = runner.invoke(app, ["query", "--no-color", "--wrap", path, document])
    first = runner.invoke(app, ["query", "--no-color", "--first", path, document])

    assert wrapped.exit_code == 0
    assert wrapped.stdout == "[10, 25.5, 7]\n"
    assert first.exit_code == 0
    assert first.stdout == "10\n"


def test_cli_runner_query_empty_result_prints_nothing(tmp_path: Path) -> None:
    """No items should produce no output."""
    runner = CliRunner()
    document = _write_document(tmp_path)

    result = runner.invoke(app, ["query", "--no-color", "$.missing", document])

    assert result.exit_code == 0
    assert result.stdout == ""


def test_cli_runner_query_reads_stdin() -> None:
    """Without FILE the document should be read from stdin."""
    runner = CliRunner()

    result = runner.invoke(app, ["query", "--no-color", "$.a + 1"], input='{"a": 1.5}')

    assert result.exit_code == 0
    assert result.stdout == "2.5\n"


def test_cli_runner_query_color_output(tmp_path: Path) -> None:
    """Colored output should still contain the rendered items."""
    runner = CliRunner()
    document = _write_document(tmp_path)

    result = runner.invoke(app, ["query", "--color", "$.store.books[0].title", document])

    assert result.exit_code == 0
    assert "Alpha" in result.stdout


def test_cli_runner_query_strict_error(tmp_path: Path) -> None:
    """Strict errors should be reported unless --silent is given."""
    runner = CliRunner()
    document = _write_document(tmp_path)

    failed = runner.invoke(app, ["query", "--no-color", "strict $.missing", document])
    silenced = runner.invoke(app, ["query", "--no-color", "--silent", "strict $.missing", document])

    assert failed.exit_code != 0
    assert "member not found" in failed.stderr
    assert silenced.exit_code == 0
    assert silenced.stdout == ""


def test_cli_runner_invalid_path(tmp_path: Path) -> None:
    """Syntax errors should be usage errors."""
    runner = CliRunner()
    document = _write_document(tmp_path)

    result = runner.invoke(app, ["query", "--no-color", "$.a +", document])

    assert result.exit_code == 2
    assert "syntax error" in result.stderr


def test_cli_runner_missing_file() -> None:
    """A missing document should be reported."""
    runner = CliRunner()

    result = runner.invoke(app, ["query", "--no-color", "$", "/nonexistent/doc.json"])

    assert result.exit_code != 0
    assert "not found" in result.stderr


def test_cli_runner_invalid_json(tmp_path: Path) -> None:
    """A malformed document should be reported."""
    runner = CliRunner()
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")

    result = runner.invoke(app, ["query", "--no-color", "$", str(path)])

    assert result.exit_code != 0
    assert "Invalid JSON" in result.stderr


def test_cli_runner_invalid_vars(tmp_path: Path) -> None:
    """--vars must hold a JSON object."""
    runner = CliRunner()
    document = _write_document(tmp_path)

    result = runner.invoke(app, ["query", "--no-color", "--vars", "[1]", "$", document])

    assert result.exit_code != 0
    assert "must be a JSON object" in result.stderr


def test_cli_runner_invalid_max_depth(tmp_path: Path) -> None:
    """--max-depth must be positive."""
    runner = CliRunner()
    document = _write_document(tmp_path)

    result = runner.invoke(app, ["query", "--no-color", "--max-depth", "0", "$", document])

    assert result.exit_code != 0
    assert "max-depth" in result.stderr


def test_cli_runner_exists(tmp_path: Path) -> None:
    """exists should print true or false."""
    runner = CliRunner()
    document = _write_document(tmp_path)

    found = runner.invoke(app, ["exists", "--no-color", "$.store.books[*] ? (@.price > 20)", document])
    missing = runner.invoke(app, ["exists", "--no-color", "$.store.owner", document])
    silenced = runner.invoke(app, ["exists", "--no-color", "--silent", "strict $.store.owner", document])

    assert found.stdout == "true\n"
    assert missing.stdout == "false\n"
    assert silenced.stdout == "null\n"


def test_cli_runner_match(tmp_path: Path) -> None:
    """match should print the predicate result."""
    runner = CliRunner()
    document = _write_document(tmp_path)

    matched = runner.invoke(app, ["match", "--no-color", "$.store.books[0].price < 20", document])
    unknown = runner.invoke(app, ["match", "--no-color", '$.store.books[0].title < 20', document])

    assert matched.exit_code == 0
    assert matched.stdout == "true\n"
    assert unknown.exit_code == 0
    assert unknown.stdout == "null\n"


def test_cli_runner_match_requires_boolean(tmp_path: Path) -> None:
    """match on a non-boolean path should fail."""
    runner = CliRunner()
    document = _write_document(tmp_path)

    result = runner.invoke(app, ["match", "--no-color", "$.store.books[0].price", document])

    assert result.exit_code == 2
    assert "singleton SQL/JSON item required" in result.stderr


def test_cli_runner_help_lists_commands() -> None:
    """The top-level help should list all commands."""
    runner = CliRunner()

    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for command in ("query", "exists", "match"):
        assert command in result.stdout


def test_cli_runner_verbose_logs_to_stderr(tmp_path: Path) -> None:
    """Verbose logs should go to stderr and leave stdout with the results only."""
    runner = CliRunner()
    document = _write_document(tmp_path)
    logger = logging.getLogger(logging_config.LOGGER_NAME)
    state = (logger.level, logger.propagate, list(logger.handlers))

    try:
        result = runner.invoke(app, ["-v", "query", "--no-color", "$.store.books[0].price", document])
    finally:
        logger.setLevel(state[0])
        logger.propagate = state[1]
        logger.handlers[:] = state[2]

    assert result.exit_code == 0
    assert result.stdout == "10\n"
    assert "Command arguments (query)" in result.stderr
    assert "Compiled lax path" in result.stderr
