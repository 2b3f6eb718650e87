"""Query execution entry point and the user-facing path functions."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TypeAlias

from jpath.path_language.ast import CompiledPath
from jpath.path_language.compiler import ensure_compiled
from jpath.path_language.context import DEFAULT_MAX_DEPTH, ExecContext
from jpath.path_language.document import unquote_text
from jpath.path_language.errors import (
    PathDepthExceeded,
    PathExecutionError,
    SingletonRequired,
)
from jpath.path_language.evaluator import evaluate
from jpath.path_language.sequence import ResultSequence
from jpath.path_language.values import DatetimeValue
from jpath.path_language.variables import make_resolver


logger = logging.getLogger("jpath")


@dataclass(frozen=True, slots=True)
class Matched:
    """At least one item matched; holds the items in full-sequence mode."""

    sequence: ResultSequence = field(default_factory=ResultSequence)


@dataclass(frozen=True, slots=True)
class NotFound:
    """Evaluation succeeded without producing any item."""


@dataclass(frozen=True, slots=True)
class Failed:
    """A suppressible error occurred while errors were not being thrown.

    The sequence keeps the items produced before the error.
    """

    error: PathExecutionError
    sequence: ResultSequence = field(default_factory=ResultSequence)


Outcome: TypeAlias = Matched | NotFound | Failed


def run(
    compiled: CompiledPath,
    document: object,
    variables: object = None,
    *,
    existence_only: bool = False,
    throw_errors: bool = True,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Outcome:
    """Execute a compiled path against a document.

    Args:
        compiled: Path expression with its mode.
        document: Root JSON value.
        variables: JSON object with `$name` values, or a variable resolver.
        existence_only: Only answer whether anything matches.
        throw_errors: Raise suppressible errors instead of returning Failed.
        max_depth: Maximum evaluation nesting depth.

    Returns:
        Matched with the result items, NotFound, or Failed.
    """
    resolver = make_resolver(variables)
    context = ExecContext.create(compiled.lax, document, resolver, throw_errors, max_depth)
    logger.debug("Executing %s path %r", compiled.mode, compiled.expr)

    found = ResultSequence()
    try:
        if existence_only and compiled.lax:
            if evaluate(context, compiled.expr, document, None):
                return Matched()
            return NotFound()

        # strict mode needs every item to be sure no error is hidden
        evaluate(context, compiled.expr, document, found)
    except PathExecutionError as exc:
        if throw_errors:
            raise
        logger.debug("Path evaluation failed silently after %d item(s): %s", len(found), exc)
        return Failed(exc, found)
    except RecursionError as exc:
        raise PathDepthExceeded("path evaluation exceeded the interpreter recursion limit") from exc

    logger.debug("Path produced %d item(s)", len(found))
    if found.is_empty():
        return NotFound()
    return Matched(found)


def to_json_value(item: object) -> object:
    """Convert a result item into a plain JSON value."""
    if isinstance(item, DatetimeValue):
        return item.to_text()
    return item


def _collect(
    path: str | CompiledPath,
    document: object,
    variables: object,
    silent: bool,
    max_depth: int,
) -> list[object]:
    outcome = run(
        ensure_compiled(path),
        document,
        variables,
        throw_errors=not silent,
        max_depth=max_depth,
    )
    if isinstance(outcome, NotFound):
        return []
    return outcome.sequence.to_list()


def path_exists(
    path: str | CompiledPath,
    document: object,
    variables: object = None,
    silent: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> bool | None:
    """Return whether the path yields any item, or None on a silenced error."""
    outcome = run(
        ensure_compiled(path),
        document,
        variables,
        existence_only=True,
        throw_errors=not silent,
        max_depth=max_depth,
    )
    if isinstance(outcome, Failed):
        return None
    return isinstance(outcome, Matched)


def path_match(
    path: str | CompiledPath,
    document: object,
    variables: object = None,
    silent: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> bool | None:
    """Return the result of a path predicate.

    The path must produce a single boolean or null item. Any other result
    raises SingletonRequired unless silent, in which case None is returned.
    """
    items = _collect(path, document, variables, silent, max_depth)
    if len(items) == 1:
        item = items[0]
        if isinstance(item, bool):
            return item
        if item is None:
            return None
    if not silent:
        raise SingletonRequired("expression should return a singleton boolean")
    return None


def path_query(
    path: str | CompiledPath,
    document: object,
    variables: object = None,
    silent: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Iterator[object]:
    """Iterate over every item the path produces."""
    items = _collect(path, document, variables, silent, max_depth)
    return iter([to_json_value(item) for item in items])


def path_query_array(
    path: str | CompiledPath,
    document: object,
    variables: object = None,
    silent: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[object]:
    """Return every item the path produces as one JSON array."""
    return [to_json_value(item) for item in _collect(path, document, variables, silent, max_depth)]


def path_query_first(
    path: str | CompiledPath,
    document: object,
    variables: object = None,
    silent: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> object:
    """Return the first item the path produces, or None."""
    items = _collect(path, document, variables, silent, max_depth)
    if not items:
        return None
    return to_json_value(items[0])


def path_query_first_text(
    path: str | CompiledPath,
    document: object,
    variables: object = None,
    silent: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str | None:
    """Return the first item as text with strings unquoted, or None."""
    items = _collect(path, document, variables, silent, max_depth)
    if not items:
        return None
    return unquote_text(items[0])
