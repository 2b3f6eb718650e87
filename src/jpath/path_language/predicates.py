"""Three-valued logic and predicate checks for path filters."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from enum import Enum
from functools import lru_cache
from typing import TypeAlias

from jpath.path_language.errors import PathParseError


class TriBool(Enum):
    """Result of a predicate: true, false or unknown."""

    FALSE = 0
    TRUE = 1
    UNKNOWN = 2

    @classmethod
    def from_bool(cls, value: bool) -> TriBool:
        return cls.TRUE if value else cls.FALSE

    def to_json(self) -> bool | None:
        """Return the JSON value of this result, null for unknown."""
        if self is TriBool.UNKNOWN:
            return None
        return self is TriBool.TRUE


PairCheck: TypeAlias = Callable[[object, object | None], TriBool]

REGEX_FLAGS = "ismxq"


def logical_not(value: TriBool) -> TriBool:
    if value is TriBool.UNKNOWN:
        return TriBool.UNKNOWN
    return TriBool.FALSE if value is TriBool.TRUE else TriBool.TRUE


def is_unknown(value: TriBool) -> TriBool:
    return TriBool.from_bool(value is TriBool.UNKNOWN)


def logical_and(left: TriBool, right: Callable[[], TriBool]) -> TriBool:
    """Conjunction; the right side is only evaluated when left is not false."""
    if left is TriBool.FALSE:
        return TriBool.FALSE
    right_value = right()
    return left if right_value is TriBool.TRUE else right_value


def logical_or(left: TriBool, right: Callable[[], TriBool]) -> TriBool:
    """Disjunction; the right side is only evaluated when left is not true."""
    if left is TriBool.TRUE:
        return TriBool.TRUE
    right_value = right()
    return left if right_value is TriBool.FALSE else right_value


def check_pairs(
    lax: bool,
    left: Iterable[object],
    right: list[object] | None,
    check: PairCheck,
) -> TriBool:
    """Apply check to every (left, right) pair of two item sequences.

    Without a right sequence every left item is checked once against None.
    Lax mode answers true at the first matching pair. Strict mode answers
    unknown at the first unknown pair and otherwise looks at all pairs.
    """
    found = False
    error = False
    for left_item in left:
        right_items: Iterable[object | None] = right if right is not None else (None,)
        for right_item in right_items:
            result = check(left_item, right_item)
            if result is TriBool.UNKNOWN:
                if not lax:
                    return TriBool.UNKNOWN
                error = True
            elif result is TriBool.TRUE:
                if lax:
                    return TriBool.TRUE
                found = True
    if found:
        return TriBool.TRUE
    if error:
        return TriBool.UNKNOWN
    return TriBool.FALSE


def starts_with(whole: object, initial: object | None) -> TriBool:
    """Check a string prefix; non-strings are unknown."""
    if not isinstance(whole, str) or not isinstance(initial, str):
        return TriBool.UNKNOWN
    return TriBool.from_bool(whole.startswith(initial))


@lru_cache(maxsize=256)
def compile_regex(pattern: str, flags: str) -> re.Pattern[str]:
    """Compile a like_regex pattern with its flag letters.

    Without flags `.` also matches newlines. `m` makes `^`, `$` and `.`
    line-sensitive, `s` switches that back off, `x` ignores whitespace in the
    pattern and `q` matches the pattern literally.
    """
    unknown = set(flags) - set(REGEX_FLAGS)
    if unknown:
        raise PathParseError(f"unrecognized flag character \"{sorted(unknown)[0]}\" in LIKE_REGEX predicate")
    options = re.DOTALL
    if "i" in flags:
        options |= re.IGNORECASE
    if "m" in flags and "s" not in flags:
        options = (options & ~re.DOTALL) | re.MULTILINE
    if "x" in flags and "q" not in flags:
        options |= re.VERBOSE
    source = re.escape(pattern) if "q" in flags else pattern
    try:
        return re.compile(source, options)
    except re.error as exc:
        raise PathParseError(f"invalid regular expression: {exc}") from exc


def like_regex(pattern: re.Pattern[str], value: object) -> TriBool:
    """Search a string for the pattern; non-strings are unknown."""
    if not isinstance(value, str):
        return TriBool.UNKNOWN
    return TriBool.from_bool(pattern.search(value) is not None)
