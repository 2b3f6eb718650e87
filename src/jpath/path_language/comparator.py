"""Cross-type comparison of path items."""

from __future__ import annotations

import locale
from decimal import Decimal
from typing import cast

from jpath.path_language import arithmetic
from jpath.path_language.datetimes import compare_datetimes
from jpath.path_language.document import ValueKind, kind_of, to_decimal
from jpath.path_language.predicates import TriBool
from jpath.path_language.values import DatetimeValue


COMPARISON_OPERATORS = ("==", "!=", "<", ">", "<=", ">=")


def _from_order(operator: str, order: int) -> TriBool:
    """Turn a three-way comparison result into the operator's answer."""
    match operator:
        case "==":
            result = order == 0
        case "!=":
            result = order != 0
        case "<":
            result = order < 0
        case ">":
            result = order > 0
        case "<=":
            result = order <= 0
        case ">=":
            result = order >= 0
        case _:
            return TriBool.UNKNOWN
    return TriBool.from_bool(result)


def _collation_key(text: str) -> str:
    # strxfrm rejects embedded NUL characters
    return locale.strxfrm(text.replace("\x00", ""))


def compare_strings(left: str, right: str) -> int:
    """Order strings by the LC_COLLATE collation of the process.

    Strings that collate equal but differ are ordered by code point, so only
    identical strings compare equal.
    """
    left_key = _collation_key(left)
    right_key = _collation_key(right)
    if left_key != right_key:
        return (left_key > right_key) - (left_key < right_key)
    return (left > right) - (left < right)


def compare_items(operator: str, left: object, right: object) -> TriBool:
    """Compare two items with SQL/JSON semantics.

    Null equals only null and is unequal to everything else. Other values
    of different kinds, as well as arrays and objects, are incomparable.
    """
    left_kind = kind_of(left)
    right_kind = kind_of(right)
    if left_kind != right_kind:
        if ValueKind.NULL in (left_kind, right_kind):
            return TriBool.TRUE if operator == "!=" else TriBool.FALSE
        return TriBool.UNKNOWN

    if isinstance(left, DatetimeValue) and isinstance(right, DatetimeValue):
        compared = compare_datetimes(left, right)
        if compared is None:
            return TriBool.UNKNOWN
        return _from_order(operator, compared)

    if isinstance(left, str) and isinstance(right, str):
        if operator in ("==", "!="):
            return TriBool.from_bool((left == right) == (operator == "=="))
        return _from_order(operator, compare_strings(left, right))

    match left_kind:
        case ValueKind.NULL:
            order = 0
        case ValueKind.BOOLEAN:
            order = int(bool(left)) - int(bool(right))
        case ValueKind.NUMBER:
            order = arithmetic.compare(
                to_decimal(cast(Decimal, left)), to_decimal(cast(Decimal, right))
            )
        case _:
            return TriBool.UNKNOWN
    return _from_order(operator, order)
