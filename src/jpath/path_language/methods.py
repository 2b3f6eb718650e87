"""Item method implementations: type(), size(), abs(), double() and friends."""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from decimal import Decimal
from typing import cast

from jpath.path_language import arithmetic
from jpath.path_language.datetimes import (
    DefaultZone,
    parse_datetime,
    resolve_timezone,
    timezone_from_number,
)
from jpath.path_language.document import (
    ValueKind,
    array_len,
    is_numeric,
    kind_of,
    object_iter,
    to_decimal,
)
from jpath.path_language.errors import (
    ArrayNotFound,
    InvalidDatetimeArgument,
    NonNumericItem,
    ObjectNotFound,
)
from jpath.path_language.values import DatetimeValue


KEYVALUE_ID_MULTIPLIER = 10_000_000_000
DOUBLE_DIGITS = 15

NUMERIC_METHODS: dict[str, Callable[[Decimal], Decimal]] = {
    "abs": arithmetic.absolute,
    "floor": arithmetic.floor,
    "ceiling": arithmetic.ceiling,
}

_DOUBLE_PATTERN = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\s*")


def type_name(value: object) -> str:
    """Name of the item type as reported by `.type()`."""
    if isinstance(value, DatetimeValue):
        return value.kind.value
    return kind_of(value).value


def size_of(value: object, auto_wrap: bool, ignore_structural_errors: bool) -> int | None:
    """Array size of value, 1 for a wrapped scalar, or None when skipped."""
    size = array_len(value)
    if size >= 0:
        return size
    if auto_wrap:
        return 1
    if not ignore_structural_errors:
        raise ArrayNotFound("jsonpath item method .size() can only be applied to an array")
    return None


def apply_numeric_method(name: str, value: object) -> Decimal:
    """Apply `.abs()`, `.floor()` or `.ceiling()` to a number."""
    if not is_numeric(value):
        raise NonNumericItem(f"jsonpath item method .{name}() can only be applied to a numeric value")
    return NUMERIC_METHODS[name](to_decimal(cast(Decimal, value)))


_DOUBLE_ERROR = "jsonpath item method .double() can only be applied to a numeric value"


def _checked_double(value: Decimal) -> float:
    """Convert to a double, rejecting values that overflow, underflow or are not finite."""
    as_float = float(value)
    if not math.isfinite(as_float) or (as_float == 0 and value != 0):
        raise NonNumericItem(_DOUBLE_ERROR)
    return as_float


def to_double(value: object) -> object:
    """Validate a number as a double, or convert a numeric string into one.

    NaN is rejected along with the infinities.
    """
    if is_numeric(value):
        _checked_double(to_decimal(cast(Decimal, value)))
        return value
    if isinstance(value, str):
        if _DOUBLE_PATTERN.fullmatch(value) is None:
            raise NonNumericItem(_DOUBLE_ERROR)
        parsed = _checked_double(Decimal(value.strip()))
        return Decimal(f"{parsed:.{DOUBLE_DIGITS}g}")
    raise NonNumericItem(
        "jsonpath item method .double() can only be applied to a string or numeric value"
    )


def timezone_argument(values: list[object]) -> DefaultZone:
    """Interpret the evaluated timezone argument of `.datetime()`."""
    if len(values) != 1 or kind_of(values[0]) not in (ValueKind.STRING, ValueKind.NUMBER):
        raise InvalidDatetimeArgument(
            "timezone argument of jsonpath item method .datetime() is not a singleton string or number"
        )
    value = values[0]
    if isinstance(value, str):
        return resolve_timezone(value)
    return timezone_from_number(to_decimal(cast(Decimal, value)))


def to_datetime(
    value: object, template: str | None, default_tz: DefaultZone | None
) -> DatetimeValue:
    """Convert a string item into a datetime item."""
    if not isinstance(value, str):
        raise InvalidDatetimeArgument("jsonpath item method .datetime() is applied to not a string")
    return parse_datetime(value, template, default_tz)


def keyvalue_pairs(value: object, object_id: int) -> list[dict[str, object]]:
    """Build the `{"key", "value", "id"}` objects for each member of an object."""
    if not isinstance(value, dict):
        raise ObjectNotFound("jsonpath item method .keyvalue() can only be applied to an object")
    return [{"key": key, "value": member, "id": object_id} for key, member in object_iter(value)]


def keyvalue_id(base_id: int, offset: int) -> int:
    """Identifier of an object from its base object id and its offset within it."""
    return base_id * KEYVALUE_ID_MULTIPLIER + offset
