"""Read-only access to JSON document values.

Documents are plain Python JSON values as produced by ``json.loads``:
``dict``, ``list``, ``str``, ``int``/``float``/``Decimal``, ``bool`` and
``None``. Lists and dicts are shared by reference and never modified.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from decimal import Decimal
from enum import StrEnum

from jpath.path_language.errors import PathInvalidParameter
from jpath.path_language.values import DatetimeValue


class ValueKind(StrEnum):
    """Kinds of values seen by the evaluator."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"
    DATETIME = "datetime"


def kind_of(value: object) -> ValueKind:
    """Classify a document value."""
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int | float | Decimal):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, list | tuple):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.OBJECT
    if isinstance(value, DatetimeValue):
        return ValueKind.DATETIME
    raise PathInvalidParameter(f"unsupported document value of type {type(value).__name__}")


def is_numeric(value: object) -> bool:
    """Return whether value is a JSON number."""
    return isinstance(value, int | float | Decimal) and not isinstance(value, bool)


def is_container(value: object) -> bool:
    """Return whether value is an array or an object."""
    return isinstance(value, list | tuple | dict)


def to_decimal(value: int | float | Decimal) -> Decimal:
    """Convert a JSON number into a Decimal without binary artifacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def array_len(value: object) -> int:
    """Return the array size, or -1 when value is not an array."""
    if isinstance(value, list | tuple):
        return len(value)
    return -1


def array_get(value: list[object] | tuple[object, ...], index: int) -> object:
    """Return one array element."""
    return value[index]


def object_get(value: dict[str, object], key: str) -> tuple[bool, object]:
    """Look up an object member, returning a (found, value) pair."""
    if key in value:
        return (True, value[key])
    return (False, None)


def object_iter(value: dict[str, object]) -> Iterator[tuple[str, object]]:
    """Iterate object members in document order."""
    yield from value.items()


def iter_children(value: object) -> Iterator[object]:
    """Iterate the direct children of a container."""
    if isinstance(value, dict):
        yield from value.values()
    elif isinstance(value, list | tuple):
        yield from value


def container_ordinals(base: object) -> dict[int, int]:
    """Number every container of a document in pre-order, base included as 0.

    Keys are object identities, so the base document must stay alive while
    the mapping is in use.
    """
    ordinals: dict[int, int] = {}
    pending = [base]
    while pending:
        current = pending.pop()
        if not is_container(current) or id(current) in ordinals:
            continue
        ordinals[id(current)] = len(ordinals)
        pending.extend(reversed(list(iter_children(current))))
    return ordinals


def load_json(text: str) -> object:
    """Parse JSON text, reading non-integral numbers as Decimal."""
    return json.loads(text, parse_float=Decimal)


def render_json(value: object) -> str:
    """Render a result item as JSON text, datetimes as ISO strings."""
    match value:
        case None:
            return "null"
        case bool():
            return "true" if value else "false"
        case Decimal():
            return format(value, "f")
        case int():
            return str(value)
        case float():
            return repr(value)
        case str():
            return json.dumps(value, ensure_ascii=False)
        case DatetimeValue():
            return json.dumps(value.to_text())
        case dict():
            members = (
                f"{json.dumps(key, ensure_ascii=False)}: {render_json(member)}"
                for key, member in value.items()
            )
            return "{" + ", ".join(members) + "}"
        case list() | tuple():
            return "[" + ", ".join(render_json(item) for item in value) + "]"
    raise PathInvalidParameter(f"unsupported document value of type {type(value).__name__}")


def unquote_text(value: object) -> str:
    """Text of an item: strings without quotes, everything else as JSON."""
    if isinstance(value, str):
        return value
    if isinstance(value, DatetimeValue):
        return value.to_text()
    return render_json(value)
