"""Virtual values synthesized during path evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import StrEnum


class DatetimeKind(StrEnum):
    """Datetime value kinds, named as reported by `.type()`."""

    DATE = "date"
    TIME = "time without time zone"
    TIMETZ = "time with time zone"
    TIMESTAMP = "timestamp without time zone"
    TIMESTAMPTZ = "timestamp with time zone"


@dataclass(frozen=True, slots=True)
class DatetimeValue:
    """Datetime item produced by the `.datetime()` method.

    ``value`` is a ``date`` for dates, a naive ``time``/``datetime`` for the
    zone-less kinds and an aware ``time``/``datetime`` for the zoned ones.
    ``tz`` is the default zone offset (seconds east of UTC) used when the
    value has to be promoted to a zoned kind for comparison.
    """

    value: date | time | datetime
    kind: DatetimeKind
    tz: int | None = None

    def to_text(self) -> str:
        """Render the value in ISO 8601 form."""
        if self.kind == DatetimeKind.DATE:
            return self.value.isoformat()
        return _trim_fraction(self.value.isoformat())


def _trim_fraction(text: str) -> str:
    """Drop trailing zeros from the fractional seconds of an ISO string."""
    if "." not in text:
        return text
    head, _, tail = text.partition(".")
    digits = tail
    suffix = ""
    for index, char in enumerate(tail):
        if not char.isdigit():
            digits, suffix = tail[:index], tail[index:]
            break
    digits = digits.rstrip("0")
    return f"{head}.{digits}{suffix}" if digits else f"{head}{suffix}"
