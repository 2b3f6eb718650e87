"""Datetime templates, parsing and comparison for the `.datetime()` method.

Templates use the SQL formatting tokens (``YYYY``, ``MM``, ``DD``, ``HH24``,
``MI``, ``SS``, ``TZH`` ...). A template is compiled once into a regular
expression; the kind of the resulting value (date, time, timestamp, with or
without zone) follows from the fields the template contains.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from typing import TypeAlias, cast
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from jpath.path_language.errors import InvalidDatetimeArgument
from jpath.path_language.values import DatetimeKind, DatetimeValue


DEFAULT_FORMATS = (
    "yyyy-mm-dd HH24:MI:SS TZH:TZM",
    "yyyy-mm-dd HH24:MI:SS TZH",
    "yyyy-mm-dd HH24:MI:SS",
    "yyyy-mm-dd",
    "HH24:MI:SS TZH:TZM",
    "HH24:MI:SS TZH",
    "HH24:MI:SS",
)

MAX_OFFSET_SECONDS = 86399

# zone names applied to time-only values are resolved against a fixed date
ZONE_REFERENCE = datetime(2000, 1, 1)

MONTH_NAMES = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

_SEPARATORS = "-/.,:;"

# longest tokens first so that e.g. HH24 wins over HH
_TOKENS: tuple[tuple[str, str, str], ...] = (
    ("MONTH", "month_name", r"[A-Za-z]+"),
    ("HH24", "hour24", r"\d{1,2}"),
    ("HH12", "hour12", r"\d{1,2}"),
    ("YYYY", "year", r"\d{4}"),
    ("A.M.", "meridiem", r"[AaPp]\.[Mm]\."),
    ("P.M.", "meridiem", r"[AaPp]\.[Mm]\."),
    ("FF1", "fraction1", r"\d{1}"),
    ("FF2", "fraction2", r"\d{1,2}"),
    ("FF3", "fraction3", r"\d{1,3}"),
    ("FF4", "fraction4", r"\d{1,4}"),
    ("FF5", "fraction5", r"\d{1,5}"),
    ("FF6", "fraction6", r"\d{1,6}"),
    ("YYY", "year3", r"\d{3}"),
    ("MON", "month_abbrev", r"[A-Za-z]{3}"),
    ("DDD", "day_of_year", r"\d{1,3}"),
    ("TZH", "tz_hour", r"[+-]\s*\d{1,2}"),
    ("TZM", "tz_minute", r"\d{2}"),
    ("YY", "year2", r"\d{2}"),
    ("MM", "month", r"\d{1,2}"),
    ("DD", "day", r"\d{1,2}"),
    ("HH", "hour12", r"\d{1,2}"),
    ("MI", "minute", r"\d{1,2}"),
    ("SS", "second", r"\d{1,2}"),
    ("MS", "millisecond", r"\d{1,3}"),
    ("US", "microsecond", r"\d{1,6}"),
    ("AM", "meridiem", r"[AaPp][Mm]"),
    ("PM", "meridiem", r"[AaPp][Mm]"),
    ("Y", "year1", r"\d"),
)

_DATE_FIELDS = {"year", "year3", "year2", "year1", "month", "month_name", "month_abbrev", "day", "day_of_year"}
_TIME_FIELDS = {
    "hour24",
    "hour12",
    "minute",
    "second",
    "millisecond",
    "microsecond",
    "fraction1",
    "fraction2",
    "fraction3",
    "fraction4",
    "fraction5",
    "fraction6",
}
_ZONE_FIELDS = {"tz_hour", "tz_minute"}

_OFFSET_PATTERN = re.compile(r"^([+-])(\d{1,2})(?::?(\d{2}))?(?::?(\d{2}))?$")

# a fixed offset in seconds east of UTC, or a named zone whose offset depends on the date
DefaultZone: TypeAlias = int | ZoneInfo


@dataclass(frozen=True, slots=True)
class DatetimeTemplate:
    """Compiled datetime template."""

    source: str
    pattern: re.Pattern[str]
    fields: frozenset[str]
    kind: DatetimeKind


def _kind_for_fields(template: str, fields: frozenset[str]) -> DatetimeKind:
    """Infer the value kind from the fields present in a template."""
    dated = bool(fields & _DATE_FIELDS)
    timed = bool(fields & _TIME_FIELDS)
    zoned = bool(fields & _ZONE_FIELDS)
    if dated and timed:
        return DatetimeKind.TIMESTAMPTZ if zoned else DatetimeKind.TIMESTAMP
    if dated:
        if zoned:
            raise InvalidDatetimeArgument(f'datetime format "{template}" is zoned but not timed')
        return DatetimeKind.DATE
    if timed:
        return DatetimeKind.TIMETZ if zoned else DatetimeKind.TIME
    raise InvalidDatetimeArgument(f'datetime format "{template}" is not dated and not timed')


def _match_token(template: str, position: int) -> tuple[str, str, str] | None:
    upper = template[position:].upper()
    for token in _TOKENS:
        if upper.startswith(token[0]):
            return token
    return None


@lru_cache(maxsize=256)
def compile_template(template: str) -> DatetimeTemplate:
    """Compile template text into a matcher."""
    parts: list[str] = []
    fields: set[str] = set()
    position = 0
    while position < len(template):
        char = template[position]
        if char == '"':
            end = template.find('"', position + 1)
            if end < 0:
                raise InvalidDatetimeArgument(f'unterminated quoted literal in datetime format "{template}"')
            parts.append(re.escape(template[position + 1 : end]))
            position = end + 1
            continue
        if char.isspace():
            while position < len(template) and template[position].isspace():
                position += 1
            parts.append(r"[\sT]*")
            continue
        if char in _SEPARATORS:
            parts.append(f"[{re.escape(_SEPARATORS)}]")
            position += 1
            continue
        token = _match_token(template, position)
        if token is None:
            parts.append(re.escape(char))
            position += 1
            continue
        text, name, regex = token
        if name in fields:
            raise InvalidDatetimeArgument(f'datetime format field "{text}" is repeated')
        fields.add(name)
        parts.append(f"(?P<{name}>{regex})")
        position += len(text)

    frozen_fields = frozenset(fields)
    return DatetimeTemplate(
        source=template,
        pattern=re.compile("".join(parts)),
        fields=frozen_fields,
        kind=_kind_for_fields(template, frozen_fields),
    )


def _adjust_partial_year(year: int) -> int:
    """Map a one to three digit year onto the years around 2020."""
    if year < 70:
        return year + 2000
    if year < 100:
        return year + 1900
    if year < 520:
        return year + 2000
    if year < 1000:
        return year + 1000
    return year


def _month_from_name(name: str, abbreviated: bool) -> int:
    lowered = name.lower()
    for index, month_name in enumerate(MONTH_NAMES, start=1):
        if (abbreviated and month_name[:3] == lowered) or month_name == lowered:
            return index
    raise InvalidDatetimeArgument(f'invalid value "{name}" for month name')


def _fraction_microseconds(groups: dict[str, str]) -> int:
    if "millisecond" in groups:
        return int(groups["millisecond"]) * 1000
    if "microsecond" in groups:
        return int(groups["microsecond"])
    for digits in range(1, 7):
        value = groups.get(f"fraction{digits}")
        if value is not None:
            return int(value.ljust(6, "0"))
    return 0


def _resolve_date(groups: dict[str, str]) -> date:
    year = 1
    if "year" in groups:
        year = int(groups["year"])
    for name in ("year3", "year2", "year1"):
        if name in groups:
            year = _adjust_partial_year(int(groups[name]))
    if "day_of_year" in groups:
        day_of_year = int(groups["day_of_year"])
        if not 1 <= day_of_year <= 366:
            raise ValueError(f"day of year {day_of_year} is out of range")
        return date(year, 1, 1) + timedelta(days=day_of_year - 1)
    month = 1
    if "month" in groups:
        month = int(groups["month"])
    elif "month_name" in groups:
        month = _month_from_name(groups["month_name"], abbreviated=False)
    elif "month_abbrev" in groups:
        month = _month_from_name(groups["month_abbrev"], abbreviated=True)
    day = int(groups.get("day", "1"))
    return date(year, month, day)


def _resolve_time(groups: dict[str, str]) -> time:
    hour = int(groups.get("hour24", "0"))
    if "hour12" in groups:
        hour = int(groups["hour12"])
        if not 1 <= hour <= 12:
            raise InvalidDatetimeArgument(f'hour "{hour}" is invalid for the 12-hour clock')
        meridiem = groups.get("meridiem", "am").lower().replace(".", "")
        if meridiem == "pm" and hour < 12:
            hour += 12
        elif meridiem == "am" and hour == 12:
            hour = 0
    return time(
        hour,
        int(groups.get("minute", "0")),
        int(groups.get("second", "0")),
        _fraction_microseconds(groups),
    )


def _resolve_offset(groups: dict[str, str]) -> int:
    # TZM alone is a displacement of whole minutes east of UTC
    sign_and_hours = groups.get("tz_hour", "+0").replace(" ", "")
    sign = -1 if sign_and_hours.startswith("-") else 1
    minutes = int(groups.get("tz_minute", "0"))
    if minutes > 59:
        raise InvalidDatetimeArgument("time zone displacement out of range")
    seconds = int(sign_and_hours[1:]) * 3600 + minutes * 60
    offset = sign * seconds
    if abs(offset) > MAX_OFFSET_SECONDS:
        raise InvalidDatetimeArgument("time zone displacement out of range")
    return offset


def _zone(offset: int) -> timezone:
    return timezone(timedelta(seconds=offset))


def resolve_timezone(name: str) -> DefaultZone:
    """Resolve a `+HH[:MM]` offset into seconds east of UTC, or a zone name into its zone."""
    stripped = name.strip()
    match = _OFFSET_PATTERN.match(stripped)
    if match is not None:
        sign, hours, minutes, seconds = match.groups()
        offset = int(hours) * 3600 + int(minutes or 0) * 60 + int(seconds or 0)
        if offset > MAX_OFFSET_SECONDS:
            raise InvalidDatetimeArgument(f'time zone "{name}" is out of range')
        return -offset if sign == "-" else offset
    try:
        zone = ZoneInfo(stripped)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidDatetimeArgument(f'time zone "{name}" not recognized') from exc
    return zone


def zone_offset(zone: DefaultZone, moment: datetime) -> int:
    """Offset of a zone in seconds east of UTC at a local wall-clock moment."""
    if isinstance(zone, int):
        return zone
    utc_offset = zone.utcoffset(moment)
    return 0 if utc_offset is None else int(utc_offset.total_seconds())


def timezone_from_number(value: Decimal) -> int:
    """Validate a numeric timezone argument given in seconds east of UTC."""
    rounded = int(value.to_integral_value(rounding=ROUND_HALF_UP))
    if not -(2**31) < rounded <= 2**31 - 1:
        raise InvalidDatetimeArgument(
            "timezone argument of jsonpath item method .datetime() is out of integer range"
        )
    if abs(rounded) > MAX_OFFSET_SECONDS:
        raise InvalidDatetimeArgument("time zone displacement out of range")
    return rounded


def parse_with_template(
    text: str, template: DatetimeTemplate, strict: bool, default_tz: DefaultZone | None
) -> DatetimeValue:
    """Parse text with a compiled template.

    In strict mode the whole text must be consumed; otherwise trailing text
    is ignored.
    """
    match = (
        template.pattern.fullmatch(text)
        if strict
        else template.pattern.match(text.lstrip())
    )
    if match is None:
        raise InvalidDatetimeArgument(f'value "{text}" does not match datetime format "{template.source}"')
    groups = {name: value for name, value in match.groupdict().items() if value is not None}

    try:
        parsed_date = _resolve_date(groups)
        parsed_time = _resolve_time(groups)
    except (ValueError, OverflowError) as exc:
        raise InvalidDatetimeArgument(f"date/time field value out of range: {exc}") from exc

    tz: int | None = None
    if template.kind in (DatetimeKind.TIMETZ, DatetimeKind.TIMESTAMPTZ):
        tz = _resolve_offset(groups)
    elif default_tz is not None:
        dated = template.kind in (DatetimeKind.DATE, DatetimeKind.TIMESTAMP)
        moment = datetime.combine(parsed_date if dated else ZONE_REFERENCE.date(), parsed_time)
        tz = zone_offset(default_tz, moment)

    value: date | time | datetime
    match template.kind:
        case DatetimeKind.DATE:
            value = parsed_date
        case DatetimeKind.TIME:
            value = parsed_time
        case DatetimeKind.TIMETZ:
            value = parsed_time.replace(tzinfo=_zone(tz or 0))
        case DatetimeKind.TIMESTAMP:
            value = datetime.combine(parsed_date, parsed_time)
        case DatetimeKind.TIMESTAMPTZ:
            value = datetime.combine(parsed_date, parsed_time, tzinfo=_zone(tz or 0))
    return DatetimeValue(value, template.kind, tz)


def parse_datetime(
    text: str, template: str | None, default_tz: DefaultZone | None
) -> DatetimeValue:
    """Parse text with an explicit template, or with the first matching default format."""
    if template:
        return parse_with_template(text, compile_template(template), False, default_tz)
    for candidate in DEFAULT_FORMATS:
        try:
            return parse_with_template(text, compile_template(candidate), True, default_tz)
        except InvalidDatetimeArgument:
            continue
    raise InvalidDatetimeArgument("unrecognized datetime format")


def _as_timestamp(value: DatetimeValue, zoned: bool) -> datetime | None:
    """Promote a date or timestamp, attaching its default zone when zoned."""
    moment = value.value
    if not isinstance(moment, datetime):
        moment = datetime.combine(cast(date, moment), time())
    if not zoned or moment.tzinfo is not None:
        return moment
    if value.tz is None:
        return None
    return moment.replace(tzinfo=_zone(value.tz))


def _as_time(value: DatetimeValue, zoned: bool) -> time | None:
    """Return a time, attaching its default zone when zoned."""
    moment = cast(time, value.value)
    if not zoned or moment.tzinfo is not None:
        return moment
    if value.tz is None:
        return None
    return moment.replace(tzinfo=_zone(value.tz))


def _time_key(value: time) -> tuple[int, int]:
    """Order times by UTC time, then by zone."""
    offset = value.utcoffset()
    offset_seconds = 0 if offset is None else int(offset.total_seconds())
    local = ((value.hour * 60 + value.minute) * 60 + value.second) * 1_000_000 + value.microsecond
    return (local - offset_seconds * 1_000_000, -offset_seconds)


_DATE_FAMILY = {DatetimeKind.DATE, DatetimeKind.TIMESTAMP, DatetimeKind.TIMESTAMPTZ}


def compare_datetimes(left: DatetimeValue, right: DatetimeValue) -> int | None:
    """Three-way comparison of two datetime values, or None if they are incomparable."""
    dated = left.kind in _DATE_FAMILY
    if dated != (right.kind in _DATE_FAMILY):
        return None

    if dated:
        zoned = DatetimeKind.TIMESTAMPTZ in (left.kind, right.kind)
        left_moment = _as_timestamp(left, zoned)
        right_moment = _as_timestamp(right, zoned)
        if left_moment is None or right_moment is None:
            return None
        return (left_moment > right_moment) - (left_moment < right_moment)

    zoned = DatetimeKind.TIMETZ in (left.kind, right.kind)
    left_time = _as_time(left, zoned)
    right_time = _as_time(right, zoned)
    if left_time is None or right_time is None:
        return None
    left_key = _time_key(left_time)
    right_key = _time_key(right_time)
    return (left_key > right_key) - (left_key < right_key)
