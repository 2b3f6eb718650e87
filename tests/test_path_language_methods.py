"""Tests for item methods and datetime parsing."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from jpath.path_language.datetimes import (
    compile_template,
    parse_datetime,
    resolve_timezone,
    timezone_from_number,
    zone_offset,
)
from jpath.path_language.errors import ArrayNotFound, InvalidDatetimeArgument, NonNumericItem
from jpath.path_language.methods import (
    apply_numeric_method,
    keyvalue_id,
    keyvalue_pairs,
    size_of,
    timezone_argument,
    to_double,
    type_name,
)
from jpath.path_language.values import DatetimeKind, DatetimeValue


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, "null"),
        (True, "boolean"),
        (1, "number"),
        (1.5, "number"),
        (Decimal("2"), "number"),
        ("x", "string"),
        ([], "array"),
        ({}, "object"),
        (DatetimeValue(date(2020, 1, 2), DatetimeKind.DATE), "date"),
    ],
)
def test_type_name(value: object, expected: str) -> None:
    """type_name should report the JSON type of an item."""
    assert type_name(value) == expected


def test_size_of() -> None:
    """size_of should wrap scalars only in lax mode."""
    assert size_of([1, 2], auto_wrap=False, ignore_structural_errors=False) == 2
    assert size_of("x", auto_wrap=True, ignore_structural_errors=True) == 1
    assert size_of("x", auto_wrap=False, ignore_structural_errors=True) is None
    with pytest.raises(ArrayNotFound):
        size_of("x", auto_wrap=False, ignore_structural_errors=False)


def test_apply_numeric_method() -> None:
    """Numeric methods should return Decimals."""
    assert apply_numeric_method("abs", -3) == Decimal(3)
    assert apply_numeric_method("floor", 2.7) == Decimal(2)
    assert apply_numeric_method("ceiling", Decimal("2.1")) == Decimal(3)
    with pytest.raises(NonNumericItem, match=r"\.floor\(\)"):
        apply_numeric_method("floor", "2")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("1.5", Decimal("1.5")),
        (" 42 ", Decimal("42")),
        ("-1e3", Decimal("-1000")),
        ("0.1", Decimal("0.1")),
    ],
)
def test_to_double_parses_strings(value: str, expected: Decimal) -> None:
    """Numeric strings should convert to numbers."""
    assert to_double(value) == expected


@pytest.mark.parametrize("value", ["abc", "nan", "inf", "1e400", "1e-400", "", True, None, [1]])
def test_to_double_rejects(value: object) -> None:
    """Non-numeric and non-finite values should be rejected."""
    with pytest.raises(NonNumericItem):
        to_double(value)


def test_to_double_numbers() -> None:
    """Numbers should be returned unchanged unless they do not fit a double."""
    assert to_double(Decimal("2.5")) == Decimal("2.5")
    assert to_double("2.5e-300") == Decimal("2.5E-300")
    with pytest.raises(NonNumericItem):
        to_double(Decimal("1e-400"))
    with pytest.raises(NonNumericItem):
        to_double(Decimal("1e400"))
    with pytest.raises(NonNumericItem):
        to_double(Decimal("NaN"))


def test_keyvalue_pairs() -> None:
    """keyvalue_pairs should keep member order and share the object id."""
    pairs = keyvalue_pairs({"b": 1, "a": [2]}, 7)

    assert pairs == [
        {"key": "b", "value": 1, "id": 7},
        {"key": "a", "value": [2], "id": 7},
    ]
    assert keyvalue_id(2, 3) == 20000000003


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("+03", 3 * 3600),
        ("-05:30", -(5 * 3600 + 30 * 60)),
    ],
)
def test_resolve_timezone(name: str, expected: int) -> None:
    """Zone offsets should resolve to seconds east of UTC."""
    assert resolve_timezone(name) == expected


def test_resolve_timezone_rejects_unknown_names() -> None:
    """Unknown zone names should be rejected."""
    with pytest.raises(InvalidDatetimeArgument, match="not recognized"):
        resolve_timezone("Nowhere/Special")


def test_timezone_argument() -> None:
    """The timezone argument should be a single string or number."""
    assert timezone_argument(["+01"]) == 3600
    assert timezone_argument([Decimal("-7200")]) == -7200
    with pytest.raises(InvalidDatetimeArgument):
        timezone_argument([])
    with pytest.raises(InvalidDatetimeArgument):
        timezone_argument([True])
    with pytest.raises(InvalidDatetimeArgument, match="out of range"):
        timezone_from_number(Decimal(90000))


@pytest.mark.parametrize(
    ("text", "template", "kind", "value"),
    [
        ("2020-01-02", None, DatetimeKind.DATE, date(2020, 1, 2)),
        ("2020-01-02T03:04:05", None, DatetimeKind.TIMESTAMP, datetime(2020, 1, 2, 3, 4, 5)),
        ("03:04:05", None, DatetimeKind.TIME, time(3, 4, 5)),
        (
            "03:04:05 -02",
            None,
            DatetimeKind.TIMETZ,
            time(3, 4, 5, tzinfo=timezone(timedelta(hours=-2))),
        ),
        ("02/01/2020", "dd/mm/yyyy", DatetimeKind.DATE, date(2020, 1, 2)),
        ("15-Mar-2021", "DD-MON-YYYY", DatetimeKind.DATE, date(2021, 3, 15)),
        ("2021 march 15", "YYYY MONTH DD", DatetimeKind.DATE, date(2021, 3, 15)),
        ("07:30 PM", "HH:MI AM", DatetimeKind.TIME, time(19, 30)),
        ("12:05.250", "HH24:MI.MS", DatetimeKind.TIME, time(12, 5, 0, 250000)),
        ("99-12-31", "YY-MM-DD", DatetimeKind.DATE, date(1999, 12, 31)),
        ("2020-01-02 trailing", "yyyy-mm-dd", DatetimeKind.DATE, date(2020, 1, 2)),
        ('at 10:00', '"at" HH24:MI', DatetimeKind.TIME, time(10, 0)),
    ],
)
def test_parse_datetime(
    text: str, template: str | None, kind: DatetimeKind, value: date | time | datetime
) -> None:
    """Datetime text should parse into the kind its format implies."""
    parsed = parse_datetime(text, template, None)

    assert parsed.kind is kind
    assert parsed.value == value


def test_parse_datetime_uses_default_zone() -> None:
    """The default zone should be kept for later comparisons."""
    parsed = parse_datetime("2020-01-02 10:00:00", "yyyy-mm-dd HH24:MI:SS", 3600)

    assert parsed.kind is DatetimeKind.TIMESTAMP
    assert parsed.tz == 3600


@pytest.mark.parametrize(
    ("text", "template"),
    [
        ("2020-13-01", "yyyy-mm-dd"),
        ("13:00 PM", "HH:MI AM"),
        ("abc", "yyyy-mm-dd"),
        ("not a date", None),
        ("2020-01-02 10:00:00 +25:00", None),
    ],
)
def test_parse_datetime_rejects(text: str, template: str | None) -> None:
    """Invalid values should raise InvalidDatetimeArgument."""
    with pytest.raises(InvalidDatetimeArgument):
        parse_datetime(text, template, None)


@pytest.mark.parametrize("template", ["yyyy yyyy", "TZH", "hello"])
def test_compile_template_rejects(template: str) -> None:
    """Templates with repeated fields or no date and time parts are invalid."""
    with pytest.raises(InvalidDatetimeArgument):
        compile_template(template)


def test_datetime_value_text() -> None:
    """Datetime items should render as ISO 8601 text."""
    value = parse_datetime("2020-01-02 03:04:05.120 +05:30", "yyyy-mm-dd HH24:MI:SS.FF3 TZH:TZM", None)

    assert value.to_text() == "2020-01-02T03:04:05.12+05:30"


def test_parse_datetime_minutes_only_zone() -> None:
    """TZM without TZH should be a displacement in minutes east of UTC."""
    parsed = parse_datetime("12:34 30", "HH24:MI TZM", None)

    assert parsed.kind is DatetimeKind.TIMETZ
    assert parsed.tz == 1800
    assert parsed.to_text() == "12:34:00+00:30"


@pytest.mark.parametrize(("text", "expected"), [("2020 366", date(2020, 12, 31)), ("2021 001", date(2021, 1, 1))])
def test_parse_datetime_day_of_year(text: str, expected: date) -> None:
    """DDD should count days from the start of the year."""
    assert parse_datetime(text, "YYYY DDD", None).value == expected


@pytest.mark.parametrize("text", ["9999 366", "2021 000"])
def test_parse_datetime_day_of_year_out_of_range(text: str) -> None:
    """Days of year outside the calendar should be rejected."""
    with pytest.raises(InvalidDatetimeArgument, match="out of range"):
        parse_datetime(text, "YYYY DDD", None)


def test_named_zone_offset_follows_daylight_saving() -> None:
    """Zone names should resolve to the offset in force at the parsed value."""
    paris = resolve_timezone("Europe/Paris")
    template = "YYYY-MM-DD HH24:MI:SS"

    summer = parse_datetime("2020-07-01 12:00:00", template, paris)
    winter = parse_datetime("2020-01-01 12:00:00", template, paris)
    clock = parse_datetime("12:00:00", "HH24:MI:SS", paris)

    assert isinstance(paris, ZoneInfo)
    assert summer.tz == 7200
    assert winter.tz == 3600
    assert clock.tz == 3600
    assert zone_offset(-5400, datetime(2020, 7, 1)) == -5400
