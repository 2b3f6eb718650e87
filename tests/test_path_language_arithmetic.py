"""Tests for numeric helpers used by path arithmetic."""

from __future__ import annotations

from decimal import Decimal

import pytest

from jpath.path_language import arithmetic
from jpath.path_language.errors import DivisionByZero, NumberNotFound, SingletonRequired


@pytest.mark.parametrize(
    ("left", "right", "expected"),
    [
        ("1", "3", "0.33333333333333333333"),
        ("10", "2", "5.0000000000000000"),
        ("2", "3", "0.66666666666666666667"),
        ("1.5", "0.5", "3.0000000000000000"),
        ("-7", "2", "-3.5000000000000000"),
    ],
)
def test_div_uses_numeric_scale(left: str, right: str, expected: str) -> None:
    """Division results should carry at least sixteen significant digits."""
    result = arithmetic.div(Decimal(left), Decimal(right))

    assert str(result) == expected


def test_div_by_zero_raises() -> None:
    """Zero divisors should raise DivisionByZero."""
    with pytest.raises(DivisionByZero):
        arithmetic.div(Decimal(1), Decimal(0))
    with pytest.raises(DivisionByZero):
        arithmetic.mod(Decimal(1), Decimal("0.0"))


def test_mod_keeps_dividend_sign() -> None:
    """Remainder should take the sign of the dividend."""
    assert arithmetic.mod(Decimal(-7), Decimal(3)) == Decimal(-1)
    assert arithmetic.mod(Decimal(7), Decimal(-3)) == Decimal(1)


def test_rounding_helpers() -> None:
    """floor, ceiling and truncate should round towards their directions."""
    value = Decimal("-1.5")

    assert arithmetic.floor(value) == Decimal(-2)
    assert arithmetic.ceiling(value) == Decimal(-1)
    assert arithmetic.truncate(value) == Decimal(-1)


def test_to_int32_range() -> None:
    """Values outside the 32-bit range should be rejected."""
    assert arithmetic.to_int32(Decimal(2**31 - 1)) == 2**31 - 1
    assert arithmetic.to_int32(Decimal(2**31)) is None
    assert arithmetic.to_int32(Decimal(-(2**31))) == -(2**31)


def test_apply_binary_converts_json_numbers() -> None:
    """Operands may be ints, floats or Decimals."""
    assert arithmetic.apply_binary("+", [1], [0.5]) == Decimal("1.5")
    assert arithmetic.apply_binary("*", [Decimal("0.1")], [3]) == Decimal("0.3")


def test_apply_binary_requires_singletons() -> None:
    """Each operand must be one number."""
    with pytest.raises(SingletonRequired, match="right operand of binary jsonpath operator -"):
        arithmetic.apply_binary("-", [1], [])
    with pytest.raises(SingletonRequired, match="left operand"):
        arithmetic.apply_binary("-", ["1"], [1])
    with pytest.raises(SingletonRequired):
        arithmetic.apply_binary("-", [True], [1])


def test_apply_unary() -> None:
    """Unary operators should accept only numbers."""
    assert arithmetic.apply_unary("-", 2) == Decimal(-2)
    assert arithmetic.apply_unary("+", Decimal("2.5")) == Decimal("2.5")
    with pytest.raises(NumberNotFound):
        arithmetic.apply_unary("-", "2")


def test_compare() -> None:
    """compare should be a three-way comparison."""
    assert arithmetic.compare(Decimal(1), Decimal(2)) == -1
    assert arithmetic.compare(Decimal("2.0"), Decimal(2)) == 0
    assert arithmetic.compare(Decimal(3), Decimal(2)) == 1
