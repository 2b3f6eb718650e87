"""Numeric service and arithmetic operators for path evaluation."""

from __future__ import annotations

from collections.abc import Callable
from decimal import (
    ROUND_CEILING,
    ROUND_DOWN,
    ROUND_FLOOR,
    ROUND_HALF_UP,
    Context,
    Decimal,
    DivisionByZero as DecimalDivisionByZero,
    InvalidOperation,
    Overflow,
)
from typing import TypeAlias

from jpath.path_language.document import is_numeric, to_decimal
from jpath.path_language.errors import (
    DecimalOverflow,
    DivisionByZero,
    NumberNotFound,
    SingletonRequired,
)


MAX_WEIGHT_DIGITS = 131072
MAX_DISPLAY_SCALE = 1000
MIN_SIGNIFICANT_DIGITS = 16
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

NUMERIC_CONTEXT = Context(
    prec=MAX_WEIGHT_DIGITS + MAX_DISPLAY_SCALE,
    rounding=ROUND_HALF_UP,
    Emax=MAX_WEIGHT_DIGITS - 1,
    Emin=-MAX_WEIGHT_DIGITS,
    traps=[Overflow, DecimalDivisionByZero, InvalidOperation],
)

BinaryOperator: TypeAlias = Callable[[Decimal, Decimal], Decimal]


def _checked(operation: Callable[[], Decimal]) -> Decimal:
    """Run a decimal operation, mapping decimal signals to path errors."""
    try:
        return operation()
    except DecimalDivisionByZero as exc:
        raise DivisionByZero() from exc
    except Overflow as exc:
        raise DecimalOverflow() from exc
    except InvalidOperation as exc:
        if isinstance(exc.__context__, DecimalDivisionByZero):
            raise DivisionByZero() from exc
        raise DecimalOverflow(str(exc)) from exc


def _scale(value: Decimal) -> int:
    exponent = value.as_tuple().exponent
    if not isinstance(exponent, int):
        return 0
    return max(-exponent, 0)


def _leading_group(value: Decimal) -> tuple[int, int]:
    """Return (weight, leading digit) of value in base 10000 notation."""
    weight = value.adjusted() // 4
    digit = int(abs(value).scaleb(-4 * weight, NUMERIC_CONTEXT))
    return (weight, digit)


def _division_scale(dividend: Decimal, divisor: Decimal) -> int:
    """Choose the result scale of a division, keeping at least 16 significant digits."""
    if dividend.is_zero():
        quotient_weight = 0
    else:
        dividend_weight, dividend_digit = _leading_group(dividend)
        divisor_weight, divisor_digit = _leading_group(divisor)
        quotient_weight = dividend_weight - divisor_weight
        if dividend_digit <= divisor_digit:
            quotient_weight -= 1
    scale = MIN_SIGNIFICANT_DIGITS - quotient_weight * 4
    scale = max(scale, _scale(dividend), _scale(divisor), 0)
    return min(scale, MAX_DISPLAY_SCALE)


def add(left: Decimal, right: Decimal) -> Decimal:
    return _checked(lambda: NUMERIC_CONTEXT.add(left, right))


def sub(left: Decimal, right: Decimal) -> Decimal:
    return _checked(lambda: NUMERIC_CONTEXT.subtract(left, right))


def mul(left: Decimal, right: Decimal) -> Decimal:
    return _checked(lambda: NUMERIC_CONTEXT.multiply(left, right))


def div(left: Decimal, right: Decimal) -> Decimal:
    if right.is_zero():
        raise DivisionByZero()
    scale = _division_scale(left, right)
    integer_digits = max(left.adjusted() - right.adjusted() + 2, 1)
    # truncating with two guard digits keeps the final half-up rounding exact
    context = NUMERIC_CONTEXT.copy()
    context.prec = integer_digits + scale + 2
    context.rounding = ROUND_DOWN

    def _divide() -> Decimal:
        quotient = context.divide(left, right)
        return quotient.quantize(Decimal(1).scaleb(-scale), context=NUMERIC_CONTEXT)

    return _checked(_divide)


def mod(left: Decimal, right: Decimal) -> Decimal:
    if right.is_zero():
        raise DivisionByZero()
    return _checked(lambda: NUMERIC_CONTEXT.remainder(left, right))


def negate(value: Decimal) -> Decimal:
    return NUMERIC_CONTEXT.minus(value)


def absolute(value: Decimal) -> Decimal:
    return NUMERIC_CONTEXT.abs(value)


def floor(value: Decimal) -> Decimal:
    return value.to_integral_value(rounding=ROUND_FLOOR, context=NUMERIC_CONTEXT)


def ceiling(value: Decimal) -> Decimal:
    return value.to_integral_value(rounding=ROUND_CEILING, context=NUMERIC_CONTEXT)


def truncate(value: Decimal) -> Decimal:
    return value.to_integral_value(rounding=ROUND_DOWN, context=NUMERIC_CONTEXT)


def compare(left: Decimal, right: Decimal) -> int:
    """Three-way comparison of two numbers."""
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def to_int32(value: Decimal) -> int | None:
    """Convert an integral number to int, or None when outside the 32-bit range."""
    converted = int(value)
    if converted < INT32_MIN or converted > INT32_MAX:
        return None
    return converted


BINARY_OPERATORS: dict[str, BinaryOperator] = {
    "+": add,
    "-": sub,
    "*": mul,
    "/": div,
    "%": mod,
}

UNARY_OPERATORS: dict[str, Callable[[Decimal], Decimal]] = {
    "+": lambda value: value,
    "-": negate,
}


def singleton_number(values: list[object], side: str, operator: str) -> Decimal:
    """Return the only numeric item of an operand sequence."""
    if len(values) != 1 or not is_numeric(values[0]):
        raise SingletonRequired(
            f"{side} operand of binary jsonpath operator {operator} is not a singleton numeric value"
        )
    return to_decimal(values[0])


def apply_binary(operator: str, left: list[object], right: list[object]) -> Decimal:
    """Apply a binary operator to two already-unwrapped operand sequences."""
    left_number = singleton_number(left, "left", operator)
    right_number = singleton_number(right, "right", operator)
    return BINARY_OPERATORS[operator](left_number, right_number)


def apply_unary(operator: str, value: object) -> Decimal:
    """Apply a unary operator to one operand item."""
    if not is_numeric(value):
        raise NumberNotFound(f"operand of unary jsonpath operator {operator} is not a numeric value")
    return UNARY_OPERATORS[operator](to_decimal(value))
