"""Errors for path language parsing and execution."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Categories of recoverable execution errors."""

    ARRAY_NOT_FOUND = "SQL/JSON array not found"
    OBJECT_NOT_FOUND = "SQL/JSON object not found"
    MEMBER_NOT_FOUND = "SQL/JSON member not found"
    NUMBER_NOT_FOUND = "SQL/JSON number not found"
    SCALAR_REQUIRED = "SQL/JSON scalar required"
    SINGLETON_REQUIRED = "singleton SQL/JSON item required"
    NON_NUMERIC_ITEM = "non-numeric SQL/JSON item"
    INVALID_SUBSCRIPT = "invalid SQL/JSON subscript"
    INVALID_DATETIME_ARGUMENT = "invalid argument for SQL/JSON datetime function"
    DIVISION_BY_ZERO = "division by zero"
    NUMERIC_OUT_OF_RANGE = "value out of range for type numeric"


class PathLanguageError(Exception):
    """Base exception for path language failures."""


class PathParseError(PathLanguageError):
    """Raised when path text cannot be parsed."""


class PathExecutionError(PathLanguageError):
    """Recoverable execution error that may be suppressed by the caller."""

    kind: ErrorKind = ErrorKind.MEMBER_NOT_FOUND

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        message = self.kind.value if detail is None else f"{self.kind.value}: {detail}"
        super().__init__(message)


class ArrayNotFound(PathExecutionError):
    """Raised when an array accessor meets a non-array in strict mode."""

    kind = ErrorKind.ARRAY_NOT_FOUND


class ObjectNotFound(PathExecutionError):
    """Raised when an object is required but another value was found."""

    kind = ErrorKind.OBJECT_NOT_FOUND


class MemberNotFound(PathExecutionError):
    """Raised when a member accessor cannot be applied."""

    kind = ErrorKind.MEMBER_NOT_FOUND


class NumberNotFound(PathExecutionError):
    """Raised when a unary operator meets a non-numeric item."""

    kind = ErrorKind.NUMBER_NOT_FOUND


class ScalarRequired(PathExecutionError):
    """Raised when a scalar value is required."""

    kind = ErrorKind.SCALAR_REQUIRED


class SingletonRequired(PathExecutionError):
    """Raised when an operand is not exactly one item."""

    kind = ErrorKind.SINGLETON_REQUIRED


class NonNumericItem(PathExecutionError):
    """Raised when a numeric item method receives a non-number."""

    kind = ErrorKind.NON_NUMERIC_ITEM


class InvalidSubscript(PathExecutionError):
    """Raised for non-numeric or out-of-range array subscripts."""

    kind = ErrorKind.INVALID_SUBSCRIPT


class InvalidDatetimeArgument(PathExecutionError):
    """Raised when datetime() cannot interpret its input."""

    kind = ErrorKind.INVALID_DATETIME_ARGUMENT


class DivisionByZero(PathExecutionError):
    """Raised on division or modulo by zero."""

    kind = ErrorKind.DIVISION_BY_ZERO


class DecimalOverflow(PathExecutionError):
    """Raised when a numeric result exceeds the supported range."""

    kind = ErrorKind.NUMERIC_OUT_OF_RANGE


class UndefinedVariable(PathLanguageError):
    """Raised when a path references a variable that was not passed."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"cannot find jsonpath variable '{name}'")


class PathInvalidParameter(PathLanguageError):
    """Raised when execution parameters are malformed."""


class PathInternalError(PathLanguageError):
    """Raised when the evaluator reaches an impossible state."""


class PathDepthExceeded(PathLanguageError):
    """Raised when evaluation nests deeper than the configured limit."""
