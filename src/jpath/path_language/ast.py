"""AST nodes for the SQL/JSON path language.

Every node carries an optional ``next`` successor: a path such as
``$.a[*].b`` is the chain ``Root -> Key("a") -> AnyArray -> Key("b")``.
Operator nodes hold their operands as separate sub-trees.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class PathNode:
    """Base AST node type."""

    next: PathNode | None = field(default=None, kw_only=True)


@dataclass(frozen=True, slots=True)
class NullLiteral(PathNode):
    """Null literal."""


@dataclass(frozen=True, slots=True)
class BoolLiteral(PathNode):
    """Boolean literal."""

    value: bool


@dataclass(frozen=True, slots=True)
class NumericLiteral(PathNode):
    """Numeric literal."""

    value: Decimal


@dataclass(frozen=True, slots=True)
class StringLiteral(PathNode):
    """String literal."""

    value: str


@dataclass(frozen=True, slots=True)
class Root(PathNode):
    """Root document reference `$`."""


@dataclass(frozen=True, slots=True)
class Current(PathNode):
    """Current filter item reference `@`."""


@dataclass(frozen=True, slots=True)
class Variable(PathNode):
    """Named variable reference `$name`."""

    name: str


@dataclass(frozen=True, slots=True)
class Last(PathNode):
    """Index of the last element of the innermost subscripted array."""


@dataclass(frozen=True, slots=True)
class Key(PathNode):
    """Member accessor `.name`."""

    name: str


@dataclass(frozen=True, slots=True)
class AnyKey(PathNode):
    """Member wildcard `.*`."""


@dataclass(frozen=True, slots=True)
class AnyArray(PathNode):
    """Element wildcard `[*]`."""


@dataclass(frozen=True, slots=True)
class Subscript:
    """Single subscript `[start]` or range `[start to end]`."""

    start: PathNode
    end: PathNode | None = None


@dataclass(frozen=True, slots=True)
class IndexArray(PathNode):
    """Element accessor with one or more subscripts."""

    subscripts: tuple[Subscript, ...]


@dataclass(frozen=True, slots=True)
class AnyLevel(PathNode):
    """Recursive wildcard `.**{first to last}`.

    A bound of None stands for `last`, i.e. unbounded depth. When both bounds
    are None only leaf values are visited.
    """

    first: int | None = 0
    last: int | None = None


@dataclass(frozen=True, slots=True)
class And(PathNode):
    """Logical conjunction."""

    left: PathNode
    right: PathNode


@dataclass(frozen=True, slots=True)
class Or(PathNode):
    """Logical disjunction."""

    left: PathNode
    right: PathNode


@dataclass(frozen=True, slots=True)
class Not(PathNode):
    """Logical negation."""

    operand: PathNode


@dataclass(frozen=True, slots=True)
class IsUnknown(PathNode):
    """Predicate `(expr) is unknown`."""

    operand: PathNode


@dataclass(frozen=True, slots=True)
class Comparison(PathNode):
    """Comparison predicate."""

    operator: str
    left: PathNode
    right: PathNode


@dataclass(frozen=True, slots=True)
class StartsWith(PathNode):
    """Prefix predicate `left starts with right`."""

    left: PathNode
    right: PathNode


@dataclass(frozen=True, slots=True)
class LikeRegex(PathNode):
    """Regular expression predicate `left like_regex "pattern" flag "flags"`."""

    operand: PathNode
    pattern: str
    flags: str = ""


@dataclass(frozen=True, slots=True)
class Exists(PathNode):
    """Existence predicate `exists (expr)`."""

    operand: PathNode


@dataclass(frozen=True, slots=True)
class Filter(PathNode):
    """Filter expression `? (predicate)`."""

    predicate: PathNode


@dataclass(frozen=True, slots=True)
class BinaryArithmetic(PathNode):
    """Binary numeric operator."""

    operator: str
    left: PathNode
    right: PathNode


@dataclass(frozen=True, slots=True)
class UnaryArithmetic(PathNode):
    """Unary plus or minus."""

    operator: str
    operand: PathNode


@dataclass(frozen=True, slots=True)
class TypeMethod(PathNode):
    """Item method `.type()`."""


@dataclass(frozen=True, slots=True)
class SizeMethod(PathNode):
    """Item method `.size()`."""


@dataclass(frozen=True, slots=True)
class NumericMethod(PathNode):
    """Item methods `.abs()`, `.floor()` and `.ceiling()`."""

    name: str


@dataclass(frozen=True, slots=True)
class DoubleMethod(PathNode):
    """Item method `.double()`."""


@dataclass(frozen=True, slots=True)
class DatetimeMethod(PathNode):
    """Item method `.datetime([template[, timezone]])`."""

    template: str | None = None
    timezone: PathNode | None = None


@dataclass(frozen=True, slots=True)
class KeyValueMethod(PathNode):
    """Item method `.keyvalue()`."""


PREDICATE_NODES = (And, Or, Not, IsUnknown, Comparison, StartsWith, LikeRegex, Exists)


@dataclass(frozen=True, slots=True)
class CompiledPath:
    """Path expression together with its `lax`/`strict` mode header."""

    expr: PathNode
    lax: bool = True

    @property
    def mode(self) -> str:
        return "lax" if self.lax else "strict"
