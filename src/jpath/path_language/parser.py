"""Parser for SQL/JSON path expressions."""

from __future__ import annotations

import re
from collections.abc import Callable, Generator
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import cast

from parsy import ParseError, Parser, eof, forward_declaration, generate, regex, seq, string

from jpath.path_language.ast import (
    PREDICATE_NODES,
    And,
    AnyArray,
    AnyKey,
    AnyLevel,
    BinaryArithmetic,
    BoolLiteral,
    Comparison,
    CompiledPath,
    Current,
    DatetimeMethod,
    DoubleMethod,
    Exists,
    Filter,
    IndexArray,
    IsUnknown,
    Key,
    KeyValueMethod,
    Last,
    LikeRegex,
    Not,
    NullLiteral,
    NumericLiteral,
    NumericMethod,
    Or,
    PathNode,
    Root,
    SizeMethod,
    StartsWith,
    StringLiteral,
    Subscript,
    TypeMethod,
    UnaryArithmetic,
    Variable,
)
from jpath.path_language.errors import PathParseError
from jpath.path_language.predicates import compile_regex


SIMPLE_METHODS: dict[str, Callable[[], PathNode]] = {
    "type": TypeMethod,
    "size": SizeMethod,
    "double": DoubleMethod,
    "keyvalue": KeyValueMethod,
    "abs": lambda: NumericMethod("abs"),
    "floor": lambda: NumericMethod("floor"),
    "ceiling": lambda: NumericMethod("ceiling"),
}

COMPARISON_TOKENS = {
    "==": "==",
    "!=": "!=",
    "<>": "!=",
    "<=": "<=",
    ">=": ">=",
    "<": "<",
    ">": ">",
}

_SIMPLE_ESCAPES = {"b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v"}
_ESCAPE = re.compile(
    r"\\(?:u\{([0-9A-Fa-f]{1,6})\}|u([0-9A-Fa-f]{4})|x([0-9A-Fa-f]{2})|(.))", re.DOTALL
)


def _parse_line_and_column(line_info: str) -> tuple[int, int]:
    """Parse line and column from parsy line info string."""
    line_text, sep, column_text = line_info.partition(":")
    if sep == "" or not line_text.isdigit() or not column_text.isdigit():
        return (0, 0)
    return (int(line_text), int(column_text))


def _format_parse_error(path: str, exc: ParseError) -> str:
    """Build parse error message with a pointer under the failing column."""
    line_number, column_number = _parse_line_and_column(exc.line_info())
    path_lines = path.splitlines() or [path]
    error_line = path_lines[line_number] if 0 <= line_number < len(path_lines) else path
    pointer = " " * max(column_number, 0) + "^"
    return f"syntax error in jsonpath: {exc}\n\n{error_line}\n{pointer}"


def _replace_escape(match: re.Match[str]) -> str:
    braced, hex4, hex2, other = match.groups()
    if braced is not None:
        code = int(braced, 16)
        if code > 0x10FFFF:
            raise PathParseError(f"invalid Unicode escape value \\u{{{braced}}}")
        return chr(code)
    if hex4 is not None:
        return chr(int(hex4, 16))
    if hex2 is not None:
        return chr(int(hex2, 16))
    return _SIMPLE_ESCAPES.get(other, other)


def _decode_string(token: str) -> str:
    """Decode a double-quoted string literal token, escapes included."""
    decoded = _ESCAPE.sub(_replace_escape, token[1:-1])
    # \uXXXX pairs may spell a surrogate pair
    try:
        return decoded.encode("utf-16", "surrogatepass").decode("utf-16")
    except UnicodeDecodeError as exc:
        raise PathParseError("invalid Unicode surrogate pair in string literal") from exc


def _decode_number(token: str) -> NumericLiteral:
    try:
        return NumericLiteral(Decimal(token))
    except InvalidOperation as exc:
        raise PathParseError(f"invalid numeric literal {token}") from exc


def _keyword(name: str) -> Parser:
    """Build a keyword parser with identifier boundary."""
    return regex(rf"{name}(?![\w$])").desc(name)


def _lexeme(parser: Parser) -> Parser:
    """Consume optional whitespace after parser."""
    ws = regex(r"\s*")
    return parser << ws


def _symbol(value: str) -> Parser:
    """Build a symbol token parser."""
    return _lexeme(string(value))


def _is_predicate(node: object) -> bool:
    return isinstance(node, PREDICATE_NODES)


def _require_expr(node: object, where: str) -> PathNode:
    """Check that a parse result is a value expression, not a predicate."""
    if not isinstance(node, PathNode):
        raise PathParseError(f"invalid {where}")
    if _is_predicate(node):
        raise PathParseError(f"predicate is not allowed as {where}")
    return node


def _require_predicate(node: object, where: str) -> PathNode:
    """Check that a parse result is a predicate."""
    if not isinstance(node, PathNode) or not _is_predicate(node):
        raise PathParseError(f"{where} must be a predicate")
    return node


def append_chain(head: PathNode, tail: PathNode | None) -> PathNode:
    """Attach tail after the last step of the chain starting at head."""
    if tail is None:
        return head
    if head.next is None:
        return replace(head, next=tail)
    return replace(head, next=append_chain(head.next, tail))


def link_steps(steps: list[PathNode]) -> PathNode | None:
    """Link accessor nodes into a single `next` chain."""
    chain: PathNode | None = None
    for step in reversed(steps):
        chain = append_chain(step, chain)
    return chain


def _make_unary(operator: str, operand: PathNode) -> PathNode:
    """Build a unary operator node, folding signs into numeric literals."""
    if isinstance(operand, NumericLiteral) and operand.next is None:
        if operator == "-":
            return NumericLiteral(-operand.value)
        return operand
    return UnaryArithmetic(operator, operand)


def _build_string_parsers() -> tuple[Parser, Parser]:
    """Build the raw string token parser and the string literal parser."""
    string_token = _lexeme(regex(r'"(?:[^"\\]|\\.)*"', flags=re.DOTALL)).map(_decode_string)
    return (string_token, string_token.map(StringLiteral))


def _build_primary_parser(
    identifier: Parser, string_token: Parser, string_literal: Parser, boolean: Parser
) -> Parser:
    """Build parser for path primaries: literals, variables, `$`, `@`, `last` and groups."""
    number_token = _lexeme(regex(r"(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?(?![\w$])"))
    number_literal = number_token.map(_decode_number)
    true_literal = _lexeme(_keyword("true")).result(BoolLiteral(True))
    false_literal = _lexeme(_keyword("false")).result(BoolLiteral(False))
    null_literal = _lexeme(_keyword("null")).result(NullLiteral())
    last = _lexeme(_keyword("last")).result(Last())
    variable = (string("$") >> (identifier | string_token)).map(Variable)
    root = _symbol("$").result(Root())
    current = _symbol("@").result(Current())

    @generate
    def grouped() -> Generator[Parser, object, PathNode]:
        yield _symbol("(")
        inner = yield boolean
        if not isinstance(inner, PathNode):
            raise PathParseError("invalid parenthesized expression")
        yield _symbol(")")
        if _is_predicate(inner):
            unknown = yield (_lexeme(_keyword("is")) >> _lexeme(_keyword("unknown"))).optional()
            if unknown is not None:
                return IsUnknown(inner)
        return inner

    return (
        grouped
        | true_literal
        | false_literal
        | null_literal
        | last
        | variable
        | root
        | current
        | number_literal
        | string_literal
    )


def _build_subscripts_parser(expr: Parser) -> Parser:
    """Build parser for `[*]` and `[subscript, ...]` accessors."""
    wildcard = (_symbol("[") >> _symbol("*") >> _symbol("]")).result(AnyArray())

    @generate
    def subscript() -> Generator[Parser, object, Subscript]:
        start = yield expr
        end = yield (_lexeme(_keyword("to")) >> expr).optional()
        return Subscript(
            _require_expr(start, "array subscript"),
            None if end is None else _require_expr(end, "array subscript"),
        )

    @generate
    def subscripts() -> Generator[Parser, object, IndexArray]:
        yield _symbol("[")
        items_result = yield subscript.sep_by(_symbol(","), min=1)
        yield _symbol("]")
        return IndexArray(tuple(cast(list[Subscript], items_result)))

    return wildcard | subscripts


def _build_any_level_parser() -> Parser:
    """Build parser for `**` with an optional `{first to last}` level range."""
    level = _lexeme(regex(r"\d+")).map(int) | _lexeme(_keyword("last")).result(None)

    @generate
    def any_level() -> Generator[Parser, object, AnyLevel]:
        yield _symbol("**")
        opened = yield _symbol("{").optional()
        if opened is None:
            return AnyLevel(0, None)
        first = yield level
        last = first
        to = yield _lexeme(_keyword("to")).optional()
        if to is not None:
            last = yield level
        yield _symbol("}")
        return AnyLevel(cast(int | None, first), cast(int | None, last))

    return any_level


def _build_dot_accessor_parser(identifier: Parser, string_token: Parser, expr: Parser) -> Parser:
    """Build parser for `.key`, `."key"`, `.*`, `.**` and item method calls."""
    any_level = _build_any_level_parser()
    any_key = _symbol("*").result(AnyKey())
    quoted_key = string_token.map(Key)

    @generate
    def datetime_arguments() -> Generator[Parser, object, DatetimeMethod]:
        template = yield string_token.optional()
        if template is None:
            yield _symbol(")")
            return DatetimeMethod()
        timezone = yield (_symbol(",") >> expr).optional()
        yield _symbol(")")
        return DatetimeMethod(
            cast(str, template),
            None if timezone is None else _require_expr(timezone, "datetime time zone"),
        )

    @generate
    def named() -> Generator[Parser, object, PathNode]:
        name_result = yield identifier
        if not isinstance(name_result, str):
            raise PathParseError("invalid member name")
        opened = yield _symbol("(").optional()
        if opened is None:
            return Key(name_result)
        if name_result == "datetime":
            method = yield datetime_arguments
            return cast(PathNode, method)
        factory = SIMPLE_METHODS.get(name_result)
        if factory is None:
            available = ", ".join(sorted([*SIMPLE_METHODS, "datetime"]))
            raise PathParseError(
                f"unknown jsonpath item method: {name_result}. Available methods: {available}"
            )
        yield _symbol(")")
        return factory()

    return string(".") >> regex(r"\s*") >> (any_level | any_key | quoted_key | named)


def _build_accessor_expr_parser(
    primary: Parser, identifier: Parser, string_token: Parser, expr: Parser, boolean: Parser
) -> Parser:
    """Build parser applying accessors, filters and methods to a primary."""

    @generate
    def filter_accessor() -> Generator[Parser, object, Filter]:
        yield _symbol("?")
        yield _symbol("(")
        predicate = yield boolean
        yield _symbol(")")
        return Filter(_require_predicate(predicate, "filter expression"))

    accessor = (
        _build_dot_accessor_parser(identifier, string_token, expr)
        | _build_subscripts_parser(expr)
        | filter_accessor
    )

    @generate
    def accessor_expr() -> Generator[Parser, object, PathNode]:
        head_result = yield primary
        if not isinstance(head_result, PathNode):
            raise PathParseError("invalid path primary")
        steps_result = yield accessor.many()
        steps = cast(list[PathNode], steps_result)
        if not steps:
            return head_result
        if _is_predicate(head_result):
            raise PathParseError("accessor is not allowed after a predicate")
        return append_chain(head_result, link_steps(steps))

    return accessor_expr


def _build_predicate_parser(expr: Parser, identifier: Parser, string_token: Parser) -> Parser:
    """Build parser for comparisons, `starts with`, `like_regex` and `exists`."""
    compare_op = _lexeme(
        string("==")
        | string("!=")
        | string("<>")
        | string("<=")
        | string(">=")
        | string("<")
        | string(">")
    ).map(COMPARISON_TOKENS.__getitem__)
    starts_with = _lexeme(_keyword("starts")) >> _lexeme(_keyword("with"))
    starts_with_initial = string_token.map(StringLiteral) | (
        string("$") >> (identifier | string_token)
    ).map(Variable)
    like_regex = _lexeme(_keyword("like_regex"))
    flag = _lexeme(_keyword("flag"))

    @generate
    def exists() -> Generator[Parser, object, Exists]:
        yield _lexeme(_keyword("exists"))
        yield _symbol("(")
        operand = yield expr
        yield _symbol(")")
        return Exists(_require_expr(operand, "exists operand"))

    @generate
    def predicate() -> Generator[Parser, object, PathNode]:
        left_result = yield expr
        if not isinstance(left_result, PathNode):
            raise PathParseError("invalid expression")
        if _is_predicate(left_result):
            return left_result

        operator = yield compare_op.optional()
        if operator is not None:
            right = yield expr
            return Comparison(
                cast(str, operator),
                left_result,
                _require_expr(right, "comparison operand"),
            )

        prefix = yield (starts_with >> starts_with_initial).optional()
        if prefix is not None:
            return StartsWith(left_result, cast(PathNode, prefix))

        pattern = yield (like_regex >> string_token).optional()
        if pattern is not None:
            flags = yield (flag >> string_token).optional()
            flags_text = "" if flags is None else cast(str, flags)
            # reject bad patterns and flags up front
            compile_regex(cast(str, pattern), flags_text)
            return LikeRegex(left_result, cast(str, pattern), flags_text)

        return left_result

    return exists | predicate


def _make_parser() -> Parser:
    """Create the full path parser."""
    ws = regex(r"\s*")
    identifier = _lexeme(regex(r"[^\W\d][\w]*"))
    string_token, string_literal = _build_string_parsers()

    expr = forward_declaration()
    boolean = forward_declaration()

    primary = _build_primary_parser(identifier, string_token, string_literal, boolean)
    accessor_expr = _build_accessor_expr_parser(primary, identifier, string_token, expr, boolean)

    unary = forward_declaration()

    @generate
    def signed() -> Generator[Parser, object, PathNode]:
        operator = yield _symbol("+") | _symbol("-")
        operand = yield unary
        return _make_unary(cast(str, operator), _require_expr(operand, "arithmetic operand"))

    unary.become(signed | accessor_expr)

    multiplicative = _chain_left(unary, _symbol("*") | _symbol("/") | _symbol("%"), _arithmetic)
    additive = _chain_left(multiplicative, _symbol("+") | _symbol("-"), _arithmetic)
    expr.become(additive)

    predicate = _build_predicate_parser(expr, identifier, string_token)

    @generate
    def negation() -> Generator[Parser, object, PathNode]:
        yield _symbol("!")
        operand = yield negation | predicate
        return Not(_require_predicate(operand, "operand of !"))

    conjunction = _chain_left(negation | predicate, _symbol("&&"), _logical)
    boolean.become(_chain_left(conjunction, _symbol("||"), _logical))

    mode = (_lexeme(_keyword("strict")).result(False) | _lexeme(_keyword("lax")).result(True)).optional()
    return seq(ws >> mode, boolean << ws << eof).combine(
        lambda lax, node: CompiledPath(cast(PathNode, node), lax is not False)
    )


def _arithmetic(operator: str, left: PathNode, right: PathNode) -> PathNode:
    """Construct binary arithmetic node."""
    return BinaryArithmetic(
        operator,
        _require_expr(left, "arithmetic operand"),
        _require_expr(right, "arithmetic operand"),
    )


def _logical(operator: str, left: PathNode, right: PathNode) -> PathNode:
    """Construct `&&`/`||` node."""
    where = f"operand of {operator}"
    left = _require_predicate(left, where)
    right = _require_predicate(right, where)
    if operator == "&&":
        return And(left, right)
    return Or(left, right)


def _chain_left(
    term: Parser,
    op: Parser,
    builder: Callable[[str, PathNode, PathNode], PathNode],
) -> Parser:
    """Build a left-associative parser from term and operator parsers."""

    @generate
    def parser() -> Generator[Parser, object, PathNode]:
        left_result = yield term
        if not isinstance(left_result, PathNode):
            raise PathParseError("invalid left expression")

        rest_result = yield seq(op, term).many()
        current: PathNode = left_result
        for operator, right in cast(list[tuple[object, object]], rest_result):
            if not isinstance(operator, str):
                raise PathParseError("invalid operator")
            if not isinstance(right, PathNode):
                raise PathParseError("invalid right expression")
            current = builder(operator, current, right)
        return current

    return parser


PATH_PARSER = _make_parser()


def parse_path(path: str) -> CompiledPath:
    """Parse path text, with its optional mode prefix, into a compiled path."""
    try:
        result = PATH_PARSER.parse(path)
    except ParseError as exc:
        raise PathParseError(_format_parse_error(path, exc)) from exc
    if isinstance(result, CompiledPath):
        return result
    raise PathParseError("parser did not produce a path expression")
