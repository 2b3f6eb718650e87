"""Item evaluator: walks a path AST over a document.

Every handler receives the node, the current item and an optional result
sequence. A ``found`` of None asks only whether anything matches, and
handlers stop at the first match in that case. Handlers return whether at
least one item was produced; recoverable failures are raised as
``PathExecutionError`` and turned into "unknown" by predicate evaluation.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from decimal import Decimal
from typing import TypeAlias, cast

from jpath.path_language import arithmetic
from jpath.path_language.ast import (
    And,
    AnyArray,
    AnyKey,
    AnyLevel,
    BinaryArithmetic,
    BoolLiteral,
    Comparison,
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
    TypeMethod,
    UnaryArithmetic,
    Variable,
)
from jpath.path_language.comparator import compare_items
from jpath.path_language.context import BaseObject, ExecContext
from jpath.path_language.datetimes import DefaultZone
from jpath.path_language.document import (
    array_get,
    array_len,
    is_container,
    is_numeric,
    iter_children,
    object_get,
    to_decimal,
)
from jpath.path_language.errors import (
    ArrayNotFound,
    InvalidDatetimeArgument,
    InvalidSubscript,
    MemberNotFound,
    ObjectNotFound,
    PathExecutionError,
    PathInternalError,
    UndefinedVariable,
)
from jpath.path_language.methods import (
    apply_numeric_method,
    keyvalue_id,
    keyvalue_pairs,
    size_of,
    timezone_argument,
    to_datetime,
    to_double,
    type_name,
)
from jpath.path_language.predicates import (
    TriBool,
    check_pairs,
    compile_regex,
    is_unknown,
    like_regex,
    logical_and,
    logical_not,
    logical_or,
    starts_with,
)
from jpath.path_language.sequence import ResultSequence


logger = logging.getLogger("jpath")

Handler: TypeAlias = Callable[..., bool]


def evaluate(
    context: ExecContext, node: PathNode, value: object, found: ResultSequence | None
) -> bool:
    """Evaluate node over value, unwrapping arrays in lax mode."""
    return evaluate_opt_unwrap(context, node, value, found, context.auto_unwrap)


def evaluate_opt_unwrap(
    context: ExecContext,
    node: PathNode,
    value: object,
    found: ResultSequence | None,
    unwrap: bool,
) -> bool:
    """Evaluate node over value with explicit control of array unwrapping."""
    handler = _HANDLERS.get(type(node))
    if handler is None:
        raise PathInternalError(f"unrecognized jsonpath item type: {type(node).__name__}")
    with context.descend():
        return handler(context, node, value, found, unwrap)


def continue_with(
    context: ExecContext, node: PathNode, value: object, found: ResultSequence | None
) -> bool:
    """Evaluate the successor of node on value, or collect value at the end of the path."""
    if node.next is not None:
        return evaluate(context, node.next, value, found)
    if found is not None:
        found.append(value)
    return True


def evaluate_unwrapping_result(
    context: ExecContext, node: PathNode, value: object, unwrap: bool
) -> ResultSequence:
    """Evaluate node and, in lax mode, replace arrays in the result by their elements."""
    if not (unwrap and context.auto_unwrap):
        found = ResultSequence()
        evaluate(context, node, value, found)
        return found

    raw = ResultSequence()
    evaluate(context, node, value, raw)
    found = ResultSequence()
    for item in raw:
        if array_len(item) >= 0:
            found.extend(iter_children(item))
        else:
            found.append(item)
    return found


def traverse(
    context: ExecContext,
    node: PathNode | None,
    container: object,
    found: ResultSequence | None,
    level: int,
    first: int | None,
    last: int | None,
    ignore_structural_errors: bool,
    unwrap_next: bool,
) -> bool:
    """Depth-first walk over the members and elements of a container.

    Items between levels `first` and `last` (None meaning unbounded) are
    visited; with both bounds unbounded only leaves are visited. Visiting
    means evaluating node on the item, or collecting the item when there is
    no node.
    """
    if last is not None and level > last:
        return False

    matched = False
    with context.descend():
        for child in iter_children(container):
            if _level_selected(level, first, last, child):
                if node is not None:
                    if ignore_structural_errors:
                        with context.override(ignore_structural_errors=True):
                            result = evaluate_opt_unwrap(context, node, child, found, unwrap_next)
                    else:
                        result = evaluate_opt_unwrap(context, node, child, found, unwrap_next)
                    if result and found is None:
                        return True
                    matched = matched or result
                elif found is not None:
                    found.append(child)
                    matched = True
                else:
                    return True

            if (last is None or level < last) and is_container(child):
                result = traverse(
                    context,
                    node,
                    child,
                    found,
                    level + 1,
                    first,
                    last,
                    ignore_structural_errors,
                    unwrap_next,
                )
                if result and found is None:
                    return True
                matched = matched or result
    return matched


def _level_selected(level: int, first: int | None, last: int | None, item: object) -> bool:
    if first is not None:
        return level >= first
    return last is None and not is_container(item)


def _unwrap_target_array(
    context: ExecContext,
    node: PathNode | None,
    array: object,
    found: ResultSequence | None,
    unwrap_elements: bool,
) -> bool:
    """Evaluate node on every element of an array."""
    return traverse(context, node, array, found, 1, 1, 1, False, unwrap_elements)


def _is_array(value: object) -> bool:
    return array_len(value) >= 0


def evaluate_bool(
    context: ExecContext, node: PathNode, value: object, can_have_next: bool
) -> TriBool:
    """Evaluate a predicate node to a three-valued result."""
    if not can_have_next and node.next is not None:
        raise PathInternalError("boolean jsonpath item cannot have next item")

    with context.descend():
        match node:
            case And(left=left, right=right):
                return logical_and(
                    evaluate_bool(context, left, value, False),
                    lambda: evaluate_bool(context, right, value, False),
                )
            case Or(left=left, right=right):
                return logical_or(
                    evaluate_bool(context, left, value, False),
                    lambda: evaluate_bool(context, right, value, False),
                )
            case Not(operand=operand):
                return logical_not(evaluate_bool(context, operand, value, False))
            case IsUnknown(operand=operand):
                return is_unknown(evaluate_bool(context, operand, value, False))
            case Comparison(operator=operator, left=left, right=right):
                return _evaluate_predicate(
                    context,
                    left,
                    right,
                    value,
                    True,
                    lambda item, other: compare_items(operator, item, other),
                )
            case StartsWith(left=left, right=right):
                return _evaluate_predicate(context, left, right, value, False, starts_with)
            case LikeRegex(operand=operand, pattern=pattern, flags=flags):
                compiled = compile_regex(pattern, flags)
                return _evaluate_predicate(
                    context,
                    operand,
                    None,
                    value,
                    False,
                    lambda item, _other: like_regex(compiled, item),
                )
            case Exists(operand=operand):
                return _evaluate_exists(context, operand, value)
    raise PathInternalError(f"invalid boolean jsonpath item type: {type(node).__name__}")


def evaluate_nested_bool(context: ExecContext, node: PathNode, value: object) -> TriBool:
    """Evaluate a filter predicate with value bound to `@`."""
    with context.push_current(value):
        return evaluate_bool(context, node, value, False)


def _operand_items(
    context: ExecContext, node: PathNode, value: object, unwrap: bool
) -> ResultSequence | None:
    """Evaluate a predicate operand, or return None when evaluation fails."""
    with context.override(throw_errors=False):
        try:
            return evaluate_unwrapping_result(context, node, value, unwrap)
        except PathExecutionError as exc:
            logger.debug("Predicate operand evaluated to unknown: %s", exc)
            return None


def _evaluate_predicate(
    context: ExecContext,
    left: PathNode,
    right: PathNode | None,
    value: object,
    unwrap_right: bool,
    check: Callable[[object, object | None], TriBool],
) -> TriBool:
    left_items = _operand_items(context, left, value, True)
    if left_items is None:
        return TriBool.UNKNOWN
    right_items: ResultSequence | None = None
    if right is not None:
        right_items = _operand_items(context, right, value, unwrap_right)
        if right_items is None:
            return TriBool.UNKNOWN
    return check_pairs(
        context.lax,
        left_items,
        None if right_items is None else right_items.to_list(),
        check,
    )


def _evaluate_exists(context: ExecContext, operand: PathNode, value: object) -> TriBool:
    if not context.lax:
        # all items are needed to be sure that no error occurs
        items = _operand_items(context, operand, value, False)
        if items is None:
            return TriBool.UNKNOWN
        return TriBool.from_bool(not items.is_empty())

    with context.override(throw_errors=False):
        try:
            return TriBool.from_bool(evaluate(context, operand, value, None))
        except PathExecutionError as exc:
            logger.debug("Exists operand evaluated to unknown: %s", exc)
            return TriBool.UNKNOWN


def _evaluate_bool_node(
    context: ExecContext, node: PathNode, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    del unwrap
    result = evaluate_bool(context, node, value, True)
    if node.next is None and found is None:
        return True
    return continue_with(context, node, result.to_json(), found)


def _evaluate_key(
    context: ExecContext, node: Key, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    if isinstance(value, dict):
        present, member = object_get(value, node.name)
        if present:
            return continue_with(context, node, member, found)
        if not context.ignore_structural_errors:
            raise MemberNotFound(f"JSON object does not contain key {json.dumps(node.name)}")
        return False
    if unwrap and _is_array(value):
        return _unwrap_target_array(context, node, value, found, False)
    if not context.ignore_structural_errors:
        raise MemberNotFound("jsonpath member accessor can only be applied to an object")
    return False


def _evaluate_root(
    context: ExecContext, node: Root, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    del value, unwrap
    with context.override(base_object=BaseObject(context.root, 0)):
        return continue_with(context, node, context.root, found)


def _evaluate_current(
    context: ExecContext, node: Current, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    del value, unwrap
    return continue_with(context, node, context.current, found)


def _evaluate_any_array(
    context: ExecContext, node: AnyArray, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    del unwrap
    if _is_array(value):
        return _unwrap_target_array(context, node.next, value, found, context.auto_unwrap)
    if context.auto_wrap:
        return continue_with(context, node, value, found)
    if not context.ignore_structural_errors:
        raise ArrayNotFound("jsonpath wildcard array accessor can only be applied to an array")
    return False


def _array_index(context: ExecContext, node: PathNode, value: object) -> int:
    """Evaluate a subscript expression to an integer index."""
    found = ResultSequence()
    evaluate(context, node, value, found)
    index_value = found.head()
    if len(found) != 1 or not is_numeric(index_value):
        raise InvalidSubscript("jsonpath array subscript is not a singleton numeric value")
    index = arithmetic.to_int32(arithmetic.truncate(to_decimal(cast(Decimal, index_value))))
    if index is None:
        raise InvalidSubscript("jsonpath array subscript is out of integer range")
    return index


def _evaluate_index_array(
    context: ExecContext, node: IndexArray, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    del unwrap
    size = array_len(value)
    if size < 0 and not context.auto_wrap:
        if not context.ignore_structural_errors:
            raise ArrayNotFound("jsonpath array accessor can only be applied to an array")
        return False

    singleton = size < 0
    if singleton:
        size = 1

    matched = False
    with context.override(innermost_array_size=size):
        for subscript in node.subscripts:
            index_from = _array_index(context, subscript.start, value)
            index_to = (
                index_from if subscript.end is None else _array_index(context, subscript.end, value)
            )
            if not context.ignore_structural_errors and (
                index_from < 0 or index_from > index_to or index_to >= size
            ):
                raise InvalidSubscript("jsonpath array subscript is out of bounds")

            for index in range(max(index_from, 0), min(index_to, size - 1) + 1):
                if node.next is None and found is None:
                    return True
                element = value if singleton else array_get(cast(list, value), index)
                if continue_with(context, node, element, found):
                    if found is None:
                        return True
                    matched = True
    return matched


def _evaluate_last(
    context: ExecContext, node: Last, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    del value, unwrap
    if context.innermost_array_size < 0:
        raise PathInternalError("evaluating jsonpath LAST outside of array subscript")
    if node.next is None and found is None:
        return True
    return continue_with(context, node, context.innermost_array_size - 1, found)


def _evaluate_any_key(
    context: ExecContext, node: AnyKey, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    if isinstance(value, dict):
        return traverse(context, node.next, value, found, 1, 1, 1, False, context.auto_unwrap)
    if unwrap and _is_array(value):
        return _unwrap_target_array(context, node, value, found, False)
    if not context.ignore_structural_errors:
        raise ObjectNotFound("jsonpath wildcard member accessor can only be applied to an object")
    return False


def _evaluate_any_level(
    context: ExecContext, node: AnyLevel, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    del unwrap
    matched = False
    if node.first == 0:
        with context.override(ignore_structural_errors=True):
            matched = continue_with(context, node, value, found)
        if matched and found is None:
            return True

    if is_container(value):
        result = traverse(
            context,
            node.next,
            value,
            found,
            1,
            node.first,
            node.last,
            True,
            context.auto_unwrap,
        )
        matched = matched or result
    return matched


def _literal_value(context: ExecContext, node: PathNode) -> tuple[object, BaseObject | None]:
    """Value of a literal or variable node, with the base object a variable belongs to."""
    match node:
        case NullLiteral():
            return (None, None)
        case BoolLiteral(value=flag):
            return (flag, None)
        case NumericLiteral(value=number):
            return (number, None)
        case StringLiteral(value=text):
            return (text, None)
        case Variable(name=name):
            resolved = context.variables.resolve(name)
            if resolved is None:
                raise UndefinedVariable(name)
            if resolved.base_id > 0:
                return (resolved.value, BaseObject(resolved.base_object, resolved.base_id))
            return (resolved.value, None)
    raise PathInternalError(f"unexpected literal node {type(node).__name__}")


def _evaluate_literal(
    context: ExecContext, node: PathNode, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    del value, unwrap
    if node.next is None and found is None:
        return True
    item, base_object = _literal_value(context, node)
    if base_object is None:
        return continue_with(context, node, item, found)
    with context.override(base_object=base_object):
        return continue_with(context, node, item, found)


def _evaluate_binary_arithmetic(
    context: ExecContext,
    node: BinaryArithmetic,
    value: object,
    found: ResultSequence | None,
    unwrap: bool,
) -> bool:
    del unwrap
    left = evaluate_unwrapping_result(context, node.left, value, True)
    right = evaluate_unwrapping_result(context, node.right, value, True)
    result = arithmetic.apply_binary(node.operator, left.to_list(), right.to_list())
    if node.next is None and found is None:
        return True
    return continue_with(context, node, result, found)


def _evaluate_unary_arithmetic(
    context: ExecContext,
    node: UnaryArithmetic,
    value: object,
    found: ResultSequence | None,
    unwrap: bool,
) -> bool:
    del unwrap
    items = evaluate_unwrapping_result(context, node.operand, value, True)
    matched = False
    for item in items:
        if found is None and node.next is None:
            # existence check: non-numeric items are skipped
            if is_numeric(item):
                return True
            continue
        result = arithmetic.apply_unary(node.operator, item)
        if continue_with(context, node, result, found):
            if found is None:
                return True
            matched = True
    return matched


def _evaluate_filter(
    context: ExecContext, node: Filter, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    if unwrap and _is_array(value):
        return _unwrap_target_array(context, node, value, found, False)
    if evaluate_nested_bool(context, node.predicate, value) is not TriBool.TRUE:
        return False
    return continue_with(context, node, value, found)


def _evaluate_type(
    context: ExecContext, node: TypeMethod, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    del unwrap
    return continue_with(context, node, type_name(value), found)


def _evaluate_size(
    context: ExecContext, node: SizeMethod, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    del unwrap
    size = size_of(value, context.auto_wrap, context.ignore_structural_errors)
    if size is None:
        return False
    return continue_with(context, node, size, found)


def _evaluate_numeric_method(
    context: ExecContext,
    node: NumericMethod,
    value: object,
    found: ResultSequence | None,
    unwrap: bool,
) -> bool:
    if unwrap and _is_array(value):
        return _unwrap_target_array(context, node, value, found, False)
    result = apply_numeric_method(node.name, value)
    if node.next is None and found is None:
        return True
    return continue_with(context, node, result, found)


def _evaluate_double(
    context: ExecContext, node: DoubleMethod, value: object, found: ResultSequence | None, unwrap: bool
) -> bool:
    if unwrap and _is_array(value):
        return _unwrap_target_array(context, node, value, found, False)
    return continue_with(context, node, to_double(value), found)


def _evaluate_datetime(
    context: ExecContext,
    node: DatetimeMethod,
    value: object,
    found: ResultSequence | None,
    unwrap: bool,
) -> bool:
    if unwrap and _is_array(value):
        return _unwrap_target_array(context, node, value, found, False)
    if not isinstance(value, str):
        raise InvalidDatetimeArgument("jsonpath item method .datetime() is applied to not a string")

    default_tz: DefaultZone | None = None
    if node.template is not None and node.timezone is not None:
        zone_items = ResultSequence()
        evaluate(context, node.timezone, value, zone_items)
        default_tz = timezone_argument(zone_items.to_list())

    result = to_datetime(value, node.template, default_tz)
    if node.next is None and found is None:
        return True
    return continue_with(context, node, result, found)


def _evaluate_keyvalue(
    context: ExecContext,
    node: KeyValueMethod,
    value: object,
    found: ResultSequence | None,
    unwrap: bool,
) -> bool:
    if unwrap and _is_array(value):
        return _unwrap_target_array(context, node, value, found, False)
    if not isinstance(value, dict):
        raise ObjectNotFound("jsonpath item method .keyvalue() can only be applied to an object")

    object_id = keyvalue_id(context.base_object.id, context.container_offset(value))
    matched = False
    for pair in keyvalue_pairs(value, object_id):
        if node.next is None and found is None:
            return True
        generated = BaseObject(pair, context.next_generated_id())
        with context.override(base_object=generated):
            result = continue_with(context, node, pair, found)
        if result:
            if found is None:
                return True
            matched = True
    return matched


_HANDLERS: dict[type[PathNode], Handler] = {
    And: _evaluate_bool_node,
    Or: _evaluate_bool_node,
    Not: _evaluate_bool_node,
    IsUnknown: _evaluate_bool_node,
    Comparison: _evaluate_bool_node,
    StartsWith: _evaluate_bool_node,
    LikeRegex: _evaluate_bool_node,
    Exists: _evaluate_bool_node,
    Key: _evaluate_key,
    Root: _evaluate_root,
    Current: _evaluate_current,
    AnyArray: _evaluate_any_array,
    IndexArray: _evaluate_index_array,
    Last: _evaluate_last,
    AnyKey: _evaluate_any_key,
    AnyLevel: _evaluate_any_level,
    NullLiteral: _evaluate_literal,
    BoolLiteral: _evaluate_literal,
    NumericLiteral: _evaluate_literal,
    StringLiteral: _evaluate_literal,
    Variable: _evaluate_literal,
    BinaryArithmetic: _evaluate_binary_arithmetic,
    UnaryArithmetic: _evaluate_unary_arithmetic,
    Filter: _evaluate_filter,
    TypeMethod: _evaluate_type,
    SizeMethod: _evaluate_size,
    NumericMethod: _evaluate_numeric_method,
    DoubleMethod: _evaluate_double,
    DatetimeMethod: _evaluate_datetime,
    KeyValueMethod: _evaluate_keyvalue,
}


def handled_node_types() -> frozenset[type[PathNode]]:
    """Node classes the evaluator can dispatch on."""
    return frozenset(_HANDLERS)
