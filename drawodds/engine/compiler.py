"""
Condition compiler: AST -> predicate over a per-type count vector.

Predicates are plain closures composed per node; nothing is generated or
evaluated from source text at runtime. A compiled predicate holds no mutable
state and may be called any number of times, from any thread.

Arithmetic inside a comparison follows the usual precedence: ``*`` and ``/``
bind tighter than ``+`` and ``-``, and ``/`` is true division. Division by
zero follows IEEE-754 (``x/0`` is ±inf, ``0/0`` is nan) so that a hand with
zero copies of the divisor simply fails or passes its comparison instead of
aborting an enumeration.
"""

from __future__ import annotations

import math
import operator
from typing import Callable, Sequence

from .conditions import AND, OR, Comparison, ConditionNode, Logical, parse_condition
from .errors import ConditionSemanticError
from .variables import name_to_index

Predicate = Callable[[Sequence[int]], bool]
"""Compiled condition: count vector -> satisfied?"""

_COMPARATORS: dict[str, Callable[[float, int], bool]] = {
    "gt": operator.gt,
    "lt": operator.lt,
    "eq": operator.eq,
    "neq": operator.ne,
    "gte": operator.ge,
    "lte": operator.le,
}


def _divide(numerator: float, denominator: float) -> float:
    if denominator:
        return numerator / denominator
    if numerator:
        return math.copysign(math.inf, numerator)
    return math.nan


def _compile_comparison(node: Comparison) -> Predicate:
    compare = _COMPARATORS.get(node.symbol)
    if compare is None:
        raise ConditionSemanticError(f"unsupported operator: {node.symbol!r}")
    try:
        threshold = int(node.value)
    except ValueError:
        raise ConditionSemanticError(f"invalid integer literal: {node.value!r}") from None

    # (operator, slot) pairs; the first term has no operator.
    terms = [(op.operator or "+", name_to_index(op.name)) for op in node.operands]
    if not terms:
        raise ConditionSemanticError("comparison has no operands")
    for op, _ in terms:
        if op not in ("+", "-", "*", "/"):
            raise ConditionSemanticError(f"unsupported operator: {op!r}")
    first_slot = terms[0][1]
    rest = terms[1:]
    highest_slot = max(slot for _, slot in terms)

    def _evaluate(counts: Sequence[int]) -> float:
        if len(counts) <= highest_slot:
            raise ConditionSemanticError(
                f"count vector of length {len(counts)} has no slot {highest_slot}"
            )
        total = 0.0
        sign = 1
        product = counts[first_slot]
        for op, slot in rest:
            value = counts[slot]
            if op == "*":
                product = product * value
            elif op == "/":
                product = _divide(product, value)
            else:
                total += sign * product
                sign = 1 if op == "+" else -1
                product = value
        return total + sign * product

    def predicate(counts: Sequence[int]) -> bool:
        return compare(_evaluate(counts), threshold)

    return predicate


def compile_condition(node: ConditionNode) -> Predicate:
    """Compile a condition AST into a predicate.

    Raises:
        ConditionSemanticError: Unknown variable name or unsupported operator.

    Examples:
        >>> pred = compile_condition(parse_condition('a + b >= 2'))
        >>> pred([1, 1]), pred([1, 0])
        (True, False)
    """
    if isinstance(node, Comparison):
        return _compile_comparison(node)

    children = [compile_condition(child) for child in node.children]
    if node.kind == AND:
        return lambda counts: all(child(counts) for child in children)
    if node.kind == OR:
        return lambda counts: any(child(counts) for child in children)
    raise ConditionSemanticError(f"unsupported logical operator: {node.kind!r}")


def compile_condition_string(text: str) -> Predicate:
    """Parse and compile a condition string in one step.

    Examples:
        >>> pred = compile_condition_string('a > 0 || c == 1')
        >>> pred([0, 5, 1])
        True
    """
    return compile_condition(parse_condition(text))
