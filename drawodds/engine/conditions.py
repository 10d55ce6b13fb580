"""
Condition AST and recursive-descent parser.

Grammar (loosest to tightest binding):

    expr          := and ( '||' and )*
    and           := rel ( '&&' rel )*
    rel           := '(' expr ')'
                   | operand_list cmp_op INTEGER
    operand_list  := term ( ('+'|'-'|'*'|'/') term )*
                   | '(' operand_list ')'
    cmp_op        := '>' | '<' | '>=' | '<=' | '==' | '!='

A parenthesised group is first parsed as a full expr; if that does not end
cleanly at the matching ')', the parser rewinds to just after '(' and reads
the group as an operand list instead, so that both ``(a > 0 || b > 0)`` and
``(a + b) >= 2`` work.

Every parse function takes the token list plus an integer position and
returns ``(result, next_position)``; no parser state outlives a call.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from .errors import ConditionSemanticError, ConditionSyntaxError
from .lexer import is_identifier, tokenize
from .variables import name_to_index

# ─── Constants ────────────────────────────────────────────────────────────────

AND: str = "and"
OR: str = "or"

SYMBOLS: dict[str, str] = {
    ">": "gt",
    "<": "lt",
    "==": "eq",
    "!=": "neq",
    ">=": "gte",
    "<=": "lte",
}
"""Comparison token -> canonical symbol name stored on Comparison nodes."""

SYMBOL_TOKENS: dict[str, str] = {symbol: token for token, symbol in SYMBOLS.items()}
"""Canonical symbol name -> comparison token (used when rendering)."""

ARITHMETIC_OPERATORS: frozenset[str] = frozenset({"+", "-", "*", "/"})

_LOGICAL_TOKENS: dict[str, str] = {"&&": AND, "||": OR}
_INTEGER_RE = re.compile(r"[0-9]+")
_NAME_RUN_RE = re.compile(r"[A-Za-z]+")


# ─── AST ──────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Operand:
    """One term of a comparison's left-hand side.

    Attributes:
        name:     Variable (or card) name as written.
        operator: Arithmetic operator joining this term to the previous one;
                  None for the first term.
    """

    name: str
    operator: str | None = None


@dataclass(frozen=True)
class Comparison:
    """``operands <symbol> value``, e.g. ``a + b >= 2``.

    Attributes:
        operands: Left-hand terms in source order.
        symbol:   One of gt, lt, eq, neq, gte, lte.
        value:    Non-negative integer literal, kept as text.
    """

    operands: tuple[Operand, ...]
    symbol: str
    value: str


@dataclass(frozen=True)
class Logical:
    """Conjunction or disjunction of child conditions.

    After parse_condition(), no child has the same kind as its parent.
    """

    kind: str
    children: tuple["ConditionNode", ...]


ConditionNode = Union[Comparison, Logical]


# ─── Token helpers ────────────────────────────────────────────────────────────


def _describe(tokens: list[str], pos: int) -> str:
    return repr(tokens[pos]) if pos < len(tokens) else "end of input"


def _expect(tokens: list[str], pos: int, expected: str) -> int:
    if pos >= len(tokens) or tokens[pos] != expected:
        raise ConditionSyntaxError(
            f"expected {expected!r}, got {_describe(tokens, pos)}"
        )
    return pos + 1


def _expect_identifier(tokens: list[str], pos: int) -> tuple[str, int]:
    if pos >= len(tokens) or not is_identifier(tokens[pos]):
        raise ConditionSyntaxError(
            f"expected a card name, got {_describe(tokens, pos)}"
        )
    return tokens[pos], pos + 1


# ─── Recursive descent ────────────────────────────────────────────────────────


def _parse_or(tokens: list[str], pos: int) -> tuple[ConditionNode, int]:
    node, pos = _parse_and(tokens, pos)
    while pos < len(tokens) and tokens[pos] == "||":
        right, pos = _parse_and(tokens, pos + 1)
        node = Logical(OR, (node, right))
    return node, pos


def _parse_and(tokens: list[str], pos: int) -> tuple[ConditionNode, int]:
    node, pos = _parse_relational(tokens, pos)
    while pos < len(tokens) and tokens[pos] == "&&":
        right, pos = _parse_relational(tokens, pos + 1)
        node = Logical(AND, (node, right))
    return node, pos


def _parse_operand_list(tokens: list[str], pos: int) -> tuple[list[Operand], int]:
    name, pos = _expect_identifier(tokens, pos)
    operands = [Operand(name)]
    while pos < len(tokens) and tokens[pos] in ARITHMETIC_OPERATORS:
        operator = tokens[pos]
        name, pos = _expect_identifier(tokens, pos + 1)
        operands.append(Operand(name, operator))
    return operands, pos


def _parse_group(
    tokens: list[str], pos: int
) -> tuple[ConditionNode | list[Operand], int]:
    """Parse a '(' … ')' group starting at pos, or a bare operand list."""
    if pos >= len(tokens) or tokens[pos] != "(":
        return _parse_operand_list(tokens, pos)

    start = pos + 1
    try:
        node, end = _parse_or(tokens, start)
        if end < len(tokens) and tokens[end] == ")":
            return node, end + 1
    except ConditionSyntaxError:
        pass

    # Not a complete condition: rewind and read the group as arithmetic.
    operands, end = _parse_operand_list(tokens, start)
    return operands, _expect(tokens, end, ")")


def _parse_relational(tokens: list[str], pos: int) -> tuple[ConditionNode, int]:
    left, pos = _parse_group(tokens, pos)
    if isinstance(left, (Comparison, Logical)):
        return left, pos

    if pos >= len(tokens) or tokens[pos] not in SYMBOLS:
        terms = " ".join(
            op.name if op.operator is None else f"{op.operator} {op.name}"
            for op in left
        )
        raise ConditionSyntaxError(
            f"expected comparison operator after {terms!r}, got {_describe(tokens, pos)}"
        )
    symbol = SYMBOLS[tokens[pos]]
    pos += 1

    if pos >= len(tokens) or not _INTEGER_RE.fullmatch(tokens[pos]):
        raise ConditionSyntaxError(f"expected integer, got {_describe(tokens, pos)}")
    return Comparison(tuple(left), symbol, tokens[pos]), pos + 1


def flatten(node: ConditionNode) -> ConditionNode:
    """Merge nested logical nodes of the same kind into their parent.

    Examples:
        >>> a, b, c = (Comparison((Operand(n),), 'gt', '0') for n in 'abc')
        >>> flatten(Logical('and', (Logical('and', (a, b)), c))).children == (a, b, c)
        True
    """
    if isinstance(node, Comparison):
        return node
    children: list[ConditionNode] = []
    for child in node.children:
        flat = flatten(child)
        if isinstance(flat, Logical) and flat.kind == node.kind:
            children.extend(flat.children)
        else:
            children.append(flat)
    return Logical(node.kind, tuple(children))


# ─── Public API ───────────────────────────────────────────────────────────────


def parse_condition(text: str) -> Logical:
    """Parse a condition string into a flattened AST.

    The root is always a Logical node; a lone comparison is wrapped in a
    one-child ``and``.

    Raises:
        ConditionSyntaxError: Empty input or a malformed token sequence.
        ConditionLexError:    Unrecognised characters.

    Examples:
        >>> root = parse_condition('a + b >= 2')
        >>> root.kind, len(root.children)
        ('and', 1)
        >>> root.children[0].symbol
        'gte'
    """
    tokens = tokenize(text)
    tree, pos = _parse_or(tokens, 0)
    if pos != len(tokens):
        raise ConditionSyntaxError(
            f"unexpected token {tokens[pos]!r} (remaining: {' '.join(tokens[pos:])})"
        )
    if isinstance(tree, Comparison):
        return Logical(AND, (tree,))
    return flatten(tree)


def node_to_string(node: ConditionNode) -> str:
    """Render a condition AST back to parseable text.

    Comparisons render as ``(a + b) >= 2``; logical nodes with more than one
    child are parenthesised. Output re-parses to an equal AST.

    Examples:
        >>> node_to_string(parse_condition('a>0 && b+c==2'))
        '((a) > 0 && (b + c) == 2)'
    """
    if isinstance(node, Comparison):
        terms = " ".join(
            op.name if i == 0 else f"{op.operator or '+'} {op.name}"
            for i, op in enumerate(node.operands)
        )
        token = SYMBOL_TOKENS.get(node.symbol, node.symbol)
        return f"({terms}) {token} {node.value}"

    parts = [text for text in (node_to_string(c) for c in node.children) if text]
    if len(parts) > 1:
        joiner = " && " if node.kind == AND else " || "
        return f"({joiner.join(parts)})"
    return parts[0] if parts else ""


def condition_variables(text: str) -> list[int]:
    """Return the sorted, de-duplicated slot indices referenced by a condition.

    Alphabetic runs that are not valid variable names are ignored.

    Examples:
        >>> condition_variables('b > 0 && a + b >= 2 || foo > 1')
        [0, 1]
        >>> condition_variables('aa > 0 && ab > 0')
        [26, 27]
    """
    indices: set[int] = set()
    for run in _NAME_RUN_RE.findall(text):
        try:
            indices.add(name_to_index(run))
        except ConditionSemanticError:
            continue
    return sorted(indices)


def replace_card_names(text: str, name_map: dict[str, str]) -> str:
    """Substitute card display names with their variable names.

    Longer names are replaced first so that a name which is a substring of
    another cannot clobber it. Entries with an empty replacement are skipped.

    Examples:
        >>> replace_card_names('Ash Blossom > 0', {'Ash Blossom': 'a'})
        'a > 0'
    """
    result = text
    for name in sorted(name_map, key=len, reverse=True):
        replacement = name_map[name]
        if not replacement:
            continue
        result = result.replace(name, replacement)
    return result
