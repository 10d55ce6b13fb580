"""
Exception hierarchy for condition handling and deck preconditions.

Every error derives from ValueError so that callers which only guard against
bad input with ``except ValueError`` keep working.

    ConditionError            — anything wrong with a condition string / AST
        ConditionLexError     — character span the lexer cannot consume
        ConditionSyntaxError  — malformed token sequence, empty expression
        ConditionSemanticError — unknown variable, bad operator, slot out of range
    DeckError                 — empty deck, draws exceeding deck size, negative input
"""

from __future__ import annotations


class ConditionError(ValueError):
    """Base class for every condition-expression failure."""


class ConditionLexError(ConditionError):
    """Raised when part of the input is not a recognised token."""


class ConditionSyntaxError(ConditionError):
    """Raised when the token stream does not match the condition grammar."""


class ConditionSemanticError(ConditionError):
    """Raised when a well-formed condition cannot be given a meaning."""


class DeckError(ValueError):
    """Raised when a deck / draw count violates an engine precondition."""
