"""
Condition lexer.

Turns a condition string into a flat list of token strings. Recognised tokens,
tried in this order at every position:

    identifiers   letters, digits, underscore, CJK ideographs
    two-char ops  >=  <=  ==  !=  &&  ||
    one-char ops  +  -  *  /  (  )  <  >

Whitespace between tokens is ignored. Any other non-blank span is rejected.
"""

from __future__ import annotations

import re

from .errors import ConditionLexError, ConditionSyntaxError

IDENTIFIER_PATTERN: str = r"[A-Za-z0-9_\u4e00-\u9fa5]+"

_TOKEN_RE = re.compile(
    r"\s*(" + IDENTIFIER_PATTERN + r"|>=|<=|==|!=|&&|\|\||[-+*/()<>])\s*"
)
_IDENTIFIER_RE = re.compile(IDENTIFIER_PATTERN)


def is_identifier(token: str) -> bool:
    """Return True if the token is an identifier (variable or card name)."""
    return _IDENTIFIER_RE.fullmatch(token) is not None


def tokenize(text: str) -> list[str]:
    """Split a condition string into tokens.

    Raises:
        ConditionSyntaxError: If the text is empty or only whitespace.
        ConditionLexError:    If any non-blank span is not a valid token.

    Examples:
        >>> tokenize('a + b >= 2')
        ['a', '+', 'b', '>=', '2']
        >>> tokenize('(a>0)||b==1')
        ['(', 'a', '>', '0', ')', '||', 'b', '==', '1']
    """
    stripped = text.strip()
    if not stripped:
        raise ConditionSyntaxError("empty condition expression")

    tokens: list[str] = []
    last_end = 0
    for match in _TOKEN_RE.finditer(stripped):
        skipped = stripped[last_end:match.start()].strip()
        if skipped:
            raise ConditionLexError(f"unsupported characters: {skipped!r}")
        tokens.append(match.group(1))
        last_end = match.end()

    remaining = stripped[last_end:].strip()
    if remaining:
        raise ConditionLexError(f"unsupported characters: {remaining!r}")

    return tokens
