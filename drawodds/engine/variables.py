"""
Variable codec: card-type names ↔ integer slot indices.

A condition addresses at most 30 card types:
    slot  0–25 -> 'a' … 'z'   (labels 'A' … 'Z')
    slot 26–29 -> 'aa' … 'ad' (labels 'AA' … 'AD')

Names are case-insensitive on input; index_to_name() always returns lowercase
and index_to_label() always returns uppercase.
"""

from __future__ import annotations

from .errors import ConditionSemanticError

MAX_VARIABLES: int = 30
"""Number of addressable card-type slots."""

_SINGLE_LETTERS: int = 26
_DOUBLE_LETTERS: int = MAX_VARIABLES - _SINGLE_LETTERS


def name_to_index(name: str) -> int:
    """Return the slot index for a variable name.

    Raises:
        ConditionSemanticError: If the name is not one of a–z or aa–ad.

    Examples:
        >>> name_to_index('a')
        0
        >>> name_to_index('Z')
        25
        >>> name_to_index('ab')
        27
    """
    lc = name.lower()
    if len(lc) == 1:
        code = ord(lc) - ord('a')
        if 0 <= code < _SINGLE_LETTERS:
            return code
    if len(lc) == 2 and lc[0] == 'a':
        code = ord(lc[1]) - ord('a')
        if 0 <= code < _DOUBLE_LETTERS:
            return _SINGLE_LETTERS + code
    raise ConditionSemanticError(f"invalid variable name: {name!r}")


def _check_index(index: int) -> None:
    if not 0 <= index < MAX_VARIABLES:
        raise ConditionSemanticError(f"index out of range: {index}")


def index_to_name(index: int) -> str:
    """Return the lowercase variable name for a slot index.

    Examples:
        >>> index_to_name(0)
        'a'
        >>> index_to_name(29)
        'ad'
    """
    _check_index(index)
    if index < _SINGLE_LETTERS:
        return chr(ord('a') + index)
    return 'a' + chr(ord('a') + index - _SINGLE_LETTERS)


def index_to_label(index: int) -> str:
    """Return the uppercase display label for a slot index.

    Examples:
        >>> index_to_label(25)
        'Z'
        >>> index_to_label(26)
        'AA'
    """
    return index_to_name(index).upper()
