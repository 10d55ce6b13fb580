"""
Binomial coefficients with a process-wide memo.

C(n, k) is computed with the multiplicative formula entirely in Python ints,
so results are exact at any size. The memo is shared by every exact
enumeration in the process, grows without eviction (keys are small in
practice) and can be emptied with clear_combination_cache().
"""

from __future__ import annotations

import functools


@functools.cache
def _binomial(n: int, k: int) -> int:
    if k < 0 or k > n:
        return 0
    if k == 0 or k == n:
        return 1
    result = 1
    for i in range(1, k + 1):
        # Exact at every step: result is C(n-k+i, i) after iteration i.
        result = result * (n - k + i) // i
    return result


def combination(n: int, k: int) -> int:
    """Return C(n, k) as an exact integer (0 when k < 0 or k > n).

    Examples:
        >>> combination(40, 5)
        658008
        >>> combination(5, 7)
        0
        >>> combination(52, 0)
        1
    """
    return _binomial(int(n), int(k))


def clear_combination_cache() -> None:
    """Drop every memoised C(n, k)."""
    _binomial.cache_clear()


def combination_cache_size() -> int:
    """Return the number of memoised (n, k) pairs."""
    return _binomial.cache_info().currsize
