"""
Exact probability by enumerating every draw composition.

A draw of ``draws`` cards from a deck with per-type counts n_0 … n_{T-1} is
summarised by how many of each type it contains, k_0 … k_{T-1} with
Σk = draws. Each composition occurs

    Π C(n_i, k_i)

times among the C(Σn, draws) equally likely hands. The engine walks every
composition depth-first (type by type, pruning once the draw budget is spent),
weights it by that product, and sums the weights into ``total`` and, when the
condition holds, into ``valid``. All arithmetic stays in Python ints.

Progress is coarse: floor(100 * type_index / T) whenever that value rises,
then exactly one final 100.
"""

from __future__ import annotations

import logging
from typing import Sequence

from drawodds.engine.compiler import Predicate, compile_condition_string
from drawodds.engine.deck import check_draws, validate_counts
from drawodds.solvers.combinatorics import combination
from drawodds.solvers.results import CalculationResult, Method, ProgressCallback

logger = logging.getLogger(__name__)


def exact_probability(valid: int, total: int) -> float:
    """Return valid/total as a percentage truncated to two decimals.

    The ratio is scaled in integer arithmetic before the single conversion
    to float.

    Examples:
        >>> exact_probability(222_111, 658_008)
        33.75
        >>> exact_probability(1, 3)
        33.33
    """
    return (valid * 10_000 // total) / 100


def calculate_exact(
    counts: Sequence[int],
    draws: int,
    condition: str | Predicate,
    on_progress: ProgressCallback | None = None,
) -> CalculationResult:
    """Compute the exact probability that a random draw satisfies a condition.

    Args:
        counts:      Copies of each card type; index i is variable slot i.
        draws:       Number of cards drawn without replacement.
        condition:   Condition text or an already compiled predicate.
        on_progress: Optional callback receiving (percent, message).

    Returns:
        CalculationResult with integer valid/total weights, total equal to
        C(Σcounts, draws).

    Raises:
        DeckError:      Empty deck, negative input or draws > deck size.
        ConditionError: Condition text that fails to parse or compile, or a
                        condition referencing a slot beyond len(counts).

    Examples:
        >>> calculate_exact([3, 37], 5, 'a > 0').probability
        33.75
    """
    capacities = validate_counts(counts)
    check_draws(sum(capacities), draws)
    predicate = (
        compile_condition_string(condition) if isinstance(condition, str) else condition
    )

    n_types = len(capacities)
    chosen = [0] * n_types
    valid = 0
    total = 0
    last_reported = 0

    logger.debug(
        "exact enumeration: %d types, %d cards, %d draws",
        n_types, sum(capacities), draws,
    )

    def _recurse(index: int, remaining: int, weight: int) -> None:
        nonlocal valid, total, last_reported
        if index == n_types:
            if remaining != 0:
                return
            total += weight
            if predicate(chosen):
                valid += weight
            return

        progress = min(100, index * 100 // n_types)
        if on_progress is not None and progress > last_reported:
            last_reported = progress
            on_progress(progress, f"Exact enumeration: {progress}%")

        capacity = capacities[index]
        for k in range(min(capacity, remaining) + 1):
            chosen[index] = k
            _recurse(index + 1, remaining - k, weight * combination(capacity, k))
        chosen[index] = 0

    _recurse(0, draws, 1)

    if on_progress is not None:
        on_progress(100, "Exact enumeration complete")

    return CalculationResult(
        valid=valid,
        total=total,
        probability=exact_probability(valid, total),
        method=Method.EXACT,
    )
