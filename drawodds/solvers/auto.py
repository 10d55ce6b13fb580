"""
Strategy selection between exact enumeration and Monte Carlo sampling.

Exact enumeration visits every per-type draw composition, which grows quickly
with the number of distinct card types and with the draw count. Small
problems are solved exactly; everything else is sampled, with a larger trial
budget for larger decks.
"""

from __future__ import annotations

import logging
from typing import Sequence

from drawodds.engine.compiler import Predicate
from drawodds.solvers.exact import calculate_exact
from drawodds.solvers.results import CalculationResult, Method, ProgressCallback
from drawodds.solvers.sampling import calculate_monte_carlo

logger = logging.getLogger(__name__)

# ─── Thresholds ───────────────────────────────────────────────────────────────

EXACT_MAX_CARDS: int = 40
"""Largest deck solved exactly."""

EXACT_MAX_TYPES: int = 10
"""Most non-zero card types solved exactly."""

EXACT_MAX_DRAWS: int = 6
"""Largest draw count solved exactly."""

SMALL_DECK_CARDS: int = 60
"""Decks up to this size get the small sampling budget."""

SMALL_DECK_SIMULATIONS: int = 100_000
LARGE_DECK_SIMULATIONS: int = 500_000


def choose_method(counts: Sequence[int], draws: int) -> tuple[Method, int | None]:
    """Pick the engine (and trial budget, for sampling) for a problem size.

    Returns:
        (Method.EXACT, None) or (Method.MONTE_CARLO, simulations).

    Examples:
        >>> choose_method([3, 37], 5)
        (<Method.EXACT: 'exact'>, None)
        >>> choose_method([3, 58], 5)
        (<Method.MONTE_CARLO: 'monte_carlo'>, 500000)
    """
    total_cards = sum(int(c) for c in counts)
    non_zero_types = sum(1 for c in counts if c > 0)

    if (
        total_cards <= EXACT_MAX_CARDS
        and non_zero_types <= EXACT_MAX_TYPES
        and draws <= EXACT_MAX_DRAWS
    ):
        return Method.EXACT, None
    if total_cards <= SMALL_DECK_CARDS:
        return Method.MONTE_CARLO, SMALL_DECK_SIMULATIONS
    return Method.MONTE_CARLO, LARGE_DECK_SIMULATIONS


def calculate_auto(
    counts: Sequence[int],
    draws: int,
    condition: str | Predicate,
    on_progress: ProgressCallback | None = None,
    seed: int | None = None,
) -> CalculationResult:
    """Compute the probability with whichever engine suits the problem size.

    Args:
        counts:      Copies of each card type; index i is variable slot i.
        draws:       Number of cards drawn without replacement.
        condition:   Condition text or an already compiled predicate.
        on_progress: Optional callback receiving (percent, message).
        seed:        Seed for the sampling engine (ignored by exact enumeration).

    Returns:
        CalculationResult from the selected engine.
    """
    method, simulations = choose_method(counts, draws)
    logger.debug("selected %s for %d cards, %d draws", method.value, sum(counts), draws)

    if method is Method.EXACT:
        return calculate_exact(counts, draws, condition, on_progress)
    return calculate_monte_carlo(
        counts, draws, condition, simulations, on_progress=on_progress, seed=seed
    )


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    examples = [
        ("At least one A in 5 from 3/40", [3, 37], 5, "a > 0"),
        ("A and B in 5 from 3+3/40", [3, 3, 34], 5, "a > 0 && b > 0"),
        ("Two starters (A+B) in 5", [3, 3, 34], 5, "a + b >= 2"),
        ("A, or both B and C, 60-card deck", [3, 3, 3, 51], 5, "a > 0 || (b > 0 && c > 0)"),
    ]
    for label, counts, draws, condition in examples:
        result = calculate_auto(counts, draws, condition, seed=42)
        print(f"{label:<36} {condition:<28} {result}")
