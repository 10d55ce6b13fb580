"""
Monte Carlo probability estimate by repeated shuffle-and-draw trials.

Each trial shuffles the virtual deck, takes the top ``draws`` cards, tallies
them per type and asks the predicate. Hands are dealt in numpy batches of
BATCH_SIZE; the predicate is then called once per hand.

A predicate that raises during a trial counts that trial as "not satisfied";
the run always completes. Errors in the deck/draw preconditions or in
compiling condition text are raised before any trial runs.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from drawodds.engine.compiler import Predicate, compile_condition_string
from drawodds.engine.deck import check_draws, create_deck, deal_hands
from drawodds.solvers.results import CalculationResult, Method, ProgressCallback

logger = logging.getLogger(__name__)

DEFAULT_SIMULATIONS: int = 100_000
"""Trial count used when the caller does not specify one."""

BATCH_SIZE: int = 4_096
"""Hands dealt per vectorised shuffle."""


def _run_trials(
    deck: np.ndarray,
    draws: int,
    n_types: int,
    predicate: Predicate,
    simulations: int,
    rng: np.random.Generator,
    on_progress: ProgressCallback | None = None,
) -> int:
    """Run ``simulations`` trials and return how many satisfied the predicate."""
    valid = 0
    failures = 0
    last_reported = 0

    for start in range(0, simulations, BATCH_SIZE):
        n_hands = min(BATCH_SIZE, simulations - start)
        hands = deal_hands(deck, draws, n_types, n_hands, rng)
        for offset, hand in enumerate(hands.tolist()):
            try:
                if predicate(hand):
                    valid += 1
            except Exception:
                failures += 1

            if on_progress is not None:
                progress = (start + offset + 1) * 100 // simulations
                if progress > last_reported:
                    last_reported = progress
                    if progress < 100:
                        on_progress(progress, f"Monte Carlo simulation: {progress}%")

    if failures:
        logger.debug("%d of %d trials raised in the predicate", failures, simulations)
    return valid


def calculate_monte_carlo(
    counts: Sequence[int],
    draws: int,
    condition: str | Predicate,
    simulations: int = DEFAULT_SIMULATIONS,
    on_progress: ProgressCallback | None = None,
    seed: int | None = None,
) -> CalculationResult:
    """Estimate the probability that a random draw satisfies a condition.

    Args:
        counts:      Copies of each card type; index i is variable slot i.
        draws:       Number of cards drawn without replacement.
        condition:   Condition text or an already compiled predicate.
        simulations: Number of trials.
        on_progress: Optional callback receiving (percent, message).
        seed:        Seed for numpy's default_rng. None for a non-deterministic run.

    Returns:
        CalculationResult with valid = satisfied trials, total = simulations.

    Raises:
        DeckError:      Empty deck, negative input or draws > deck size.
        ValueError:     simulations < 1.
        ConditionError: Condition text that fails to parse or compile.
    """
    deck = create_deck(counts)
    check_draws(deck.size, draws)
    if simulations < 1:
        raise ValueError(f"simulations must be positive, got {simulations}")
    predicate = (
        compile_condition_string(condition) if isinstance(condition, str) else condition
    )

    logger.debug(
        "monte carlo: %d types, %d cards, %d draws, %d trials",
        len(counts), deck.size, draws, simulations,
    )
    rng = np.random.default_rng(seed)
    valid = _run_trials(deck, draws, len(counts), predicate, simulations, rng, on_progress)

    if on_progress is not None:
        on_progress(100, "Monte Carlo simulation complete")

    return CalculationResult(
        valid=valid,
        total=simulations,
        probability=valid / simulations * 100,
        method=Method.MONTE_CARLO,
    )


def quick_monte_carlo(
    counts: Sequence[int],
    draws: int,
    predicate: Predicate,
    simulations: int,
    seed: int | None = None,
) -> float:
    """Return a sampled probability percentage without progress reporting.

    Intended for callers that evaluate many perturbed decks in a row. An
    empty deck, or one smaller than ``draws``, returns 0.0 instead of raising.

    Examples:
        >>> quick_monte_carlo([0, 0], 1, lambda counts: True, 100)
        0.0
    """
    deck = create_deck(counts)
    if deck.size == 0 or not 0 <= draws <= deck.size or simulations < 1:
        return 0.0
    rng = np.random.default_rng(seed)
    valid = _run_trials(deck, draws, len(counts), predicate, simulations, rng)
    return valid / simulations * 100
