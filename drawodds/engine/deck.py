"""
Virtual deck construction and dealing for the sampling engine.

A deck is a numpy int32 array holding one entry per physical card; the entry
is the card's type index (its variable slot). For counts [2, 0, 3]:

    deck = [0, 0, 2, 2, 2]

A hand is summarised as a per-type count vector of length n_types.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .errors import DeckError


def validate_counts(counts: Sequence[int]) -> list[int]:
    """Return counts as plain ints, rejecting negative entries.

    Raises:
        DeckError: If any count is negative.
    """
    values = [int(c) for c in counts]
    for index, value in enumerate(values):
        if value < 0:
            raise DeckError(f"card count at index {index} is negative: {value}")
    return values


def create_deck(counts: Sequence[int]) -> np.ndarray:
    """Expand per-type counts into a flat deck of type indices.

    Examples:
        >>> create_deck([2, 0, 3]).tolist()
        [0, 0, 2, 2, 2]
        >>> create_deck([]).size
        0
    """
    values = validate_counts(counts)
    return np.repeat(np.arange(len(values), dtype=np.int32), values)


def check_draws(deck_size: int, draws: int) -> None:
    """Validate a draw count against a deck size.

    Raises:
        DeckError: Empty deck, negative draws, or draws exceeding the deck.
    """
    if deck_size == 0:
        raise DeckError("empty deck")
    if draws < 0:
        raise DeckError(f"draw count must be non-negative, got {draws}")
    if draws > deck_size:
        raise DeckError(f"draw count ({draws}) exceeds deck size ({deck_size})")


def shuffle_deck(deck: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """Return a uniformly shuffled copy of the deck (Fisher–Yates).

    For i from the last index down to 1, swap position i with a uniformly
    chosen position in [0, i].
    """
    result = deck.copy()
    for i in range(len(result) - 1, 0, -1):
        j = int(rng.integers(0, i + 1))
        result[i], result[j] = result[j], result[i]
    return result


def draw_counts(deck: np.ndarray, draws: int, n_types: int) -> list[int]:
    """Tally the first ``draws`` cards of a (shuffled) deck per type.

    Examples:
        >>> draw_counts(np.array([2, 0, 2, 1]), 3, 3)
        [1, 0, 2]
    """
    return np.bincount(deck[:draws], minlength=n_types).tolist()


def deal_hands(
    deck: np.ndarray,
    draws: int,
    n_types: int,
    n_hands: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """Deal ``n_hands`` independent hands and return their count vectors.

    Each row is shuffled independently (numpy's in-row Fisher–Yates via
    Generator.permuted) and its first ``draws`` cards are tallied.

    Returns:
        np.ndarray: int64 array of shape (n_hands, n_types).
    """
    shuffled = rng.permuted(np.tile(deck, (n_hands, 1)), axis=1)
    hands = shuffled[:, :draws].astype(np.int64)
    # Offset each row into its own block so one bincount tallies every hand.
    offsets = hands + (np.arange(n_hands, dtype=np.int64) * n_types)[:, None]
    tallies = np.bincount(offsets.ravel(), minlength=n_hands * n_types)
    return tallies.reshape(n_hands, n_types)
