"""
Shared pytest fixtures for the drawodds test suite.

Provides small canonical decks and a recorder for progress callbacks.
"""

from __future__ import annotations

import pytest

from drawodds.solvers.combinatorics import clear_combination_cache


class ProgressRecorder:
    """Callable that records every (percent, message) progress call."""

    def __init__(self) -> None:
        self.calls: list[tuple[int, str | None]] = []

    def __call__(self, percent: int, message: str | None = None) -> None:
        self.calls.append((percent, message))

    @property
    def percents(self) -> list[int]:
        return [p for p, _ in self.calls]


@pytest.fixture
def progress() -> ProgressRecorder:
    return ProgressRecorder()


@pytest.fixture
def forty_card_deck() -> list[int]:
    """3 copies of A, 37 other cards."""
    return [3, 37]


@pytest.fixture
def two_starter_deck() -> list[int]:
    """3 copies each of A and B, 34 other cards."""
    return [3, 3, 34]


@pytest.fixture
def fresh_cache():
    """Start and end the test with an empty combination cache."""
    clear_combination_cache()
    yield
    clear_combination_cache()
