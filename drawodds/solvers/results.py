"""
Result and callback types shared by the probability engines.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from scipy import stats

ProgressCallback = Callable[[int, Optional[str]], None]
"""(percent 0–100, optional message) -> None. Called synchronously."""


class Method(Enum):
    """Which engine produced a CalculationResult."""

    EXACT = "exact"
    MONTE_CARLO = "monte_carlo"


@dataclass
class CalculationResult:
    """Outcome of one probability calculation.

    Attributes:
        valid:       Weight (exact) or trial count (sampling) satisfying the condition.
        total:       Total weight C(deck, draws) (exact) or number of trials (sampling).
        probability: Percentage in [0, 100].
        method:      Engine that produced the result.
    """

    valid: int
    total: int
    probability: float
    method: Method

    def __str__(self) -> str:
        return (
            f"Method: {self.method.value} | "
            f"Valid: {self.valid:,} / {self.total:,} | "
            f"Probability: {self.probability:.2f}%"
        )


def confidence_interval(
    result: CalculationResult, confidence: float = 0.95
) -> tuple[float, float]:
    """Return a (low, high) percentage interval for the result's probability.

    Sampling results use the Wilson score interval of the binomial
    proportion valid/total. Exact results are not estimates, so the interval
    collapses to the point value.

    Examples:
        >>> r = CalculationResult(500, 1000, 50.0, Method.MONTE_CARLO)
        >>> low, high = confidence_interval(r)
        >>> 46.0 < low < 50.0 < high < 54.0
        True
    """
    if result.method is Method.EXACT:
        return result.probability, result.probability
    ci = stats.binomtest(int(result.valid), int(result.total)).proportion_ci(
        confidence_level=confidence, method="wilson"
    )
    return float(ci.low) * 100.0, float(ci.high) * 100.0
