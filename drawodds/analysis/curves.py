"""Hit-rate curves: probability of a condition as a function of draw count.

Four public functions:

    probability_curve(counts, condition, draw_range, seed)
        — one CalculationResult per draw count (engine chosen per point).
    build_curve_figure(curve, title)
        — interactive Plotly line chart; hover shows method and valid/total.
    plot_probability_curve(curve, title, show, save_path)
        — static matplotlib rendering of the same curve.
    print_curve_report(curve)
        — plain-text table on stdout.

save_curve_html(fig, path) exports a Plotly figure to a standalone HTML file.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import matplotlib.figure
import matplotlib.pyplot as plt
import plotly.graph_objects as go

from drawodds.engine.compiler import Predicate, compile_condition_string
from drawodds.engine.deck import validate_counts
from drawodds.engine.errors import DeckError
from drawodds.solvers.auto import calculate_auto
from drawodds.solvers.results import CalculationResult, Method

Curve = list[tuple[int, CalculationResult]]

DEFAULT_MAX_DRAWS: int = 10
"""Upper end of the default draw range (clamped to the deck size)."""

_METHOD_COLORS: dict[Method, str] = {
    Method.EXACT: "#1f77b4",
    Method.MONTE_CARLO: "#ff7f0e",
}


def probability_curve(
    counts: Sequence[int],
    condition: str | Predicate,
    draw_range: Iterable[int] | None = None,
    seed: int | None = None,
) -> Curve:
    """Compute the hit rate of ``condition`` for each draw count in draw_range.

    The condition is compiled once. Each point goes through calculate_auto(),
    so small draws are typically exact and larger ones sampled.

    Args:
        counts:     Copies of each card type.
        condition:  Condition text or an already compiled predicate.
        draw_range: Draw counts to evaluate. Defaults to 1 … min(deck, 10).
        seed:       Seed for sampled points. None for non-deterministic runs.

    Returns:
        List of (draws, CalculationResult) in draw_range order.

    Raises:
        DeckError: Empty deck or a draw count outside [0, deck size].
    """
    deck_size = sum(validate_counts(counts))
    if deck_size == 0:
        raise DeckError("empty deck")
    if draw_range is None:
        draw_range = range(1, min(deck_size, DEFAULT_MAX_DRAWS) + 1)
    predicate = (
        compile_condition_string(condition) if isinstance(condition, str) else condition
    )
    return [
        (draws, calculate_auto(counts, draws, predicate, seed=seed))
        for draws in draw_range
    ]


def build_curve_figure(curve: Curve, title: str = "Hit rate by cards drawn") -> go.Figure:
    """Return a Plotly figure of probability (%) against draw count.

    Marker colour distinguishes exact points from sampled ones.
    """
    draws = [d for d, _ in curve]
    probabilities = [r.probability for _, r in curve]
    hover = [
        f"Draws: {d}<br>Probability: {r.probability:.2f}%<br>"
        f"Method: {r.method.value}<br>Valid / total: {r.valid:,} / {r.total:,}"
        for d, r in curve
    ]

    fig = go.Figure(
        go.Scatter(
            x=draws,
            y=probabilities,
            mode="lines+markers",
            marker=dict(color=[_METHOD_COLORS[r.method] for _, r in curve], size=9),
            line=dict(color="#7f7f7f"),
            hovertext=hover,
            hoverinfo="text",
            name="P(condition)",
        )
    )
    fig.update_layout(
        title=title,
        xaxis_title="Cards drawn",
        yaxis_title="Probability (%)",
        yaxis=dict(range=[0, 100]),
        template="plotly_white",
    )
    return fig


def save_curve_html(fig: go.Figure, path: str) -> None:
    """Save a Plotly figure to a self-contained HTML file (Plotly JS from CDN)."""
    fig.write_html(path, include_plotlyjs="cdn")


def plot_probability_curve(
    curve: Curve,
    title: str = "Hit rate by cards drawn",
    *,
    show: bool = False,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot the curve with matplotlib.

    Args:
        curve:     Output of probability_curve().
        title:     Axes title.
        show:      If True, call plt.show() after rendering.
        save_path: If not None, save the figure to this path.

    Returns:
        matplotlib.figure.Figure.
    """
    fig, ax = plt.subplots(figsize=(7, 4))
    draws = [d for d, _ in curve]
    probabilities = [r.probability for _, r in curve]

    ax.plot(draws, probabilities, color="#7f7f7f", linewidth=1.5)
    ax.scatter(
        draws,
        probabilities,
        c=[_METHOD_COLORS[r.method] for _, r in curve],
        zorder=3,
    )
    ax.set_title(title, fontsize=11)
    ax.set_xlabel("Cards drawn", fontsize=9)
    ax.set_ylabel("Probability (%)", fontsize=9)
    ax.set_ylim(0, 100)
    ax.grid(alpha=0.3)
    fig.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()

    return fig


def print_curve_report(curve: Curve) -> None:
    """Print one row per draw count: probability, method and raw counts."""
    print("=" * 56)
    print("Hit rate by cards drawn")
    print("=" * 56)
    print(f"  {'Draws':>5}  {'P(%)':>7}  {'Method':<12}  {'Valid / total'}")
    for draws, result in curve:
        print(
            f"  {draws:>5}  {result.probability:>7.2f}  {result.method.value:<12}  "
            f"{result.valid:,} / {result.total:,}"
        )
    print()


# ─── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    condition = sys.argv[1] if len(sys.argv) > 1 else "a > 0 || b + c >= 2"
    curve = probability_curve([3, 3, 3, 31], condition, seed=42)
    print_curve_report(curve)
    save_curve_html(build_curve_figure(curve, title=condition), "hit_rate_curve.html")
    print("Wrote hit_rate_curve.html")
