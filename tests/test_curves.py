"""Tests for drawodds/analysis/curves.py — hit-rate curves and their renderings.

The Agg backend is activated before any pyplot import so the suite runs
without a display server.
"""

from __future__ import annotations

import os

import matplotlib

matplotlib.use("Agg")  # must precede any pyplot import

import matplotlib.figure
import plotly.graph_objects as go
import pytest

from drawodds.analysis.curves import (
    build_curve_figure,
    plot_probability_curve,
    print_curve_report,
    probability_curve,
    save_curve_html,
)
from drawodds.engine.errors import DeckError
from drawodds.solvers.results import Method


@pytest.fixture(scope="module")
def curve():
    return probability_curve([3, 3, 34], "a > 0 || b > 0", range(1, 9), seed=0)


class TestProbabilityCurve:
    def test_one_point_per_draw(self, curve):
        assert [d for d, _ in curve] == list(range(1, 9))

    def test_exact_then_sampled(self, curve):
        methods = [r.method for _, r in curve]
        assert methods[:6] == [Method.EXACT] * 6
        assert methods[6:] == [Method.MONTE_CARLO] * 2

    def test_monotone_in_exact_region(self, curve):
        exact = [r.probability for _, r in curve if r.method is Method.EXACT]
        assert exact == sorted(exact)

    def test_default_range_clamped_to_deck(self):
        points = probability_curve([2, 3], "a > 0")
        assert [d for d, _ in points] == [1, 2, 3, 4, 5]

    def test_empty_deck(self):
        with pytest.raises(DeckError, match="empty deck"):
            probability_curve([0], "a > 0")

    def test_draw_beyond_deck(self):
        with pytest.raises(DeckError, match="exceeds deck size"):
            probability_curve([2, 3], "a > 0", [6])


class TestBuildCurveFigure:
    def test_returns_figure(self, curve):
        fig = build_curve_figure(curve)
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 1

    def test_data_matches_curve(self, curve):
        trace = build_curve_figure(curve).data[0]
        assert list(trace.x) == [d for d, _ in curve]
        assert list(trace.y) == pytest.approx([r.probability for _, r in curve])

    def test_hover_mentions_method(self, curve):
        trace = build_curve_figure(curve).data[0]
        assert "exact" in trace.hovertext[0]
        assert "monte_carlo" in trace.hovertext[-1]

    def test_save_html(self, curve, tmp_path):
        path = str(tmp_path / "curve.html")
        save_curve_html(build_curve_figure(curve), path)
        assert os.path.getsize(path) > 0


class TestPlotProbabilityCurve:
    def test_returns_matplotlib_figure(self, curve):
        fig = plot_probability_curve(curve)
        assert isinstance(fig, matplotlib.figure.Figure)

    def test_save_path(self, curve, tmp_path):
        path = str(tmp_path / "curve.png")
        plot_probability_curve(curve, save_path=path)
        assert os.path.getsize(path) > 0


class TestPrintCurveReport:
    def test_prints_each_row(self, curve, capsys):
        print_curve_report(curve)
        out = capsys.readouterr().out
        assert "Hit rate by cards drawn" in out
        assert out.count("exact") == 6
        assert out.count("monte_carlo") == 2
