"""Tests for drawodds/analysis/optimizer.py — heuristic deck optimizer.

Small simulation budgets keep the suite fast; assertions check plan structure
and directions rather than precise rates.
"""

from __future__ import annotations

import pytest

from drawodds.analysis.optimizer import (
    MAX_PLANS_PER_GROUP,
    MIN_IMPROVEMENT,
    Card,
    OptimizationPlan,
    PlanChange,
    PlanType,
    _decrease_plans,
    _increase_plans,
    apply_plan,
    optimize,
)
from drawodds.engine.errors import ConditionSyntaxError, DeckError


def deck(*counts: int) -> list[Card]:
    labels = "ABCDEFGHIJ"
    return [Card(count=c, label=labels[i]) for i, c in enumerate(counts)]


# ─── Plan generation ──────────────────────────────────────────────────────────


class TestIncreasePlans:
    @pytest.fixture
    def plans(self):
        cards = deck(1, 1, 3, 35)
        key = [(0, cards[0]), (1, cards[1])]
        non_key = [(2, cards[2]), (3, cards[3])]
        return _increase_plans(key, non_key, [1, 1, 3, 35], 40)

    def test_swaps_preserve_size(self, plans):
        for plan in plans:
            if plan.type in (PlanType.INCREASE_KEY, PlanType.INCREASE_MULTI_KEY):
                assert sum(plan.new_counts) == 40

    def test_single_key_swaps(self, plans):
        swaps = [p for p in plans if p.type is PlanType.INCREASE_KEY]
        # Each key card can gain 1 or 2 copies from either non-key card.
        assert len(swaps) == 2 * 2 * 2

    def test_multi_key_swap(self, plans):
        multi = [p for p in plans if p.type is PlanType.INCREASE_MULTI_KEY]
        assert len(multi) == 2
        assert all(p.new_counts[0] == 2 and p.new_counts[1] == 2 for p in multi)

    def test_expand_limited_to_two(self, plans):
        expand = [p for p in plans if p.type is PlanType.EXPAND_DECK]
        assert {p.new_deck_size for p in expand} == {41, 42}
        assert all(p.priority == 3 for p in expand)

    def test_no_reduce_at_minimum_size(self, plans):
        assert not [p for p in plans if p.type is PlanType.REDUCE_DECK]

    def test_respects_copy_limit(self, plans):
        for plan in plans:
            assert plan.new_counts[0] <= 3 and plan.new_counts[1] <= 3

    def test_never_negative(self, plans):
        for plan in plans:
            assert min(plan.new_counts) >= 0


class TestDecreasePlans:
    def test_reduce_deck_above_minimum(self):
        cards = deck(3, 42)
        plans = _decrease_plans([(0, cards[0])], [(1, cards[1])], [3, 42], 45)
        reduce = [p for p in plans if p.type is PlanType.REDUCE_DECK]
        assert [p.new_counts[0] for p in reduce] == [2, 1, 0]
        assert [p.new_deck_size for p in reduce] == [44, 43, 42]

    def test_swap_needs_room_on_non_key(self):
        cards = [Card(3, label="A"), Card(3, label="B", max_count=3)]
        plans = _decrease_plans([(0, cards[0])], [(1, cards[1])], [3, 3], 6)
        assert not [p for p in plans if p.type is PlanType.DECREASE_KEY]

    def test_swap_with_unlimited_non_key(self):
        cards = [Card(2, label="A"), Card(30, label="B", max_count=60)]
        plans = _decrease_plans([(0, cards[0])], [(1, cards[1])], [2, 30], 32)
        swaps = [p for p in plans if p.type is PlanType.DECREASE_KEY]
        assert [p.new_counts for p in swaps] == [[1, 31], [0, 32]]


# ─── optimize ─────────────────────────────────────────────────────────────────


class TestOptimize:
    @pytest.fixture(scope="class")
    def increase_result(self):
        cards = [Card(1, name="Starter", label="A"), Card(39, name="Filler", label="B", max_count=40)]
        return optimize(cards, "a > 0", 5, 40.0, simulations=4_000, seed=0)

    def test_direction_increase(self, increase_result):
        assert increase_result.direction == "increase"
        assert increase_result.current_rate < 40.0

    def test_plans_improve(self, increase_result):
        for group in (
            increase_result.keep_deck_plans,
            increase_result.expand_deck_plans,
            increase_result.reduce_deck_plans,
        ):
            assert len(group) <= MAX_PLANS_PER_GROUP
            for plan in group:
                assert plan.improvement > MIN_IMPROVEMENT

    def test_keep_deck_plans_found(self, increase_result):
        assert increase_result.keep_deck_plans
        assert increase_result.keep_deck_plans[0].is_best
        assert all(not p.is_best for p in increase_result.keep_deck_plans[1:])

    def test_ranked_reach_target_first(self, increase_result):
        flags = [p.reach_target for p in increase_result.keep_deck_plans]
        assert flags == sorted(flags, reverse=True)

    def test_total_count(self, increase_result):
        shown = (
            len(increase_result.keep_deck_plans)
            + len(increase_result.expand_deck_plans)
            + len(increase_result.reduce_deck_plans)
        )
        assert increase_result.total_plans_count >= shown

    def test_direction_decrease(self):
        cards = [Card(3, label="A"), Card(37, label="B", max_count=40)]
        result = optimize(cards, "a > 0", 5, 10.0, simulations=4_000, seed=1)
        assert result.direction == "decrease"
        for plan in result.keep_deck_plans:
            assert plan.type in (PlanType.DECREASE_KEY, PlanType.DECREASE_MULTI_KEY)
            assert plan.improvement < -MIN_IMPROVEMENT

    def test_progress(self, progress):
        cards = [Card(2, label="A"), Card(38, label="B", max_count=40)]
        optimize(cards, "a > 0", 5, 50.0, simulations=1_000, on_progress=progress, seed=2)
        assert progress.percents[0] == 5
        assert progress.percents[-1] == 100
        assert progress.percents == sorted(progress.percents)

    def test_empty_deck(self):
        with pytest.raises(DeckError, match="empty deck"):
            optimize([Card(0, label="A")], "a > 0", 5, 50.0)

    def test_blank_condition(self):
        with pytest.raises(ConditionSyntaxError, match="empty condition expression"):
            optimize(deck(3, 37), "  ", 5, 50.0)


# ─── apply_plan ───────────────────────────────────────────────────────────────


class TestApplyPlan:
    def test_matches_by_label(self):
        cards = deck(1, 39)
        plan = OptimizationPlan(
            type=PlanType.INCREASE_KEY,
            description="",
            changes=[PlanChange(Card(1, label="A"), 2), PlanChange(Card(39, label="B"), -2)],
            new_counts=[3, 37],
            priority=1,
        )
        apply_plan(plan, cards)
        assert [c.count for c in cards] == [3, 37]

    def test_matches_by_name(self):
        cards = [Card(2, name="Pot"), Card(10, name="Filler")]
        plan = OptimizationPlan(
            type=PlanType.REDUCE_DECK,
            description="",
            changes=[PlanChange(Card(10, name="Filler"), -3)],
            new_counts=[2, 7],
            priority=4,
        )
        apply_plan(plan, cards)
        assert cards[1].count == 7

    def test_clamps_at_zero(self):
        cards = deck(1)
        plan = OptimizationPlan(
            type=PlanType.REDUCE_DECK,
            description="",
            changes=[PlanChange(Card(1, label="A"), -5)],
            new_counts=[0],
            priority=4,
        )
        apply_plan(plan, cards)
        assert cards[0].count == 0

    def test_unknown_card_ignored(self):
        cards = deck(1, 2)
        plan = OptimizationPlan(
            type=PlanType.EXPAND_DECK,
            description="",
            changes=[PlanChange(Card(1, label="Z"), 1)],
            new_counts=[1, 2],
            priority=3,
        )
        apply_plan(plan, cards)
        assert [c.count for c in cards] == [1, 2]

    def test_round_trip_with_optimize(self):
        cards = [Card(1, label="A"), Card(39, label="B", max_count=40)]
        result = optimize(cards, "a > 0", 5, 40.0, simulations=2_000, seed=3)
        best = result.keep_deck_plans[0]
        apply_plan(best, cards)
        assert [c.count for c in cards] == best.new_counts
