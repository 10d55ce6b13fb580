"""
Heuristic deck optimizer.

Given a deck, a condition and a target hit rate, proposes small deck edits
that move the sampled hit rate toward the target:

    keep deck size   swap copies between key and non-key cards
    expand deck      add copies (up to MAX_DECK_SIZE cards)
    reduce deck      remove copies (down to MIN_DECK_SIZE cards)

"Key" cards are the ones the condition references; every other card with a
positive count is "non-key". Each candidate is scored with the quick Monte
Carlo engine, filtered by MIN_IMPROVEMENT, grouped, ranked (reaching the
target first, then by distance to it) and capped at MAX_PLANS_PER_GROUP.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from drawodds.engine.compiler import compile_condition_string
from drawodds.engine.conditions import condition_variables
from drawodds.engine.errors import ConditionSyntaxError, DeckError
from drawodds.solvers.results import ProgressCallback
from drawodds.solvers.sampling import quick_monte_carlo

logger = logging.getLogger(__name__)

# ─── Constants ────────────────────────────────────────────────────────────────

DEFAULT_SIMULATIONS: int = 30_000
"""Trials for the current-rate estimate; candidate plans use half of this."""

DEFAULT_MAX_COPIES: int = 3
MAX_DECK_SIZE: int = 60
MIN_DECK_SIZE: int = 40

MIN_IMPROVEMENT: float = 0.1
"""Smallest rate change (percentage points) for a plan to be reported."""

MAX_PLANS_PER_GROUP: int = 10


# ─── Types ────────────────────────────────────────────────────────────────────


@dataclass
class Card:
    """One card type in a deck list.

    Attributes:
        count:     Copies in the deck.
        name:      Display name, optional.
        label:     Unique label such as 'A', optional.
        max_count: Copy limit for this card.
    """

    count: int
    name: str | None = None
    label: str | None = None
    max_count: int = DEFAULT_MAX_COPIES

    @property
    def display_name(self) -> str:
        return self.name or self.label or "?"


@dataclass
class PlanChange:
    card: Card
    change: int


class PlanType(Enum):
    INCREASE_KEY = "increase_key"
    INCREASE_MULTI_KEY = "increase_multi_key"
    DECREASE_KEY = "decrease_key"
    DECREASE_MULTI_KEY = "decrease_multi_key"
    EXPAND_DECK = "expand_deck"
    REDUCE_DECK = "reduce_deck"


_KEEP_DECK_TYPES: dict[str, frozenset[PlanType]] = {
    "increase": frozenset({PlanType.INCREASE_KEY, PlanType.INCREASE_MULTI_KEY}),
    "decrease": frozenset({PlanType.DECREASE_KEY, PlanType.DECREASE_MULTI_KEY}),
}


@dataclass
class OptimizationPlan:
    """One candidate deck edit and its evaluated effect.

    Attributes:
        type:          Which heuristic produced the plan.
        description:   Human-readable summary of the edit.
        changes:       Per-card count deltas.
        new_counts:    Count vector after the edit.
        new_deck_size: Deck size after the edit, for size-changing plans.
        new_rate:      Sampled hit rate (percent) after the edit.
        improvement:   new_rate minus the current rate.
        reach_target:  Whether new_rate is on the target side.
        priority:      Heuristic ordinal (1 = swap … 4 = reduce).
        is_best:       True for the top-ranked plan in its group.
    """

    type: PlanType
    description: str
    changes: list[PlanChange]
    new_counts: list[int]
    priority: int
    new_deck_size: int | None = None
    new_rate: float = 0.0
    improvement: float = 0.0
    reach_target: bool = False
    is_best: bool = False


@dataclass
class OptimizationResult:
    current_rate: float
    target_rate: float
    direction: str
    keep_deck_plans: list[OptimizationPlan] = field(default_factory=list)
    expand_deck_plans: list[OptimizationPlan] = field(default_factory=list)
    reduce_deck_plans: list[OptimizationPlan] = field(default_factory=list)
    total_plans_count: int = 0


# ─── Plan generation ──────────────────────────────────────────────────────────


def _shifted(counts: list[int], deltas: dict[int, int]) -> list[int]:
    new_counts = list(counts)
    for index, delta in deltas.items():
        new_counts[index] += delta
    return new_counts


def _swap_plan(
    plan_type: PlanType,
    counts: list[int],
    edits: list[tuple[int, Card, int]],
    priority: int,
) -> OptimizationPlan:
    """Build a deck-size-preserving plan from (index, card, delta) edits."""
    gains = [f"「{card.display_name}」{delta}" for _, card, delta in edits if delta > 0]
    losses = [f"「{card.display_name}」{-delta}" for _, card, delta in edits if delta < 0]
    if plan_type in (PlanType.INCREASE_KEY, PlanType.INCREASE_MULTI_KEY):
        description = f"Add {' + '.join(gains)}, remove {' + '.join(losses)}"
    else:
        description = f"Remove {' + '.join(losses)}, add {' + '.join(gains)}"
    return OptimizationPlan(
        type=plan_type,
        description=description,
        changes=[PlanChange(card, delta) for _, card, delta in edits],
        new_counts=_shifted(counts, {index: delta for index, _, delta in edits}),
        priority=priority,
    )


def _resize_plan(
    plan_type: PlanType,
    counts: list[int],
    index: int,
    card: Card,
    delta: int,
    total_cards: int,
    priority: int,
) -> OptimizationPlan:
    verb = "Add" if delta > 0 else "Remove"
    new_size = total_cards + delta
    return OptimizationPlan(
        type=plan_type,
        description=(
            f"{verb} 「{card.display_name}」{abs(delta)} "
            f"(deck {total_cards} -> {new_size} cards)"
        ),
        changes=[PlanChange(card, delta)],
        new_counts=_shifted(counts, {index: delta}),
        new_deck_size=new_size,
        priority=priority,
    )


def _increase_plans(
    key_cards: list[tuple[int, Card]],
    non_key_cards: list[tuple[int, Card]],
    counts: list[int],
    total_cards: int,
) -> list[OptimizationPlan]:
    plans: list[OptimizationPlan] = []

    # 1. More copies of one key card, fewer of one non-key card.
    for key_index, key in key_cards:
        for add in range(1, key.max_count - key.count + 1):
            for other_index, other in non_key_cards:
                if other.count >= add:
                    plans.append(_swap_plan(
                        PlanType.INCREASE_KEY, counts,
                        [(key_index, key, add), (other_index, other, -add)], 1,
                    ))

    # 2. One more copy each of two key cards, two fewer of one non-key card.
    for i, (index1, card1) in enumerate(key_cards):
        for index2, card2 in key_cards[i + 1:]:
            if card1.count >= card1.max_count or card2.count >= card2.max_count:
                continue
            for other_index, other in non_key_cards:
                if other.count >= 2:
                    plans.append(_swap_plan(
                        PlanType.INCREASE_MULTI_KEY, counts,
                        [(index1, card1, 1), (index2, card2, 1), (other_index, other, -2)], 2,
                    ))

    # 3. Grow the deck with key cards.
    if total_cards < MAX_DECK_SIZE:
        for key_index, key in key_cards:
            max_add = min(key.max_count - key.count, MAX_DECK_SIZE - total_cards, 2)
            for add in range(1, max_add + 1):
                plans.append(_resize_plan(
                    PlanType.EXPAND_DECK, counts, key_index, key, add, total_cards, 3,
                ))

    # 4. Shrink the deck by cutting non-key cards.
    if total_cards > MIN_DECK_SIZE:
        for other_index, other in non_key_cards:
            max_reduce = min(other.count, total_cards - MIN_DECK_SIZE, 3)
            for reduce in range(1, max_reduce + 1):
                plans.append(_resize_plan(
                    PlanType.REDUCE_DECK, counts, other_index, other, -reduce, total_cards, 4,
                ))

    return plans


def _decrease_plans(
    key_cards: list[tuple[int, Card]],
    non_key_cards: list[tuple[int, Card]],
    counts: list[int],
    total_cards: int,
) -> list[OptimizationPlan]:
    plans: list[OptimizationPlan] = []

    # 1. Fewer copies of one key card, more of one non-key card.
    for key_index, key in key_cards:
        for reduce in range(1, min(key.count, 3) + 1):
            for other_index, other in non_key_cards:
                if other.count + reduce <= other.max_count:
                    plans.append(_swap_plan(
                        PlanType.DECREASE_KEY, counts,
                        [(key_index, key, -reduce), (other_index, other, reduce)], 1,
                    ))

    # 2. One fewer copy each of two key cards, two more of one non-key card.
    for i, (index1, card1) in enumerate(key_cards):
        for index2, card2 in key_cards[i + 1:]:
            if card1.count < 1 or card2.count < 1:
                continue
            for other_index, other in non_key_cards:
                if other.count + 2 <= other.max_count:
                    plans.append(_swap_plan(
                        PlanType.DECREASE_MULTI_KEY, counts,
                        [(index1, card1, -1), (index2, card2, -1), (other_index, other, 2)], 2,
                    ))

    # 3. Dilute with extra non-key cards.
    if total_cards < MAX_DECK_SIZE:
        for other_index, other in non_key_cards:
            max_add = min(other.max_count - other.count, MAX_DECK_SIZE - total_cards, 3)
            for add in range(1, max_add + 1):
                plans.append(_resize_plan(
                    PlanType.EXPAND_DECK, counts, other_index, other, add, total_cards, 3,
                ))

    # 4. Cut key cards outright.
    if total_cards > MIN_DECK_SIZE:
        for key_index, key in key_cards:
            max_reduce = min(key.count, total_cards - MIN_DECK_SIZE, 3)
            for reduce in range(1, max_reduce + 1):
                plans.append(_resize_plan(
                    PlanType.REDUCE_DECK, counts, key_index, key, -reduce, total_cards, 4,
                ))

    return plans


# ─── Ranking ──────────────────────────────────────────────────────────────────


def _rank(plans: list[OptimizationPlan], target_rate: float) -> list[OptimizationPlan]:
    ranked = sorted(
        plans, key=lambda p: (not p.reach_target, abs(target_rate - p.new_rate))
    )
    if ranked:
        ranked[0].is_best = True
    return ranked[:MAX_PLANS_PER_GROUP]


# ─── Public API ───────────────────────────────────────────────────────────────


def optimize(
    cards: list[Card],
    condition: str,
    draws: int,
    target_rate: float,
    simulations: int = DEFAULT_SIMULATIONS,
    on_progress: ProgressCallback | None = None,
    seed: int | None = None,
) -> OptimizationResult:
    """Propose deck edits that move the hit rate of ``condition`` toward a target.

    The direction is "increase" when the current rate is below target_rate,
    otherwise "decrease".

    Args:
        cards:       Deck list; card i is variable slot i.
        condition:   Condition text over the card slots.
        draws:       Opening-hand size.
        target_rate: Desired hit rate in percent (0–100).
        simulations: Trials for the current rate; plans use simulations // 2.
        on_progress: Optional callback receiving (percent, message).
        seed:        Seed for the sampling engine. None for a non-deterministic run.

    Raises:
        DeckError:            Deck has no cards.
        ConditionSyntaxError: Blank condition.
    """

    def _report(progress: int, message: str) -> None:
        if on_progress is not None:
            on_progress(progress, message)

    counts = [card.count for card in cards]
    total_cards = sum(counts)
    if total_cards == 0:
        raise DeckError("empty deck")
    if not condition or not condition.strip():
        raise ConditionSyntaxError("empty condition expression")

    _report(5, "Compiling condition...")
    predicate = compile_condition_string(condition)

    _report(10, "Estimating current rate...")
    current_rate = quick_monte_carlo(counts, draws, predicate, simulations, seed=seed)
    direction = "increase" if current_rate < target_rate else "decrease"
    _report(15, f"Analysing deck ({direction} mode)...")

    referenced = set(condition_variables(condition))
    key_cards = [(i, c) for i, c in enumerate(cards) if c.count > 0 and i in referenced]
    non_key_cards = [(i, c) for i, c in enumerate(cards) if c.count > 0 and i not in referenced]

    _report(20, "Generating plans...")
    generate = _increase_plans if direction == "increase" else _decrease_plans
    plans = generate(key_cards, non_key_cards, counts, total_cards)
    logger.debug(
        "%d candidate plans (%s, current rate %.2f%%)", len(plans), direction, current_rate
    )

    _report(30, f"Evaluating plans (0/{len(plans)})...")
    plan_simulations = simulations // 2
    for i, plan in enumerate(plans):
        plan_draws = min(draws, sum(plan.new_counts))
        plan.new_rate = quick_monte_carlo(
            plan.new_counts, plan_draws, predicate, plan_simulations,
            seed=None if seed is None else seed + i + 1,
        )
        plan.improvement = plan.new_rate - current_rate
        if direction == "increase":
            plan.reach_target = plan.new_rate >= target_rate
        else:
            plan.reach_target = plan.new_rate <= target_rate

        if i % 5 == 0 or i == len(plans) - 1:
            progress = 30 + (i + 1) * 65 // len(plans)
            _report(progress, f"Evaluating plans ({i + 1}/{len(plans)})...")

    _report(95, "Ranking plans...")
    if direction == "increase":
        useful = [p for p in plans if p.improvement > MIN_IMPROVEMENT]
    else:
        useful = [p for p in plans if p.improvement < -MIN_IMPROVEMENT]

    result = OptimizationResult(
        current_rate=current_rate,
        target_rate=target_rate,
        direction=direction,
        keep_deck_plans=_rank(
            [p for p in useful if p.type in _KEEP_DECK_TYPES[direction]], target_rate
        ),
        expand_deck_plans=_rank(
            [p for p in useful if p.type is PlanType.EXPAND_DECK], target_rate
        ),
        reduce_deck_plans=_rank(
            [p for p in useful if p.type is PlanType.REDUCE_DECK], target_rate
        ),
        total_plans_count=len(useful),
    )
    _report(100, "Done")
    return result


def apply_plan(plan: OptimizationPlan, cards: list[Card]) -> None:
    """Apply a plan's changes to a deck list in place.

    Cards are matched by label first, then by (non-empty) name. Counts never
    drop below zero; changes for cards not in the list are ignored.
    """
    for change in plan.changes:
        for card in cards:
            if change.card.label and card.label == change.card.label:
                break
            if change.card.name and card.name and card.name == change.card.name:
                break
        else:
            continue
        card.count = max(0, card.count + change.change)
