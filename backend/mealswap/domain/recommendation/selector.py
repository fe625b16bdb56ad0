"""
Swap selector.

Ranks safe slot candidates with the goal scorer and turns the top-K
distinct names into swap suggestions with quantified benefits.
"""

from __future__ import annotations

from typing import Optional, Sequence

from backend.mealswap.domain.catalog.allergen_guard import guard
from backend.mealswap.domain.catalog.models import MealSlot, MenuItem
from backend.mealswap.domain.catalog.slot_filter import filter_slot
from backend.mealswap.domain.estimation.models import MealEstimate
from backend.mealswap.domain.nutrition.models import Nutrient
from backend.mealswap.domain.profile.models import AllergenSet, Goal
from backend.mealswap.domain.recommendation.models import SwapSuggestion
from backend.mealswap.domain.recommendation.scoring import GoalStrategy, strategy_for

DEFAULT_SWAP_COUNT = 3

# from_item when nothing was detected
UNDETECTED_PLACEHOLDER = "your meal"


def rank_candidates(candidates: Sequence[MenuItem], goal: Goal) -> list[MenuItem]:
    """Sort by score descending; ties keep input order."""
    strategy = strategy_for(goal)
    scored = [(strategy.score(item.nutrients), item) for item in candidates]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [item for _, item in scored]


def select_swaps(
    estimate: MealEstimate,
    candidates: Sequence[MenuItem],
    goal: Goal,
    k: int = DEFAULT_SWAP_COUNT,
) -> list[SwapSuggestion]:
    """
    Select up to k swaps from already filtered and guarded candidates.

    Args:
        estimate: Validated meal estimate
        candidates: Safe items of the request slot, catalog order
        goal: Active goal
        k: Maximum number of suggestions

    Returns:
        Suggestions in rank order, one per distinct to_item. Empty if
        there are no candidates.

    Raises:
        ValueError: If k < 1
    """
    if k < 1:
        raise ValueError(f"k must be at least 1: {k}")
    if not candidates:
        return []

    strategy = strategy_for(goal)
    from_item = estimate.primary_item() or UNDETECTED_PLACEHOLDER

    suggestions: list[SwapSuggestion] = []
    seen: set[str] = set()
    for item in rank_candidates(candidates, goal):
        if item.name in seen:
            continue
        seen.add(item.name)
        suggestions.append(
            SwapSuggestion(
                from_item=from_item,
                to_item=item.name,
                reason=_reason(strategy, estimate, item, from_item),
                nutritional_benefit=_benefit(strategy, estimate, item),
            )
        )
        if len(suggestions) == k:
            break
    return suggestions


def recommend_swaps(
    estimate: MealEstimate,
    catalog: Optional[Sequence[MenuItem]],
    slot: MealSlot,
    allergens: AllergenSet,
    goal: Goal,
    k: int = DEFAULT_SWAP_COUNT,
) -> list[SwapSuggestion]:
    """Filter to the slot, guard allergens, then select."""
    candidates = guard(filter_slot(catalog, slot.day_of_week, slot.meal_type), allergens)
    return select_swaps(estimate, candidates, goal, k)


def _reason(
    strategy: GoalStrategy, estimate: MealEstimate, item: MenuItem, from_item: str
) -> str:
    goal_label = strategy.goal.label
    if strategy.score(item.nutrients) > strategy.score(estimate.nutrients):
        return (
            f"{item.name} fits your {goal_label} goal better than {from_item}: "
            f"{strategy.describe()}."
        )
    return f"{item.name} is one of the best {goal_label} options on your menu for this meal."


def _benefit(strategy: GoalStrategy, estimate: MealEstimate, item: MenuItem) -> str:
    nutrients = [strategy.priority]
    if strategy.priority is not Nutrient.CALORIES:
        nutrients.append(Nutrient.CALORIES)
    parts = [
        _format_delta(nutrient, item.nutrients.delta(estimate.nutrients, nutrient))
        for nutrient in nutrients
    ]
    return ", ".join(parts) + " compared to your meal"


def _format_delta(nutrient: Nutrient, delta: float) -> str:
    if nutrient is Nutrient.CALORIES:
        value = round(delta) or 0
        return f"{value:+d} {nutrient.unit}"
    value = round(delta, 1) or 0.0
    return f"{value:+.1f} {nutrient.unit} {nutrient.label}"
