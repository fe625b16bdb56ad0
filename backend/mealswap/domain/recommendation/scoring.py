"""
Goal scorer.

One scoring strategy per Goal variant. Scores rank menu items within a
single goal (higher is better) and are not comparable across goals.
Unknown nutrients count as zero.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from backend.mealswap.domain.catalog.models import MenuItem
from backend.mealswap.domain.nutrition.models import Nutrient, NutrientProfile
from backend.mealswap.domain.profile.models import Goal


class GoalStrategy(ABC):
    """
    Scoring policy for one goal.

    Attributes:
        goal: Goal this strategy scores for
        priority: Nutrient the goal cares about most
        lower_is_better: Direction of the priority nutrient
    """

    goal: ClassVar[Goal]
    priority: ClassVar[Nutrient]
    lower_is_better: ClassVar[bool] = False

    @abstractmethod
    def score(self, nutrients: NutrientProfile) -> float:
        """Score a nutrient profile. Higher is better."""

    def describe(self) -> str:
        """Short rationale used in suggestion reasons."""
        direction = "lower" if self.lower_is_better else "higher"
        return f"{direction} {self.priority.label}"


class LoseWeightStrategy(GoalStrategy):
    """Low calories and carbs, fiber as a satiety proxy."""

    goal = Goal.LOSE_WEIGHT
    priority = Nutrient.CALORIES
    lower_is_better = True

    def score(self, nutrients: NutrientProfile) -> float:
        return (
            -nutrients.value_of(Nutrient.CALORIES) / 100.0
            + 0.5 * nutrients.value_of(Nutrient.FIBER)
            - 0.05 * nutrients.value_of(Nutrient.CARBS)
        )


class LowCarbStrategy(GoalStrategy):
    """Carbs first, then calories; fiber rewarded."""

    goal = Goal.LOW_CARB
    priority = Nutrient.CARBS
    lower_is_better = True

    def score(self, nutrients: NutrientProfile) -> float:
        return (
            -0.1 * nutrients.value_of(Nutrient.CARBS)
            - 0.01 * nutrients.value_of(Nutrient.CALORIES)
            + 0.3 * nutrients.value_of(Nutrient.FIBER)
        )


class GainMuscleStrategy(GoalStrategy):
    """Protein first, moderate-to-high calories as a secondary reward."""

    goal = Goal.GAIN_MUSCLE
    priority = Nutrient.PROTEIN

    # Calories above this add nothing
    CALORIE_CAP = 900.0

    def score(self, nutrients: NutrientProfile) -> float:
        calories = min(nutrients.value_of(Nutrient.CALORIES), self.CALORIE_CAP)
        return nutrients.value_of(Nutrient.PROTEIN) + 0.01 * calories


class MoreProteinStrategy(GoalStrategy):
    """Protein dominates, calories barely matter."""

    goal = Goal.MORE_PROTEIN
    priority = Nutrient.PROTEIN

    def score(self, nutrients: NutrientProfile) -> float:
        return nutrients.value_of(Nutrient.PROTEIN) + 0.002 * nutrients.value_of(
            Nutrient.CALORIES
        )


class BalancedDietStrategy(GoalStrategy):
    """Closeness of the protein:carbs:fats split to an even third each."""

    goal = Goal.BALANCED_DIET
    priority = Nutrient.PROTEIN

    # Score of an item with no macros (largest possible distance)
    WORST = -4.0 / 3.0

    def score(self, nutrients: NutrientProfile) -> float:
        macros = [
            nutrients.value_of(Nutrient.PROTEIN),
            nutrients.value_of(Nutrient.CARBS),
            nutrients.value_of(Nutrient.FATS),
        ]
        total = sum(macros)
        if total <= 0:
            return self.WORST
        return -sum(abs(m / total - 1.0 / 3.0) for m in macros)

    def describe(self) -> str:
        return "a more even protein:carbs:fats split"


class HighFiberStrategy(GoalStrategy):
    """Fiber directly, everything else as a tie-breaker."""

    goal = Goal.HIGH_FIBER
    priority = Nutrient.FIBER

    def score(self, nutrients: NutrientProfile) -> float:
        return (
            nutrients.value_of(Nutrient.FIBER)
            + 0.001 * nutrients.value_of(Nutrient.PROTEIN)
            - 0.0001 * nutrients.value_of(Nutrient.CALORIES)
        )


_STRATEGIES: dict[Goal, GoalStrategy] = {
    strategy.goal: strategy
    for strategy in (
        LoseWeightStrategy(),
        LowCarbStrategy(),
        GainMuscleStrategy(),
        MoreProteinStrategy(),
        BalancedDietStrategy(),
        HighFiberStrategy(),
    )
}

_missing = set(Goal) - set(_STRATEGIES)
if _missing:
    raise RuntimeError(f"No scoring strategy for goals: {sorted(g.value for g in _missing)}")


def strategy_for(goal: Goal) -> GoalStrategy:
    """Get the scoring strategy of a goal."""
    return _STRATEGIES[Goal(goal)]


def score(item: MenuItem, goal: Goal) -> float:
    """
    Score a menu item for a goal. Higher is better.

    Example:
        >>> salad = MenuItem(
        ...     id="1", name="Salad",
        ...     nutrients=NutrientProfile(calories=200, fiber_g=8),
        ... )
        >>> score(salad, Goal.LOSE_WEIGHT)
        2.0
    """
    return strategy_for(goal).score(item.nutrients)
