"""
Domain models for meal estimation.

The estimate is the validated form of the external estimator's output.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator, ConfigDict

from backend.mealswap.domain.catalog.models import MealSlot
from backend.mealswap.domain.nutrition.models import NutrientProfile
from backend.mealswap.domain.profile.models import AllergenSet, Goal, UserProfile


class MealEstimate(BaseModel):
    """
    Validated estimate for a photographed meal.

    Attributes:
        detected_items: Detected food names, in estimator order (may be empty)
        nutrients: Aggregate nutrients, all five fields known
        goal_alignment: Narrative on how the meal fits the goal

    Example:
        >>> estimate = MealEstimate(
        ...     detected_items=("Burger", "Fries"),
        ...     nutrients=NutrientProfile(
        ...         calories=950, protein_g=35, carbs_g=90, fats_g=50, fiber_g=4
        ...     ),
        ...     goal_alignment="High in calories for a weight-loss goal.",
        ... )
    """

    model_config = ConfigDict(frozen=True)

    detected_items: tuple[str, ...] = Field(default_factory=tuple)
    nutrients: NutrientProfile
    goal_alignment: str = ""

    @field_validator("nutrients")
    @classmethod
    def all_nutrients_known(cls, v: NutrientProfile) -> NutrientProfile:
        """An estimate must carry all five nutrients."""
        if not v.is_complete():
            raise ValueError("Estimate nutrients must all be present")
        return v

    @field_validator("detected_items")
    @classmethod
    def items_not_blank(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Detected item names are non-empty."""
        if any(not item.strip() for item in v):
            raise ValueError("Detected items cannot be empty strings")
        return v

    def primary_item(self) -> Optional[str]:
        """First detected item, or None if nothing was detected."""
        return self.detected_items[0] if self.detected_items else None


class EstimationContext(BaseModel):
    """
    Context handed to the estimator alongside the image.

    Candidate names are slot-filtered and allergen-guarded so a model
    that proposes swaps only sees real, safe items.
    """

    model_config = ConfigDict(frozen=True)

    goal: Goal
    allergens: AllergenSet
    profile: UserProfile
    slot: MealSlot
    candidate_names: tuple[str, ...] = Field(default_factory=tuple)
