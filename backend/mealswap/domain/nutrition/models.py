"""
Nutrition domain models.

Nutrient profile shared by menu items, meal estimates and analysis records.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


class Nutrient(str, Enum):
    """
    The five tracked nutrients.

    Values are the attribute names on NutrientProfile.
    """

    CALORIES = "calories"
    PROTEIN = "protein_g"
    CARBS = "carbs_g"
    FATS = "fats_g"
    FIBER = "fiber_g"

    @property
    def label(self) -> str:
        """Human readable name used in suggestion text."""
        return _LABELS[self]

    @property
    def unit(self) -> str:
        """Display unit (kcal or g)."""
        return "kcal" if self is Nutrient.CALORIES else "g"


_LABELS = {
    Nutrient.CALORIES: "calories",
    Nutrient.PROTEIN: "protein",
    Nutrient.CARBS: "carbs",
    Nutrient.FATS: "fats",
    Nutrient.FIBER: "fiber",
}


class NutrientProfile(BaseModel):
    """
    Nutrient profile of a food or meal.

    Every field is independently optional: None means unknown.
    Known values are finite and non-negative.

    Attributes:
        calories: Energy in kcal
        protein_g: Protein in grams
        carbs_g: Carbohydrates in grams
        fats_g: Total fat in grams
        fiber_g: Dietary fiber in grams

    Example:
        >>> profile = NutrientProfile(calories=200, fiber_g=8.0)
        >>> profile.value_of(Nutrient.PROTEIN)
        0.0
    """

    model_config = ConfigDict(frozen=True)

    calories: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="kcal")
    protein_g: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Protein in g")
    carbs_g: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Carbs in g")
    fats_g: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Fat in g")
    fiber_g: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Fiber in g")

    def value_of(self, nutrient: Nutrient) -> float:
        """
        Get a nutrient value with unknown treated as zero.

        Args:
            nutrient: Nutrient to read

        Returns:
            Value, or 0.0 if unknown
        """
        value = getattr(self, nutrient.value)
        return float(value) if value is not None else 0.0

    def is_complete(self) -> bool:
        """True when all five nutrients are known."""
        return all(getattr(self, n.value) is not None for n in Nutrient)

    def delta(self, other: NutrientProfile, nutrient: Nutrient) -> float:
        """Signed difference self - other for one nutrient (unknown as zero)."""
        return self.value_of(nutrient) - other.value_of(nutrient)
