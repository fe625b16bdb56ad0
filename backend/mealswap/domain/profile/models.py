"""
User context domain models.

Profile, goal and allergens as read from the persistence layer.
All models are immutable for the duration of one request.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from pydantic import BaseModel, Field, field_validator, ConfigDict


class Gender(str, Enum):
    """Gender as captured during onboarding."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class Goal(str, Enum):
    """
    Dietary goal. Closed set: unknown values fail validation.

    Example:
        >>> Goal("low_carb").label
        'Low Carb'
    """

    LOSE_WEIGHT = "lose_weight"
    GAIN_MUSCLE = "gain_muscle"
    MORE_PROTEIN = "more_protein"
    BALANCED_DIET = "balanced_diet"
    LOW_CARB = "low_carb"
    HIGH_FIBER = "high_fiber"

    @property
    def label(self) -> str:
        """Display label, e.g. 'Lose Weight'."""
        return self.value.replace("_", " ").title()


class UserProfile(BaseModel):
    """
    Physical profile of a user.

    Attributes:
        weight_kg: Body weight in kilograms
        height_cm: Height in centimeters
        gender: Gender

    Example:
        >>> profile = UserProfile(weight_kg=70, height_cm=175, gender=Gender.MALE)
        >>> round(profile.bmi(), 1)
        22.9
    """

    model_config = ConfigDict(frozen=True)

    weight_kg: float = Field(..., gt=0, allow_inf_nan=False, description="Weight in kg")
    height_cm: float = Field(..., gt=0, allow_inf_nan=False, description="Height in cm")
    gender: Gender = Field(..., description="Gender")

    def bmi(self) -> float:
        """Body mass index (kg/m²)."""
        height_m = self.height_cm / 100.0
        return self.weight_kg / (height_m * height_m)


class AllergenSet(BaseModel):
    """
    Set of allergen names.

    Names are trimmed, lower-cased and deduplicated; blank names are
    dropped. An empty set is valid.

    Example:
        >>> allergens = AllergenSet.of(["Peanuts", " peanuts", "", "Milk"])
        >>> allergens.tokens
        ('milk', 'peanuts')
    """

    model_config = ConfigDict(frozen=True)

    names: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("names", mode="before")
    @classmethod
    def normalize(cls, v: Iterable[str]) -> frozenset[str]:
        """Lower-case, trim and drop blanks."""
        if isinstance(v, str):
            v = [v]
        return frozenset(name.strip().lower() for name in v if name and name.strip())

    @property
    def tokens(self) -> tuple[str, ...]:
        """Allergen names in sorted order."""
        return tuple(sorted(self.names))

    def is_empty(self) -> bool:
        return not self.names

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip().lower() in self.names

    def __len__(self) -> int:
        return len(self.names)

    @classmethod
    def of(cls, names: Iterable[str]) -> AllergenSet:
        """Create from any iterable of names."""
        return cls(names=list(names))

    @classmethod
    def empty(cls) -> AllergenSet:
        return cls()
