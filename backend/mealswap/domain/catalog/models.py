"""
Menu catalog domain models.

Menu items and the (day_of_week, meal_type) slot that scopes them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, ConfigDict

from backend.mealswap.domain.nutrition.models import NutrientProfile
from backend.mealswap.domain.shared.errors import InvalidSlotError


class DayOfWeek(str, Enum):
    """Day of week. Closed set, exact names only."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


class MealType(str, Enum):
    """Meal type. Closed set, exact names only."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACKS = "Snacks"


class MealSlot(BaseModel):
    """
    Slot key scoping which menu items are eligible for an analysis.

    Example:
        >>> slot = MealSlot.parse("Monday", "Lunch")
        >>> str(slot)
        'Monday/Lunch'
    """

    model_config = ConfigDict(frozen=True)

    day_of_week: DayOfWeek
    meal_type: MealType

    def __str__(self) -> str:
        return f"{self.day_of_week.value}/{self.meal_type.value}"

    @classmethod
    def parse(cls, day_of_week: Any, meal_type: Any) -> MealSlot:
        """
        Build a slot from raw values.

        Args:
            day_of_week: Day name, e.g. "Monday"
            meal_type: Meal type name, e.g. "Lunch"

        Returns:
            Validated MealSlot

        Raises:
            InvalidSlotError: If either value is missing or unknown
        """
        if day_of_week is None or day_of_week == "":
            raise InvalidSlotError("day_of_week is required")
        if meal_type is None or meal_type == "":
            raise InvalidSlotError("meal_type is required")
        try:
            day = DayOfWeek(day_of_week)
        except ValueError as e:
            raise InvalidSlotError(f"Unknown day_of_week: {day_of_week!r}") from e
        try:
            meal = MealType(meal_type)
        except ValueError as e:
            raise InvalidSlotError(f"Unknown meal_type: {meal_type!r}") from e
        return cls(day_of_week=day, meal_type=meal)


class MenuItem(BaseModel):
    """
    Item of a user's menu catalog.

    Items without a slot are never swap-eligible.

    Attributes:
        id: Item identifier
        name: Display name, used verbatim as swap target
        description: Free-text description (optional)
        nutrients: Nutrient profile (fields may be unknown)
        category: Free-text category (may be empty)
        slot: Day/meal slot (optional)
        menu_id: Owning menu (optional)

    Example:
        >>> item = MenuItem(
        ...     id="item_1",
        ...     name="Salad",
        ...     nutrients=NutrientProfile(calories=200, fiber_g=8),
        ...     slot=MealSlot.parse("Monday", "Lunch"),
        ... )
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Item identifier")
    name: str = Field(..., min_length=1, max_length=200, description="Item name")
    description: Optional[str] = Field(None, description="Free-text description")
    nutrients: NutrientProfile = Field(default_factory=NutrientProfile)
    category: str = Field("", description="Free-text category")
    slot: Optional[MealSlot] = Field(None, description="Day/meal slot")
    menu_id: Optional[str] = Field(None, description="Owning menu")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        """Ensure name is not just whitespace."""
        if not v.strip():
            raise ValueError("Menu item name cannot be empty or whitespace")
        return v

    def searchable_text(self) -> str:
        """Name, description and category joined and lower-cased."""
        parts = [self.name, self.description or "", self.category or ""]
        return " ".join(parts).lower()
