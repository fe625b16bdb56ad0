"""Slot filter for menu catalogs."""

from __future__ import annotations

from typing import Optional, Sequence

from backend.mealswap.domain.catalog.models import DayOfWeek, MealSlot, MealType, MenuItem
from backend.mealswap.domain.shared.errors import ContextUnavailableError


def filter_slot(
    catalog: Optional[Sequence[MenuItem]],
    day: DayOfWeek,
    meal: MealType,
) -> list[MenuItem]:
    """
    Keep the items whose slot equals (day, meal), in input order.

    An empty result is valid. A missing catalog is not.

    Raises:
        ContextUnavailableError: If catalog is None
    """
    if catalog is None:
        raise ContextUnavailableError("Menu catalog is absent")

    slot = MealSlot(day_of_week=day, meal_type=meal)
    return [item for item in catalog if item.slot is not None and item.slot == slot]
