"""Swap suggestion model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ConfigDict


class SwapSuggestion(BaseModel):
    """
    Recommended substitution of a detected food for a menu item.

    Attributes:
        from_item: Detected item name (not necessarily in the catalog)
        to_item: Name of a safe slot candidate, verbatim
        reason: Why the swap fits the goal
        nutritional_benefit: Signed nutrient deltas vs. the meal
    """

    model_config = ConfigDict(frozen=True)

    from_item: str = Field(..., min_length=1)
    to_item: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)
    nutritional_benefit: str = Field(..., min_length=1)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()
