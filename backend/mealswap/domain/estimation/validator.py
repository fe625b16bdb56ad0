"""
Estimate validator.

Turns the untrusted estimator payload into a MealEstimate or raises
MalformedEstimateError. Never substitutes defaults for missing nutrients.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Mapping, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from backend.mealswap.domain.estimation.models import MealEstimate
from backend.mealswap.domain.nutrition.models import Nutrient, NutrientProfile
from backend.mealswap.domain.shared.errors import MalformedEstimateError


# Accepted payload keys per nutrient, first match wins
NUTRIENT_ALIASES: dict[Nutrient, tuple[str, ...]] = {
    Nutrient.CALORIES: ("calories", "kcal"),
    Nutrient.PROTEIN: ("protein", "protein_g"),
    Nutrient.CARBS: ("carbs", "carbs_g"),
    Nutrient.FATS: ("fats", "fat", "fats_g"),
    Nutrient.FIBER: ("fiber", "fiber_g"),
}

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)


def validate_estimate(raw: Any) -> MealEstimate:
    """
    Validate and normalize raw estimator output.

    Accepts a mapping or a JSON string (optionally wrapped in a markdown
    code fence). Nutrients are read from the top level or from a nested
    "nutrients" object. Any "swaps" key is ignored.

    Args:
        raw: Estimator payload

    Returns:
        Validated MealEstimate

    Raises:
        MalformedEstimateError: Listing every invalid field

    Example:
        >>> estimate = validate_estimate({
        ...     "detected_items": ["Pasta"],
        ...     "calories": 650, "protein": 20, "carbs": 90,
        ...     "fats": 18, "fiber": 5,
        ...     "goal_alignment": "Carb heavy",
        ... })
        >>> estimate.nutrients.calories
        650.0
    """
    payload = _decode(raw)
    errors: list[tuple[str, str]] = []

    nested = payload.get("nutrients")
    sources: list[Mapping[str, Any]] = [payload]
    if isinstance(nested, Mapping):
        sources.insert(0, nested)

    values: dict[str, float] = {}
    for nutrient, aliases in NUTRIENT_ALIASES.items():
        found, value = _lookup(sources, aliases)
        if not found:
            errors.append((nutrient.label, "missing"))
            continue
        number, problem = _as_nutrient_value(value)
        if problem:
            errors.append((nutrient.label, problem))
        else:
            values[nutrient.value] = number

    detected, problem = _detected_items(payload.get("detected_items"))
    if problem:
        errors.append(("detected_items", problem))

    goal_alignment = payload.get("goal_alignment")
    if goal_alignment is None:
        goal_alignment = ""
    elif not isinstance(goal_alignment, str):
        errors.append(("goal_alignment", "must be a string"))

    if errors:
        message = "; ".join(f"{field}: {reason}" for field, reason in errors)
        raise MalformedEstimateError(message, fields=[field for field, _ in errors])

    try:
        return MealEstimate(
            detected_items=detected,
            nutrients=NutrientProfile(**values),
            goal_alignment=goal_alignment.strip(),
        )
    except PydanticValidationError as e:
        raise MalformedEstimateError(str(e)) from e


def _decode(raw: Any) -> Mapping[str, Any]:
    """Decode JSON text and require a mapping."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        match = _CODE_FENCE.match(raw)
        text = match.group(1) if match else raw
        try:
            raw = json.loads(text)
        except ValueError as e:
            # Also covers integer literals past the int conversion limit
            raise MalformedEstimateError(f"Invalid JSON: {e}", fields=["payload"]) from e
    if not isinstance(raw, Mapping):
        raise MalformedEstimateError(
            f"Estimate must be an object, got {type(raw).__name__}", fields=["payload"]
        )
    return raw


def _lookup(sources: Sequence[Mapping[str, Any]], aliases: Sequence[str]) -> tuple[bool, Any]:
    for source in sources:
        for key in aliases:
            if key in source:
                return True, source[key]
    return False, None


def _as_nutrient_value(value: Any) -> tuple[float, Optional[str]]:
    """Parse a finite, non-negative number. Returns (value, problem)."""
    if value is None:
        return 0.0, "missing"
    if isinstance(value, bool):
        return 0.0, "not a number"
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0.0, "not a number"
    if not isinstance(value, (int, float)):
        return 0.0, "not a number"
    try:
        number = float(value)
    except OverflowError:
        return 0.0, "not finite"
    if not math.isfinite(number):
        return 0.0, "not finite"
    if number < 0:
        return 0.0, "negative"
    return number, None


def _detected_items(value: Any) -> tuple[tuple[str, ...], Optional[str]]:
    """Parse detected items. Missing or empty means nothing detected."""
    if value is None:
        return (), None
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return (), "must be a list of strings"
    items: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            return (), "items must be non-empty strings"
        items.append(item.strip())
    return tuple(items), None
