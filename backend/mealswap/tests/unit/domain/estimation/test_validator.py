"""
Unit tests for the estimate validator.

The estimator is untrusted: every malformed payload must fail with
MalformedEstimateError, never be patched with defaults.
"""

import json
from typing import Any

import pytest

from backend.mealswap.domain.estimation.validator import validate_estimate
from backend.mealswap.domain.shared.errors import MalformedEstimateError


# ═══════════════════════════════════════════════════════════
# VALID PAYLOADS
# ═══════════════════════════════════════════════════════════


def test_valid_mapping(raw_estimate: dict[str, Any]) -> None:
    estimate = validate_estimate(raw_estimate)

    assert estimate.detected_items == ("Burger", "Fries")
    assert estimate.nutrients.calories == 950.0
    assert estimate.nutrients.protein_g == 35.0
    assert estimate.nutrients.carbs_g == 90.0
    assert estimate.nutrients.fats_g == 50.0
    assert estimate.nutrients.fiber_g == 4.0
    assert estimate.goal_alignment == "High in calories for a weight-loss goal."


def test_valid_json_text(raw_estimate: dict[str, Any]) -> None:
    estimate = validate_estimate(json.dumps(raw_estimate))
    assert estimate.nutrients.calories == 950.0


def test_json_in_code_fence(raw_estimate: dict[str, Any]) -> None:
    """Models sometimes wrap JSON in a markdown fence."""
    text = "```json\n" + json.dumps(raw_estimate) + "\n```"

    estimate = validate_estimate(text)

    assert estimate.detected_items == ("Burger", "Fries")


def test_bytes_payload(raw_estimate: dict[str, Any]) -> None:
    estimate = validate_estimate(json.dumps(raw_estimate).encode("utf-8"))
    assert estimate.nutrients.fiber_g == 4.0


def test_nested_nutrients_and_aliases() -> None:
    """Nested object wins over top level; kcal/fat aliases accepted."""
    payload = {
        "detected_items": ["Omelette"],
        "calories": 9999,
        "nutrients": {"kcal": 320, "protein_g": 21, "carbs_g": 2, "fat": 24, "fiber_g": 0},
    }

    estimate = validate_estimate(payload)

    assert estimate.nutrients.calories == 320.0
    assert estimate.nutrients.fats_g == 24.0
    assert estimate.nutrients.fiber_g == 0.0


def test_numeric_strings_accepted(raw_estimate: dict[str, Any]) -> None:
    raw_estimate["calories"] = " 640.5 "

    assert validate_estimate(raw_estimate).nutrients.calories == 640.5


def test_zero_values_are_valid(raw_estimate: dict[str, Any]) -> None:
    raw_estimate.update(calories=0, protein=0, carbs=0, fats=0, fiber=0)

    estimate = validate_estimate(raw_estimate)

    assert estimate.nutrients.is_complete()
    assert estimate.nutrients.calories == 0.0


def test_empty_detected_items(raw_estimate: dict[str, Any]) -> None:
    """Nothing detected is allowed."""
    raw_estimate["detected_items"] = []
    assert validate_estimate(raw_estimate).detected_items == ()

    del raw_estimate["detected_items"]
    assert validate_estimate(raw_estimate).detected_items == ()


def test_missing_goal_alignment_defaults_to_empty(raw_estimate: dict[str, Any]) -> None:
    del raw_estimate["goal_alignment"]
    assert validate_estimate(raw_estimate).goal_alignment == ""


def test_estimator_swaps_are_ignored(raw_estimate: dict[str, Any]) -> None:
    raw_estimate["swaps"] = [{"from_item": "Burger", "to_item": "Unicorn Steak"}]

    estimate = validate_estimate(raw_estimate)

    assert not hasattr(estimate, "swaps")


# ═══════════════════════════════════════════════════════════
# MALFORMED PAYLOADS
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize("field", ["calories", "protein", "carbs", "fats", "fiber"])
def test_missing_nutrient_rejected(raw_estimate: dict[str, Any], field: str) -> None:
    """Missing calories is never replaced by zero."""
    del raw_estimate[field]

    with pytest.raises(MalformedEstimateError) as exc_info:
        validate_estimate(raw_estimate)

    assert field in exc_info.value.fields
    assert "missing" in str(exc_info.value)


@pytest.mark.parametrize(
    "value,reason",
    [
        (None, "missing"),
        (-10, "negative"),
        ("lots", "not a number"),
        (True, "not a number"),
        ([100], "not a number"),
        (float("inf"), "not finite"),
        ("nan", "not finite"),
        (10**400, "not finite"),
    ],
)
def test_invalid_nutrient_value_rejected(
    raw_estimate: dict[str, Any], value: Any, reason: str
) -> None:
    raw_estimate["calories"] = value

    with pytest.raises(MalformedEstimateError) as exc_info:
        validate_estimate(raw_estimate)

    assert exc_info.value.fields == ("calories",)
    assert reason in str(exc_info.value)


def test_all_errors_reported(raw_estimate: dict[str, Any]) -> None:
    del raw_estimate["calories"]
    raw_estimate["fiber"] = -1
    raw_estimate["detected_items"] = "Burger"

    with pytest.raises(MalformedEstimateError) as exc_info:
        validate_estimate(raw_estimate)

    assert set(exc_info.value.fields) == {"calories", "fiber", "detected_items"}


@pytest.mark.parametrize("items", ["Burger", [""], ["Burger", 3], ["  "]])
def test_invalid_detected_items_rejected(raw_estimate: dict[str, Any], items: Any) -> None:
    raw_estimate["detected_items"] = items

    with pytest.raises(MalformedEstimateError) as exc_info:
        validate_estimate(raw_estimate)

    assert exc_info.value.fields == ("detected_items",)


def test_non_string_goal_alignment_rejected(raw_estimate: dict[str, Any]) -> None:
    raw_estimate["goal_alignment"] = {"score": 3}

    with pytest.raises(MalformedEstimateError) as exc_info:
        validate_estimate(raw_estimate)

    assert exc_info.value.fields == ("goal_alignment",)


@pytest.mark.parametrize("raw", ["not json at all", "[1, 2, 3]", 42, None, ""])
def test_non_object_payload_rejected(raw: Any) -> None:
    with pytest.raises(MalformedEstimateError) as exc_info:
        validate_estimate(raw)

    assert exc_info.value.fields == ("payload",)
    assert exc_info.value.code == "MalformedEstimate"


def test_oversized_integer_literal_rejected(raw_estimate: dict[str, Any]) -> None:
    text = json.dumps(raw_estimate).replace('"calories": 950', '"calories": ' + "9" * 5001)

    with pytest.raises(MalformedEstimateError):
        validate_estimate(text)
