"""
Shared fixtures for meal swap tests.
"""

from typing import Any, Callable, Optional

import pytest

from backend.mealswap.domain.catalog.models import MealSlot, MenuItem
from backend.mealswap.domain.estimation.models import MealEstimate
from backend.mealswap.domain.nutrition.models import NutrientProfile
from backend.mealswap.domain.profile.models import AllergenSet, Gender, UserProfile
from backend.mealswap.domain.shared.value_objects import UserId
from backend.mealswap.infrastructure.config import OrchestratorSettings


# ═══════════════════════════════════════════════════════════
# DOMAIN MODEL FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def user_id() -> UserId:
    """Test user ID."""
    return UserId(value="user_123")


@pytest.fixture
def monday_lunch() -> MealSlot:
    return MealSlot.parse("Monday", "Lunch")


@pytest.fixture
def sample_profile() -> UserProfile:
    return UserProfile(weight_kg=72.5, height_cm=178, gender=Gender.FEMALE)


@pytest.fixture
def no_allergens() -> AllergenSet:
    return AllergenSet.empty()


@pytest.fixture
def make_item(monday_lunch: MealSlot) -> Callable[..., MenuItem]:
    """Factory for menu items in the Monday/Lunch slot by default."""
    counter = {"n": 0}

    def _make(
        name: str,
        calories: Optional[float] = None,
        protein: Optional[float] = None,
        carbs: Optional[float] = None,
        fats: Optional[float] = None,
        fiber: Optional[float] = None,
        description: Optional[str] = None,
        category: str = "",
        slot: Any = "default",
    ) -> MenuItem:
        counter["n"] += 1
        return MenuItem(
            id=f"item_{counter['n']}",
            name=name,
            description=description,
            category=category,
            nutrients=NutrientProfile(
                calories=calories,
                protein_g=protein,
                carbs_g=carbs,
                fats_g=fats,
                fiber_g=fiber,
            ),
            slot=monday_lunch if slot == "default" else slot,
        )

    return _make


@pytest.fixture
def sample_estimate() -> MealEstimate:
    """Burger and fries, heavy meal."""
    return MealEstimate(
        detected_items=("Burger", "Fries"),
        nutrients=NutrientProfile(
            calories=950.0, protein_g=35.0, carbs_g=90.0, fats_g=50.0, fiber_g=4.0
        ),
        goal_alignment="High in calories for a weight-loss goal.",
    )


@pytest.fixture
def raw_estimate() -> dict[str, Any]:
    """Well-formed estimator payload."""
    return {
        "detected_items": ["Burger", "Fries"],
        "calories": 950,
        "protein": 35,
        "carbs": 90,
        "fats": 50,
        "fiber": 4,
        "goal_alignment": "High in calories for a weight-loss goal.",
    }


@pytest.fixture
def fast_settings() -> OrchestratorSettings:
    """Settings with short timeouts and no retry pause."""
    return OrchestratorSettings(
        estimator_timeout_s=0.5,
        estimator_retry_backoff_s=0.0,
        persist_timeout_s=0.5,
        swap_count=3,
    )
