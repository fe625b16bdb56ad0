"""
Unit tests for MongoDB user context repository.

Uses AsyncMock for Motor (MongoDB async driver) to avoid real DB dependencies.
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import AutoReconnect

from backend.mealswap.domain.catalog.models import DayOfWeek, MealSlot, MealType
from backend.mealswap.domain.profile.models import Gender, Goal
from backend.mealswap.domain.shared.errors import PersistenceError
from backend.mealswap.domain.shared.value_objects import UserId
from backend.mealswap.infrastructure.database.user_context_repository_mongo import (
    UserContextRepositoryMongo,
)


def _cursor(docs: list[dict[str, Any]]) -> MagicMock:
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


@pytest.fixture
def collections() -> dict[str, MagicMock]:
    """One mock collection per name."""
    names = ["profiles", "user_goals", "user_allergies", "menus", "menu_items"]
    mocks: dict[str, MagicMock] = {}
    for name in names:
        collection = MagicMock()
        collection.find_one = AsyncMock(return_value=None)
        collection.find.return_value = _cursor([])
        mocks[name] = collection
    return mocks


@pytest.fixture
def mock_db(collections: dict[str, MagicMock]) -> MagicMock:
    """Mock Motor AsyncIOMotorDatabase."""
    db = MagicMock()
    db.__getitem__ = MagicMock(side_effect=lambda name: collections[name])
    return db


@pytest.fixture
def repository(mock_db: MagicMock) -> UserContextRepositoryMongo:
    return UserContextRepositoryMongo(mock_db)


@pytest.fixture
def uid() -> UserId:
    return UserId(value="user_789")


class TestProfile:
    """Profile reads."""

    @pytest.mark.asyncio
    async def test_get_profile(
        self,
        repository: UserContextRepositoryMongo,
        collections: dict[str, MagicMock],
        uid: UserId,
    ) -> None:
        collections["profiles"].find_one.return_value = {
            "user_id": "user_789",
            "weight": 64.0,
            "height": 168.0,
            "gender": "female",
        }

        profile = await repository.get_profile(uid)

        assert profile is not None
        assert profile.weight_kg == 64.0
        assert profile.gender is Gender.FEMALE
        collections["profiles"].find_one.assert_called_once_with({"user_id": "user_789"})

    @pytest.mark.asyncio
    async def test_incomplete_profile_is_none(
        self,
        repository: UserContextRepositoryMongo,
        collections: dict[str, MagicMock],
        uid: UserId,
    ) -> None:
        """Onboarding not finished: weight missing."""
        collections["profiles"].find_one.return_value = {"user_id": "user_789", "weight": None}

        assert await repository.get_profile(uid) is None

    @pytest.mark.asyncio
    async def test_db_failure_wrapped(
        self,
        repository: UserContextRepositoryMongo,
        collections: dict[str, MagicMock],
        uid: UserId,
    ) -> None:
        collections["profiles"].find_one.side_effect = AutoReconnect("connection lost")

        with pytest.raises(PersistenceError):
            await repository.get_profile(uid)


class TestGoalAndAllergens:
    """Goal and allergy reads."""

    @pytest.mark.asyncio
    async def test_latest_goal(
        self,
        repository: UserContextRepositoryMongo,
        collections: dict[str, MagicMock],
        uid: UserId,
    ) -> None:
        collections["user_goals"].find_one.return_value = {"goal_type": "low_carb"}

        goal = await repository.get_goal(uid)

        assert goal is Goal.LOW_CARB
        call = collections["user_goals"].find_one.call_args
        assert call[1]["sort"] == [("updated_at", -1)]

    @pytest.mark.asyncio
    async def test_missing_goal(self, repository: UserContextRepositoryMongo, uid: UserId) -> None:
        assert await repository.get_goal(uid) is None

    @pytest.mark.asyncio
    async def test_unknown_goal_raises(
        self,
        repository: UserContextRepositoryMongo,
        collections: dict[str, MagicMock],
        uid: UserId,
    ) -> None:
        collections["user_goals"].find_one.return_value = {"goal_type": "keto"}

        with pytest.raises(ValueError):
            await repository.get_goal(uid)

    @pytest.mark.asyncio
    async def test_allergens(
        self,
        repository: UserContextRepositoryMongo,
        collections: dict[str, MagicMock],
        uid: UserId,
    ) -> None:
        collections["user_allergies"].find.return_value = _cursor(
            [{"allergy_name": "Peanuts"}, {"allergy_name": "Shellfish"}, {"allergy_name": None}]
        )

        allergens = await repository.get_allergens(uid)

        assert allergens is not None
        assert allergens.tokens == ("peanuts", "shellfish")

    @pytest.mark.asyncio
    async def test_no_allergies_is_empty_set(
        self, repository: UserContextRepositoryMongo, uid: UserId
    ) -> None:
        allergens = await repository.get_allergens(uid)

        assert allergens is not None
        assert allergens.is_empty()


class TestCatalog:
    """Menu catalog reads."""

    @pytest.mark.asyncio
    async def test_no_menu_is_none(
        self, repository: UserContextRepositoryMongo, uid: UserId
    ) -> None:
        assert await repository.get_catalog(uid, DayOfWeek.MONDAY, MealType.LUNCH) is None

    @pytest.mark.asyncio
    async def test_items_of_all_menus(
        self,
        repository: UserContextRepositoryMongo,
        collections: dict[str, MagicMock],
        uid: UserId,
    ) -> None:
        collections["menus"].find.return_value = _cursor(
            [{"menu_id": "menu_1"}, {"menu_id": "menu_2"}]
        )
        collections["menu_items"].find.return_value = _cursor(
            [
                {
                    "item_id": "i1",
                    "menu_id": "menu_1",
                    "name": "Lentil Soup",
                    "description": "Red lentils",
                    "calories": 320,
                    "protein": 18,
                    "carbs": 45,
                    "fats": 6,
                    "fiber": 15,
                    "category": "Soups",
                    "day_of_week": "Monday",
                    "meal_type": "Lunch",
                },
                {
                    "_id": "i2",
                    "menu_id": "menu_2",
                    "name": "Fruit Cup",
                    "calories": None,
                    "day_of_week": "Someday",
                    "meal_type": "Snacks",
                },
            ]
        )

        catalog = await repository.get_catalog(uid, DayOfWeek.MONDAY, MealType.LUNCH)

        assert catalog is not None
        soup, fruit = catalog
        assert soup.id == "i1"
        assert soup.nutrients.fiber_g == 15
        assert soup.slot == MealSlot.parse("Monday", "Lunch")
        assert soup.menu_id == "menu_1"
        assert fruit.id == "i2"
        assert fruit.slot is None
        assert fruit.nutrients.calories is None
        collections["menu_items"].find.assert_called_once_with(
            {"menu_id": {"$in": ["menu_1", "menu_2"]}}
        )

    @pytest.mark.asyncio
    async def test_invalid_item_skipped(
        self,
        repository: UserContextRepositoryMongo,
        collections: dict[str, MagicMock],
        uid: UserId,
    ) -> None:
        collections["menus"].find.return_value = _cursor([{"menu_id": "menu_1"}])
        collections["menu_items"].find.return_value = _cursor(
            [
                {"item_id": "bad", "menu_id": "menu_1", "name": "Broken", "calories": -50},
                {"item_id": "ok", "menu_id": "menu_1", "name": "Toast"},
            ]
        )

        catalog = await repository.get_catalog(uid, DayOfWeek.MONDAY, MealType.LUNCH)

        assert [item.id for item in catalog] == ["ok"]  # type: ignore[union-attr]

    @pytest.mark.asyncio
    async def test_incomplete_documents_skipped(
        self,
        repository: UserContextRepositoryMongo,
        collections: dict[str, MagicMock],
        uid: UserId,
    ) -> None:
        # ARRANGE: a menu without id, an item without name, an item without any id
        collections["menus"].find.return_value = _cursor(
            [{"name": "Draft menu"}, {"menu_id": "menu_1"}]
        )
        collections["menu_items"].find.return_value = _cursor(
            [
                {"item_id": "nameless", "menu_id": "menu_1"},
                {"menu_id": "menu_1", "name": "Orphan"},
                {"item_id": "ok", "menu_id": "menu_1", "name": "Toast"},
            ]
        )

        # ACT
        catalog = await repository.get_catalog(uid, DayOfWeek.MONDAY, MealType.LUNCH)

        # ASSERT
        assert catalog is not None
        assert [item.id for item in catalog] == ["ok"]
        collections["menu_items"].find.assert_called_once_with(
            {"menu_id": {"$in": ["menu_1"]}}
        )

    @pytest.mark.asyncio
    async def test_db_failure_wrapped(
        self,
        repository: UserContextRepositoryMongo,
        collections: dict[str, MagicMock],
        uid: UserId,
    ) -> None:
        collections["menus"].find.return_value.to_list.side_effect = AutoReconnect("lost")

        with pytest.raises(PersistenceError):
            await repository.get_catalog(uid, DayOfWeek.MONDAY, MealType.LUNCH)
