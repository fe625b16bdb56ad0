"""
MongoDB implementation of the user context repository.

Read-only view over the onboarding and menu collections.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from backend.mealswap.domain.catalog.models import DayOfWeek, MealSlot, MealType, MenuItem
from backend.mealswap.domain.nutrition.models import NutrientProfile
from backend.mealswap.domain.profile.models import AllergenSet, Gender, Goal, UserProfile
from backend.mealswap.domain.shared.errors import InvalidSlotError, PersistenceError
from backend.mealswap.domain.shared.value_objects import UserId

logger = structlog.get_logger(__name__)


class UserContextRepositoryMongo:
    """
    MongoDB implementation of IUserContextRepository.

    Storage design:
    - profiles: one document per user (weight, height, gender)
    - user_goals: goal_type + updated_at, the latest document wins
    - user_allergies: one document per allergy_name
    - menus: menus owned by a user
    - menu_items: items referencing their menu via menu_id

    Example:
        >>> from motor.motor_asyncio import AsyncIOMotorClient
        >>> client = AsyncIOMotorClient("mongodb://localhost:27017")
        >>> repository = UserContextRepositoryMongo(client.mealswap)
        >>> goal = await repository.get_goal(UserId(value="user_123"))
    """

    PROFILES = "profiles"
    GOALS = "user_goals"
    ALLERGIES = "user_allergies"
    MENUS = "menus"
    MENU_ITEMS = "menu_items"

    def __init__(self, db: AsyncIOMotorDatabase[Any]):
        self.db = db

    async def get_profile(self, user_id: UserId) -> Optional[UserProfile]:
        """Profile of the user; None if missing or onboarding incomplete."""
        try:
            doc = await self.db[self.PROFILES].find_one({"user_id": user_id.value})
        except PyMongoError as e:
            raise PersistenceError(f"Failed to read profile: {e}") from e

        if doc is None or doc.get("weight") is None or doc.get("height") is None:
            return None
        return UserProfile(
            weight_kg=doc["weight"],
            height_cm=doc["height"],
            gender=Gender(doc.get("gender") or Gender.OTHER.value),
        )

    async def get_goal(self, user_id: UserId) -> Optional[Goal]:
        """
        Active goal of the user.

        Raises:
            ValueError: If the stored goal_type is not a known goal
        """
        try:
            doc = await self.db[self.GOALS].find_one(
                {"user_id": user_id.value},
                sort=[("updated_at", -1)],
            )
        except PyMongoError as e:
            raise PersistenceError(f"Failed to read goal: {e}") from e

        if doc is None:
            return None
        return Goal(doc["goal_type"])

    async def get_allergens(self, user_id: UserId) -> Optional[AllergenSet]:
        try:
            cursor = self.db[self.ALLERGIES].find({"user_id": user_id.value})
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise PersistenceError(f"Failed to read allergies: {e}") from e

        return AllergenSet.of(doc.get("allergy_name") or "" for doc in docs)

    async def get_catalog(
        self, user_id: UserId, day: DayOfWeek, meal: MealType
    ) -> Optional[list[MenuItem]]:
        """
        All items of all menus owned by the user.

        Slot filtering happens in the domain, so ``day`` and ``meal`` are
        not used in the query. Returns None if the user has no menu.
        """
        try:
            menus = await self.db[self.MENUS].find({"user_id": user_id.value}).to_list(
                length=None
            )
            if not menus:
                return None
            # Menus without an id cannot own items
            menu_ids = [menu["menu_id"] for menu in menus if menu.get("menu_id") is not None]
            cursor = self.db[self.MENU_ITEMS].find({"menu_id": {"$in": menu_ids}})
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise PersistenceError(f"Failed to read menu catalog: {e}") from e

        items: list[MenuItem] = []
        for doc in docs:
            try:
                items.append(self._item_from_document(doc))
            except (KeyError, ValidationError) as e:
                logger.warning(
                    "Skipping invalid menu item",
                    item_id=doc.get("item_id"),
                    error=str(e),
                )
        return items

    @staticmethod
    def _item_from_document(doc: dict[str, Any]) -> MenuItem:
        """Convert a menu_items document to MenuItem."""
        slot: Optional[MealSlot]
        try:
            slot = MealSlot.parse(doc.get("day_of_week"), doc.get("meal_type"))
        except InvalidSlotError:
            # Items without a valid slot are kept but never swap-eligible
            slot = None

        return MenuItem(
            id=str(doc.get("item_id") or doc["_id"]),
            name=doc["name"],
            description=doc.get("description"),
            nutrients=NutrientProfile(
                calories=doc.get("calories"),
                protein_g=doc.get("protein"),
                carbs_g=doc.get("carbs"),
                fats_g=doc.get("fats"),
                fiber_g=doc.get("fiber"),
            ),
            category=doc.get("category") or "",
            slot=slot,
            menu_id=doc.get("menu_id"),
        )
