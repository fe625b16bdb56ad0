"""
MongoDB implementation of the analysis record repository.

Append-only: records are inserted once and never updated.
"""

from __future__ import annotations

from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from backend.mealswap.domain.analysis.models import AnalysisRecord
from backend.mealswap.domain.catalog.models import DayOfWeek, MealType
from backend.mealswap.domain.nutrition.models import NutrientProfile
from backend.mealswap.domain.recommendation.models import SwapSuggestion
from backend.mealswap.domain.shared.errors import PersistenceError
from backend.mealswap.domain.shared.value_objects import RecordId, UserId


class AnalysisRecordRepositoryMongo:
    """
    MongoDB implementation of IAnalysisRecordRepository.

    Storage design:
    - Collection: food_analyses
    - Unique index on record_id (idempotency)
    - Index on (user_id, created_at DESC) (recent history)

    Example:
        >>> from motor.motor_asyncio import AsyncIOMotorClient
        >>> client = AsyncIOMotorClient("mongodb://localhost:27017")
        >>> repository = AnalysisRecordRepositoryMongo(client.mealswap)
        >>> await repository.append(record)
    """

    COLLECTION_NAME = "food_analyses"

    def __init__(self, db: AsyncIOMotorDatabase[Any]):
        """
        Initialize repository with MongoDB database.

        Creates indexes on first use.

        Args:
            db: Motor AsyncIOMotorDatabase instance
        """
        self.db = db
        self.collection = db[self.COLLECTION_NAME]
        self._indexes_created = False

    async def _ensure_indexes(self) -> None:
        if self._indexes_created:
            return

        await self.collection.create_index(
            "record_id",
            unique=True,
            name="unique_record_id",
        )
        await self.collection.create_index(
            [("user_id", 1), ("created_at", -1)],
            name="idx_user_recent",
        )

        self._indexes_created = True

    def _to_document(self, record: AnalysisRecord) -> dict[str, Any]:
        """Convert AnalysisRecord to MongoDB document."""
        nutrients = record.nutrients
        return {
            "record_id": record.record_id.value,
            "user_id": record.user_id.value,
            "detected_items": list(record.detected_items),
            "calories": nutrients.calories,
            "protein": nutrients.protein_g,
            "carbs": nutrients.carbs_g,
            "fats": nutrients.fats_g,
            "fiber": nutrients.fiber_g,
            "goal_alignment": record.goal_alignment,
            "swaps": [swap.to_dict() for swap in record.swaps],
            "day_of_week": record.day_of_week.value,
            "meal_type": record.meal_type.value,
            "created_at": record.created_at,
        }

    def _from_document(self, doc: dict[str, Any]) -> AnalysisRecord:
        """Convert MongoDB document to AnalysisRecord."""
        return AnalysisRecord(
            record_id=RecordId(value=doc["record_id"]),
            user_id=UserId(value=doc["user_id"]),
            detected_items=tuple(doc.get("detected_items") or ()),
            nutrients=NutrientProfile(
                calories=doc.get("calories"),
                protein_g=doc.get("protein"),
                carbs_g=doc.get("carbs"),
                fats_g=doc.get("fats"),
                fiber_g=doc.get("fiber"),
            ),
            goal_alignment=doc.get("goal_alignment") or "",
            swaps=tuple(SwapSuggestion(**swap) for swap in doc.get("swaps") or ()),
            day_of_week=DayOfWeek(doc["day_of_week"]),
            meal_type=MealType(doc["meal_type"]),
            created_at=doc["created_at"],
        )

    async def append(self, record: AnalysisRecord) -> None:
        """
        Insert a new record.

        Raises:
            PersistenceError: On duplicate record_id or database failure
        """
        try:
            await self._ensure_indexes()
            await self.collection.insert_one(self._to_document(record))
        except DuplicateKeyError as e:
            raise PersistenceError(f"Record {record.record_id} already exists") from e
        except PyMongoError as e:
            raise PersistenceError(f"Failed to insert analysis record: {e}") from e

    async def get_by_user(self, user_id: UserId, limit: int = 5) -> list[AnalysisRecord]:
        """Get recent records for user, newest first."""
        try:
            await self._ensure_indexes()
            cursor = (
                self.collection.find({"user_id": user_id.value})
                .sort("created_at", -1)
                .limit(limit)
            )
            docs = await cursor.to_list(length=limit)
        except PyMongoError as e:
            raise PersistenceError(f"Failed to read analysis history: {e}") from e

        return [self._from_document(doc) for doc in docs]
