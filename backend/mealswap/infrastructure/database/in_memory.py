"""In-memory implementations of the persistence ports for tests and development."""

from __future__ import annotations

from typing import Iterable, Optional

from backend.mealswap.domain.analysis.models import AnalysisRecord
from backend.mealswap.domain.catalog.models import DayOfWeek, MealType, MenuItem
from backend.mealswap.domain.profile.models import AllergenSet, Goal, UserProfile
from backend.mealswap.domain.shared.errors import PersistenceError
from backend.mealswap.domain.shared.value_objects import UserId


class InMemoryUserContextRepository:
    """
    In-memory user context store.

    Data is lost when the application stops. Models are immutable, so
    stored instances are shared rather than copied.
    """

    def __init__(self) -> None:
        self._profiles: dict[str, UserProfile] = {}
        self._goals: dict[str, Goal] = {}
        self._allergens: dict[str, AllergenSet] = {}
        self._catalogs: dict[str, list[MenuItem]] = {}

    # Seeding

    def save_profile(self, user_id: UserId, profile: UserProfile) -> None:
        self._profiles[user_id.value] = profile

    def upsert_goal(self, user_id: UserId, goal: Goal) -> None:
        """Set the active goal; the latest call wins."""
        self._goals[user_id.value] = Goal(goal)

    def save_allergens(self, user_id: UserId, allergens: AllergenSet) -> None:
        self._allergens[user_id.value] = allergens

    def add_menu_items(self, user_id: UserId, items: Iterable[MenuItem]) -> None:
        """Append items to the user's catalog, creating it if needed."""
        self._catalogs.setdefault(user_id.value, []).extend(items)

    # IUserContextRepository

    async def get_profile(self, user_id: UserId) -> Optional[UserProfile]:
        return self._profiles.get(user_id.value)

    async def get_goal(self, user_id: UserId) -> Optional[Goal]:
        return self._goals.get(user_id.value)

    async def get_allergens(self, user_id: UserId) -> Optional[AllergenSet]:
        return self._allergens.get(user_id.value)

    async def get_catalog(
        self, user_id: UserId, day: DayOfWeek, meal: MealType
    ) -> Optional[list[MenuItem]]:
        """Whole catalog snapshot; None if the user never created one."""
        catalog = self._catalogs.get(user_id.value)
        return list(catalog) if catalog is not None else None


class InMemoryAnalysisRecordRepository:
    """In-memory append-only analysis history."""

    def __init__(self) -> None:
        self._records: list[AnalysisRecord] = []
        self._ids: set[str] = set()

    async def append(self, record: AnalysisRecord) -> None:
        """
        Append a record.

        Raises:
            PersistenceError: If the record_id already exists
        """
        if record.record_id.value in self._ids:
            raise PersistenceError(f"Record {record.record_id} already exists")
        self._ids.add(record.record_id.value)
        self._records.append(record)

    async def get_by_user(self, user_id: UserId, limit: int = 5) -> list[AnalysisRecord]:
        # Reversed first so equal timestamps list the latest append first
        records = [r for r in reversed(self._records) if r.user_id == user_id]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[:limit]

    def count(self) -> int:
        return len(self._records)
