"""
Ports (Interfaces) for persistence used by the swap orchestrator.

Design Pattern: Ports & Adapters (Hexagonal Architecture)
"""

from typing import Optional, Protocol, Sequence, runtime_checkable

from backend.mealswap.domain.analysis.models import AnalysisRecord
from backend.mealswap.domain.catalog.models import DayOfWeek, MealType, MenuItem
from backend.mealswap.domain.profile.models import AllergenSet, Goal, UserProfile
from backend.mealswap.domain.shared.value_objects import UserId


@runtime_checkable
class IUserContextRepository(Protocol):
    """
    Read port for user context.

    Every method returns None when the data is not found and raises on
    storage failure.
    """

    async def get_profile(self, user_id: UserId) -> Optional[UserProfile]:
        """Get the user's physical profile."""
        ...

    async def get_goal(self, user_id: UserId) -> Optional[Goal]:
        """Get the user's active goal (most recent upsert)."""
        ...

    async def get_allergens(self, user_id: UserId) -> Optional[AllergenSet]:
        """Get the user's allergens."""
        ...

    async def get_catalog(
        self, user_id: UserId, day: DayOfWeek, meal: MealType
    ) -> Optional[Sequence[MenuItem]]:
        """
        Get the user's menu catalog for a slot.

        Implementations may return more than the slot; the orchestrator
        filters again. None means the user has no catalog at all.
        """
        ...


@runtime_checkable
class IAnalysisRecordRepository(Protocol):
    """
    Append-only store for analysis records.

    Never updates or deletes existing records.
    """

    async def append(self, record: AnalysisRecord) -> None:
        """
        Append a record.

        Raises:
            PersistenceError: On storage failure or duplicate record_id
        """
        ...

    async def get_by_user(self, user_id: UserId, limit: int = 5) -> list[AnalysisRecord]:
        """Get recent records for a user, newest first."""
        ...
