"""
Meal analysis domain models.

Inbound request, outbound response and the append-only analysis record.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, field_validator, ConfigDict

from backend.mealswap.domain.catalog.models import DayOfWeek, MealSlot, MealType
from backend.mealswap.domain.estimation.models import MealEstimate
from backend.mealswap.domain.nutrition.models import Nutrient, NutrientProfile
from backend.mealswap.domain.recommendation.models import SwapSuggestion
from backend.mealswap.domain.shared.value_objects import RecordId, UserId


class PipelineState(str, Enum):
    """States of one analysis request."""

    INIT = "INIT"
    FETCHING_CONTEXT = "FETCHING_CONTEXT"
    FILTERING = "FILTERING"
    ESTIMATING = "ESTIMATING"
    VALIDATING_ESTIMATE = "VALIDATING_ESTIMATE"
    SELECTING = "SELECTING"
    PERSISTING = "PERSISTING"
    DONE = "DONE"
    FAILED = "FAILED"


class AnalysisStatus(str, Enum):
    """Outcome of a completed analysis."""

    SUCCESS = "success"  # Computed and persisted
    DEGRADED = "degraded"  # Computed, history append failed


class AnalysisRequest(BaseModel):
    """
    Request to analyze a meal photo.

    Attributes:
        image_reference: URL or data URL of the meal photo
        user_id: User requesting the analysis
        slot: Day/meal slot the meal belongs to
    """

    model_config = ConfigDict(frozen=True)

    image_reference: str = Field(..., min_length=1, description="Meal photo reference")
    user_id: UserId
    slot: MealSlot

    @field_validator("image_reference")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("image_reference cannot be empty")
        return v.strip()

    @classmethod
    def parse(cls, raw: Mapping[str, Any]) -> AnalysisRequest:
        """
        Build a request from a raw mapping.

        The slot is checked first so a bad day or meal type fails with
        InvalidSlotError before anything else.

        Raises:
            InvalidSlotError: If day_of_week or meal_type is missing/unknown
            pydantic.ValidationError: If image_reference or user_id is invalid
        """
        slot = MealSlot.parse(raw.get("day_of_week"), raw.get("meal_type"))
        return cls(
            image_reference=raw.get("image_reference") or "",
            user_id=UserId(value=raw.get("user_id") or ""),
            slot=slot,
        )


class AnalysisRecord(BaseModel):
    """
    Persisted result of one successful analysis.

    Created once, never mutated.
    """

    model_config = ConfigDict(frozen=True)

    record_id: RecordId
    user_id: UserId
    detected_items: tuple[str, ...] = Field(default_factory=tuple)
    nutrients: NutrientProfile
    goal_alignment: str = ""
    swaps: tuple[SwapSuggestion, ...] = Field(default_factory=tuple)
    day_of_week: DayOfWeek
    meal_type: MealType
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are assumed UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def slot(self) -> MealSlot:
        return MealSlot(day_of_week=self.day_of_week, meal_type=self.meal_type)

    def to_payload(self) -> dict[str, Any]:
        """History entry wire format."""
        nutrients = self.nutrients
        return {
            "record_id": self.record_id.value,
            "detected_items": list(self.detected_items),
            "calories": nutrients.value_of(Nutrient.CALORIES),
            "protein": nutrients.value_of(Nutrient.PROTEIN),
            "carbs": nutrients.value_of(Nutrient.CARBS),
            "fats": nutrients.value_of(Nutrient.FATS),
            "fiber": nutrients.value_of(Nutrient.FIBER),
            "goal_alignment": self.goal_alignment,
            "swaps": [swap.to_dict() for swap in self.swaps],
            "day_of_week": self.day_of_week.value,
            "meal_type": self.meal_type.value,
            "created_at": self.created_at.isoformat(),
        }

    @staticmethod
    def create_new(
        user_id: UserId,
        slot: MealSlot,
        estimate: MealEstimate,
        swaps: list[SwapSuggestion],
        record_id: Optional[RecordId] = None,
    ) -> AnalysisRecord:
        """
        Factory method with automatic ID and timestamp.

        Example:
            >>> record = AnalysisRecord.create_new(
            ...     user_id=UserId(value="user123"),
            ...     slot=MealSlot.parse("Monday", "Lunch"),
            ...     estimate=estimate,
            ...     swaps=swaps,
            ... )
        """
        return AnalysisRecord(
            record_id=record_id or RecordId.generate(),
            user_id=user_id,
            detected_items=estimate.detected_items,
            nutrients=estimate.nutrients,
            goal_alignment=estimate.goal_alignment,
            swaps=tuple(swaps),
            day_of_week=slot.day_of_week,
            meal_type=slot.meal_type,
            created_at=datetime.now(timezone.utc),
        )


class AnalysisResponse(BaseModel):
    """
    Result returned to the caller.

    Attributes:
        estimate: Validated meal estimate
        swaps: Selected swap suggestions (may be empty)
        status: success, or degraded when history could not be saved
        record_id: ID of the analysis record
    """

    model_config = ConfigDict(frozen=True)

    estimate: MealEstimate
    swaps: tuple[SwapSuggestion, ...] = Field(default_factory=tuple)
    status: AnalysisStatus = AnalysisStatus.SUCCESS
    record_id: Optional[RecordId] = None

    def to_payload(self) -> dict[str, Any]:
        """Outbound wire format."""
        nutrients = self.estimate.nutrients
        return {
            "detected_items": list(self.estimate.detected_items),
            "calories": nutrients.value_of(Nutrient.CALORIES),
            "protein": nutrients.value_of(Nutrient.PROTEIN),
            "carbs": nutrients.value_of(Nutrient.CARBS),
            "fats": nutrients.value_of(Nutrient.FATS),
            "fiber": nutrients.value_of(Nutrient.FIBER),
            "goal_alignment": self.estimate.goal_alignment,
            "swaps": [swap.to_dict() for swap in self.swaps],
            "status": self.status.value,
        }
