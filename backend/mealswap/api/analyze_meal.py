"""REST API endpoints for meal analysis and swap recommendations.

POST /analyze-meal runs the swap pipeline on a meal photo;
GET /analyses/{user_id} returns the most recent analyses.
"""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from backend.mealswap.application.recommendation.orchestration_service import (
    SwapRecommendationOrchestrator,
)
from backend.mealswap.domain.shared.errors import (
    ContextUnavailableError,
    DomainError,
    EstimationUnavailableError,
    InvalidSlotError,
    MalformedEstimateError,
    PersistenceError,
)
from backend.mealswap.domain.shared.value_objects import UserId

logger = structlog.get_logger(__name__)

# Domain error -> HTTP status
ERROR_STATUS: dict[type[DomainError], int] = {
    InvalidSlotError: 400,
    ContextUnavailableError: 409,
    MalformedEstimateError: 502,
    EstimationUnavailableError: 503,
    PersistenceError: 503,
}


class AnalyzeMealRequest(BaseModel):
    """Request body of POST /analyze-meal."""

    image_reference: str = Field(..., description="Meal photo URL or data URL")
    user_id: str = Field(..., description="Requesting user")
    day_of_week: Optional[str] = Field(None, description="e.g. Monday")
    meal_type: Optional[str] = Field(None, description="Breakfast, Lunch, Dinner or Snacks")


class SwapResponse(BaseModel):
    from_item: str
    to_item: str
    reason: str
    nutritional_benefit: str


class AnalyzeMealResponse(BaseModel):
    """Response body of POST /analyze-meal."""

    detected_items: list[str]
    calories: float
    protein: float
    carbs: float
    fats: float
    fiber: float
    goal_alignment: str
    swaps: list[SwapResponse]
    status: str


class AnalysisHistoryEntry(BaseModel):
    """One entry of GET /analyses/{user_id}."""

    record_id: str
    detected_items: list[str]
    calories: float
    protein: float
    carbs: float
    fats: float
    fiber: float
    goal_alignment: str
    swaps: list[SwapResponse]
    day_of_week: str
    meal_type: str
    created_at: str


class ErrorResponse(BaseModel):
    """Response model for analysis errors."""

    error: str
    detail: Optional[str] = None


def status_for(error: DomainError) -> int:
    """HTTP status for a domain error (500 if unmapped)."""
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 500


async def domain_error_handler(_: Request, exc: Exception) -> JSONResponse:
    """Render a DomainError as {error, detail}."""
    assert isinstance(exc, DomainError)
    return JSONResponse(
        status_code=status_for(exc),
        content={"error": exc.code, "detail": exc.user_message},
    )


def get_orchestrator(request: Request) -> SwapRecommendationOrchestrator:
    """Orchestrator built by the application lifespan.

    Raises:
        HTTPException: 503 if the application is not ready
    """
    orchestrator: Optional[SwapRecommendationOrchestrator] = getattr(
        request.app.state, "orchestrator", None
    )
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return orchestrator


router = APIRouter(tags=["analysis"])

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status: {"model": ErrorResponse} for status in sorted(set(ERROR_STATUS.values()))
}


@router.post(
    "/analyze-meal",
    response_model=AnalyzeMealResponse,
    responses=_ERROR_RESPONSES,
)
async def analyze_meal(
    body: AnalyzeMealRequest,
    orchestrator: SwapRecommendationOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """Analyze a meal photo and suggest swaps from the user's menu.

    Example:
        ```bash
        curl -X POST http://localhost:8080/analyze-meal \\
          -H "Content-Type: application/json" \\
          -d '{"image_reference": "https://example.com/meal.jpg",
               "user_id": "user_123", "day_of_week": "Monday",
               "meal_type": "Lunch"}'
        ```
    """
    logger.info(
        "Analyze meal request",
        user_id=body.user_id,
        day_of_week=body.day_of_week,
        meal_type=body.meal_type,
    )
    try:
        response = await orchestrator.analyze_raw(body.model_dump())
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=[err["msg"] for err in e.errors()]) from e
    return response.to_payload()


@router.get(
    "/analyses/{user_id}",
    response_model=list[AnalysisHistoryEntry],
    responses={503: {"model": ErrorResponse}},
)
async def list_analyses(
    user_id: str = Path(..., min_length=1, description="User ID"),
    limit: int = Query(5, ge=1, le=50, description="Max entries, newest first"),
    orchestrator: SwapRecommendationOrchestrator = Depends(get_orchestrator),
) -> list[dict[str, Any]]:
    """Recent analyses of a user, newest first."""
    try:
        uid = UserId(value=user_id)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail="user_id cannot be empty") from e
    records = await orchestrator.get_history(uid, limit=limit)
    return [record.to_payload() for record in records]
