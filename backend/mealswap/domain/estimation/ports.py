"""
Port (interface) for the external meal estimator.

Design Pattern: Ports & Adapters (Hexagonal Architecture)
"""

from typing import Any, Protocol, runtime_checkable

from backend.mealswap.domain.estimation.models import EstimationContext


@runtime_checkable
class IMealEstimator(Protocol):
    """
    Port for the vision/nutrition estimator.

    Implementations call an external model and return its raw,
    untrusted output. Validation is not their concern.
    """

    async def estimate(self, image_reference: str, context: EstimationContext) -> Any:
        """
        Estimate detected foods and nutrients for a meal photo.

        Args:
            image_reference: URL or data URL of the meal photo
            context: Goal, allergens, profile and safe slot candidates

        Returns:
            Raw payload (mapping or JSON text)

        Raises:
            Exception: On transport failure; the orchestrator maps it
                to EstimationUnavailableError
        """
        ...
