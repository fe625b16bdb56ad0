"""FastAPI application factory.

Run with:
    uvicorn --factory backend.mealswap.api.app:create_app --port 8080
"""

import os
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, AsyncIterator, Optional

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI

from backend.mealswap import __version__
from backend.mealswap.api.analyze_meal import domain_error_handler, router
from backend.mealswap.application.recommendation.orchestration_service import (
    SwapRecommendationOrchestrator,
)
from backend.mealswap.domain.shared.errors import DomainError
from backend.mealswap.infrastructure.ai.openai_estimator import OpenAIMealEstimator
from backend.mealswap.infrastructure.config import (
    get_openai_model,
    load_orchestrator_settings,
)
from backend.mealswap.infrastructure.logging_config import configure_logging
from backend.mealswap.infrastructure.repository_factory import create_repositories

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the orchestrator on startup and release clients on shutdown.

    Skipped when an orchestrator was injected into create_app.
    """
    if getattr(app.state, "orchestrator", None) is not None:
        yield
        return

    async with AsyncExitStack() as stack:
        repositories = create_repositories()
        stack.callback(repositories.close)

        settings = load_orchestrator_settings()
        estimator = await stack.enter_async_context(
            OpenAIMealEstimator(
                model=get_openai_model(),
                timeout=settings.estimator_timeout_s,
            )
        )
        orchestrator = SwapRecommendationOrchestrator(
            context_repository=repositories.context,
            record_repository=repositories.records,
            estimator=estimator,
            settings=settings,
        )
        app.state.orchestrator = orchestrator
        logger.info(
            "Application ready",
            model=estimator.model,
            swap_count=settings.swap_count,
            persist_in_background=settings.persist_in_background,
        )

        try:
            yield
        finally:
            logger.info("Application shutting down")
            await orchestrator.drain()
            app.state.orchestrator = None


def create_app(
    orchestrator: Optional[SwapRecommendationOrchestrator] = None,
    load_env: bool = True,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        orchestrator: Pre-built orchestrator (tests); built from env otherwise
        load_env: Load variables from .env

    Returns:
        Configured FastAPI app
    """
    if load_env:
        load_dotenv()
    configure_logging()

    app = FastAPI(
        title="Meal Swap Recommendation API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator
    app.add_exception_handler(DomainError, domain_error_handler)
    app.include_router(router)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"status": "ok", "version": __version__}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.mealswap.api.app:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        log_level="info",
    )
