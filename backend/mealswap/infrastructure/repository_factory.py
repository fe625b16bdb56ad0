"""Repository factory.

Environment-based repository selection.
Strategy:
- REPOSITORY_BACKEND=mongodb: MongoDB persistence (requires MONGODB_URI)
- REPOSITORY_BACKEND=inmemory: in-memory stores (default, tests)
"""

from __future__ import annotations

from typing import Any, NamedTuple, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorClient

from backend.mealswap.domain.analysis.ports import (
    IAnalysisRecordRepository,
    IUserContextRepository,
)
from backend.mealswap.infrastructure.config import (
    get_mongodb_database,
    get_mongodb_uri,
    get_repository_backend,
)
from backend.mealswap.infrastructure.database.analysis_record_repository_mongo import (
    AnalysisRecordRepositoryMongo,
)
from backend.mealswap.infrastructure.database.in_memory import (
    InMemoryAnalysisRecordRepository,
    InMemoryUserContextRepository,
)
from backend.mealswap.infrastructure.database.user_context_repository_mongo import (
    UserContextRepositoryMongo,
)

logger = structlog.get_logger(__name__)


class Repositories(NamedTuple):
    """Repositories used by the orchestrator."""

    context: IUserContextRepository
    records: IAnalysisRecordRepository
    client: Optional[AsyncIOMotorClient[Any]] = None

    def close(self) -> None:
        """Close the MongoDB client, if any."""
        if self.client is not None:
            self.client.close()


def create_repositories(backend: Optional[str] = None) -> Repositories:
    """Create repositories based on REPOSITORY_BACKEND env var.

    Args:
        backend: Override for REPOSITORY_BACKEND ("inmemory" or "mongodb")

    Returns:
        Repositories bundle

    Raises:
        ValueError: If the backend is unknown, or mongodb is selected
            but MONGODB_URI is not set

    Example:
        # In .env (production):
        REPOSITORY_BACKEND=mongodb
        MONGODB_URI=mongodb://localhost:27017
    """
    mode = (backend or get_repository_backend()).lower()

    if mode == "mongodb":
        uri = get_mongodb_uri()
        if not uri:
            raise ValueError(
                "REPOSITORY_BACKEND=mongodb but MONGODB_URI not set. "
                "Set MONGODB_URI in .env or use REPOSITORY_BACKEND=inmemory"
            )
        client: AsyncIOMotorClient[Any] = AsyncIOMotorClient(uri)
        db = client[get_mongodb_database()]
        logger.info("Using MongoDB repositories", database=db.name)
        return Repositories(
            context=UserContextRepositoryMongo(db),
            records=AnalysisRecordRepositoryMongo(db),
            client=client,
        )

    if mode != "inmemory":
        raise ValueError(f"Unknown REPOSITORY_BACKEND: {mode!r}")

    logger.info("Using in-memory repositories")
    return Repositories(
        context=InMemoryUserContextRepository(),
        records=InMemoryAnalysisRecordRepository(),
    )
