"""
Swap Recommendation Orchestration Service.

Runs one meal analysis end to end: context fetch, slot filtering and
allergen guarding, estimation with retry, validation, swap selection and
best-effort persistence.

Design Pattern: Service Layer + Dependency Injection
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Sequence

import structlog

from backend.mealswap.domain.analysis.models import (
    AnalysisRecord,
    AnalysisRequest,
    AnalysisResponse,
    AnalysisStatus,
    PipelineState,
)
from backend.mealswap.domain.analysis.ports import (
    IAnalysisRecordRepository,
    IUserContextRepository,
)
from backend.mealswap.domain.catalog.allergen_guard import guard
from backend.mealswap.domain.catalog.models import MenuItem
from backend.mealswap.domain.catalog.slot_filter import filter_slot
from backend.mealswap.domain.estimation.models import EstimationContext
from backend.mealswap.domain.estimation.ports import IMealEstimator
from backend.mealswap.domain.estimation.validator import validate_estimate
from backend.mealswap.domain.profile.models import AllergenSet, Goal, UserProfile
from backend.mealswap.domain.recommendation.selector import select_swaps
from backend.mealswap.domain.shared.errors import (
    ContextUnavailableError,
    DomainError,
    EstimationUnavailableError,
)
from backend.mealswap.domain.shared.value_objects import UserId
from backend.mealswap.infrastructure.config import OrchestratorSettings

logger = structlog.get_logger(__name__)

# First call plus one retry
ESTIMATOR_ATTEMPTS = 2


class _UserContext:
    """Context reads joined for one request."""

    __slots__ = ("profile", "goal", "allergens", "catalog")

    def __init__(
        self,
        profile: UserProfile,
        goal: Goal,
        allergens: AllergenSet,
        catalog: Optional[Sequence[MenuItem]],
    ) -> None:
        self.profile = profile
        self.goal = goal
        self.allergens = allergens
        self.catalog = catalog


class SwapRecommendationOrchestrator:
    """
    Orchestrates meal-swap recommendations.

    Responsibilities:
    - Fetch profile, goal, allergens and catalog concurrently
    - Restrict the catalog to safe items of the requested slot
    - Call the estimator with timeout and a single retry
    - Validate the estimate before anything consumes it
    - Select swaps and persist the analysis record without letting a
      storage failure fail the request

    Dependencies (injected via Ports/Interfaces):
    - context_repository: IUserContextRepository - user context reads
    - record_repository: IAnalysisRecordRepository - append-only history
    - estimator: IMealEstimator - external vision/nutrition model

    Example:
        >>> orchestrator = SwapRecommendationOrchestrator(
        ...     context_repository=context_repo,
        ...     record_repository=record_repo,
        ...     estimator=estimator,
        ... )
        >>> response = await orchestrator.analyze(request)
        >>> for swap in response.swaps:
        ...     print(f"{swap.from_item} -> {swap.to_item}")
    """

    def __init__(
        self,
        context_repository: IUserContextRepository,
        record_repository: IAnalysisRecordRepository,
        estimator: IMealEstimator,
        settings: Optional[OrchestratorSettings] = None,
    ):
        """
        Initialize orchestrator with dependencies.

        Args:
            context_repository: User context read port
            record_repository: Analysis history write port
            estimator: Meal estimator port
            settings: Timeouts, retry backoff and swap count
        """
        self.context_repository = context_repository
        self.record_repository = record_repository
        self.estimator = estimator
        self.settings = settings or OrchestratorSettings()
        self._pending: set[asyncio.Task[bool]] = set()

    async def analyze_raw(self, raw: Mapping[str, Any]) -> AnalysisResponse:
        """
        Parse an inbound payload and analyze it.

        Raises:
            InvalidSlotError: Before any external call if the slot is bad
        """
        return await self.analyze(AnalysisRequest.parse(raw))

    async def analyze(self, request: AnalysisRequest) -> AnalysisResponse:
        """
        Analyze a meal photo and recommend swaps.

        Workflow:
        1. Fetch user context (4 concurrent reads)
        2. Filter catalog to the slot and drop unsafe items
        3. Call estimator (timeout, one retry)
        4. Validate estimate
        5. Select top-K swaps
        6. Persist analysis record (failure only degrades the response)

        By default the response waits for the history append, bounded by
        ``persist_timeout_s``, so a lost write is reported as ``degraded``.
        With ``persist_in_background`` the append is scheduled instead and
        the response never waits on storage (status is always ``success``).

        Args:
            request: Validated analysis request

        Returns:
            AnalysisResponse with estimate, swaps and status

        Raises:
            ContextUnavailableError: Profile, goal or catalog missing, or a read failed
            EstimationUnavailableError: Estimator failed twice or timed out
            MalformedEstimateError: Estimate failed validation
        """
        log = logger.bind(user_id=request.user_id.value, slot=str(request.slot))
        trail: list[PipelineState] = [PipelineState.INIT]

        try:
            trail.append(PipelineState.FETCHING_CONTEXT)
            context = await self._fetch_context(request)

            trail.append(PipelineState.FILTERING)
            slot_items = filter_slot(
                context.catalog, request.slot.day_of_week, request.slot.meal_type
            )
            candidates = guard(slot_items, context.allergens)
            log.debug(
                "Candidates ready",
                slot_items=len(slot_items),
                safe_items=len(candidates),
            )

            trail.append(PipelineState.ESTIMATING)
            estimation_context = EstimationContext(
                goal=context.goal,
                allergens=context.allergens,
                profile=context.profile,
                slot=request.slot,
                candidate_names=tuple(item.name for item in candidates),
            )
            raw_estimate = await self._estimate(request, estimation_context, log)

            trail.append(PipelineState.VALIDATING_ESTIMATE)
            estimate = validate_estimate(raw_estimate)

            trail.append(PipelineState.SELECTING)
            swaps = select_swaps(estimate, candidates, context.goal, self.settings.swap_count)
        except DomainError as e:
            failed_at = trail[-1]
            trail.append(PipelineState.FAILED)
            log.warning(
                "Analysis failed",
                state=failed_at.value,
                reason=e.code,
                error=str(e),
                trail=[state.value for state in trail],
            )
            raise

        trail.append(PipelineState.PERSISTING)
        record = AnalysisRecord.create_new(
            user_id=request.user_id,
            slot=request.slot,
            estimate=estimate,
            swaps=swaps,
        )
        persisted = await self._persist(record, log)
        status = AnalysisStatus.SUCCESS if persisted else AnalysisStatus.DEGRADED

        trail.append(PipelineState.DONE)
        log.info(
            "Analysis completed",
            record_id=record.record_id.value,
            detected=len(estimate.detected_items),
            swaps=len(swaps),
            status=status.value,
            trail=[state.value for state in trail],
        )
        return AnalysisResponse(
            estimate=estimate,
            swaps=tuple(swaps),
            status=status,
            record_id=record.record_id,
        )

    async def get_history(self, user_id: UserId, limit: int = 5) -> list[AnalysisRecord]:
        """
        Get the user's recent analyses, newest first.

        Raises:
            PersistenceError: On storage failure
        """
        return await self.record_repository.get_by_user(user_id, limit=limit)

    async def drain(self) -> None:
        """Wait for background persistence tasks to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _fetch_context(self, request: AnalysisRequest) -> _UserContext:
        user_id = request.user_id
        results = await asyncio.gather(
            self.context_repository.get_profile(user_id),
            self.context_repository.get_goal(user_id),
            self.context_repository.get_allergens(user_id),
            self.context_repository.get_catalog(
                user_id, request.slot.day_of_week, request.slot.meal_type
            ),
            return_exceptions=True,
        )
        for name, result in zip(("profile", "goal", "allergens", "catalog"), results):
            if isinstance(result, Exception):
                raise ContextUnavailableError(f"Failed to read {name}: {result}") from result
            if isinstance(result, BaseException):
                raise result

        profile, goal, allergens, catalog = results
        if profile is None:
            raise ContextUnavailableError(f"No profile for user {user_id}")
        if goal is None:
            raise ContextUnavailableError(f"No goal for user {user_id}")
        if catalog is None:
            raise ContextUnavailableError(f"No menu catalog for user {user_id}")
        try:
            goal = Goal(goal)
        except ValueError as e:
            raise ContextUnavailableError(f"Unknown goal for user {user_id}: {goal!r}") from e

        return _UserContext(
            profile=profile,
            goal=goal,
            allergens=allergens if allergens is not None else AllergenSet.empty(),
            catalog=catalog,
        )

    async def _estimate(
        self,
        request: AnalysisRequest,
        context: EstimationContext,
        log: Any,
    ) -> Any:
        last_error: Optional[BaseException] = None
        for attempt in range(1, ESTIMATOR_ATTEMPTS + 1):
            try:
                return await asyncio.wait_for(
                    self.estimator.estimate(request.image_reference, context),
                    timeout=self.settings.estimator_timeout_s,
                )
            except asyncio.TimeoutError as e:
                last_error = e
                log.warning(
                    "Estimator timed out",
                    attempt=attempt,
                    timeout_s=self.settings.estimator_timeout_s,
                )
            except Exception as e:
                last_error = e
                log.warning("Estimator call failed", attempt=attempt, error=str(e))

            if attempt < ESTIMATOR_ATTEMPTS:
                await asyncio.sleep(self.settings.estimator_retry_backoff_s * attempt)

        raise EstimationUnavailableError(
            f"Estimator unavailable after {ESTIMATOR_ATTEMPTS} attempts: "
            f"{last_error!r}"
        ) from last_error

    async def _persist(self, record: AnalysisRecord, log: Any) -> bool:
        """Append the record. Returns False if the append failed or timed out."""
        if self.settings.persist_in_background:
            task = asyncio.create_task(self._append(record, log))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            return True

        try:
            return await asyncio.wait_for(
                self._append(record, log),
                timeout=self.settings.persist_timeout_s,
            )
        except asyncio.TimeoutError:
            log.error(
                "Persisting analysis record timed out",
                record_id=record.record_id.value,
                timeout_s=self.settings.persist_timeout_s,
            )
            return False

    async def _append(self, record: AnalysisRecord, log: Any) -> bool:
        try:
            await self.record_repository.append(record)
        except Exception as e:
            log.error(
                "Failed to persist analysis record",
                record_id=record.record_id.value,
                error=str(e),
            )
            return False
        log.info("Persisted analysis record", record_id=record.record_id.value)
        return True
