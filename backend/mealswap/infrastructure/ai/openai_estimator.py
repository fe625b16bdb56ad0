"""OpenAI Vision adapter for the meal estimator port."""

from __future__ import annotations

import time
from typing import Any, Optional

import structlog
from openai import AsyncOpenAI

from backend.mealswap.domain.estimation.models import EstimationContext
from backend.mealswap.domain.estimation.prompts import (
    ESTIMATION_RESPONSE_FORMAT,
    build_estimation_messages,
)
from backend.mealswap.infrastructure.config import get_openai_api_key

logger = structlog.get_logger(__name__)


class OpenAIMealEstimator:
    """
    Meal estimator backed by an OpenAI vision model.

    Owns its AsyncOpenAI client between ``__aenter__`` and ``__aexit__``.
    SDK retries are disabled: the orchestrator applies the timeout and the
    single retry. The model's raw JSON text is returned; validation happens
    in the domain.

    Example:
        >>> async with OpenAIMealEstimator(model="gpt-4o") as estimator:
        ...     raw = await estimator.estimate(image_url, context)
    """

    def __init__(
        self,
        model: str = "gpt-4o",
        api_key: Optional[str] = None,
        timeout: float = 20.0,
        max_tokens: int = 1000,
        temperature: float = 0.2,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        """
        Args:
            model: Vision model with structured output support
            api_key: OpenAI API key (reads OPENAI_API_KEY if None)
            timeout: HTTP timeout of one completion, in seconds
            max_tokens: Completion token cap
            temperature: Sampling temperature
            client: Pre-built AsyncOpenAI client (tests)

        Raises:
            ValueError: If no API key is available and no client is given
        """
        if client is None:
            api_key = api_key or get_openai_api_key()
            if not api_key:
                raise ValueError(
                    "OPENAI_API_KEY not found in environment. "
                    "Set it in .env file or pass as parameter."
                )

        self.model = model
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._api_key = api_key
        self._client = client

    async def __aenter__(self) -> OpenAIMealEstimator:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                timeout=self.timeout,
                max_retries=0,
            )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def estimate(self, image_reference: str, context: EstimationContext) -> str:
        """
        Ask the model for detected items and nutrients.

        A refusal or a truncated completion is returned as-is (possibly
        empty) and rejected by the validator.

        Args:
            image_reference: URL or data URL of the meal photo
            context: Goal, profile, allergies and safe slot candidates

        Returns:
            Raw model output (JSON text, unvalidated)

        Raises:
            RuntimeError: If used outside ``async with``
            openai.OpenAIError: On API failure
        """
        if self._client is None:
            raise RuntimeError("Estimator not started. Use async with.")

        start = time.perf_counter()
        completion = await self._client.chat.completions.create(
            model=self.model,
            messages=build_estimation_messages(image_reference, context),  # type: ignore[arg-type]
            response_format=ESTIMATION_RESPONSE_FORMAT,  # type: ignore[arg-type]
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        choice = completion.choices[0]
        log = logger.bind(
            model=self.model,
            finish_reason=choice.finish_reason,
            elapsed_ms=int((time.perf_counter() - start) * 1000),
            candidates=len(context.candidate_names),
        )
        refusal = getattr(choice.message, "refusal", None)
        if refusal:
            log.warning("Estimator refused the request", refusal=refusal)
        elif choice.finish_reason == "length":
            log.warning("Estimator output truncated", max_tokens=self.max_tokens)
        else:
            log.info(
                "Estimator call completed",
                total_tokens=completion.usage.total_tokens if completion.usage else 0,
            )
        return choice.message.content or ""
