"""
Domain exceptions.

Typed exceptions for the swap recommendation pipeline.
Each failure kind maps to one class with a stable ``code`` and a
message that can be shown to the user.
"""

from __future__ import annotations

from typing import Sequence


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    Attributes:
        code: Stable machine-readable error code
        user_message: Message safe to surface to end users
    """

    code: str = "DomainError"
    user_message: str = "Something went wrong."


# ═══════════════════════════════════════════════════════════
# REQUEST / CONTEXT EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class InvalidSlotError(DomainError):
    """
    Day of week or meal type missing or unknown.

    Raised before any external call is made.

    Example:
        >>> raise InvalidSlotError("Unknown meal_type: 'Brunch'")
    """

    code = "InvalidSlot"
    user_message = "Please pick a valid day and meal type."


class ContextUnavailableError(DomainError):
    """
    Mandatory user data missing or unreadable.

    Raised when:
    - Profile or goal not found
    - Menu catalog absent
    - A context read failed

    Example:
        >>> raise ContextUnavailableError("No goal for user user_123")
    """

    code = "ContextUnavailable"
    user_message = "Please complete onboarding first."


# ═══════════════════════════════════════════════════════════
# ESTIMATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class EstimationUnavailableError(DomainError):
    """
    External estimator down or timed out (after the retry).

    Example:
        >>> raise EstimationUnavailableError("Estimator timeout after 20s")
    """

    code = "EstimationUnavailable"
    user_message = "Meal analysis is temporarily unavailable, please retry later."


class MalformedEstimateError(DomainError):
    """
    Estimator output failed schema validation.

    Not retried automatically.

    Attributes:
        fields: Names of the offending fields

    Example:
        >>> raise MalformedEstimateError("calories: missing", fields=["calories"])
    """

    code = "MalformedEstimate"
    user_message = "Analysis failed, try again."

    def __init__(self, message: str, fields: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.fields = tuple(fields)


# ═══════════════════════════════════════════════════════════
# INFRASTRUCTURE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class PersistenceError(DomainError):
    """
    Repository write or read failed.

    The orchestrator never propagates write failures: the response is
    returned with a degraded status instead.

    Example:
        >>> raise PersistenceError("MongoDB connection lost")
    """

    code = "PersistenceDegraded"
    user_message = "Your analysis could not be saved to history."
