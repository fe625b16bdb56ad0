"""
Meal-swap recommendation engine.

Given an estimate for a photographed meal and a user's profile, goal,
allergens and slot-scoped menu catalog, produces safe, goal-aligned
swap suggestions drawn from the user's own menu.

Structure:
- domain/: Business logic and domain models
- infrastructure/: External concerns (OpenAI, MongoDB, config, logging)
- application/: Use cases orchestrating domain services
- api/: FastAPI HTTP layer
- tests/: Test suite
"""

__version__ = "1.0.0"
