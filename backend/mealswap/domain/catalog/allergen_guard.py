"""
Allergen guard.

Conservative substring matching: an allergen token found anywhere in an
item's name, description or category makes the item unsafe. Missing an
allergen is the unacceptable failure mode, over-filtering is not.
No plural or synonym handling ("nut" matches "nuts", "dairy" does not
match "milk").
"""

from __future__ import annotations

from typing import Iterable

import structlog

from backend.mealswap.domain.catalog.models import MenuItem
from backend.mealswap.domain.profile.models import AllergenSet

logger = structlog.get_logger(__name__)


def matching_allergens(item: MenuItem, allergens: AllergenSet) -> list[str]:
    """Allergen tokens found in the item text, sorted."""
    text = item.searchable_text()
    return [token for token in allergens.tokens if token in text]


def is_safe(item: MenuItem, allergens: AllergenSet) -> bool:
    """True if no allergen token occurs in the item's name, description or category."""
    return not matching_allergens(item, allergens)


def guard(items: Iterable[MenuItem], allergens: AllergenSet) -> list[MenuItem]:
    """
    Drop unsafe items, preserving order.

    Args:
        items: Candidate menu items
        allergens: User allergens

    Returns:
        Safe items in input order
    """
    safe: list[MenuItem] = []
    for item in items:
        matches = matching_allergens(item, allergens)
        if matches:
            logger.debug("Excluded unsafe item", item_id=item.id, allergens=matches)
            continue
        safe.append(item)
    return safe
