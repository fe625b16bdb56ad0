"""
OpenAI prompts for meal estimation.

IMPORTANT: System prompts are cacheable by OpenAI.
Keep static instructions in ESTIMATION_SYSTEM_PROMPT and user context in
the user message.
"""

from typing import Any

from backend.mealswap.domain.estimation.models import EstimationContext


# ═══════════════════════════════════════════════════════════
# SYSTEM PROMPT (Cacheable - static instructions)
# ═══════════════════════════════════════════════════════════

ESTIMATION_SYSTEM_PROMPT = """You are a nutrition expert analyzing photos of meals.

Your task: identify the foods on the plate and estimate the nutrients of the whole meal.

Output: JSON object with:
- detected_items: Array of food names visible in the photo, most prominent first.
  Use an empty array if no food is visible. Never invent items.
- calories: Total energy of the meal in kcal
- protein: Total protein in grams
- carbs: Total carbohydrates in grams
- fats: Total fat in grams
- fiber: Total dietary fiber in grams
- goal_alignment: One or two sentences on how well the meal fits the user's goal

RULES:
- All five nutrient fields are required. Use 0 when a nutrient is absent, never omit it.
- Numbers only, no units in values.
- Estimate portions from visual context (plate size, cutlery).
- Do not propose substitutions; they are computed from the user's menu separately.
"""


# ═══════════════════════════════════════════════════════════
# USER MESSAGE BUILDER (Dynamic - not cached)
# ═══════════════════════════════════════════════════════════


def build_estimation_user_message(context: EstimationContext) -> str:
    """Build the user message carrying the user's context.

    Args:
        context: Goal, profile, allergens and safe slot candidates

    Returns:
        User message text
    """
    allergies = ", ".join(context.allergens.tokens) or "None"
    candidates = ", ".join(context.candidate_names) or "None"
    return (
        "Analyze this meal.\n\n"
        f"- Goal: {context.goal.label}\n"
        f"- Weight: {context.profile.weight_kg:g}kg, "
        f"Height: {context.profile.height_cm:g}cm, "
        f"BMI: {context.profile.bmi():.1f}\n"
        f"- Allergies: {allergies}\n"
        f"- Meal slot: {context.slot}\n"
        f"- Available menu items for this slot: {candidates}"
    )


# ═══════════════════════════════════════════════════════════
# JSON SCHEMA (For OpenAI structured output)
# ═══════════════════════════════════════════════════════════

ESTIMATION_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "detected_items": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Detected food names",
        },
        "calories": {"type": "number", "description": "Energy in kcal"},
        "protein": {"type": "number", "description": "Protein in grams"},
        "carbs": {"type": "number", "description": "Carbohydrates in grams"},
        "fats": {"type": "number", "description": "Fat in grams"},
        "fiber": {"type": "number", "description": "Fiber in grams"},
        "goal_alignment": {"type": "string", "description": "Fit with the user's goal"},
    },
    "required": [
        "detected_items",
        "calories",
        "protein",
        "carbs",
        "fats",
        "fiber",
        "goal_alignment",
    ],
    "additionalProperties": False,
}

# Strict structured output; the validator still checks every value
ESTIMATION_RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "meal_estimate",
        "schema": ESTIMATION_OUTPUT_SCHEMA,
        "strict": True,
    },
}


def build_estimation_messages(
    image_reference: str, context: EstimationContext
) -> list[dict[str, Any]]:
    """Build complete message array for the vision API.

    Args:
        image_reference: URL or data URL of the meal photo
        context: Estimation context

    Returns:
        List of message dicts for OpenAI API
    """
    return [
        {"role": "system", "content": ESTIMATION_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": build_estimation_user_message(context)},
                {"type": "image_url", "image_url": {"url": image_reference}},
            ],
        },
    ]
