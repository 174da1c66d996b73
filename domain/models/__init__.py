"""
Domain models package - in-memory meal planning entities.
"""

from domain.models.meal_plan import (
    DEFAULT_SERVINGS,
    MAX_SERVINGS,
    MIN_SERVINGS,
    DayMeals,
    MealPlan,
    MealSlot,
    clamp_servings,
    rebase_days,
)

__all__ = [
    "DEFAULT_SERVINGS",
    "MAX_SERVINGS",
    "MIN_SERVINGS",
    "DayMeals",
    "MealPlan",
    "MealSlot",
    "clamp_servings",
    "rebase_days",
]
