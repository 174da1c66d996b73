"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.meal_plan_repository import MealPlanRepository
from repositories.recipe_repository import RecipeRepository

__all__ = [
    "BaseRepository",
    "MealPlanRepository",
    "RecipeRepository",
]
