"""
Adapters package - External service connections.
MongoDB storage adapter and the HTTP client for the meal plan store.
"""

from adapters import mongo_adapter
from adapters.meal_plan_api import MealPlanApiClient

__all__ = [
    "mongo_adapter",
    "MealPlanApiClient",
]
