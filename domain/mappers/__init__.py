"""
Domain mappers package.
Handles transformation between in-memory models and JSON documents.
"""

from domain.mappers.meal_plan_mapper import MealPlanMapper, normalize_slot

__all__ = ["MealPlanMapper", "normalize_slot"]
