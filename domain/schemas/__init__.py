"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.plan_schemas import (
    WireModel,
    MealSlotSchema,
    DayMealsSchema,
    CreatePlanRequest,
    UpdatePlanRequest,
    BatchCopyData,
    BatchRequest,
    BatchResponse,
    ShoppingListItemSchema,
    ShoppingListResponse,
)

__all__ = [
    "WireModel",
    "MealSlotSchema",
    "DayMealsSchema",
    "CreatePlanRequest",
    "UpdatePlanRequest",
    "BatchCopyData",
    "BatchRequest",
    "BatchResponse",
    "ShoppingListItemSchema",
    "ShoppingListResponse",
]
