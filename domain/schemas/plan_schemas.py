from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from domain.enums import BatchOperation
from domain.week import to_local_date


class WireModel(BaseModel):
    """Base for JSON payloads exchanged with the meal plan store (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _local_date(value):
    if value is None or isinstance(value, dt.date) and not isinstance(value, dt.datetime):
        return value
    return to_local_date(value)


class MealSlotSchema(WireModel):
    recipe_id: str = ""
    recipe_name: str = ""
    servings: int = Field(default=2, ge=1, le=20)
    prep_time: int = Field(default=0, ge=0)
    cooking_time: int = Field(default=0, ge=0)
    image: Optional[str] = None
    ingredients: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    notes: str = ""


class DayMealsSchema(WireModel):
    date: dt.date
    breakfast: List[MealSlotSchema] = Field(default_factory=list)
    lunch: List[MealSlotSchema] = Field(default_factory=list)
    dinner: List[MealSlotSchema] = Field(default_factory=list)
    snacks: List[MealSlotSchema] = Field(default_factory=list)
    daily_notes: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v):
        return _local_date(v)


class CreatePlanRequest(WireModel):
    user_id: str = Field(..., min_length=1)
    week_start_date: dt.date
    title: Optional[str] = None
    is_template: bool = False
    shopping_list_generated: bool = False
    total_calories: Optional[float] = None
    tags: List[str] = Field(default_factory=list)
    copy_from_week: Optional[dt.date] = None
    days: Optional[List[DayMealsSchema]] = Field(default=None, max_length=7)

    @field_validator("week_start_date", "copy_from_week", mode="before")
    @classmethod
    def normalize_dates(cls, v):
        return _local_date(v)


class UpdatePlanRequest(WireModel):
    days: Optional[List[DayMealsSchema]] = Field(default=None, max_length=7)
    title: Optional[str] = None
    tags: Optional[List[str]] = None
    total_calories: Optional[float] = None
    shopping_list_generated: Optional[bool] = None


class BatchCopyData(WireModel):
    start_date: dt.date
    weeks_to_advance: int = Field(default=1, ge=1, le=52)

    @field_validator("start_date", mode="before")
    @classmethod
    def normalize_date(cls, v):
        return _local_date(v)


class BatchRequest(WireModel):
    operation: BatchOperation
    plan_ids: List[str] = Field(..., min_length=1)
    data: Optional[BatchCopyData] = None


class BatchResponse(WireModel):
    success: bool = True
    operation: BatchOperation
    affected: int
    message: str


class ShoppingListItemSchema(WireModel):
    name: str
    count: int
    recipes: List[str] = Field(default_factory=list)
    checked: bool = False


class ShoppingListResponse(WireModel):
    plan_id: Optional[str] = None
    week_start_date: dt.date
    items: List[ShoppingListItemSchema] = Field(default_factory=list)
