"""
Meal plan mappers.
Handles transformation between the in-memory dataclasses and the JSON
documents exchanged with the meal plan store.

Recipe payloads and stored slots come in several historical shapes
(``cookingTime`` vs ``readyInMinutes``, ``recipeName`` vs ``title``, ingredient
strings vs ingredient objects). ``normalize_slot`` is the only place that
knows about them.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from domain.enums import MealType
from domain.models import DayMeals, MealPlan, MealSlot, clamp_servings
from domain.week import to_local_date, week_dates, week_start

logger = logging.getLogger("smartplates.mapper")

_NAME_KEYS = ("recipeName", "recipe_name", "name", "title")
_ID_KEYS = ("recipeId", "recipe_id", "id", "_id")
_PREP_KEYS = ("prepTime", "prep_time", "preparationMinutes")
_COOK_KEYS = ("cookingTime", "cooking_time", "readyInMinutes", "cookingMinutes")


def _first(payload: Mapping[str, Any], keys) -> Any:
    for key in keys:
        value = payload.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_int(value: Any, default: int) -> int:
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return default
    return number if number >= 0 else default


def _ingredient_names(raw: Any) -> List[str]:
    names: List[str] = []
    for item in raw or []:
        if isinstance(item, str):
            text = item.strip()
        elif isinstance(item, Mapping):
            text = str(item.get("original") or item.get("name") or item.get("nameClean") or "").strip()
        else:
            continue
        if text:
            names.append(text)
    return names


def normalize_slot(payload: Mapping[str, Any], servings: Optional[int] = None) -> MealSlot:
    """Build a canonical MealSlot from a recipe or stored-slot payload.

    Missing fields are defaulted (servings 1, times 0) rather than rejected.
    An explicit ``servings`` argument wins over the payload's own value.
    """
    recipe = payload.get("recipe") if isinstance(payload.get("recipe"), Mapping) else {}
    merged: Dict[str, Any] = {**recipe, **payload}

    raw_servings = servings if servings is not None else merged.get("servings")
    if isinstance(merged.get("yields"), Mapping) and raw_servings is None:
        raw_servings = merged["yields"].get("servings")

    ingredients = merged.get("ingredients")
    if not ingredients:
        ingredients = merged.get("extendedIngredients")

    recipe_id = _first(merged, _ID_KEYS)
    return MealSlot(
        recipe_id=str(recipe_id) if recipe_id is not None else "",
        recipe_name=str(_first(merged, _NAME_KEYS) or "").strip(),
        servings=clamp_servings(_as_int(raw_servings, 1) or 1),
        prep_time=_as_int(_first(merged, _PREP_KEYS), 0),
        cooking_time=_as_int(_first(merged, _COOK_KEYS), 0),
        image=merged.get("image") or merged.get("imageUrl") or None,
        ingredients=_ingredient_names(ingredients),
        tags={str(t) for t in merged.get("tags") or [] if t},
        notes=str(merged.get("notes") or ""),
    )


class MealPlanMapper:
    """Mapper for meal plan transformations."""

    @staticmethod
    def slot_to_payload(slot: MealSlot) -> Dict[str, Any]:
        return {
            "recipeId": slot.recipe_id,
            "recipeName": slot.recipe_name,
            "servings": slot.servings,
            "prepTime": slot.prep_time,
            "cookingTime": slot.cooking_time,
            "image": slot.image,
            "ingredients": list(slot.ingredients),
            "tags": sorted(slot.tags),
            "notes": slot.notes,
        }

    @staticmethod
    def day_to_payload(day: DayMeals) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"date": day.date.isoformat()}
        for meal_type, bucket in day.buckets():
            payload[meal_type.value] = [MealPlanMapper.slot_to_payload(s) for s in bucket]
        payload["dailyNotes"] = day.daily_notes
        return payload

    @staticmethod
    def to_payload(plan: MealPlan) -> Dict[str, Any]:
        """
        Convert a MealPlan to its JSON document.

        Dates are ISO ``YYYY-MM-DD`` strings, timestamps ISO-8601 datetimes.
        ``_id`` is only present once the plan has been persisted.
        """
        payload: Dict[str, Any] = {
            "userId": plan.user_id,
            "weekStartDate": plan.week_start_date.isoformat(),
            "weekEndDate": plan.week_end_date.isoformat(),
            "title": plan.title,
            "days": [MealPlanMapper.day_to_payload(d) for d in plan.days],
            "shoppingListGenerated": plan.shopping_list_generated,
            "isTemplate": plan.is_template,
            "totalCalories": plan.total_calories,
            "tags": list(plan.tags),
            "createdAt": plan.created_at.isoformat(),
            "updatedAt": plan.updated_at.isoformat(),
        }
        if plan.id:
            payload["_id"] = plan.id
        return payload

    @staticmethod
    def day_from_payload(payload: Mapping[str, Any], fallback_date=None) -> DayMeals:
        raw_date = payload.get("date") or fallback_date
        day = DayMeals(
            date=to_local_date(raw_date),
            daily_notes=str(payload.get("dailyNotes") or payload.get("daily_notes") or ""),
        )
        for meal_type in MealType:
            for raw_slot in payload.get(meal_type.value) or []:
                if isinstance(raw_slot, Mapping):
                    day.bucket(meal_type).append(normalize_slot(raw_slot))
        return day

    @staticmethod
    def from_payload(payload: Mapping[str, Any]) -> MealPlan:
        """
        Build a MealPlan from a stored or transmitted document.

        Days are placed by date, not by list position, so a document with
        missing, shuffled or off-by-one-stored days still loads as a valid
        Monday..Sunday plan. Days outside the week are dropped.
        """
        start = week_start(payload["weekStartDate"])
        dates = week_dates(start)
        days = [DayMeals(date=d) for d in dates]
        for raw_day in payload.get("days") or []:
            if not isinstance(raw_day, Mapping) or not raw_day.get("date"):
                continue
            day = MealPlanMapper.day_from_payload(raw_day)
            offset = (day.date - start).days
            if 0 <= offset < 7:
                days[offset] = day
            else:
                logger.warning("Dropping day %s outside week %s", day.date, start)

        plan = MealPlan(
            user_id=str(payload.get("userId") or ""),
            week_start_date=start,
            days=days,
            id=str(payload["_id"]) if payload.get("_id") else None,
            title=str(payload.get("title") or ""),
            shopping_list_generated=bool(payload.get("shoppingListGenerated", False)),
            is_template=bool(payload.get("isTemplate", False)),
            total_calories=payload.get("totalCalories"),
            tags=[str(t) for t in payload.get("tags") or []],
        )
        for attr, key in (("created_at", "createdAt"), ("updated_at", "updatedAt")):
            value = payload.get(key)
            if isinstance(value, str):
                value = datetime.fromisoformat(value.replace("Z", "+00:00"))
            if isinstance(value, datetime):
                setattr(plan, attr, value)
        return plan
