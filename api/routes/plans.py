"""Meal plan routes - weekly plan storage, batch operations and exports"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, Response

from api.dependencies import get_meal_plan_repository
from api.responses import success_response
from app.exceptions import UnauthorizedError
from domain.mappers import MealPlanMapper
from domain.schemas.plan_schemas import (
    BatchRequest,
    CreatePlanRequest,
    ShoppingListItemSchema,
    ShoppingListResponse,
    UpdatePlanRequest,
)
from repositories import MealPlanRepository
from services.calendar_export import build_ics
from services.meal_plan_service import MealPlanService

router = APIRouter(prefix="/meal-plans", tags=["Meal Plans"])
logger = logging.getLogger("smartplates.api.plans")


def _require_user(user_id: Optional[str]) -> str:
    user_id = (user_id or "").strip()
    if not user_id:
        raise UnauthorizedError("A user id is required")
    return user_id


@router.get("")
def list_meal_plans(
    user_id: str = Query(..., alias="userId", description="Owner of the plans"),
    start: Optional[date] = Query(default=None, alias="from", description="First date of the range"),
    end: Optional[date] = Query(default=None, alias="to", description="Last date of the range"),
    week_start: Optional[date] = Query(default=None, alias="weekStart", description="Any date in a single week"),
    template: Optional[bool] = Query(default=None, description="Only templates (true) or only regular plans (false)"),
    repo: MealPlanRepository = Depends(get_meal_plan_repository),
):
    """
    List a user's meal plans.

    - **from** / **to**: plans whose week overlaps the range
    - **weekStart**: only the plan of the week containing this date
    - **template**: filter on the template flag
    """
    user_id = _require_user(user_id)
    plans = MealPlanService.list_plans(
        repo, user_id, start=start, end=end, week_of=week_start, is_template=template
    )
    return success_response(data=[MealPlanMapper.to_payload(p) for p in plans])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_meal_plan(body: CreatePlanRequest, repo: MealPlanRepository = Depends(get_meal_plan_repository)):
    """
    Get or create the plan of a week.

    Returns 201 with the new plan, or 200 with the plan the week already had.
    With **copyFromWeek** the new plan starts with that week's meals.
    """
    _require_user(body.user_id)
    plan, created = MealPlanService.get_or_create(repo, body)
    if created:
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=success_response(MealPlanMapper.to_payload(plan), "Meal plan created successfully"),
        )
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=success_response(MealPlanMapper.to_payload(plan), "Meal plan already exists for this week"),
    )


@router.post("/batch")
def batch_meal_plans(
    body: BatchRequest,
    user_id: str = Query(..., alias="userId"),
    repo: MealPlanRepository = Depends(get_meal_plan_repository),
):
    """Bulk **delete**, **copy** or **makeTemplates** on the caller's own plans."""
    user_id = _require_user(user_id)
    result = MealPlanService.batch(repo, user_id, body)
    return result.model_dump(by_alias=True, mode="json")


@router.get("/{plan_id}")
def get_meal_plan(
    plan_id: str,
    user_id: str = Query(..., alias="userId"),
    repo: MealPlanRepository = Depends(get_meal_plan_repository),
):
    plan = MealPlanService.get_plan(repo, plan_id, _require_user(user_id))
    return success_response(data=MealPlanMapper.to_payload(plan))


@router.put("/{plan_id}")
def update_meal_plan(
    plan_id: str,
    body: UpdatePlanRequest,
    user_id: str = Query(..., alias="userId"),
    repo: MealPlanRepository = Depends(get_meal_plan_repository),
):
    """Replace the days and/or metadata of a stored plan."""
    plan = MealPlanService.update_plan(repo, plan_id, _require_user(user_id), body)
    return success_response(MealPlanMapper.to_payload(plan), "Meal plan updated successfully")


@router.delete("/{plan_id}")
def delete_meal_plan(
    plan_id: str,
    user_id: str = Query(..., alias="userId"),
    repo: MealPlanRepository = Depends(get_meal_plan_repository),
):
    MealPlanService.delete_plan(repo, plan_id, _require_user(user_id))
    return success_response({"deleted": plan_id}, "Meal plan deleted successfully")


@router.post("/{plan_id}/shopping-list")
def generate_shopping_list(
    plan_id: str,
    user_id: str = Query(..., alias="userId"),
    repo: MealPlanRepository = Depends(get_meal_plan_repository),
):
    """Aggregate the plan's ingredients and flag the plan as shopped for."""
    plan, items = MealPlanService.generate_shopping_list(repo, plan_id, _require_user(user_id))
    response = ShoppingListResponse(
        plan_id=plan.id,
        week_start_date=plan.week_start_date,
        items=[
            ShoppingListItemSchema(name=i.name, count=i.count, recipes=i.recipes, checked=i.checked)
            for i in items
        ],
    )
    return success_response(response.model_dump(by_alias=True, mode="json"), f"{len(items)} items")


@router.get("/{plan_id}/calendar.ics")
def export_calendar(
    plan_id: str,
    user_id: str = Query(..., alias="userId"),
    repo: MealPlanRepository = Depends(get_meal_plan_repository),
):
    """Download the plan as an iCalendar file."""
    plan = MealPlanService.get_plan(repo, plan_id, _require_user(user_id))
    logger.info("Exporting plan %s as calendar", plan_id)
    return Response(
        content=build_ics(plan),
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="meal-plan-{plan.week_key}.ics"'},
    )
