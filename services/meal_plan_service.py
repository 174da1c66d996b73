"""Meal plan service - server-side rules for stored weekly plans"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import List, Optional, Tuple

from app.exceptions import ForbiddenError, NotFoundError, ServiceValidationError
from domain.enums import BatchOperation
from domain.mappers import MealPlanMapper
from domain.models import DayMeals, MealPlan
from domain.models.meal_plan import rebase_days, utcnow
from domain.schemas.plan_schemas import (
    BatchRequest,
    BatchResponse,
    CreatePlanRequest,
    DayMealsSchema,
    UpdatePlanRequest,
)
from domain.week import week_dates, week_start
from repositories import MealPlanRepository
from services.shopping_service import ShoppingItem, ShoppingListService

logger = logging.getLogger("smartplates.meal_plans")


def _days_from_schemas(schemas: List[DayMealsSchema], start: date) -> List[DayMeals]:
    """Build a full Monday..Sunday list from request days, placed by date."""
    payload = {
        "weekStartDate": start.isoformat(),
        "days": [s.model_dump(by_alias=True, mode="json") for s in schemas],
    }
    return MealPlanMapper.from_payload(payload).days


class MealPlanService:
    @staticmethod
    def list_plans(
        repo: MealPlanRepository,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        week_of: Optional[date] = None,
        is_template: Optional[bool] = None,
    ) -> List[MealPlan]:
        """
        List a user's plans.

        ``week_of`` selects the single week containing that date; otherwise
        ``start``/``end`` select every week overlapping the range.
        """
        if week_of is not None:
            plan = repo.find_by_user_and_week(user_id, week_start(week_of))
            if plan is None or (is_template is not None and plan.is_template != is_template):
                return []
            return [plan]
        if start is not None and end is not None and end < start:
            raise ServiceValidationError(
                "'to' must not be before 'from'",
                details={"from": start.isoformat(), "to": end.isoformat()},
            )
        return repo.list_by_user(user_id, start=start, end=end, is_template=is_template)

    @staticmethod
    def get_plan(repo: MealPlanRepository, plan_id: str, user_id: str) -> MealPlan:
        plan = repo.get_by_id_and_user(plan_id, user_id)
        if plan is None:
            raise NotFoundError(f"Meal plan {plan_id} not found")
        return plan

    @staticmethod
    def get_or_create(repo: MealPlanRepository, body: CreatePlanRequest) -> Tuple[MealPlan, bool]:
        """
        Return the user's plan for the requested week, creating it if missing.

        Returns:
            (plan, created) where created is False when the week already had a plan
        """
        monday = week_start(body.week_start_date)
        existing = repo.find_by_user_and_week(body.user_id, monday)
        if existing is not None:
            logger.info("Returning existing plan %s for week %s", existing.id, monday)
            return existing, False

        if body.days:
            days = _days_from_schemas(body.days, monday)
        else:
            days = [DayMeals(date=d) for d in week_dates(monday)]

        if body.copy_from_week is not None:
            source = repo.find_by_user_and_week(body.user_id, week_start(body.copy_from_week))
            if source is not None:
                days = rebase_days(source.days, monday)
                logger.info("Copying week %s into %s", source.week_key, monday)
            else:
                logger.info("No plan for week of %s to copy from", body.copy_from_week)

        plan = MealPlan(
            user_id=body.user_id,
            week_start_date=monday,
            days=days,
            title=body.title or "",
            is_template=body.is_template,
            shopping_list_generated=body.shopping_list_generated,
            total_calories=body.total_calories,
            tags=list(body.tags),
        )
        created = repo.create(plan)
        logger.info("Created plan %s for user %s week %s", created.id, body.user_id, monday)
        return created, True

    @staticmethod
    def update_plan(
        repo: MealPlanRepository, plan_id: str, user_id: str, body: UpdatePlanRequest
    ) -> MealPlan:
        plan = MealPlanService.get_plan(repo, plan_id, user_id)
        if body.days is not None:
            plan.days = _days_from_schemas(body.days, plan.week_start_date)
        if body.title is not None:
            plan.title = body.title
        if body.tags is not None:
            plan.tags = list(body.tags)
        if body.total_calories is not None:
            plan.total_calories = body.total_calories
        if body.shopping_list_generated is not None:
            plan.shopping_list_generated = body.shopping_list_generated
        plan.touch()
        return repo.update(plan)

    @staticmethod
    def delete_plan(repo: MealPlanRepository, plan_id: str, user_id: str) -> None:
        if not repo.delete(plan_id, user_id):
            raise NotFoundError(f"Meal plan {plan_id} not found")
        logger.info("Deleted plan %s of user %s", plan_id, user_id)

    @staticmethod
    def generate_shopping_list(
        repo: MealPlanRepository, plan_id: str, user_id: str
    ) -> Tuple[MealPlan, List[ShoppingItem]]:
        plan = MealPlanService.get_plan(repo, plan_id, user_id)
        items = ShoppingListService.build(plan)
        if not plan.shopping_list_generated:
            plan.shopping_list_generated = True
            plan.touch()
            repo.update(plan)
        return plan, items

    @staticmethod
    def batch(repo: MealPlanRepository, user_id: str, body: BatchRequest) -> BatchResponse:
        """
        Apply a bulk operation to plans owned by ``user_id``.

        Raises:
            ForbiddenError: if any id is unknown or belongs to another user
            ServiceValidationError: if a copy is requested without a start date
        """
        plan_ids = list(dict.fromkeys(body.plan_ids))
        if repo.count_owned(plan_ids, user_id) != len(plan_ids):
            raise ForbiddenError(
                "Some plans not found or unauthorized",
                details={"planIds": plan_ids},
            )

        operation = BatchOperation(body.operation)
        if operation == BatchOperation.DELETE:
            affected = repo.delete_many(plan_ids, user_id)
            message = f"Successfully deleted {affected} meal plan(s)"
        elif operation == BatchOperation.COPY:
            if body.data is None:
                raise ServiceValidationError("Start date required for copy operation")
            sources = sorted(repo.get_many(plan_ids, user_id), key=lambda p: p.week_start_date)
            copies = []
            now = utcnow()
            for i, source in enumerate(sources):
                target = week_start(body.data.start_date + timedelta(days=7 * i * body.data.weeks_to_advance))
                copies.append(
                    MealPlan(
                        user_id=user_id,
                        week_start_date=target,
                        days=rebase_days(source.days, target),
                        title=f"{source.title} (Copy)",
                        tags=list(source.tags),
                        total_calories=source.total_calories,
                        is_template=False,
                        created_at=now,
                        updated_at=now,
                    )
                )
            affected = len(repo.create_many(copies))
            message = f"Successfully copied {affected} meal plan(s)"
        else:
            affected = repo.mark_templates(plan_ids, user_id)
            message = f"Successfully converted {affected} plan(s) to template(s)"

        logger.info("Batch %s for user %s affected %d plans", operation.value, user_id, affected)
        return BatchResponse(operation=operation, affected=affected, message=message)
