"""
Meal Plan Repository - Data access layer for meal plan documents (MongoDB)
"""

import logging
from datetime import date
from typing import List, Optional
from uuid import uuid4

from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from adapters import mongo_adapter
from app.exceptions import ConflictError
from domain.mappers import MealPlanMapper
from domain.models import MealPlan
from domain.models.meal_plan import utcnow
from repositories.base import BaseRepository

logger = logging.getLogger("smartplates.repositories.meal_plans")


class MealPlanRepository(BaseRepository):
    """Repository for meal plan data access.

    Documents are the camelCase payloads of ``MealPlanMapper`` with string
    ``_id`` values; dates are stored as ISO ``YYYY-MM-DD`` strings so range
    filters compare lexicographically.
    """

    def __init__(self, collection=None):
        super().__init__(collection, resolve=mongo_adapter.meal_plans)

    def _to_plans(self, docs) -> List[MealPlan]:
        return [MealPlanMapper.from_payload(doc) for doc in docs]

    def get_by_id_and_user(self, plan_id: str, user_id: str) -> Optional[MealPlan]:
        """Get meal plan by ID for specific user"""
        doc = self.find_one({"_id": plan_id, "userId": user_id})
        return MealPlanMapper.from_payload(doc) if doc else None

    def find_by_user_and_week(self, user_id: str, week_start: date) -> Optional[MealPlan]:
        doc = self.find_one({"userId": user_id, "weekStartDate": week_start.isoformat()})
        return MealPlanMapper.from_payload(doc) if doc else None

    def list_by_user(
        self,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        is_template: Optional[bool] = None,
    ) -> List[MealPlan]:
        """Plans whose week overlaps ``start``..``end``, oldest week first."""
        query = {"userId": user_id}
        if start is not None:
            query["weekEndDate"] = {"$gte": start.isoformat()}
        if end is not None:
            query["weekStartDate"] = {"$lte": end.isoformat()}
        if is_template is not None:
            query["isTemplate"] = is_template
        return self._to_plans(self.find(query, sort=[("weekStartDate", ASCENDING)]))

    def get_many(self, plan_ids: List[str], user_id: str) -> List[MealPlan]:
        return self._to_plans(self.find({"_id": {"$in": list(plan_ids)}, "userId": user_id}))

    def count_owned(self, plan_ids: List[str], user_id: str) -> int:
        return self.collection.count_documents({"_id": {"$in": list(plan_ids)}, "userId": user_id})

    def create(self, plan: MealPlan) -> MealPlan:
        """Insert a new plan; a second plan for the same user and week is a conflict."""
        if not plan.id:
            plan.id = str(uuid4())
        try:
            self.collection.insert_one(MealPlanMapper.to_payload(plan))
        except DuplicateKeyError as exc:
            logger.warning("Duplicate plan for user %s week %s", plan.user_id, plan.week_key)
            raise ConflictError(
                f"A meal plan for the week of {plan.week_key} already exists",
                details={"userId": plan.user_id, "weekStartDate": plan.week_key},
            ) from exc
        return plan

    def create_many(self, plans: List[MealPlan]) -> List[MealPlan]:
        created = []
        for plan in plans:
            try:
                created.append(self.create(plan))
            except ConflictError:
                logger.info("Skipping copy into existing week %s", plan.week_key)
        return created

    def update(self, plan: MealPlan) -> MealPlan:
        self.collection.replace_one({"_id": plan.id}, MealPlanMapper.to_payload(plan))
        return plan

    def delete(self, plan_id: str, user_id: str) -> bool:
        result = self.collection.delete_one({"_id": plan_id, "userId": user_id})
        return result.deleted_count > 0

    def delete_many(self, plan_ids: List[str], user_id: str) -> int:
        result = self.collection.delete_many({"_id": {"$in": list(plan_ids)}, "userId": user_id})
        return result.deleted_count

    def mark_templates(self, plan_ids: List[str], user_id: str) -> int:
        """Flag non-template plans as templates; returns how many changed."""
        result = self.collection.update_many(
            {"_id": {"$in": list(plan_ids)}, "userId": user_id, "isTemplate": {"$ne": True}},
            {"$set": {"isTemplate": True, "updatedAt": utcnow().isoformat()}},
        )
        return result.modified_count
