"""In-memory store of weekly meal plans keyed by week start."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from domain.models import MealPlan
from domain.week import DateLike, week_key

logger = logging.getLogger("smartplates.store")


class PlanStore:
    """
    Single source of truth for the plans of one planning session.

    Keys are week keys (ISO date of the Monday). There is at most one plan per
    key; ``get_or_create`` hands out the same object for every date of a week.
    """

    def __init__(self, user_id: str, plans: Optional[Iterable[MealPlan]] = None):
        self.user_id = user_id
        self._plans: Dict[str, MealPlan] = {}
        for plan in plans or []:
            self.put(plan)

    @staticmethod
    def key_for(value: DateLike) -> str:
        """Accept a week key, an ISO string, a date or a datetime."""
        return week_key(value)

    def get(self, value: DateLike) -> Optional[MealPlan]:
        return self._plans.get(self.key_for(value))

    def get_or_create(self, value: DateLike) -> MealPlan:
        key = self.key_for(value)
        plan = self._plans.get(key)
        if plan is None:
            plan = MealPlan.empty(self.user_id, key)
            self._plans[key] = plan
            logger.debug("Created empty plan for week %s", key)
        return plan

    def put(self, plan: MealPlan) -> MealPlan:
        """
        Store ``plan`` under its week key, dropping any stale key it had.

        Raises:
            ValueError: if the plan's days do not match its week start
        """
        plan.check_days()
        key = plan.week_key
        for stale_key, existing in list(self._plans.items()):
            if existing is plan and stale_key != key:
                logger.info("Re-keying plan from week %s to %s", stale_key, key)
                del self._plans[stale_key]
        self._plans[key] = plan
        return plan

    def remove(self, value: DateLike) -> Optional[MealPlan]:
        return self._plans.pop(self.key_for(value), None)

    def keys(self) -> List[str]:
        return sorted(self._plans)

    def plans(self) -> List[MealPlan]:
        return [self._plans[k] for k in self.keys()]

    def __iter__(self) -> Iterator[MealPlan]:
        return iter(self.plans())

    def __len__(self) -> int:
        return len(self._plans)

    def __contains__(self, value) -> bool:
        try:
            return self.key_for(value) in self._plans
        except (TypeError, ValueError):
            return False
