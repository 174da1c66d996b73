"""
Mutations of the plan store: add, remove, move, copy/paste and edits.

Every operation returns the list of plans it changed. An empty list means the
request was rejected (stale index, self-drop, unknown bucket) and nothing was
touched. Changed plans get ``updated_at`` bumped and are handed to the save
sink, normally the PersistenceBridge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Protocol, Tuple

from domain.enums import MealType
from domain.models import MealPlan, MealSlot, clamp_servings
from domain.models.meal_plan import utcnow
from domain.week import DateLike, day_index, week_key
from services.plan_store import PlanStore

logger = logging.getLogger("smartplates.moves")


class SaveSink(Protocol):
    def save(self, plan: MealPlan) -> None: ...


@dataclass(frozen=True)
class SlotLocation:
    """Address of a bucket, and optionally of one slot inside it."""

    week_key: str
    day_index: int
    meal_type: MealType
    slot_index: Optional[int] = None

    @classmethod
    def for_date(cls, when: DateLike, meal_type, slot_index: Optional[int] = None) -> "SlotLocation":
        return cls(week_key(when), day_index(when), MealType(meal_type), slot_index)

    def same_bucket(self, other: "SlotLocation") -> bool:
        """Compare by normalized week, so any date inside the week addresses it."""
        try:
            return (
                week_key(self.week_key) == week_key(other.week_key)
                and self.day_index == other.day_index
                and MealType(self.meal_type) == MealType(other.meal_type)
            )
        except (TypeError, ValueError):
            return False


class MoveEngine:
    """Applies validated meal-slot mutations to a PlanStore."""

    def __init__(
        self,
        store: PlanStore,
        sink: Optional[SaveSink] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.sink = sink
        self._clock = clock
        self._clipboard: Optional[MealSlot] = None

    # ---------- helpers ----------

    def _bucket(
        self, week: str, index: int, meal_type, create: bool = True
    ) -> Optional[Tuple[MealPlan, List[MealSlot]]]:
        """Plan and bucket for an address, or None when the address is invalid."""
        if not isinstance(index, int) or not 0 <= index < 7:
            return None
        try:
            meal = MealType(meal_type)
            key = self.store.key_for(week)
        except (TypeError, ValueError):
            return None
        plan = self.store.get_or_create(key) if create else self.store.get(key)
        if plan is None:
            return None
        return plan, plan.days[index].bucket(meal)

    def _commit(self, *plans: MealPlan) -> List[MealPlan]:
        changed: List[MealPlan] = []
        now = self._clock()
        for plan in plans:
            if any(plan is seen for seen in changed):
                continue
            plan.touch(now)
            changed.append(plan)
        if self.sink is not None:
            for plan in changed:
                self.sink.save(plan)
        return changed

    @staticmethod
    def _reject(reason: str, *args) -> List[MealPlan]:
        logger.debug("Rejected: " + reason, *args)
        return []

    # ---------- operations ----------

    def add_meal(self, week: str, index: int, meal_type, slot: MealSlot) -> List[MealPlan]:
        """Append ``slot`` to the end of a bucket, creating the week's plan if needed."""
        target = self._bucket(week, index, meal_type)
        if target is None:
            return self._reject("add to invalid bucket %s/%s/%s", week, index, meal_type)
        plan, bucket = target
        bucket.append(slot)
        logger.info("Added %r to %s day %d %s", slot.recipe_name, plan.week_key, index, MealType(meal_type).value)
        return self._commit(plan)

    def remove_meal(self, week: str, index: int, meal_type, slot_index: int) -> List[MealPlan]:
        """Delete by index; an index outside the current bucket is a no-op."""
        target = self._bucket(week, index, meal_type, create=False)
        if target is None:
            return self._reject("remove from unknown bucket %s/%s/%s", week, index, meal_type)
        plan, bucket = target
        if not isinstance(slot_index, int) or not 0 <= slot_index < len(bucket):
            return self._reject("stale slot index %s (bucket has %d)", slot_index, len(bucket))
        removed = bucket.pop(slot_index)
        logger.info("Removed %r from %s day %d", removed.recipe_name, plan.week_key, index)
        return self._commit(plan)

    def move(self, slot: Optional[MealSlot], source: SlotLocation, target: SlotLocation) -> List[MealPlan]:
        """
        Move a slot to the end of another bucket.

        The source slot is found at ``source.slot_index`` when that index still
        points at ``slot``; otherwise it is searched for by identity. Both ends
        are validated before either plan is changed.
        """
        if source.same_bucket(target):
            return self._reject("self-drop on %s", source)

        origin = self._bucket(source.week_key, source.day_index, source.meal_type, create=False)
        if origin is None:
            return self._reject("move from unknown bucket %s", source)
        source_plan, source_bucket = origin

        position = self._locate(source_bucket, slot, source.slot_index)
        if position is None:
            return self._reject("slot not found in %s", source)

        # Validate the target address before the lazy get_or_create below.
        if not isinstance(target.day_index, int) or not 0 <= target.day_index < 7:
            return self._reject("invalid target day %s", target.day_index)
        try:
            MealType(target.meal_type)
            self.store.key_for(target.week_key)
        except (TypeError, ValueError):
            return self._reject("invalid target %s", target)

        target_plan, target_bucket = self._bucket(target.week_key, target.day_index, target.meal_type)
        moved = source_bucket.pop(position)
        target_bucket.append(moved)
        logger.info(
            "Moved %r from %s/%d/%s to %s/%d/%s",
            moved.recipe_name,
            source_plan.week_key, source.day_index, MealType(source.meal_type).value,
            target_plan.week_key, target.day_index, MealType(target.meal_type).value,
        )
        return self._commit(source_plan, target_plan)

    @staticmethod
    def _locate(bucket: List[MealSlot], slot: Optional[MealSlot], index: Optional[int]) -> Optional[int]:
        if isinstance(index, int) and 0 <= index < len(bucket):
            if slot is None or bucket[index] is slot:
                return index
        if slot is not None:
            for i, candidate in enumerate(bucket):
                if candidate is slot:
                    return i
        return None

    def copy_meal(self, location: SlotLocation) -> Optional[MealSlot]:
        """Remember a duplicate of the addressed slot for a later paste."""
        found = self._bucket(location.week_key, location.day_index, location.meal_type, create=False)
        if found is None:
            return None
        _, bucket = found
        index = location.slot_index
        if not isinstance(index, int) or not 0 <= index < len(bucket):
            return None
        self._clipboard = bucket[index].copy()
        return self._clipboard

    @property
    def clipboard(self) -> Optional[MealSlot]:
        return self._clipboard

    def paste_meal(self, week: str, index: int, meal_type) -> List[MealPlan]:
        """Add a fresh copy of the copied slot; nothing happens with an empty clipboard."""
        if self._clipboard is None:
            return self._reject("paste with empty clipboard")
        return self.add_meal(week, index, meal_type, self._clipboard.copy())

    def adjust_servings(self, location: SlotLocation, delta: int) -> List[MealPlan]:
        found = self._bucket(location.week_key, location.day_index, location.meal_type, create=False)
        if found is None:
            return self._reject("servings on unknown bucket %s", location)
        plan, bucket = found
        index = location.slot_index
        if not isinstance(index, int) or not 0 <= index < len(bucket):
            return self._reject("stale slot index %s", index)
        slot = bucket[index]
        servings = clamp_servings(slot.servings + delta)
        if servings == slot.servings:
            return []
        slot.servings = servings
        return self._commit(plan)

    def set_daily_notes(self, week: str, index: int, notes: str) -> List[MealPlan]:
        if not isinstance(index, int) or not 0 <= index < 7:
            return self._reject("notes on invalid day %s", index)
        try:
            plan = self.store.get_or_create(week)
        except (TypeError, ValueError):
            return self._reject("notes on invalid week %s", week)
        day = plan.days[index]
        if day.daily_notes == notes:
            return []
        day.daily_notes = notes
        return self._commit(plan)

    def mark_shopping_list_generated(self, week: str) -> List[MealPlan]:
        try:
            plan = self.store.get(self.store.key_for(week))
        except (TypeError, ValueError):
            return self._reject("shopping list for invalid week %s", week)
        if plan is None or plan.shopping_list_generated:
            return []
        plan.shopping_list_generated = True
        return self._commit(plan)
