"""
Planning session: one user's planner wired together.

Owns the plan store, the view projector, the move engine, the persistence
bridge and the view cursor. Every edit goes through the engine, which hands
changed plans to the bridge; views are projected from the store on demand.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional

from adapters.meal_plan_api import MealPlanApiClient
from app.exceptions import RemoteStoreError
from domain.enums import MealType, SaveStatus, ViewMode
from domain.mappers import normalize_slot
from domain.models import MealPlan, MealSlot
from domain.week import DateLike, day_index, month_grid_start, to_local_date, week_key, week_start
from services.calendar_export import build_ics
from services.move_engine import MoveEngine, SlotLocation
from services.persistence_bridge import PersistenceBridge, StatusListener
from services.plan_store import PlanStore
from services.shopping_service import ShoppingItem, ShoppingListService
from services.view_projector import MONTH_GRID_CELLS, Cursor, ViewModel, ViewProjector

logger = logging.getLogger("smartplates.session")

LOAD_ERROR_MESSAGE = "Failed to load meal plans. Please try again."


class MealPlanningSession:
    """Planner state for a single user."""

    def __init__(
        self,
        user_id: str,
        client: MealPlanApiClient,
        today: Callable[[], date] = date.today,
        debounce_sec: Optional[float] = None,
        saved_reset_sec: Optional[float] = None,
        on_status: Optional[StatusListener] = None,
        view_mode: ViewMode = ViewMode.WEEK,
    ):
        self.user_id = user_id
        self.client = client
        self._today = today
        self.store = PlanStore(user_id)
        self.bridge = PersistenceBridge(
            client.save_plan,
            debounce_sec=debounce_sec,
            saved_reset_sec=saved_reset_sec,
            on_status=on_status,
        )
        self.engine = MoveEngine(self.store, sink=self.bridge)
        self.projector = ViewProjector(today=today)
        self.cursor = Cursor(date=today(), view_mode=ViewMode(view_mode))
        self.load_error: Optional[str] = None
        self._last_load: Optional[date] = None

    # ---------- loading ----------

    @staticmethod
    def load_range(around: DateLike):
        """Dates covered by a month grid plus the full week of ``around``."""
        anchor = to_local_date(around)
        grid_start = month_grid_start(anchor)
        start = min(grid_start, week_start(anchor))
        end = max(grid_start + timedelta(days=MONTH_GRID_CELLS - 1), week_start(anchor) + timedelta(days=6))
        return start, end

    async def load(self, around: Optional[DateLike] = None) -> bool:
        """
        Fetch the user's plans around a date into the store.

        Plans with unsaved local edits, including ones whose last save failed,
        are kept as they are. On failure the
        store is left untouched and ``load_error`` carries a message for the
        user.

        Returns:
            True when the plans were loaded
        """
        anchor = to_local_date(around) if around is not None else self.cursor.date
        self._last_load = anchor
        start, end = self.load_range(anchor)
        try:
            plans = await self.client.list_plans(self.user_id, start, end)
        except RemoteStoreError as exc:
            logger.error("Loading plans %s..%s for %s failed: %s", start, end, self.user_id, exc)
            self.load_error = LOAD_ERROR_MESSAGE
            return False

        self.load_error = None
        for plan in plans:
            local = self.store.get(plan.week_start_date)
            if local is not None and self.bridge.has_unsaved_changes(local):
                logger.debug("Keeping locally edited week %s", local.week_key)
                continue
            self.store.put(plan)
        logger.info("Loaded %d plans for %s (%s..%s)", len(plans), self.user_id, start, end)
        return True

    async def retry_load(self) -> bool:
        return await self.load(self._last_load)

    # ---------- views and navigation ----------

    def view(self) -> ViewModel:
        return self.projector.project_cursor(self.cursor, self.store)

    def set_view_mode(self, view_mode: ViewMode) -> ViewModel:
        self.cursor = self.cursor.with_mode(view_mode)
        return self.view()

    def previous(self) -> ViewModel:
        self.cursor = self.cursor.previous()
        return self.view()

    def next(self) -> ViewModel:
        self.cursor = self.cursor.next()
        return self.view()

    def today(self) -> ViewModel:
        self.cursor = self.cursor.today(self._today())
        return self.view()

    @property
    def save_status(self) -> SaveStatus:
        return self.bridge.status

    # ---------- edits ----------

    def add_meal(self, when: DateLike, meal_type: MealType, slot: MealSlot) -> List[MealPlan]:
        return self.engine.add_meal(week_key(when), day_index(when), meal_type, slot)

    def remove_meal(self, when: DateLike, meal_type: MealType, slot_index: int) -> List[MealPlan]:
        return self.engine.remove_meal(week_key(when), day_index(when), meal_type, slot_index)

    def move_meal(self, slot: Optional[MealSlot], source: SlotLocation, target: SlotLocation) -> List[MealPlan]:
        return self.engine.move(slot, source, target)

    def copy_meal(self, when: DateLike, meal_type: MealType, slot_index: int) -> Optional[MealSlot]:
        return self.engine.copy_meal(SlotLocation.for_date(when, meal_type, slot_index))

    def paste_meal(self, when: DateLike, meal_type: MealType) -> List[MealPlan]:
        return self.engine.paste_meal(week_key(when), day_index(when), meal_type)

    def adjust_servings(self, when: DateLike, meal_type: MealType, slot_index: int, delta: int) -> List[MealPlan]:
        return self.engine.adjust_servings(SlotLocation.for_date(when, meal_type, slot_index), delta)

    def set_daily_notes(self, when: DateLike, notes: str) -> List[MealPlan]:
        return self.engine.set_daily_notes(week_key(when), day_index(when), notes)

    async def add_recipe(
        self, when: DateLike, meal_type: MealType, recipe_id: str, servings: Optional[int] = None
    ) -> List[MealPlan]:
        """Look a recipe up and add it as a new slot. Unknown recipes add nothing."""
        try:
            recipe = await self.client.get_recipe(recipe_id)
        except RemoteStoreError as exc:
            logger.warning("Recipe %s lookup failed: %s", recipe_id, exc)
            return []
        if recipe is None:
            logger.warning("Recipe %s not found", recipe_id)
            return []
        return self.add_meal(when, meal_type, normalize_slot(recipe, servings=servings))

    # ---------- extras ----------

    def build_shopping_list(self, when: Optional[DateLike] = None) -> List[ShoppingItem]:
        """Shopping list of the week containing ``when`` (the cursor by default)."""
        anchor = when if when is not None else self.cursor.date
        plan = self.store.get(anchor)
        if plan is None:
            return []
        items = ShoppingListService.build(plan)
        self.engine.mark_shopping_list_generated(plan.week_key)
        return items

    def export_ics(self, when: Optional[DateLike] = None, now: Optional[datetime] = None) -> str:
        anchor = when if when is not None else self.cursor.date
        plan = self.store.get(anchor) or MealPlan.empty(self.user_id, anchor)
        return build_ics(plan, now=now)

    async def flush(self) -> None:
        await self.bridge.flush()

    async def close(self) -> None:
        await self.bridge.aclose()
