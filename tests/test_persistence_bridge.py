"""Tests for debounced plan saving and the save status lifecycle."""

import asyncio
from datetime import date

import pytest

from domain.enums import MealType, SaveStatus
from domain.models import MealPlan
from services.move_engine import MoveEngine
from services.persistence_bridge import PersistenceBridge
from services.plan_store import PlanStore
from test_fixtures import USER_ID, make_slot

pytestmark = pytest.mark.anyio

WEEK = "2024-03-11"


class RecordingWriter:
    """Async writer that records the plan state at the time of each call."""

    def __init__(self, fail_with=None, delay=0.0):
        self.calls = []
        self.fail_with = fail_with
        self.delay = delay

    async def __call__(self, plan: MealPlan):
        self.calls.append((plan.week_key, [s.recipe_name for _, _, s in plan.slots()]))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        return plan.id or f"plan-{plan.week_key}"


def _wire(writer, **kwargs):
    statuses = []
    bridge = PersistenceBridge(
        writer,
        debounce_sec=kwargs.pop("debounce_sec", 0.05),
        saved_reset_sec=kwargs.pop("saved_reset_sec", 0.05),
        on_status=lambda key, status: statuses.append((key, status)),
    )
    engine = MoveEngine(PlanStore(USER_ID), sink=bridge)
    return bridge, engine, statuses


async def test_rapid_edits_write_once_with_final_state():
    writer = RecordingWriter()
    bridge, engine, _ = _wire(writer)

    engine.add_meal(WEEK, 0, MealType.BREAKFAST, make_slot("Pancakes"))
    engine.add_meal(WEEK, 1, MealType.LUNCH, make_slot("Caesar Salad"))
    assert writer.calls == []
    assert bridge.has_pending()

    await asyncio.sleep(0.15)

    assert writer.calls == [(WEEK, ["Pancakes", "Caesar Salad"])]
    assert not bridge.has_pending()


async def test_successful_save_assigns_id_and_resets_to_idle():
    writer = RecordingWriter()
    bridge, engine, statuses = _wire(writer)
    engine.add_meal(WEEK, 0, MealType.DINNER, make_slot("Turkey Chili"))
    plan = engine.store.get(WEEK)

    await bridge.flush()
    assert plan.id == f"plan-{WEEK}"
    assert bridge.status_for(plan) == SaveStatus.SAVED
    assert bridge.status == SaveStatus.SAVED

    await asyncio.sleep(0.1)
    assert bridge.status_for(WEEK) == SaveStatus.IDLE
    assert [s for _, s in statuses] == [SaveStatus.SAVING, SaveStatus.SAVED, SaveStatus.IDLE]


async def test_failed_save_keeps_local_state_and_reports_error():
    writer = RecordingWriter(fail_with=RuntimeError("store unreachable"))
    bridge, engine, _ = _wire(writer)
    engine.add_meal(WEEK, 0, MealType.DINNER, make_slot("Turkey Chili"))

    await bridge.flush()

    plan = engine.store.get(WEEK)
    assert [s.recipe_name for s in plan.days[0].dinner] == ["Turkey Chili"]
    assert plan.id is None
    assert bridge.status_for(plan) == SaveStatus.ERROR
    assert bridge.error_for(plan) == "store unreachable"
    assert bridge.last_error == "store unreachable"

    # Error does not decay to idle on its own
    await asyncio.sleep(0.1)
    assert bridge.status_for(plan) == SaveStatus.ERROR
    assert bridge.has_unsaved_changes(plan)

    writer.fail_with = None
    engine.add_meal(WEEK, 1, MealType.LUNCH, make_slot("Soup"))
    await bridge.flush()
    assert bridge.status_for(plan) == SaveStatus.SAVED
    assert not bridge.has_unsaved_changes(plan)


async def test_separate_plans_are_saved_separately():
    writer = RecordingWriter()
    bridge, engine, _ = _wire(writer)
    engine.add_meal(WEEK, 0, MealType.LUNCH, make_slot("Soup"))
    engine.add_meal("2024-03-18", 0, MealType.LUNCH, make_slot("Wrap"))

    await bridge.flush()

    assert sorted(key for key, _ in writer.calls) == [WEEK, "2024-03-18"]


async def test_edit_during_write_triggers_one_more_write():
    writer = RecordingWriter(delay=0.1)
    bridge, engine, _ = _wire(writer, debounce_sec=0.01)
    engine.add_meal(WEEK, 0, MealType.LUNCH, make_slot("Soup"))
    await asyncio.sleep(0.05)  # first write is in flight now
    engine.add_meal(WEEK, 0, MealType.LUNCH, make_slot("Bread"))

    await asyncio.sleep(0.05)
    await bridge.flush()

    assert writer.calls == [(WEEK, ["Soup"]), (WEEK, ["Soup", "Bread"])]


async def test_aclose_drops_pending_writes():
    writer = RecordingWriter()
    bridge, engine, _ = _wire(writer, debounce_sec=10)
    engine.add_meal(WEEK, 0, MealType.LUNCH, make_slot("Soup"))

    await bridge.aclose()

    assert writer.calls == []
    assert not bridge.has_pending()


async def test_newer_plan_object_for_same_week_replaces_pending_one():
    # Pending writes are keyed by week
    writer = RecordingWriter()
    bridge, _, _ = _wire(writer)
    first = MealPlan.empty(USER_ID, date(2024, 3, 11))
    second = MealPlan.empty(USER_ID, date(2024, 3, 13))
    second.days[0].lunch.append(make_slot("Ramen"))
    bridge.save(first)
    bridge.save(second)

    await bridge.flush()

    assert writer.calls == [(WEEK, ["Ramen"])]
