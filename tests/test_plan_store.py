"""Tests for the in-memory PlanStore and the MealPlan model invariants."""

from datetime import date, timedelta

import pytest

from domain.models import DayMeals, MealPlan, MealSlot
from services.plan_store import PlanStore
from test_fixtures import USER_ID, make_slot


def test_get_or_create_is_idempotent_within_a_week():
    store = PlanStore(USER_ID)
    first = store.get_or_create(date(2024, 3, 14))
    again = store.get_or_create("2024-03-17")
    assert first is again
    assert len(store) == 1
    assert store.keys() == ["2024-03-11"]


def test_created_plan_has_seven_dated_days():
    plan = PlanStore(USER_ID).get_or_create(date(2024, 3, 14))
    assert plan.week_start_date == date(2024, 3, 11)
    assert [d.date for d in plan.days] == [date(2024, 3, 11) + timedelta(days=i) for i in range(7)]
    assert plan.meal_count() == 0
    assert plan.title == "Week of 3/11/2024"
    assert plan.user_id == USER_ID
    assert plan.id is None


def test_get_returns_none_for_unknown_week():
    store = PlanStore(USER_ID)
    assert store.get(date(2024, 3, 14)) is None
    assert date(2024, 3, 14) not in store
    assert "not a date" not in store


def test_put_rekeys_a_plan_whose_week_changed():
    store = PlanStore(USER_ID)
    plan = store.get_or_create(date(2024, 3, 11))
    plan.week_start_date = date(2024, 3, 18)
    plan.days = [DayMeals(date=date(2024, 3, 18) + timedelta(days=i)) for i in range(7)]
    store.put(plan)
    assert store.keys() == ["2024-03-18"]
    assert store.get(date(2024, 3, 20)) is plan


def test_put_replaces_plan_for_same_week():
    store = PlanStore(USER_ID)
    local = store.get_or_create(date(2024, 3, 11))
    remote = MealPlan.empty(USER_ID, date(2024, 3, 13))
    remote.id = "plan-1"
    store.put(remote)
    assert store.get(date(2024, 3, 11)) is remote
    assert store.get(date(2024, 3, 11)) is not local
    assert len(store) == 1


def test_iteration_is_sorted_by_week():
    store = PlanStore(USER_ID)
    for d in (date(2024, 3, 25), date(2024, 3, 4), date(2024, 3, 11)):
        store.get_or_create(d)
    assert [p.week_key for p in store] == ["2024-03-04", "2024-03-11", "2024-03-25"]
    assert store.remove(date(2024, 3, 5)).week_key == "2024-03-04"
    assert len(store) == 2


def test_plan_normalizes_week_start_to_monday():
    days = [DayMeals(date=date(2024, 3, 11) + timedelta(days=i)) for i in range(7)]
    plan = MealPlan(user_id=USER_ID, week_start_date=date(2024, 3, 14), days=days)
    assert plan.week_start_date == date(2024, 3, 11)
    assert plan.week_end_date == date(2024, 3, 17)


def test_plan_rejects_misdated_days():
    days = [DayMeals(date=date(2024, 3, 12) + timedelta(days=i)) for i in range(7)]
    with pytest.raises(ValueError):
        MealPlan(user_id=USER_ID, week_start_date=date(2024, 3, 11), days=days)
    with pytest.raises(ValueError):
        MealPlan(user_id=USER_ID, week_start_date=date(2024, 3, 11), days=days[:6])


def test_slot_servings_are_clamped_and_copy_is_independent():
    assert MealSlot(recipe_name="Soup", servings=0).servings == 1
    assert MealSlot(recipe_name="Soup", servings=50).servings == 20
    slot = make_slot("Pancakes", ingredients=["flour"], tags={"breakfast"})
    dup = slot.copy()
    dup.ingredients.append("eggs")
    dup.tags.add("sweet")
    assert slot.ingredients == ["flour"]
    assert slot.tags == {"breakfast"}
    assert dup == MealSlot(
        recipe_id="r-pancakes", recipe_name="Pancakes", ingredients=["flour", "eggs"], tags={"breakfast", "sweet"}
    )


def test_put_rejects_plan_with_drifted_days():
    store = PlanStore(USER_ID)
    plan = store.get_or_create(date(2024, 3, 11))
    plan.week_start_date = date(2024, 3, 18)
    with pytest.raises(ValueError):
        store.put(plan)
    assert store.keys() == ["2024-03-11"]
