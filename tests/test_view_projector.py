"""Tests for Today / Week / Month projections and cursor navigation."""

from datetime import date

from domain.enums import MealType, ViewMode
from services.plan_store import PlanStore
from services.view_projector import Cursor, MonthView, TodayView, ViewProjector, WeekView
from test_fixtures import USER_ID, make_slot

TODAY = date(2024, 3, 14)


def _projector():
    return ViewProjector(today=lambda: TODAY)


def test_week_view_creates_plan_lazily():
    store = PlanStore(USER_ID)
    view = _projector().project(ViewMode.WEEK, TODAY, store)
    assert isinstance(view, WeekView)
    assert view.week_key == "2024-03-11"
    assert view.label == "Mar 11 - Mar 17, 2024"
    assert len(view.days) == 7
    assert store.keys() == ["2024-03-11"]
    assert view.plan is store.get(TODAY)


def test_today_and_month_views_do_not_create_plans():
    store = PlanStore(USER_ID)
    projector = _projector()
    today = projector.project(ViewMode.TODAY, TODAY, store)
    month = projector.project(ViewMode.MONTH, TODAY, store)
    assert isinstance(today, TodayView)
    assert isinstance(month, MonthView)
    assert today.plan is None
    assert today.day.meal_count() == 0
    assert len(store) == 0


def test_today_view_shows_stored_day():
    store = PlanStore(USER_ID)
    plan = store.get_or_create(TODAY)
    plan.day_for(TODAY).bucket(MealType.BREAKFAST).append(make_slot("Pancakes"))
    view = _projector().today_view(TODAY, store)
    assert view.label == "Thursday, March 14, 2024"
    assert view.plan is plan
    assert [s.recipe_name for s in view.day.breakfast] == ["Pancakes"]
    assert view.stats.total_meals == 1


def test_month_view_has_42_cells_with_flags():
    store = PlanStore(USER_ID)
    store.get_or_create(TODAY).day_for(TODAY).bucket(MealType.DINNER).append(make_slot("Turkey Chili"))
    view = _projector().month_view(TODAY, store)
    assert view.label == "March 2024"
    assert len(view.cells) == 42
    assert len(view.weeks) == 6
    assert view.cells[0].date == date(2024, 2, 25)
    assert not view.cells[0].is_current_month
    today_cells = [c for c in view.cells if c.is_today]
    assert len(today_cells) == 1 and today_cells[0].date == TODAY
    assert today_cells[0].has_meals
    assert sum(1 for c in view.cells if c.has_meals) == 1
    assert view.stats.total_meals == 1
    assert view.stats.total_days == 31


def test_week_projection_of_any_day_in_week_is_same_plan():
    store = PlanStore(USER_ID)
    projector = _projector()
    a = projector.week_view(date(2024, 3, 11), store)
    b = projector.week_view(date(2024, 3, 17), store)
    assert a.plan is b.plan


def test_stats():
    store = PlanStore(USER_ID)
    plan = store.get_or_create(TODAY)
    plan.days[0].bucket(MealType.LUNCH).append(make_slot("Salad"))
    plan.days[0].bucket(MealType.DINNER).append(make_slot("Soup"))
    plan.days[3].bucket(MealType.BREAKFAST).append(make_slot("Oats"))
    stats = ViewProjector.plan_stats(plan)
    assert (stats.total_meals, stats.planned_days, stats.total_days) == (3, 2, 7)
    assert ViewProjector.week_stats(date(2024, 4, 1), store).total_meals == 0
    assert ViewProjector.all_plans_stats(store).total_meals == 3


def test_cursor_navigation_steps():
    week = Cursor(date=TODAY)
    assert week.next().date == date(2024, 3, 21)
    assert week.previous().date == date(2024, 3, 7)

    day = week.with_mode(ViewMode.TODAY)
    assert day.next().date == date(2024, 3, 15)
    assert day.previous().date == date(2024, 3, 13)

    month = Cursor(date=date(2024, 1, 31), view_mode=ViewMode.MONTH)
    assert month.next().date == date(2024, 2, 29)
    assert month.previous().date == date(2023, 12, 31)
    assert month.today(TODAY) == Cursor(date=TODAY, view_mode=ViewMode.MONTH)


def test_navigation_does_not_touch_store():
    store = PlanStore(USER_ID)
    cursor = Cursor(date=TODAY, view_mode=ViewMode.MONTH).next().next()
    assert cursor.date == date(2024, 5, 14)
    assert len(store) == 0
