"""
End-to-end tests for a planning session against the store API.
"""

from datetime import date, datetime, timezone

import httpx
import pytest

from adapters.meal_plan_api import MealPlanApiClient
from domain.enums import MealType, SaveStatus, ViewMode
from main import app
from services.move_engine import SlotLocation
from services.planning_session import LOAD_ERROR_MESSAGE, MealPlanningSession
from test_fixtures import USER_ID, make_plan, make_slot, plan_repo  # noqa: F401

pytestmark = pytest.mark.anyio

TODAY = date(2024, 3, 14)


@pytest.fixture
async def session(plan_repo):
    http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
    client = MealPlanApiClient(client=http)
    planner = MealPlanningSession(
        USER_ID, client, today=lambda: TODAY, debounce_sec=0.01, saved_reset_sec=0.05
    )
    yield planner
    await planner.close()
    await http.aclose()


async def test_load_puts_remote_plans_in_store(session, plan_repo):
    plan = make_plan()
    plan.days[3].bucket(MealType.BREAKFAST).append(make_slot("Pancakes"))
    plan_repo.seed(plan)

    assert await session.load() is True
    assert session.load_error is None

    view = session.view()
    assert view.week_key == "2024-03-11"
    assert view.plan.id == plan.id
    assert [s.recipe_name for s in view.days[3].breakfast] == ["Pancakes"]


async def test_add_recipe_and_move_are_saved(session, plan_repo):
    await session.load()
    changed = await session.add_recipe(TODAY, MealType.DINNER, "r-chili", servings=3)
    assert len(changed) == 1
    slot = changed[0].day_for(TODAY).dinner[0]
    assert (slot.recipe_name, slot.servings, slot.cooking_time) == ("Turkey Chili", 3, 45)

    session.move_meal(
        slot,
        SlotLocation.for_date(TODAY, MealType.DINNER, 0),
        SlotLocation.for_date(date(2024, 3, 15), MealType.LUNCH),
    )
    await session.flush()

    plan = session.store.get(TODAY)
    assert plan.id is not None
    stored = plan_repo.get_by_id(plan.id)
    assert stored.day_for(TODAY).dinner == []
    assert stored.day_for(date(2024, 3, 15)).lunch[0].recipe_name == "Turkey Chili"
    assert session.save_status == SaveStatus.SAVED


async def test_unknown_recipe_adds_nothing(session):
    assert await session.add_recipe(TODAY, MealType.LUNCH, "does-not-exist") == []
    assert session.store.get(TODAY) is None


async def test_navigation_and_modes(session):
    assert session.view().label == "Mar 11 - Mar 17, 2024"
    assert session.next().label == "Mar 18 - Mar 24, 2024"
    session.set_view_mode(ViewMode.MONTH)
    assert session.next().label == "April 2024"
    assert session.previous().label == "March 2024"
    assert session.today().label == "March 2024"
    session.set_view_mode(ViewMode.TODAY)
    assert session.previous().label == "Wednesday, March 13, 2024"


async def test_load_failure_sets_message_and_retry_recovers(plan_repo):
    calls = {"fail": True}
    asgi = httpx.ASGITransport(app=app)

    async def handler(request):
        if calls["fail"]:
            return httpx.Response(503, json={"success": False, "error": {"code": "HTTP_503", "message": "down"}})
        return await asgi.handle_async_request(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
    planner = MealPlanningSession(USER_ID, MealPlanApiClient(client=http), today=lambda: TODAY)

    assert await planner.load(date(2024, 3, 14)) is False
    assert planner.load_error == LOAD_ERROR_MESSAGE
    assert len(planner.store) == 0

    calls["fail"] = False
    plan_repo.seed(make_plan())
    assert await planner.retry_load() is True
    assert planner.load_error is None
    assert planner.store.keys() == ["2024-03-11"]

    await planner.close()
    await http.aclose()


async def test_load_keeps_unsaved_local_edits(session, plan_repo):
    plan_repo.seed(make_plan())
    session.bridge.debounce_sec = 10
    session.add_meal(TODAY, MealType.SNACKS, make_slot("Apple"))
    local = session.store.get(TODAY)

    await session.load()

    assert session.store.get(TODAY) is local
    assert [s.recipe_name for s in local.day_for(TODAY).snacks] == ["Apple"]


async def test_shopping_list_and_calendar(session, plan_repo):
    session.add_meal(TODAY, MealType.LUNCH, make_slot("Soup", ingredients=["Leeks", "Stock"]))
    items = session.build_shopping_list()
    assert [i.name for i in items] == ["Leeks", "Stock"]
    assert session.store.get(TODAY).shopping_list_generated

    ics = session.export_ics(now=datetime(2024, 3, 14, tzinfo=timezone.utc))
    assert "SUMMARY:Lunch: Soup" in ics

    await session.flush()
    stored = plan_repo.find_by_user_and_week(USER_ID, date(2024, 3, 11))
    assert stored.shopping_list_generated


async def test_edits_through_session(session):
    session.add_meal(TODAY, MealType.BREAKFAST, make_slot("Oats", servings=2))
    session.adjust_servings(TODAY, MealType.BREAKFAST, 0, 2)
    session.copy_meal(TODAY, MealType.BREAKFAST, 0)
    session.paste_meal(date(2024, 3, 15), MealType.BREAKFAST)
    session.set_daily_notes(TODAY, "Early start")
    session.remove_meal(TODAY, MealType.BREAKFAST, 0)

    plan = session.store.get(TODAY)
    assert plan.day_for(TODAY).breakfast == []
    assert plan.day_for(TODAY).daily_notes == "Early start"
    assert plan.day_for(date(2024, 3, 15)).breakfast[0].servings == 4


async def test_load_keeps_edits_whose_save_failed(plan_repo):
    plan_repo.seed(make_plan())
    asgi = httpx.ASGITransport(app=app)

    async def handler(request):
        if request.method in ("POST", "PUT"):
            return httpx.Response(503, json={"success": False, "error": {"code": "HTTP_503", "message": "down"}})
        return await asgi.handle_async_request(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
    planner = MealPlanningSession(USER_ID, MealPlanApiClient(client=http), today=lambda: TODAY, debounce_sec=0.01)

    planner.add_meal(TODAY, MealType.DINNER, make_slot("Local Edit"))
    await planner.flush()
    assert planner.save_status == SaveStatus.ERROR

    assert await planner.load() is True
    assert [s.recipe_name for s in planner.store.get(TODAY).day_for(TODAY).dinner] == ["Local Edit"]

    await planner.close()
    await http.aclose()
